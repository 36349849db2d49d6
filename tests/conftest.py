"""Shared test fixtures for the inkwell test suite.

WHY: Playback tests need a clock they control, and session/server tests
need a collaborator that answers instantly (or fails on cue) without a
network. Centralizing both keeps every test module deterministic.

HOW: FakeLoop implements the one event-loop method the scheduler uses
(call_later) and fires callbacks only when a test advances time.
FakeGeminiClient implements the async-context-manager interface of
GeminiClient with canned results or exceptions.

RULES:
- No test touches the network or sleeps
- FakeLoop fires due callbacks in time order, one at a time
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

import pytest

from inkwell.api.models import AnalyticalAnalysis, CreativeAnalysis, ParsedDocument


# ---------------------------------------------------------------------------
# Controlled timer source
# ---------------------------------------------------------------------------


class FakeTimerHandle:
    def __init__(self, when: float, delay: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Minimal stand-in for an asyncio loop's call_later()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: List[FakeTimerHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimerHandle:
        handle = FakeTimerHandle(self.now + delay, delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[FakeTimerHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds: float) -> None:
        """Move time forward, firing every callback that falls due."""
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = handle.when
            handle.fired = True
            handle.callback()
        self.now = target


@pytest.fixture
def fake_loop():
    return FakeLoop()


# ---------------------------------------------------------------------------
# Collaborator stand-in
# ---------------------------------------------------------------------------


class FakeGeminiClient:
    """Async context manager with the GeminiClient call surface."""

    def __init__(
        self,
        analysis: Any = None,
        explanation: str = "",
        document: Optional[ParsedDocument] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.analysis = analysis
        self.explanation = explanation
        self.document = document
        self.error = error
        self.calls: List[tuple] = []

    async def __aenter__(self) -> FakeGeminiClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def analyze_content(self, text, mode):
        self.calls.append(("analyze_content", text, mode))
        if self.error:
            raise self.error
        return self.analysis

    async def explain_term(self, term, context_snippet=""):
        self.calls.append(("explain_term", term, context_snippet))
        if self.error:
            raise self.error
        return self.explanation

    async def parse_document(self, data, mime_type):
        self.calls.append(("parse_document", data, mime_type))
        if self.error:
            raise self.error
        return self.document


@pytest.fixture
def creative_analysis():
    return CreativeAnalysis(
        nouns=["荷塘", "月色"],
        verbs=["走过"],
        adjectives=["美丽"],
    )


@pytest.fixture
def analytical_analysis():
    return AnalyticalAnalysis(
        summary="讨论人工智能与社会。",
        keywords=["人工智能", "社会"],
        proper_nouns=["中国社会"],
        topic_hot_words=["中国", "人工智能"],
    )


SAMPLE_NOVEL_TEXT = "曲曲折折的荷塘上面，弥望的是田田的叶子。我走过荷塘，月色很美丽。"

SAMPLE_PAPER_TEXT = "人工智能正在改变中国社会。中国的研究者关注人工智能伦理。"

"""Tests for ReaderSession: analysis, degradation, staleness, explanations.

WHY: The session is where collaborator failures must stop. Every test
here either checks that a failure degrades into readable text or that a
late answer never overwrites newer state.

HOW: A FakeGeminiClient (see conftest.py) stands in for GeminiClient via
client_factory; response-shape tests use the real client over
httpx.MockTransport. Coroutines run with asyncio.run().
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
from conftest import SAMPLE_NOVEL_TEXT, SAMPLE_PAPER_TEXT, FakeGeminiClient

from inkwell.api.client import GeminiAPIError, GeminiClient
from inkwell.api.models import CreativeAnalysis
from inkwell.config import (
    ANALYSIS_FAILED_SUMMARY,
    EXPLAIN_CONTEXT_CHARS,
    EXPLANATION_EMPTY,
    EXPLANATION_UNAVAILABLE,
    MAX_ANNOTATION_CHARS,
)
from inkwell.core.models import AppMode, Category, HighlightConfig
from inkwell.session import ReaderSession, reading_progress


def _session(fake, content=SAMPLE_NOVEL_TEXT, mode=AppMode.NOVEL, **kwargs):
    return ReaderSession(content=content, mode=mode, client_factory=lambda: fake, **kwargs)


class TestAnalyze:

    def test_novel_mode_highlights_nouns(self, creative_analysis):
        fake = FakeGeminiClient(analysis=creative_analysis)
        view = asyncio.run(_session(fake).analyze())
        assert 'data-type="noun"' in view.html
        assert 'data-type="verb"' not in view.html
        assert view.degraded is False
        assert fake.calls == [("analyze_content", SAMPLE_NOVEL_TEXT, AppMode.NOVEL)]

    def test_paper_mode_summary_and_keywords(self, analytical_analysis):
        fake = FakeGeminiClient(analysis=analytical_analysis)
        session = _session(fake, content=SAMPLE_PAPER_TEXT, mode=AppMode.PAPER)
        view = asyncio.run(session.analyze())
        assert view.summary == analytical_analysis.summary
        assert view.keywords == analytical_analysis.keywords
        assert 'data-term="中国社会" data-type="proper"' in view.html

    def test_standard_mode_makes_no_request(self):
        fake = FakeGeminiClient()
        session = _session(fake, content="a < b", mode=AppMode.STANDARD)
        view = asyncio.run(session.analyze())
        assert fake.calls == []
        assert view.html == "a &lt; b"

    def test_failure_degrades_to_plain_text(self):
        fake = FakeGeminiClient(error=GeminiAPIError(500, "boom"))
        session = _session(fake, content="<b>text</b>\nmore")
        view = asyncio.run(session.analyze())
        assert view.degraded is True
        assert view.html == "&lt;b&gt;text&lt;/b&gt;<br/><br/>more"
        assert view.summary == ""
        assert session.analysis is None

    def test_paper_failure_has_summary(self):
        fake = FakeGeminiClient(error=GeminiAPIError(0, "timeout"))
        session = _session(fake, content=SAMPLE_PAPER_TEXT, mode=AppMode.PAPER)
        view = asyncio.run(session.analyze())
        assert view.summary == ANALYSIS_FAILED_SUMMARY
        assert view.degraded is True

    def test_missing_api_key_degrades(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        session = ReaderSession(content="正文", mode=AppMode.NOVEL)
        view = asyncio.run(session.analyze())
        assert view.degraded is True


class _RacingClient(FakeGeminiClient):
    """Changes the session's state while its answer is in flight."""

    def __init__(self, session_ref, change, **kwargs):
        super().__init__(**kwargs)
        self.session_ref = session_ref
        self.change = change

    async def analyze_content(self, text, mode):
        self.change(self.session_ref[0])
        return await super().analyze_content(text, mode)


class TestLastWriteWins:

    def test_text_change_during_analysis_discards_result(self, creative_analysis):
        ref = []
        fake = _RacingClient(ref, lambda s: s.set_text("新的文本。"), analysis=creative_analysis)
        session = _session(fake)
        ref.append(session)

        view = asyncio.run(session.analyze())
        assert view.html == "新的文本。"
        assert session.analysis is None

    def test_mode_change_during_analysis_discards_result(self, creative_analysis):
        ref = []
        fake = _RacingClient(ref, lambda s: s.set_mode(AppMode.STANDARD), analysis=creative_analysis)
        session = _session(fake)
        ref.append(session)

        view = asyncio.run(session.analyze())
        assert "<span" not in view.html
        assert view.mode == AppMode.STANDARD

    def test_stale_failure_does_not_overwrite(self):
        ref = []
        fake = _RacingClient(ref, lambda s: s.set_text("新的文本。"), error=GeminiAPIError(500, "x"))
        session = _session(fake)
        ref.append(session)

        view = asyncio.run(session.analyze())
        assert view.degraded is False
        assert view.html == "新的文本。"

    def test_set_text_resets_view(self, creative_analysis):
        session = _session(FakeGeminiClient(analysis=creative_analysis))
        asyncio.run(session.analyze())
        view = session.set_text("另一本书")
        assert view.html == "另一本书"
        assert session.analysis is None


class TestHighlightSettings:

    def test_config_change_rerenders_without_request(self, creative_analysis):
        fake = FakeGeminiClient(analysis=creative_analysis)
        session = _session(fake)
        asyncio.run(session.analyze())

        config = HighlightConfig().toggled(Category.VERB)
        view = session.update_highlight_config(config)
        assert 'data-term="走过" data-type="verb"' in view.html
        assert len(fake.calls) == 1
        assert session.highlight_config == config

    def test_config_change_outside_novel_mode_keeps_view(self, analytical_analysis):
        session = _session(
            FakeGeminiClient(analysis=analytical_analysis),
            content=SAMPLE_PAPER_TEXT,
            mode=AppMode.PAPER,
        )
        before = asyncio.run(session.analyze())
        after = session.update_highlight_config(HighlightConfig().toggled(Category.NOUN))
        assert after == before

    def test_disabling_every_category_leaves_plain_text(self):
        analysis = CreativeAnalysis(nouns=["荷塘"])
        session = _session(FakeGeminiClient(analysis=analysis))
        asyncio.run(session.analyze())
        view = session.update_highlight_config(HighlightConfig().toggled(Category.NOUN))
        assert "<span" not in view.html


class TestExplain:

    def test_explanation_uses_book_start_as_context(self):
        fake = FakeGeminiClient(explanation="一种水生植物。")
        content = "荷" * (EXPLAIN_CONTEXT_CHARS + 50)
        session = _session(fake, content=content)
        assert asyncio.run(session.explain("荷塘")) == "一种水生植物。"
        _, term, context = fake.calls[0]
        assert term == "荷塘"
        assert len(context) == EXPLAIN_CONTEXT_CHARS

    def test_failure_returns_placeholder(self):
        fake = FakeGeminiClient(error=GeminiAPIError(503, "unavailable"))
        assert asyncio.run(_session(fake).explain("荷塘")) == EXPLANATION_UNAVAILABLE

    def test_empty_answer_returns_placeholder(self):
        fake = FakeGeminiClient(explanation="")
        assert asyncio.run(_session(fake).explain("荷塘")) == EXPLANATION_EMPTY


class TestFullTextViews:

    def test_standard_mode_renders_whole_book(self):
        content = "第一句。" * 2000 + "结尾。"
        assert len(content) > MAX_ANNOTATION_CHARS
        session = _session(FakeGeminiClient(), content=content, mode=AppMode.STANDARD)
        view = asyncio.run(session.analyze())
        assert view.html.endswith("结尾。")
        assert view.html == content

    def test_failure_view_keeps_whole_book(self):
        content = "第一句。" * 2000 + "结尾。"
        session = _session(FakeGeminiClient(error=GeminiAPIError(500, "boom")), content=content)
        view = asyncio.run(session.analyze())
        assert view.degraded is True
        assert view.html.endswith("结尾。")

    def test_set_text_renders_whole_book(self):
        content = "字" * (MAX_ANNOTATION_CHARS + 10)
        view = ReaderSession().set_text(content)
        assert len(view.html) == len(content)


def _gemini_factory(payload):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    return lambda: GeminiClient(api_key="test-key", transport=transport)


class TestOddResponseShapes:
    """Unexpected generateContent nesting must never escape the session."""

    @pytest.mark.parametrize("payload", [
        {"candidates": {"x": 1}},
        {"candidates": [{"content": "oops"}]},
        {"candidates": [{"content": {"parts": "oops"}}]},
    ])
    def test_analyze_does_not_raise(self, payload):
        session = ReaderSession(
            content=SAMPLE_NOVEL_TEXT,
            mode=AppMode.NOVEL,
            client_factory=_gemini_factory(payload),
        )
        view = asyncio.run(session.analyze())
        assert "<span" not in view.html
        assert view.html == SAMPLE_NOVEL_TEXT

    @pytest.mark.parametrize("payload", [
        {"candidates": {"x": 1}},
        {"candidates": [{"content": "oops"}]},
    ])
    def test_explain_returns_placeholder(self, payload):
        session = ReaderSession(content="正文", client_factory=_gemini_factory(payload))
        assert asyncio.run(session.explain("荷塘")) == EXPLANATION_EMPTY


class TestReadingProgress:

    def test_halfway(self):
        assert reading_progress(450, 1000, 100) == 50.0

    def test_clamped(self):
        assert reading_progress(-10, 1000, 100) == 0.0
        assert reading_progress(5000, 1000, 100) == 100.0

    def test_nothing_to_scroll(self):
        assert reading_progress(0, 500, 800) == 100.0

"""Reader session: current text, mode, analysis, and rendered markup.

WHY: Something has to own the "what is on screen right now" state that
ties the collaborator to the annotation engine — which text is open,
which mode is active, which terms came back, which highlight settings
apply — and it has to make sure a slow, stale classifier answer never
overwrites the rendering of newer text.

HOW: ReaderSession stamps every text or mode change with a generation
number. analyze() remembers the generation it started under and drops
its result if the session has moved on (last write wins). All
collaborator failures are caught here and turned into a degraded view:
sanitized, unannotated text, or a placeholder explanation.

RULES:
- STANDARD mode never calls the collaborator; it renders plain text
- NOVEL mode re-renders from cached terms when highlight settings change
- PAPER mode failure keeps the text readable with "Analysis failed."
- explain() never raises; it returns a placeholder on failure
- Nothing in here lets a collaborator exception escape
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from inkwell.api.client import GeminiClient, InkwellAPIError
from inkwell.api.models import AnalyticalAnalysis, CreativeAnalysis
from inkwell.config import (
    ANALYSIS_FAILED_SUMMARY,
    EXPLAIN_CONTEXT_CHARS,
    EXPLANATION_EMPTY,
    EXPLANATION_UNAVAILABLE,
)
from inkwell.core.annotator import annotate_analytical, annotate_creative
from inkwell.core.models import AppMode, HighlightConfig
from inkwell.core.sanitizer import sanitize

logger = logging.getLogger(__name__)

Analysis = Union[CreativeAnalysis, AnalyticalAnalysis]


@dataclass
class AnalysisView:
    """What the display layer shows for the current text and mode.

    RULES:
    - html is always safe markup (sanitized, possibly annotated)
    - degraded is True when the collaborator failed and html is plain
    """

    mode: AppMode
    html: str
    summary: str = ""
    keywords: List[str] = field(default_factory=list)
    degraded: bool = False


class ReaderSession:
    """State holder for one open book in the reader.

    Args:
        content: Full text of the open book.
        mode: Initial reading mode.
        highlight_config: Creative-reading highlight settings.
        client_factory: Zero-argument callable returning an async context
            manager with the GeminiClient interface.
    """

    def __init__(
        self,
        content: str = "",
        mode: AppMode = AppMode.STANDARD,
        highlight_config: Optional[HighlightConfig] = None,
        client_factory: Callable[[], Any] = GeminiClient,
    ) -> None:
        self._content = content
        self._mode = mode
        self._config = highlight_config or HighlightConfig()
        self._client_factory = client_factory
        self._generation = 0
        self._analysis: Optional[Analysis] = None
        self.view = AnalysisView(mode=mode, html=sanitize(content))

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def content(self) -> str:
        return self._content

    @property
    def mode(self) -> AppMode:
        return self._mode

    @property
    def highlight_config(self) -> HighlightConfig:
        return self._config

    @property
    def analysis(self) -> Optional[Analysis]:
        return self._analysis

    def set_text(self, content: str) -> AnalysisView:
        """Open new text; any in-flight analysis becomes stale."""
        self._content = content
        return self._reset()

    def set_mode(self, mode: AppMode) -> AnalysisView:
        self._mode = mode
        return self._reset()

    def _reset(self) -> AnalysisView:
        self._generation += 1
        self._analysis = None
        self.view = AnalysisView(mode=self._mode, html=sanitize(self._content))
        return self.view

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def analyze(self) -> AnalysisView:
        """Classify the current text and render the annotated view.

        WHY: The classifier is slow and may fail. The user may switch
        text or mode while it runs. Only an answer that still matches
        the current state may be shown.

        RULES:
        - STANDARD: no request, plain view
        - Stale result (generation moved on): discarded, view unchanged
        - Failure: degraded plain view (PAPER also gets the failure summary)
        """
        if self._mode == AppMode.STANDARD:
            return self._reset()

        generation = self._generation
        content = self._content
        mode = self._mode

        try:
            async with self._client_factory() as client:
                result = await client.analyze_content(content, mode)
        except (InkwellAPIError, ValueError):
            logger.exception("Content analysis failed in %s mode", mode.value)
            if generation != self._generation:
                return self.view
            self._analysis = None
            self.view = AnalysisView(
                mode=mode,
                html=sanitize(content),
                summary=ANALYSIS_FAILED_SUMMARY if mode == AppMode.PAPER else "",
                degraded=True,
            )
            return self.view

        if generation != self._generation:
            logger.info("Discarding stale %s analysis", mode.value)
            return self.view

        self._analysis = result
        self.view = self._render()
        return self.view

    def update_highlight_config(self, config: HighlightConfig) -> AnalysisView:
        """Replace creative-reading settings and re-render from scratch."""
        self._config = config
        if self._mode == AppMode.NOVEL and isinstance(self._analysis, CreativeAnalysis):
            self.view = self._render()
        return self.view

    def _render(self) -> AnalysisView:
        result = self._analysis
        if isinstance(result, CreativeAnalysis):
            html = annotate_creative(
                self._content, result.nouns, result.verbs, result.adjectives, self._config
            )
            return AnalysisView(mode=self._mode, html=html)
        if isinstance(result, AnalyticalAnalysis):
            html = annotate_analytical(
                self._content, result.proper_nouns, result.topic_hot_words
            )
            return AnalysisView(
                mode=self._mode,
                html=html,
                summary=result.summary,
                keywords=list(result.keywords),
            )
        return AnalysisView(mode=self._mode, html=sanitize(self._content))

    # ------------------------------------------------------------------
    # Term explanation
    # ------------------------------------------------------------------

    async def explain(self, term: str) -> str:
        """Explain a clicked term using the start of the book as context."""
        try:
            async with self._client_factory() as client:
                explanation = await client.explain_term(
                    term, self._content[:EXPLAIN_CONTEXT_CHARS]
                )
        except (InkwellAPIError, ValueError):
            logger.exception("Explanation failed for term %r", term)
            return EXPLANATION_UNAVAILABLE
        return explanation or EXPLANATION_EMPTY


def reading_progress(scroll_top: float, scroll_height: float, client_height: float) -> float:
    """Percentage of the chapter scrolled past, clamped to 0–100."""
    scrollable = scroll_height - client_height
    if scrollable <= 0:
        return 100.0
    return max(0.0, min(100.0, scroll_top / scrollable * 100.0))

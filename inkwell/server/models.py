"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint has its own request and response model. Highlight
settings mirror core.models.HighlightConfig and convert into it.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Term lists default to empty; a missing list means "no highlights"
- Response models never expose internal implementation details
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from inkwell.config import (
    DEFAULT_ADJECTIVE_COLOR,
    DEFAULT_NOUN_COLOR,
    DEFAULT_RATE,
    DEFAULT_VERB_COLOR,
)
from inkwell.core.models import AppMode, CategoryConfig, HighlightConfig


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


class CategorySettings(BaseModel):
    """Toggle and colour for one creative-reading category."""

    enabled: bool = Field(description="Whether this category is highlighted.")
    color: str = Field(description="Highlight colour, e.g. '#F97316'.")


class HighlightSettings(BaseModel):
    """Creative-reading highlight settings.

    RULES:
    - Defaults match the reader: nouns on (orange), verbs and adjectives off
    """

    nouns: CategorySettings = Field(
        default_factory=lambda: CategorySettings(enabled=True, color=DEFAULT_NOUN_COLOR),
        description="Noun highlighting.",
    )
    verbs: CategorySettings = Field(
        default_factory=lambda: CategorySettings(enabled=False, color=DEFAULT_VERB_COLOR),
        description="Verb highlighting.",
    )
    adjectives: CategorySettings = Field(
        default_factory=lambda: CategorySettings(enabled=False, color=DEFAULT_ADJECTIVE_COLOR),
        description="Adjective highlighting.",
    )

    def to_config(self) -> HighlightConfig:
        return HighlightConfig(
            nouns=CategoryConfig(self.nouns.enabled, self.nouns.color),
            verbs=CategoryConfig(self.verbs.enabled, self.verbs.color),
            adjectives=CategoryConfig(self.adjectives.enabled, self.adjectives.color),
        )


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreativeAnnotateRequest(BaseModel):
    """Text plus grammatical term lists for creative-reading mode."""

    text: str = Field(description="Raw chapter text (only the leading prefix is annotated).")
    nouns: List[str] = Field(default_factory=list, description="Noun terms.")
    verbs: List[str] = Field(default_factory=list, description="Verb terms.")
    adjectives: List[str] = Field(default_factory=list, description="Adjective terms.")
    config: HighlightSettings = Field(
        default_factory=HighlightSettings,
        description="Which categories to highlight and in which colours.",
    )


class AnalyticalAnnotateRequest(BaseModel):
    """Text plus proper-noun and hot-word lists for analytical mode."""

    text: str = Field(description="Raw chapter text (only the leading prefix is annotated).")
    proper_nouns: List[str] = Field(default_factory=list, description="Proper-noun terms.")
    hot_words: List[str] = Field(default_factory=list, description="Topic hot-word terms.")


class TextRequest(BaseModel):
    """A single block of raw text."""

    text: str = Field(description="Raw text.")


class PlaybackRequest(BaseModel):
    """Text and reading speed for focus-mode pacing."""

    text: str = Field(description="Raw text to segment.")
    rate: float = Field(
        default=DEFAULT_RATE,
        description="Reading speed in characters per second (clamped to 2–15).",
    )


class AnalyzeRequest(BaseModel):
    """Text to classify and the mode to classify it for."""

    text: str = Field(description="Raw chapter text.")
    mode: AppMode = Field(description="STANDARD, NOVEL (creative) or PAPER (analytical).")
    config: HighlightSettings = Field(
        default_factory=HighlightSettings,
        description="Creative-reading highlight settings (NOVEL mode only).",
    )


class ExplainRequest(BaseModel):
    """A clicked term and the text around it."""

    term: str = Field(description="The term to explain.")
    context: str = Field(default="", description="Context snippet (first 500 chars are used).")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AnnotationResponse(BaseModel):
    """Annotated, markup-safe HTML."""

    html: str = Field(description="Sanitized HTML with highlight spans.")


class SegmentResponse(BaseModel):
    """Sentence units in reading order."""

    units: List[str] = Field(description="Sentence units, terminal punctuation retained.")
    count: int = Field(description="Number of units.")


class PlaybackResponse(BaseModel):
    """Per-unit display durations for focus-mode playback."""

    rate: float = Field(description="Effective (clamped) rate in characters per second.")
    units: List[str] = Field(description="Sentence units in reading order.")
    delays_ms: List[float] = Field(description="Display time of each unit in milliseconds.")
    total_ms: float = Field(description="Total playback time in milliseconds.")


class AnalyzeResponse(BaseModel):
    """Rendered analysis for one text.

    RULES:
    - degraded is true when the classifier failed and html is plain text
    """

    mode: AppMode = Field(description="Mode the text was analyzed for.")
    html: str = Field(description="Sanitized HTML, annotated when analysis succeeded.")
    summary: str = Field(default="", description="Summary (PAPER mode).")
    keywords: List[str] = Field(default_factory=list, description="Keywords (PAPER mode).")
    degraded: bool = Field(default=False, description="True when analysis failed.")


class ExplainResponse(BaseModel):
    """Explanation of a term, or a placeholder when unavailable."""

    term: str = Field(description="The term that was explained.")
    explanation: str = Field(description="Short plain-text explanation.")


class DocumentResponse(BaseModel):
    """Parsed document content."""

    title: str = Field(description="Document title, or a placeholder.")
    author: str = Field(description="Document author, or a placeholder.")
    content: str = Field(description="Full extracted text.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    model: Optional[str] = Field(default=None, description="Configured Gemini model.")

"""Configuration constants, colour palettes, and .env loading.

WHY: Centralizes every tunable value of the reader core — annotation
budget, playback pacing limits, default highlight colours, Gemini API
defaults — so they are easy to find and override without touching logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values; the few that deployments need to change read
from environment variables. load_api_key() gives a clear error when the
key is missing.

RULES:
- Annotation only ever sees the first MAX_ANNOTATION_CHARS characters
- Playback rate is characters per second, clamped to [MIN_RATE, MAX_RATE]
- No unit is shown for less than MIN_DELAY_MS milliseconds
- API key is loaded from .env via python-dotenv, never hardcoded
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Annotation
# ---------------------------------------------------------------------------

MAX_ANNOTATION_CHARS = int(os.getenv("INKWELL_MAX_ANNOTATION_CHARS", "4500"))
"""Prefix length sent to the classifier and annotated for display."""

MIN_TERM_LENGTH = 2

# Creative-reading (novel) mode defaults; user-adjustable per category.
DEFAULT_NOUN_COLOR = "#F97316"
DEFAULT_VERB_COLOR = "#3B82F6"
DEFAULT_ADJECTIVE_COLOR = "#A855F7"

# Alpha suffix appended to six-digit hex colours for translucent backgrounds.
HIGHLIGHT_ALPHA_SUFFIX = "4d"

# Analytical (paper) mode uses a fixed palette: (background, foreground).
PROPER_NOUN_PALETTE = ("#FEF3C7", "#92400E")
HOT_WORD_PALETTE = ("#E0F2FE", "#075985")

# ---------------------------------------------------------------------------
# Focus playback
# ---------------------------------------------------------------------------

MIN_DELAY_MS = 1000
MIN_RATE = 2
MAX_RATE = 15
DEFAULT_RATE = 5

# ---------------------------------------------------------------------------
# Term explanation
# ---------------------------------------------------------------------------

EXPLAIN_CONTEXT_CHARS = 500
EXPLAIN_WORD_LIMIT = 60
EXPLANATION_UNAVAILABLE = "无法获取解释"
EXPLANATION_EMPTY = "暂无解释"
ANALYSIS_FAILED_SUMMARY = "Analysis failed."

# ---------------------------------------------------------------------------
# Document import
# ---------------------------------------------------------------------------

SUPPORTED_DOCUMENT_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".html": "text/html",
    ".htm": "text/html",
    ".epub": "application/epub+zip",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
"""File extensions accepted for document import, mapped to MIME types."""

UNTITLED_DOCUMENT = "未命名文档"
UNKNOWN_AUTHOR = "未知作者"

# ---------------------------------------------------------------------------
# Gemini API defaults
# ---------------------------------------------------------------------------

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")


def load_api_key() -> str:
    """Load the Gemini API key from the environment.

    WHY: Every collaborator call needs the key. Loading it from the
    environment (via .env) keeps it out of source code.

    RULES:
    - GEMINI_API_KEY wins; API_KEY is accepted as a fallback
    - Raises ValueError if neither is set
    """
    key = (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()
    if not key:
        raise ValueError(
            "Gemini API key not configured. "
            "Add GEMINI_API_KEY to the .env file in the app folder."
        )
    return key


def document_mime_type(filename: str) -> str | None:
    """Return the MIME type for a supported document filename, else None."""
    ext = os.path.splitext(filename)[1].lower()
    return SUPPORTED_DOCUMENT_TYPES.get(ext)

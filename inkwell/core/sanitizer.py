"""Markup-safe escaping of raw reader text.

WHY: Book text is arbitrary user or LLM-extracted content. It must be
inserted into HTML without letting a stray ``<script>`` or ``&`` change
the meaning of the page, and paragraph breaks must survive rendering.

HOW: Three ordered replacements (``&`` first so entities produced by
the later steps are never double-escaped), then newline conversion.

RULES:
- "&" → "&amp;", then "<" → "&lt;", then ">" → "&gt;"
- Every "\\n" becomes the paragraph marker "<br/><br/>"
- Quotes are left alone in body text; escape_attribute() handles them
- Total and pure: any string in, a string out
"""

from __future__ import annotations

PARAGRAPH_BREAK = "<br/><br/>"


def escape_text(text: str) -> str:
    """Entity-escape ``&``, ``<`` and ``>`` without touching newlines."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def sanitize(text: str) -> str:
    """Escape raw text and convert newlines into paragraph breaks."""
    return escape_text(text).replace("\n", PARAGRAPH_BREAK)


def escape_attribute(value: str) -> str:
    """Make already-sanitized text safe inside a double-quoted attribute."""
    return value.replace('"', "&quot;")

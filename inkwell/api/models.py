"""Typed views of Gemini responses, tolerant of malformed fields.

WHY: Everything the classifier returns is untrusted — fields go missing,
lists contain nulls, a string arrives where an array was promised. The
reader must degrade (fewer highlights, placeholder title) rather than
crash, so every field read here has a default.

HOW: Each dataclass has a from_dict() factory. Fields are validated one
by one against the schema in api/schemas.py with jsonschema; a field
that fails falls back to its default, and array fields keep whichever
items do validate.

RULES:
- from_dict() never raises on content, only on a non-dict argument
- Missing title/author become the "untitled"/"unknown author" placeholders
- JSON keys use Gemini's camelCase (properNouns, topicHotWords)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from inkwell.api.schemas import ANALYTICAL_SCHEMA, CREATIVE_SCHEMA, DOCUMENT_SCHEMA
from inkwell.config import UNKNOWN_AUTHOR, UNTITLED_DOCUMENT

logger = logging.getLogger(__name__)


def read_field(data: Dict[str, Any], name: str, schema: Dict[str, Any]) -> Any:
    """Return ``data[name]`` if it satisfies its property schema, else None.

    RULES:
    - Absent or null → None
    - Array that fails as a whole → the list of items that pass
    - Anything else that fails → None, with a warning logged
    """
    value = data.get(name)
    if value is None:
        return None
    prop_schema = schema.get("properties", {}).get(name, {})
    if Draft7Validator(prop_schema).is_valid(value):
        return value
    if prop_schema.get("type") == "array" and isinstance(value, list):
        item_validator = Draft7Validator(prop_schema.get("items", {}))
        return [item for item in value if item_validator.is_valid(item)]
    logger.warning("Discarding malformed %r field from classifier response", name)
    return None


@dataclass
class ParsedDocument:
    """Title, author and full text extracted from an imported document."""

    title: str
    author: str
    content: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ParsedDocument:
        return cls(
            title=read_field(data, "title", DOCUMENT_SCHEMA) or UNTITLED_DOCUMENT,
            author=read_field(data, "author", DOCUMENT_SCHEMA) or UNKNOWN_AUTHOR,
            content=read_field(data, "content", DOCUMENT_SCHEMA) or "",
        )


@dataclass
class CreativeAnalysis:
    """Grammatical classes for creative-reading (novel) mode."""

    nouns: List[str] = field(default_factory=list)
    verbs: List[str] = field(default_factory=list)
    adjectives: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CreativeAnalysis:
        return cls(
            nouns=read_field(data, "nouns", CREATIVE_SCHEMA) or [],
            verbs=read_field(data, "verbs", CREATIVE_SCHEMA) or [],
            adjectives=read_field(data, "adjectives", CREATIVE_SCHEMA) or [],
        )


@dataclass
class AnalyticalAnalysis:
    """Summary, keywords and highlight terms for analytical (paper) mode."""

    summary: str = ""
    keywords: List[str] = field(default_factory=list)
    proper_nouns: List[str] = field(default_factory=list)
    topic_hot_words: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AnalyticalAnalysis:
        return cls(
            summary=read_field(data, "summary", ANALYTICAL_SCHEMA) or "",
            keywords=read_field(data, "keywords", ANALYTICAL_SCHEMA) or [],
            proper_nouns=read_field(data, "properNouns", ANALYTICAL_SCHEMA) or [],
            topic_hot_words=read_field(data, "topicHotWords", ANALYTICAL_SCHEMA) or [],
        )


@dataclass
class GenerateContentResponse:
    """The parts of a ``generateContent`` response the reader uses.

    WHY: Gemini nests the generated text under candidates → content →
    parts. Only the first candidate's text parts matter here.

    RULES:
    - text is the concatenation of the first candidate's text parts
    - Any level of the nesting with the wrong type yields empty text
    - finish_reason is None when the API omits it
    """

    text: str
    finish_reason: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GenerateContentResponse:
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return cls(text="")
        first = candidates[0]
        if not isinstance(first, dict):
            return cls(text="")
        content = first.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            parts = []
        text = "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
        finish_reason = first.get("finishReason")
        if not isinstance(finish_reason, str):
            finish_reason = None
        return cls(text=text, finish_reason=finish_reason)

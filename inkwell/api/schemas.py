"""JSON Schemas for the structured responses requested from Gemini.

WHY: The same shape is needed twice — once sent to Gemini as the
``responseSchema`` that constrains its output, once used locally with
jsonschema to check what actually came back. Keeping one definition
avoids the two drifting apart.

HOW: Schemas are plain JSON Schema dicts (lowercase types). to_gemini()
converts one into Gemini's OpenAPI-subset dialect (uppercase type names,
no JSON-Schema-only keywords).

RULES:
- Every property used by api/models.py is declared here
- Only type, properties, items, required and description survive to_gemini()
"""

from __future__ import annotations

from typing import Any, Dict

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

DOCUMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "description": "The title of the book or document"},
        "author": {"type": "string", "description": "The author of the book or document"},
        "content": {"type": "string", "description": "The full extracted text content"},
    },
    "required": ["title", "author", "content"],
}

CREATIVE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "nouns": dict(_STRING_LIST),
        "verbs": dict(_STRING_LIST),
        "adjectives": dict(_STRING_LIST),
    },
    "required": ["nouns", "verbs", "adjectives"],
}

ANALYTICAL_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "keywords": dict(_STRING_LIST),
        "properNouns": dict(_STRING_LIST),
        "topicHotWords": dict(_STRING_LIST),
    },
    "required": ["summary", "keywords", "properNouns", "topicHotWords"],
}

_GEMINI_KEYS = ("properties", "items", "required", "description")


def to_gemini(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a JSON Schema dict into a Gemini ``responseSchema``."""
    converted: Dict[str, Any] = {}
    if "type" in schema:
        converted["type"] = schema["type"].upper()
    for key in _GEMINI_KEYS:
        if key not in schema:
            continue
        value = schema[key]
        if key == "properties":
            converted[key] = {name: to_gemini(sub) for name, sub in value.items()}
        elif key == "items":
            converted[key] = to_gemini(value)
        else:
            converted[key] = value
    return converted

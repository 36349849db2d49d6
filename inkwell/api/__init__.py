"""Gemini API client package — the reader's only network boundary.

WHY: Document parsing, term classification and term explanation are
delegated to an LLM. This package encapsulates that communication behind
an async client class with typed, failure-tolerant response models.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response JSON is
validated field by field with jsonschema and parsed into dataclasses.

RULES:
- All HTTP calls go through GeminiClient (no direct httpx usage elsewhere)
- Every collaborator error derives from InkwellAPIError
"""

from inkwell.api.client import (
    DocumentParseError,
    GeminiAPIError,
    GeminiClient,
    InkwellAPIError,
    MalformedResponseError,
)
from inkwell.api.models import AnalyticalAnalysis, CreativeAnalysis, ParsedDocument

__all__ = [
    "AnalyticalAnalysis",
    "CreativeAnalysis",
    "DocumentParseError",
    "GeminiAPIError",
    "GeminiClient",
    "InkwellAPIError",
    "MalformedResponseError",
    "ParsedDocument",
]

"""Async HTTP client for the Gemini ``generateContent`` API.

WHY: Three reader features depend on an external LLM — importing a
document (text, title, author), classifying the visible text into
highlight terms, and explaining a clicked term. This module keeps all
HTTP, prompt and response-decoding details behind one client class so
the session, CLI and HTTP API never touch httpx directly.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. GeminiClient is an
async context manager — enter it to get an authenticated client, exit to
close the connection pool. Structured calls send a responseSchema and
decode the JSON text that comes back into the typed models of
api/models.py.

RULES:
- Always use the async context manager (async with GeminiClient() as client:)
- Authentication is via the x-goog-api-key header, key from config
- Analysis text is truncated to MAX_ANNOTATION_CHARS before sending
- Explanation context is capped at EXPLAIN_CONTEXT_CHARS
- No retries: failures raise and the caller decides how to degrade
- parse_document() raises DocumentParseError for every failure kind
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from inkwell.api.models import (
    AnalyticalAnalysis,
    CreativeAnalysis,
    GenerateContentResponse,
    ParsedDocument,
)
from inkwell.api.schemas import (
    ANALYTICAL_SCHEMA,
    CREATIVE_SCHEMA,
    DOCUMENT_SCHEMA,
    to_gemini,
)
from inkwell.config import (
    EXPLAIN_CONTEXT_CHARS,
    EXPLAIN_WORD_LIMIT,
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    MAX_ANNOTATION_CHARS,
    load_api_key,
)
from inkwell.core.models import AppMode

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

_PARSE_PROMPT = (
    "Analyze this document. 1. Extract the full text content accurately, "
    "preserving line breaks. 2. Identify the Title and Author of the document "
    "from its content or metadata. If they cannot be found, provide reasonable "
    "placeholders like 'Unknown Title' or 'Unknown Author'. Return the result "
    "as a JSON object."
)

_NOVEL_PROMPT = (
    'Analyze for "Novel Mode": Detect language, extract nouns, verbs, '
    'adjectives. Return ONLY JSON: {{"nouns":[], "verbs":[], "adjectives":[]}}. '
    "Text: {text}"
)

_PAPER_PROMPT = (
    'Analyze for "Paper Mode": Provide summary (Chinese, max 3 sentences), '
    "5 keywords. Identify domain-specific properNouns and topicHotWords. "
    "STRICTLY EXCLUDE common daily words (e.g. 粗鲁, 敬畏, 军官). Only include "
    'academic or technical terms. Return JSON: {{"summary":"", "keywords":[], '
    '"properNouns":[], "topicHotWords":[]}}. Text: {text}'
)

_EXPLAIN_PROMPT = (
    'Context: Reading Assistant. Term: "{term}" Context snippet: {context} '
    "Task: Explain this term concisely in Simplified Chinese (简体中文). "
    "Keep it under {limit} words. Plain text only."
)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class InkwellAPIError(Exception):
    """Base class for every collaborator failure.

    WHY: Callers that only need "did the collaborator fail?" catch this
    one type and degrade, whatever the underlying cause.
    """


class GeminiAPIError(InkwellAPIError):
    """Raised when Gemini returns a non-2xx response or cannot be reached.

    RULES:
    - status_code is 0 for transport failures (DNS, timeout, refused)
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Gemini API error {status_code}: {message}")


class MalformedResponseError(InkwellAPIError):
    """Raised when the generated text is not the JSON object that was asked for."""


class DocumentParseError(InkwellAPIError):
    """Raised when a document cannot be parsed.

    RULES:
    - Recoverable: the caller should offer manual text entry instead
    """


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GeminiClient:
    """Async client for the three reader collaborator calls.

    RULES:
    - Use as: async with GeminiClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url and model default to the config values
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._model = model or GEMINI_MODEL
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(120.0, connect=15.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GeminiClient must be used as an async context manager: "
                "async with GeminiClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def generate(
        self,
        parts: List[Dict[str, Any]],
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        """POST one generateContent request and return the generated text.

        Args:
            parts: Gemini content parts (text and/or inlineData).
            response_schema: JSON Schema for structured JSON output, or None
                for free text.

        Returns:
            The concatenated text of the first candidate.
        """
        client = self._ensure_client()
        body: Dict[str, Any] = {"contents": [{"parts": parts}]}
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": to_gemini(response_schema),
            }

        try:
            resp = await client.post(f"/models/{self._model}:generateContent", json=body)
        except httpx.HTTPError as exc:
            raise GeminiAPIError(0, str(exc)) from exc

        if resp.status_code != 200:
            raise GeminiAPIError(resp.status_code, resp.text)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise MalformedResponseError("Response body is not JSON") from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError("Response body is not a JSON object")

        try:
            return GenerateContentResponse.from_dict(payload).text
        except (KeyError, TypeError, AttributeError) as exc:
            raise MalformedResponseError("Unexpected generateContent response shape") from exc

    async def generate_json(
        self,
        parts: List[Dict[str, Any]],
        response_schema: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Like generate(), but decode the generated text as a JSON object."""
        text = await self.generate(parts, response_schema=response_schema)
        return decode_json_object(text)

    # ------------------------------------------------------------------
    # Collaborator calls
    # ------------------------------------------------------------------

    async def parse_document(self, data: bytes, mime_type: str) -> ParsedDocument:
        """Extract title, author and text from an uploaded document.

        RULES:
        - Any failure (HTTP, transport, malformed output) → DocumentParseError
        - Missing title/author are replaced by placeholders, not errors
        """
        parts = [
            {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(data).decode("ascii")}},
            {"text": _PARSE_PROMPT},
        ]
        try:
            result = await self.generate_json(parts, DOCUMENT_SCHEMA)
        except InkwellAPIError as exc:
            logger.exception("Document parsing failed for %s", mime_type)
            raise DocumentParseError(
                "Failed to parse document. Please try a different format "
                "or paste text manually."
            ) from exc
        return ParsedDocument.from_dict(result)

    async def analyze_content(
        self,
        text: str,
        mode: AppMode,
    ) -> Union[CreativeAnalysis, AnalyticalAnalysis]:
        """Classify the visible prefix of ``text`` for ``mode``.

        RULES:
        - Only the first MAX_ANNOTATION_CHARS characters are sent
        - NOVEL → CreativeAnalysis, PAPER → AnalyticalAnalysis
        - STANDARD has nothing to analyze and raises ValueError
        """
        safe_text = json.dumps(text[:MAX_ANNOTATION_CHARS], ensure_ascii=False)
        if mode == AppMode.NOVEL:
            data = await self.generate_json(
                [{"text": _NOVEL_PROMPT.format(text=safe_text)}], CREATIVE_SCHEMA
            )
            return CreativeAnalysis.from_dict(data)
        if mode == AppMode.PAPER:
            data = await self.generate_json(
                [{"text": _PAPER_PROMPT.format(text=safe_text)}], ANALYTICAL_SCHEMA
            )
            return AnalyticalAnalysis.from_dict(data)
        raise ValueError("No analysis is defined for mode {}".format(mode.value))

    async def explain_term(self, term: str, context_snippet: str = "") -> str:
        """Return a short plain-text explanation of ``term``, or "" if empty."""
        prompt = _EXPLAIN_PROMPT.format(
            term=term,
            context=json.dumps(context_snippet[:EXPLAIN_CONTEXT_CHARS], ensure_ascii=False),
            limit=EXPLAIN_WORD_LIMIT,
        )
        text = await self.generate([{"text": prompt}])
        return text.strip()


# ---------------------------------------------------------------------------
# Helpers (module-private)
# ---------------------------------------------------------------------------


def decode_json_object(text: str) -> Dict[str, Any]:
    """Decode generated text into a dict, tolerating a Markdown code fence.

    RULES:
    - ```json ... ``` fences are stripped before decoding
    - Raises MalformedResponseError if the result is not a JSON object
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    try:
        data = json.loads(stripped or "{}")
    except ValueError as exc:
        raise MalformedResponseError("Generated text is not valid JSON") from exc
    if not isinstance(data, dict):
        raise MalformedResponseError("Generated JSON is not an object")
    return data

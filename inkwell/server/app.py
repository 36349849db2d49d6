"""FastAPI application exposing the reader core over HTTP.

WHY: The display layer (web reader, mobile shell, scripts) needs the
annotation engine, segmenter and collaborator calls without embedding
Python. FastAPI provides request validation, automatic OpenAPI docs, and
async endpoints that fit the async Gemini client.

HOW: One FastAPI app with endpoints grouped by tags. Pure core operations
(annotate, segment, playback pacing) run inline. Collaborator operations
(analyze, explain, document import) go through ReaderSession or the
GeminiClient created by _make_client(), which tests patch.

RULES:
- Error responses use the ErrorResponse schema
- /analyze and /explain never fail on collaborator errors; they degrade
- /documents returns 400 for unsupported types, 502 when parsing fails
- Uploaded filenames are reduced to their base name before use
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile

from inkwell import __version__
from inkwell.api.client import GeminiClient, InkwellAPIError
from inkwell.config import GEMINI_MODEL, SUPPORTED_DOCUMENT_TYPES, document_mime_type
from inkwell.core.annotator import annotate_analytical, annotate_creative
from inkwell.core.playback import clamp_rate, unit_delay_ms
from inkwell.core.segmenter import segment
from inkwell.server.models import (
    AnalyticalAnnotateRequest,
    AnalyzeRequest,
    AnalyzeResponse,
    AnnotationResponse,
    CreativeAnnotateRequest,
    DocumentResponse,
    ErrorResponse,
    ExplainRequest,
    ExplainResponse,
    HealthResponse,
    PlaybackRequest,
    PlaybackResponse,
    SegmentResponse,
    TextRequest,
)
from inkwell.session import ReaderSession

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Inkwell Reader API",
    description=(
        "Term highlighting, sentence segmentation and focus-mode pacing for "
        "an LLM-assisted e-reader, plus document import, content analysis "
        "and term explanation backed by Gemini."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


def _make_client() -> GeminiClient:
    """Create the collaborator client (patched in tests)."""
    return GeminiClient()


# ---------------------------------------------------------------------------
# Endpoints: Annotation
# ---------------------------------------------------------------------------


@app.post(
    "/annotate/creative",
    response_model=AnnotationResponse,
    tags=["annotation"],
    summary="Highlight nouns, verbs and adjectives",
    description=(
        "Sanitizes the text prefix and wraps every occurrence of the enabled "
        "categories' terms in a coloured span, nouns first."
    ),
)
async def annotate_creative_endpoint(request: CreativeAnnotateRequest) -> AnnotationResponse:
    html = annotate_creative(
        request.text,
        request.nouns,
        request.verbs,
        request.adjectives,
        request.config.to_config(),
    )
    return AnnotationResponse(html=html)


@app.post(
    "/annotate/analytical",
    response_model=AnnotationResponse,
    tags=["annotation"],
    summary="Highlight proper nouns and topic hot-words",
    description=(
        "Sanitizes the text prefix and wraps proper nouns, then hot-words, "
        "in fixed-colour clickable spans."
    ),
)
async def annotate_analytical_endpoint(request: AnalyticalAnnotateRequest) -> AnnotationResponse:
    html = annotate_analytical(request.text, request.proper_nouns, request.hot_words)
    return AnnotationResponse(html=html)


# ---------------------------------------------------------------------------
# Endpoints: Focus mode
# ---------------------------------------------------------------------------


@app.post(
    "/segment",
    response_model=SegmentResponse,
    tags=["focus"],
    summary="Split text into sentence units",
)
async def segment_endpoint(request: TextRequest) -> SegmentResponse:
    units = segment(request.text)
    return SegmentResponse(units=units, count=len(units))


@app.post(
    "/playback/delays",
    response_model=PlaybackResponse,
    tags=["focus"],
    summary="Compute focus-mode display time per sentence",
    description=(
        "Returns each unit's display time at the given reading speed, so a "
        "client can drive its own timer with the same pacing rules."
    ),
)
async def playback_delays_endpoint(request: PlaybackRequest) -> PlaybackResponse:
    rate = clamp_rate(request.rate)
    units = segment(request.text)
    delays = [unit_delay_ms(unit, rate) for unit in units]
    return PlaybackResponse(rate=rate, units=units, delays_ms=delays, total_ms=sum(delays))


# ---------------------------------------------------------------------------
# Endpoints: Collaborator
# ---------------------------------------------------------------------------


@app.post(
    "/analyze",
    response_model=AnalyzeResponse,
    tags=["collaborator"],
    summary="Classify text and return the annotated view",
    description=(
        "Asks Gemini for highlight terms in the requested mode and renders "
        "them. If Gemini fails, returns the plain sanitized text with "
        "degraded=true instead of an error."
    ),
)
async def analyze_endpoint(request: AnalyzeRequest) -> AnalyzeResponse:
    session = ReaderSession(
        content=request.text,
        mode=request.mode,
        highlight_config=request.config.to_config(),
        client_factory=_make_client,
    )
    view = await session.analyze()
    return AnalyzeResponse(
        mode=view.mode,
        html=view.html,
        summary=view.summary,
        keywords=view.keywords,
        degraded=view.degraded,
    )


@app.post(
    "/explain",
    response_model=ExplainResponse,
    tags=["collaborator"],
    summary="Explain a highlighted term",
)
async def explain_endpoint(request: ExplainRequest) -> ExplainResponse:
    session = ReaderSession(content=request.context, client_factory=_make_client)
    explanation = await session.explain(request.term)
    return ExplainResponse(term=request.term, explanation=explanation)


@app.post(
    "/documents",
    response_model=DocumentResponse,
    tags=["collaborator"],
    summary="Import a document",
    description=(
        "Extracts title, author and full text from an uploaded document. "
        "On failure the client should offer manual text entry."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported file type"},
        502: {"model": ErrorResponse, "description": "Document could not be parsed"},
    },
)
async def import_document(
    file: Annotated[UploadFile, File(description="Document to import")],
) -> DocumentResponse:
    filename = Path(file.filename or "upload").name
    mime_type = document_mime_type(filename)
    if mime_type is None:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                Path(filename).suffix.lower(), ", ".join(sorted(SUPPORTED_DOCUMENT_TYPES))
            ),
        )

    data = await file.read()
    try:
        async with _make_client() as client:
            document = await client.parse_document(data, mime_type)
    except (InkwellAPIError, ValueError) as exc:
        logger.exception("Document import failed for %s", filename)
        raise HTTPException(status_code=502, detail=str(exc))

    return DocumentResponse(
        title=document.title,
        author=document.author,
        content=document.content,
    )


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, model=GEMINI_MODEL)


def run_api(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Entry point for the inkwell-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(app, host=host, port=port)

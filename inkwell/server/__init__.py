"""HTTP API server package — FastAPI surface over the reader core.

WHY: Lets any display layer call the annotation engine, segmenter and
collaborator operations over HTTP.

HOW: app.py defines the FastAPI app and routes; models.py holds the
Pydantic request/response schemas.
"""

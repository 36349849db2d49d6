"""Inkwell — reader core for LLM-assisted highlighting and focus reading.

WHY: The reader delegates understanding (document parsing, term
extraction, term explanation) to an external LLM, but the placement of
those terms into text and the pacing of focus-mode playback must be
deterministic, safe, and testable without a network.

HOW: Three layers — core (sanitize, match, annotate, segment, playback),
api (async Gemini client and typed response models), and the surfaces
that glue them together (reader session, CLI, HTTP API).

RULES:
- The core never performs I/O and never raises on term content
- All collaborator failures degrade to a usable local state
- Annotation always re-runs from scratch on the sanitized text
"""

__version__ = "0.1.0"

"""Deterministic reader core: sanitize, match, annotate, segment, play.

WHY: These modules are the part of the reader that must behave the same
on every run — no network, no clock except the injected timer source —
so they can be tested exhaustively and reused by every surface.

HOW: sanitizer.py escapes raw text, matcher.py places one category of
terms, annotator.py runs the categories of a mode in order, segmenter.py
splits sentences, playback.py paces them. models.py holds the shared
types.

RULES:
- No I/O in this package
- Markup is always produced from sanitized text
"""

from inkwell.core.annotator import (
    annotate,
    annotate_analytical,
    annotate_creative,
    annotate_terms,
)
from inkwell.core.matcher import apply
from inkwell.core.playback import PlaybackScheduler
from inkwell.core.sanitizer import sanitize
from inkwell.core.segmenter import segment

__all__ = [
    "PlaybackScheduler",
    "annotate",
    "annotate_analytical",
    "annotate_creative",
    "annotate_terms",
    "apply",
    "sanitize",
    "segment",
]

"""Term matching and span rendering over sanitized text.

WHY: The classifier hands back bare term lists ("人工智能", "Transformer",
"智能", ...). The reader must wrap every occurrence of every term in a
styled, clickable span without nesting spans, without breaking existing
markup, and without ever crashing on odd term content.

HOW: Matching produces a list of accepted Span objects over the sanitized
text; rendering inserts the markup once at the end. Before a match is
accepted it is checked against the protected regions of the text (tags,
spans that are already rendered, spans accepted earlier in this pass) and
against character entities it would cut in half. Terms are tried longest
first so "人工智能" claims its characters before "智能" can.

RULES:
- Terms shorter than MIN_TERM_LENGTH (after stripping) are ignored
- Longest term first; equal lengths keep caller order
- Pure-ASCII terms must be bounded by non-word ASCII characters
- Non-ASCII terms (CJK etc.) match with no boundary assertions
- Matching is case-insensitive
- Regex metacharacters in terms are escaped; a term that still fails to
  compile or scan is logged and skipped, other terms still apply
- The data-term attribute carries the literal matched text, quotes escaped
- apply() is idempotent: re-running it on its own output adds nothing
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from inkwell.config import HOT_WORD_PALETTE, MIN_TERM_LENGTH, PROPER_NOUN_PALETTE
from inkwell.core.models import Category, Span
from inkwell.core.sanitizer import escape_attribute, escape_text

logger = logging.getLogger(__name__)

# Rendered spans (never nested) and any other tag, e.g. the <br/> markers.
_PROTECTED_RE = re.compile(r"<span\b[^>]*>.*?</span>|<[^>]*>", re.IGNORECASE | re.DOTALL)

# Character entities produced by the sanitizer (and any others already present).
_ENTITY_RE = re.compile(r"&(?:#\d+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

_SPAN_TEMPLATE = (
    '<span data-term="{term}" data-type="{kind}" class="term term-{kind}" '
    'style="{style}">{text}</span>'
)

# Analytical categories use a fixed foreground; everything else inherits.
_FOREGROUNDS = {
    Category.PROPER_NOUN: PROPER_NOUN_PALETTE[1],
    Category.HOT_WORD: HOT_WORD_PALETTE[1],
}


def prepare_terms(terms: Iterable[str]) -> list[str]:
    """Strip, drop short/duplicate terms, and order longest first.

    RULES:
    - None and non-string entries are skipped (classifier output is untrusted)
    - Duplicates are detected case-insensitively; the first spelling wins
    - sorted() is stable, so equal-length terms keep their input order
    """
    seen: set[str] = set()
    kept: list[str] = []
    for raw in terms or ():
        if not isinstance(raw, str):
            continue
        term = raw.strip()
        if len(term) < MIN_TERM_LENGTH:
            continue
        key = term.casefold()
        if key in seen:
            continue
        seen.add(key)
        kept.append(term)
    return sorted(kept, key=len, reverse=True)


def compile_term(term: str) -> re.Pattern[str]:
    """Build the search pattern for one term against sanitized text.

    WHY: The text being searched is already entity-escaped, so the term
    must be escaped the same way ("AT&T" has to find "AT&amp;T") before
    its regex metacharacters are neutralized.

    HOW: ASCII terms are wrapped in ASCII-only lookarounds that forbid a
    word character on either side, which rejects "cat" in "category" but
    still accepts "C++" followed by a space. Non-ASCII terms get no
    boundary at all because CJK text has no spaces between words.
    """
    body = re.escape(escape_text(term))
    if term.isascii():
        return re.compile(r"(?<!\w)" + body + r"(?!\w)", re.IGNORECASE | re.ASCII)
    return re.compile(body, re.IGNORECASE)


def _protected_ranges(safe_text: str) -> list[tuple[int, int]]:
    return [m.span() for m in _PROTECTED_RE.finditer(safe_text)]


def _entity_ranges(safe_text: str) -> list[tuple[int, int]]:
    return [m.span() for m in _ENTITY_RE.finditer(safe_text)]


def _cuts_entity(start: int, end: int, entities: Sequence[tuple[int, int]]) -> bool:
    for e_start, e_end in entities:
        if start < e_end and end > e_start and not (start <= e_start and e_end <= end):
            return True
    return False


def find_spans(
    safe_text: str,
    terms: Iterable[str],
    category: Category,
    color: str,
    taken: Sequence[Span] = (),
) -> list[Span]:
    """Find every acceptable occurrence of ``terms`` in ``safe_text``.

    WHY: Separating "where do highlights go" from "what markup do they
    become" lets the annotation engine run several categories against one
    text and render once, with an explicit overlap check instead of a
    lookahead on half-rendered markup.

    HOW: Protected regions (existing tags and rendered spans), the spans
    in ``taken``, and the spans accepted so far in this call are all
    treated as occupied. A match that overlaps any of them, or that cuts a
    character entity in half, is rejected.

    RULES:
    - Returns only the newly accepted spans, unsorted
    - ``taken`` is never modified
    - A re.error on one term skips that term only

    Args:
        safe_text: Output of sanitize(), possibly already annotated.
        terms: Raw term strings from the classifier.
        category: Category stamped on every accepted span.
        color: Resolved CSS background colour for the spans.
        taken: Spans already accepted by earlier category passes.

    Returns:
        Newly accepted, mutually non-overlapping spans.
    """
    occupied = _protected_ranges(safe_text)
    occupied.extend((span.start, span.end) for span in taken)
    entities = _entity_ranges(safe_text)
    accepted: list[Span] = []

    for term in prepare_terms(terms):
        try:
            pattern = compile_term(term)
            for match in pattern.finditer(safe_text):
                start, end = match.span()
                if start == end:
                    continue
                if any(start < o_end and end > o_start for o_start, o_end in occupied):
                    continue
                if _cuts_entity(start, end, entities):
                    continue
                accepted.append(Span(start, end, category, color))
                occupied.append((start, end))
        except re.error as exc:
            logger.warning("Skipping term %r for %s: %s", term, category.value, exc)

    return accepted


def span_style(category: Category, color: str) -> str:
    """Inline style for a highlight of ``category`` with background ``color``."""
    foreground = _FOREGROUNDS.get(category, "inherit")
    return (
        "background-color: {}; color: {}; padding: 0px 4px; "
        "border-radius: 3px; vertical-align: baseline;".format(color, foreground)
    )


def render(safe_text: str, spans: Iterable[Span]) -> str:
    """Insert span markup for ``spans`` into ``safe_text``.

    RULES:
    - Spans must not overlap (find_spans guarantees this)
    - Text outside spans is copied through unchanged
    """
    pieces: list[str] = []
    cursor = 0
    for span in sorted(spans, key=lambda s: s.start):
        matched = safe_text[span.start:span.end]
        pieces.append(safe_text[cursor:span.start])
        pieces.append(_SPAN_TEMPLATE.format(
            term=escape_attribute(matched),
            kind=span.category.value,
            style=escape_attribute(span_style(span.category, span.color)),
            text=matched,
        ))
        cursor = span.end
    pieces.append(safe_text[cursor:])
    return "".join(pieces)


def apply(safe_text: str, terms: Iterable[str], category: Category, color: str) -> str:
    """Wrap every acceptable occurrence of ``terms`` in a styled span.

    This is the single-category, string-in/string-out entry point. Regions
    that are already annotated are left untouched, so calling it again
    with the same arguments returns the same markup.
    """
    return render(safe_text, find_spans(safe_text, terms, category, color))

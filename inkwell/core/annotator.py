"""Annotation engine: multi-category highlighting of one text.

WHY: A chapter is highlighted with several term categories at once —
proper nouns and topic hot-words in analytical (paper) mode; nouns,
verbs and adjectives in creative-reading (novel) mode. The categories
compete for the same characters, so their order decides who wins.

HOW: Truncate the raw text to the annotation budget, sanitize it, then
run find_spans() per category in a fixed order while sharing one span
list, so a region claimed by an earlier category is off-limits to later
ones. Markup is rendered once at the end.

RULES:
- Analytical order: proper-noun → hot-word, fixed palette
- Creative order: noun → verb → adjective, enabled categories only,
  user colours rendered as translucent backgrounds
- Source text is cut to MAX_ANNOTATION_CHARS before anything else
- Always recomputed from scratch — no incremental state between calls
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence

from inkwell.config import (
    HIGHLIGHT_ALPHA_SUFFIX,
    HOT_WORD_PALETTE,
    MAX_ANNOTATION_CHARS,
    PROPER_NOUN_PALETTE,
)
from inkwell.core.matcher import find_spans, render
from inkwell.core.models import Category, HighlightConfig, Span, Term
from inkwell.core.sanitizer import sanitize

_HEX6_RE = re.compile(r"^#[0-9a-fA-F]{6}$")

CREATIVE_ORDER = (Category.NOUN, Category.VERB, Category.ADJECTIVE)
ANALYTICAL_ORDER = (Category.PROPER_NOUN, Category.HOT_WORD)

ANALYTICAL_PALETTE = {
    Category.PROPER_NOUN: PROPER_NOUN_PALETTE[0],
    Category.HOT_WORD: HOT_WORD_PALETTE[0],
}


def truncate(text: str, limit: int = MAX_ANNOTATION_CHARS) -> str:
    """Return the prefix of ``text`` that is eligible for annotation."""
    return (text or "")[:limit]


def highlight_background(color: str) -> str:
    """Turn a user colour into a translucent background.

    Six-digit hex colours get the alpha suffix; anything else (named
    colours, rgba(), short hex) is used as given.
    """
    if _HEX6_RE.match(color):
        return color + HIGHLIGHT_ALPHA_SUFFIX
    return color


def annotate(
    text: str,
    passes: Sequence[tuple[Category, Iterable[str], str]],
    limit: int = MAX_ANNOTATION_CHARS,
) -> str:
    """Annotate ``text`` with several category passes, first pass wins.

    Args:
        text: Raw (unsanitized) source text.
        passes: Ordered (category, terms, resolved colour) triples.
        limit: Character budget applied before sanitizing.

    Returns:
        Sanitized markup with non-nested highlight spans.
    """
    safe_text = sanitize(truncate(text, limit))
    spans: list[Span] = []
    for category, terms, color in passes:
        spans.extend(find_spans(safe_text, terms, category, color, taken=spans))
    return render(safe_text, spans)


def annotate_creative(
    text: str,
    nouns: Iterable[str],
    verbs: Iterable[str],
    adjectives: Iterable[str],
    config: HighlightConfig,
    limit: int = MAX_ANNOTATION_CHARS,
) -> str:
    """Creative-reading mode: nouns, then verbs, then adjectives."""
    terms_by_category = {
        Category.NOUN: nouns,
        Category.VERB: verbs,
        Category.ADJECTIVE: adjectives,
    }
    passes = []
    for category in CREATIVE_ORDER:
        settings = config.for_category(category)
        if not settings.enabled:
            continue
        passes.append((
            category,
            terms_by_category[category] or (),
            highlight_background(settings.color),
        ))
    return annotate(text, passes, limit)


def annotate_analytical(
    text: str,
    proper_nouns: Iterable[str],
    hot_words: Iterable[str],
    limit: int = MAX_ANNOTATION_CHARS,
) -> str:
    """Analytical mode: proper nouns, then topic hot-words, fixed colours."""
    terms_by_category = {
        Category.PROPER_NOUN: proper_nouns,
        Category.HOT_WORD: hot_words,
    }
    passes = [
        (category, terms_by_category[category] or (), ANALYTICAL_PALETTE[category])
        for category in ANALYTICAL_ORDER
    ]
    return annotate(text, passes, limit)


def annotate_terms(
    text: str,
    terms: Iterable[Term],
    colors: Mapping[Category, str],
    order: Sequence[Category],
    limit: int = MAX_ANNOTATION_CHARS,
) -> str:
    """Annotate from categorized Term objects instead of per-category lists.

    Categories missing from ``order`` or ``colors`` are skipped.
    """
    grouped: dict[Category, list[str]] = {category: [] for category in order}
    for term in terms:
        if term.category in grouped:
            grouped[term.category].append(term.text)
    passes = [
        (category, grouped[category], colors[category])
        for category in order
        if category in colors
    ]
    return annotate(text, passes, limit)

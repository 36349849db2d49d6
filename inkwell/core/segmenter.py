"""Sentence segmentation for focus-mode playback.

WHY: Focus mode highlights one sentence at a time and paces playback by
sentence length. Chinese and Western punctuation both end sentences, and
line breaks end them too (headings, dialogue lines).

HOW: One global regex — a run of non-terminal characters followed by any
number of terminal marks — then whitespace-only units are dropped.

RULES:
- Terminal marks: . ! ? 。 ！ ？ and newline; they stay on their unit
- A trailing unterminated remainder is still a unit
- Empty and whitespace-only units are discarded
- If nothing matches, the whole (non-blank) text is one unit
- Pure: recomputed from scratch on every call
"""

from __future__ import annotations

import re

TERMINALS = ".!?。！？\n"

_UNIT_RE = re.compile("[^{0}]+[{0}]*".format(re.escape(TERMINALS)))


def segment(text: str) -> list[str]:
    """Split ``text`` into ordered sentence units."""
    if not text:
        return []
    units = _UNIT_RE.findall(text) or [text]
    return [unit for unit in units if unit.strip()]

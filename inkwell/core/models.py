"""Data model shared by the annotation engine and the playback scheduler.

WHY: The matcher, annotator, session, CLI, and HTTP API all pass around
the same handful of concepts — term categories, per-category highlight
settings, accepted spans, and playback snapshots. Defining them once
keeps the markup attributes and the config shape consistent everywhere.

HOW: Category is a str-valued enum whose values double as the
``data-type`` attribute written into markup. Configuration and playback
snapshots are frozen dataclasses; callers replace them rather than
mutating them.

RULES:
- Category values are the markup ``data-type`` strings, do not rename
- Span offsets index into the *sanitized* text, half-open [start, end)
- Spans never nest and never overlap
- HighlightConfig is read-then-replaced, never mutated in place
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace

from inkwell.config import (
    DEFAULT_ADJECTIVE_COLOR,
    DEFAULT_NOUN_COLOR,
    DEFAULT_RATE,
    DEFAULT_VERB_COLOR,
)


class Category(str, enum.Enum):
    """Closed set of term categories.

    RULES:
    - PROPER_NOUN and HOT_WORD belong to analytical (paper) mode
    - NOUN, VERB and ADJECTIVE belong to creative-reading (novel) mode
    """

    PROPER_NOUN = "proper"
    HOT_WORD = "hotword"
    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adj"


class AppMode(str, enum.Enum):
    """Reading mode selected by the user."""

    STANDARD = "STANDARD"
    NOVEL = "NOVEL"
    PAPER = "PAPER"


@dataclass(frozen=True)
class Term:
    """A token to highlight plus the category it was classified into."""

    text: str
    category: Category


@dataclass(frozen=True)
class CategoryConfig:
    """Toggle and colour for one creative-reading category."""

    enabled: bool
    color: str


@dataclass(frozen=True)
class HighlightConfig:
    """Per-category highlight settings for creative-reading mode.

    WHY: Users switch categories on and off and recolour them while
    reading. The annotation engine reads this on every re-render.

    RULES:
    - Only enabled categories contribute terms
    - toggled()/recolored() return new instances
    """

    nouns: CategoryConfig = field(
        default_factory=lambda: CategoryConfig(True, DEFAULT_NOUN_COLOR)
    )
    verbs: CategoryConfig = field(
        default_factory=lambda: CategoryConfig(False, DEFAULT_VERB_COLOR)
    )
    adjectives: CategoryConfig = field(
        default_factory=lambda: CategoryConfig(False, DEFAULT_ADJECTIVE_COLOR)
    )

    def for_category(self, category: Category) -> CategoryConfig:
        try:
            return getattr(self, _CONFIG_FIELDS[category])
        except KeyError:
            raise ValueError(
                "{} is not a creative-reading category".format(category.name)
            ) from None

    def toggled(self, category: Category) -> HighlightConfig:
        current = self.for_category(category)
        return replace(
            self,
            **{_CONFIG_FIELDS[category]: replace(current, enabled=not current.enabled)}
        )

    def recolored(self, category: Category, color: str) -> HighlightConfig:
        current = self.for_category(category)
        return replace(
            self, **{_CONFIG_FIELDS[category]: replace(current, color=color)}
        )


_CONFIG_FIELDS = {
    Category.NOUN: "nouns",
    Category.VERB: "verbs",
    Category.ADJECTIVE: "adjectives",
}


@dataclass(frozen=True)
class Span:
    """An accepted highlight over the sanitized text."""

    start: int
    end: int
    category: Category
    color: str


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the focus-mode playback cursor.

    RULES:
    - 0 <= index < count whenever count > 0; index is 0 when count == 0
    - rate is characters per second, already clamped
    """

    index: int = 0
    playing: bool = False
    rate: float = DEFAULT_RATE
    count: int = 0

    @property
    def at_end(self) -> bool:
        return self.count == 0 or self.index >= self.count - 1

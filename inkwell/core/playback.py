"""Focus-mode playback scheduler.

WHY: Focus mode walks the reader through a chapter one sentence at a
time, holding each sentence on screen for a time proportional to its
length. The user can pause, jump around, and change speed at any moment,
and none of that may ever leave two timers racing to advance the cursor.

HOW: An explicit two-state machine (stopped / playing) that owns at most
one timer handle. Timers come from an event-loop-like object exposing
``call_later(delay_seconds, callback)`` whose return value has
``cancel()`` — the running asyncio loop by default, a fake loop in tests.
Every operation cancels the outstanding handle before re-arming or
settling, then publishes a fresh PlaybackState to subscribers.

RULES:
- delay = max(min_delay_ms, len(unit) * 1000 / rate)
- rate is clamped to [MIN_RATE, MAX_RATE] characters per second
- At most one pending timer; cancel before arm, always
- On expiry: advance by exactly one, or stop on the last unit
- seek() clamps to [0, count - 1]; while playing it re-arms at the new
  index, while stopped it only moves the cursor
- set_rate() while playing re-arms the current unit
- With zero units play() does nothing
- close() cancels the timer and drops subscribers
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from inkwell.config import DEFAULT_RATE, MAX_RATE, MIN_DELAY_MS, MIN_RATE
from inkwell.core.models import PlaybackState
from inkwell.core.segmenter import segment

logger = logging.getLogger(__name__)

Listener = Callable[[PlaybackState], None]


def clamp_rate(rate: float) -> float:
    """Clamp a characters-per-second rate into the supported range."""
    return max(MIN_RATE, min(MAX_RATE, rate))


def unit_delay_ms(unit: str, rate: float, min_delay_ms: float = MIN_DELAY_MS) -> float:
    """How long ``unit`` stays active at ``rate`` characters per second."""
    return max(min_delay_ms, len(unit) * (1000.0 / clamp_rate(rate)))


class PlaybackScheduler:
    """Timer-driven cursor over the sentence units of one text.

    WHY: Replaces ambient "re-run the effect and set another timeout"
    rescheduling with named states and a single cancellable handle.

    RULES:
    - Construct with the text to play; call load() when the text changes
    - Operations return the new PlaybackState
    - Without an explicit loop, arming a timer requires a running asyncio loop
    """

    def __init__(
        self,
        text: str = "",
        rate: float = DEFAULT_RATE,
        loop: Any = None,
        min_delay_ms: float = MIN_DELAY_MS,
    ) -> None:
        self._units: list[str] = segment(text)
        self._index = 0
        self._playing = False
        self._rate = clamp_rate(rate)
        self._loop = loop
        self._min_delay_ms = min_delay_ms
        self._handle: Any = None
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def units(self) -> list[str]:
        return list(self._units)

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            index=self._index,
            playing=self._playing,
            rate=self._rate,
            count=len(self._units),
        )

    @property
    def current_unit(self) -> str:
        return self._units[self._index] if self._units else ""

    @property
    def pending(self) -> bool:
        """True while a timer is armed."""
        return self._handle is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every new state; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load(self, text: str) -> PlaybackState:
        """Re-segment for new source text; resets to the first unit, stopped."""
        self._cancel()
        self._units = segment(text)
        self._index = 0
        self._playing = False
        return self._emit()

    def play(self) -> PlaybackState:
        if self._playing or not self._units:
            return self.state
        self._playing = True
        self._arm()
        return self._emit()

    def pause(self) -> PlaybackState:
        self._cancel()
        self._playing = False
        return self._emit()

    def toggle(self) -> PlaybackState:
        return self.pause() if self._playing else self.play()

    def seek(self, index: int) -> PlaybackState:
        """Move the cursor; keeps playing (re-armed) if it was playing."""
        if not self._units:
            return self.state
        self._cancel()
        self._index = max(0, min(len(self._units) - 1, index))
        if self._playing:
            self._arm()
        return self._emit()

    def next(self) -> PlaybackState:
        return self.seek(self._index + 1)

    def previous(self) -> PlaybackState:
        return self.seek(self._index - 1)

    def set_rate(self, rate: float) -> PlaybackState:
        self._rate = clamp_rate(rate)
        if self._playing:
            self._cancel()
            self._arm()
        return self._emit()

    def close(self) -> None:
        """Tear down: cancel any pending timer and forget subscribers."""
        self._cancel()
        self._playing = False
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Timer plumbing
    # ------------------------------------------------------------------

    def _timer_source(self) -> Any:
        if self._loop is None:
            return asyncio.get_running_loop()
        return self._loop

    def _arm(self) -> None:
        self._cancel()
        delay_ms = unit_delay_ms(self.current_unit, self._rate, self._min_delay_ms)
        logger.debug("Arming unit %d for %.0f ms", self._index, delay_ms)
        self._handle = self._timer_source().call_later(delay_ms / 1000.0, self._on_elapsed)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _on_elapsed(self) -> None:
        self._handle = None
        if not self._playing:
            return
        if self.state.at_end:
            self._playing = False
        else:
            self._index += 1
            self._arm()
        self._emit()

    def _emit(self) -> PlaybackState:
        state = self.state
        for listener in list(self._listeners):
            listener(state)
        return state

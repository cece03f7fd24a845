"""Client-side typing debouncer.

Turns the raw stream of input-changed notifications into discrete `typing` /
`stop typing` edges:

- idle -> typing when the input becomes non-empty; `typing` is emitted once.
- every further keystroke refreshes the activity marker and arms its own
  watchdog, without re-emitting.
- typing -> idle (emitting `stop typing`) when the input is cleared, when a
  message is sent, or when a watchdog fires and no keystroke happened since it
  was armed. Watchdogs armed before a fresher keystroke are stale and do
  nothing, so they never need cancelling.

Clock, scheduler and emit sink are injected so the machine runs without a
transport or an event loop in tests.
"""

from __future__ import annotations

import enum
import time
import asyncio
import logging
from typing import Any
from collections.abc import Callable

from chat_relay.config.presence import TYPING_TIMEOUT_S, TYPING_WATCHDOG_SLACK_S
from chat_relay.config.websocket import WS_EVENT_TYPING, WS_EVENT_STOP_TYPING

logger = logging.getLogger(__name__)

EmitFn = Callable[[str], None]
TimeFn = Callable[[], float]
ScheduleFn = Callable[[float, Callable[[], None]], Any]


class TypingState(enum.Enum):
    IDLE = "idle"
    TYPING = "typing"


def _loop_schedule(delay_s: float, callback: Callable[[], None]) -> Any:
    return asyncio.get_running_loop().call_later(delay_s, callback)


class TypingDebouncer:
    def __init__(
        self,
        emit: EmitFn,
        *,
        timeout_s: float = TYPING_TIMEOUT_S,
        slack_s: float = TYPING_WATCHDOG_SLACK_S,
        now_fn: TimeFn | None = None,
        schedule_fn: ScheduleFn | None = None,
    ) -> None:
        self._emit = emit
        self._timeout_s = max(0.0, float(timeout_s))
        self._slack_s = max(0.0, float(slack_s))
        self._now = now_fn or time.monotonic
        self._schedule = schedule_fn or _loop_schedule
        self._state = TypingState.IDLE
        self._last_activity: float | None = None
        # Bumped on every keystroke; a watchdog is current only if it still matches.
        self._activity_seq = 0

    @property
    def state(self) -> TypingState:
        return self._state

    @property
    def is_typing(self) -> bool:
        return self._state is TypingState.TYPING

    @property
    def last_activity(self) -> float | None:
        """Clock reading of the latest keystroke.

        Informational only. Whether a watchdog is current is decided by the
        activity sequence, never by comparing timestamps.
        """
        return self._last_activity

    def input_changed(self, value: str | None) -> None:
        if value and value.strip():
            self._on_activity()
            return
        self._stop()

    def message_sent(self) -> None:
        self._stop()

    def reset(self) -> None:
        """Drop to idle without emitting (the connection that would carry it is gone)."""
        self._state = TypingState.IDLE
        self._activity_seq += 1

    def _on_activity(self) -> None:
        if self._state is TypingState.IDLE:
            self._state = TypingState.TYPING
            self._emit(WS_EVENT_TYPING)
        self._last_activity = self._now()
        self._activity_seq += 1
        seq = self._activity_seq
        self._schedule(self._timeout_s + self._slack_s, lambda: self._on_watchdog(seq))

    def _on_watchdog(self, seq: int) -> None:
        if seq != self._activity_seq:
            return
        if self._state is not TypingState.TYPING:
            return
        logger.debug("typing quiet period elapsed")
        self._stop()

    def _stop(self) -> None:
        if self._state is not TypingState.TYPING:
            return
        self._state = TypingState.IDLE
        self._emit(WS_EVENT_STOP_TYPING)


__all__ = ["TypingDebouncer", "TypingState"]

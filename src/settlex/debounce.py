"""Debounce scheduling — turn a burst of change signals into one trigger.

Each schedule() cancels the previous not-yet-fired timer and arms a new one
on the running event loop, so only the last call in a burst fires.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from settlex import _anchor
from settlex.config import DEFAULT_DEBOUNCE_SECONDS


class Debouncer:
    """Coalesce rapid schedule() calls — fire once after a quiet period."""

    __slots__ = ("_id", "_interval")

    def __init__(self, interval: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        self._id = _anchor.new_id()
        self._interval = interval
        _anchor.timers[self._id] = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def pending(self) -> bool:
        """Is a trigger armed and not yet fired?"""
        return _anchor.timers.get(self._id) is not None

    @property
    def disposed(self) -> bool:
        return self._id not in _anchor.timers

    def schedule(self, trigger: Callable[[], None], interval: float | None = None) -> None:
        """Run trigger `interval` seconds from now, replacing any pending trigger.

        An interval of 0 still goes through the loop timer, so a trigger
        scheduled with no delay can be canceled like any other.
        Must be called from a running event loop.
        """
        if self._id not in _anchor.timers:
            return
        self.cancel()
        delay = self._interval if interval is None else interval
        loop = asyncio.get_running_loop()
        _anchor.timers[self._id] = loop.call_later(max(delay, 0), self._fire, trigger)

    def _fire(self, trigger: Callable[[], None]) -> None:
        _anchor.timers[self._id] = None
        trigger()

    def cancel(self) -> None:
        """Drop the pending trigger, if any."""
        handle = _anchor.timers.get(self._id)
        if handle is not None:
            handle.cancel()
            _anchor.timers[self._id] = None

    def dispose(self) -> None:
        """Cancel, refuse further schedule() calls and free the anchor record."""
        handle = _anchor.timers.pop(self._id, None)
        if handle is not None:
            handle.cancel()

    def __repr__(self) -> str:
        if self.disposed:
            state = "disposed"
        else:
            state = "pending" if self.pending else "idle"
        return f"Debouncer({self._interval}s, {state})"

"""Observable cells — the externally visible state of every channel.

A channel never hands its consumers a mutable object. It publishes frozen
values into an Observable, and consumers subscribe to be told when the value
changes. Writing an equal value is a no-op, so a repeated "validating" state
does not notify twice.

All state lives in _anchor — instances are thin handles holding an _id.
A disposed Observable keeps only its last value, on the handle itself.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from settlex import _anchor
from settlex._batch import schedule

T = TypeVar("T")

Disposer = Callable[[], None]


def _noop() -> None:
    pass


class Observable(Generic[T]):
    """A single value that notifies its subscribers when it changes."""

    __slots__ = ("_id", "_last")

    def __init__(self, value: T) -> None:
        self._id = _anchor.new_id()
        self._last = None
        _anchor.values[self._id] = value
        _anchor.subscribers[self._id] = []

    @property
    def disposed(self) -> bool:
        return self._id not in _anchor.values

    def get(self) -> T:
        if self._id in _anchor.values:
            return _anchor.values[self._id]
        return self._last

    def set(self, value: T) -> None:
        """Write a new value. Subscribers run only if it differs from the old one.

        Ignored once disposed.
        """
        if self._id not in _anchor.values:
            return
        old = _anchor.values[self._id]
        if old is not value and old != value:
            _anchor.values[self._id] = value
            schedule(self)

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        if self._id not in _anchor.subscribers:
            return _noop
        _anchor.subscribers[self._id].append(callback)

        def _unsubscribe() -> None:
            try:
                _anchor.subscribers[self._id].remove(callback)
            except (KeyError, ValueError):
                pass  # already removed, or the cell was disposed

        return _unsubscribe

    def _notify(self) -> None:
        if self._id not in _anchor.values:
            return
        value = _anchor.values[self._id]
        for callback in list(_anchor.subscribers[self._id]):
            callback(value)

    def dispose(self) -> None:
        """Drop every subscriber and free the anchor records; get() keeps the last value."""
        if self._id not in _anchor.values:
            return
        self._last = _anchor.values.pop(self._id)
        del _anchor.subscribers[self._id]

    def __repr__(self) -> str:
        return f"Observable({self.get()!r})"

"""Lifecycle guard — no state delivery after a consumer is torn down.

Nothing in Python can observe "the consumer is gone" on its own, so the
consumer says so explicitly: constructing a Lifecycle is the create signal,
destroy() is the teardown signal. Every delivery path runs through guard(),
and destroy() disposes the timers and slots the consumer owns so nothing
fires afterwards.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Protocol, TypeVar

from settlex import _anchor

logger = logging.getLogger("settlex.lifecycle")


class Disposable(Protocol):
    def dispose(self) -> None: ...


D = TypeVar("D", bound=Disposable)


class Lifecycle:
    """One consumer's alive flag plus the primitives torn down with it."""

    __slots__ = ("_id", "_name")

    def __init__(self, name: str = "consumer") -> None:
        self._id = _anchor.new_id()
        self._name = name
        _anchor.alive[self._id] = True
        _anchor.owned[self._id] = []

    @property
    def alive(self) -> bool:
        return _anchor.alive.get(self._id, False)

    def guard(self, deliver: Callable[[], None]) -> bool:
        """Call deliver() unless destroyed. Returns whether it ran."""
        if not self.alive:
            logger.debug("%s: delivery after destroy suppressed", self._name)
            return False
        deliver()
        return True

    def own(self, disposable: D) -> D:
        """Dispose `disposable` when this lifecycle is destroyed.

        Owning something after destroy disposes it immediately.
        """
        if not self.alive:
            disposable.dispose()
        else:
            _anchor.owned[self._id].append(disposable)
        return disposable

    def disown(self, disposable: Disposable) -> None:
        """Forget `disposable`, which was disposed before this lifecycle ended."""
        owned = _anchor.owned.get(self._id)
        if owned is not None and disposable in owned:
            owned.remove(disposable)

    def destroy(self) -> None:
        """Flip alive to False (once) and dispose everything owned, newest first.

        The anchor records are freed; a destroyed Lifecycle reads as not alive.
        """
        if not self.alive:
            return
        del _anchor.alive[self._id]
        owned = _anchor.owned.pop(self._id)
        while owned:
            owned.pop().dispose()

    def dispose(self) -> None:
        # Lets a Lifecycle be owned by a parent Lifecycle.
        self.destroy()

    def __repr__(self) -> str:
        state = "alive" if self.alive else "destroyed"
        return f"Lifecycle({self._name}, {state})"


@contextmanager
def mounted(name: str = "consumer") -> Iterator[Lifecycle]:
    """Lifecycle scoped to a with-block; destroyed on exit, even on error."""
    lifecycle = Lifecycle(name)
    try:
        yield lifecycle
    finally:
        lifecycle.destroy()

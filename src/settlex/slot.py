"""Task slots — at most one live asynchronous task per channel.

Every run() advances the slot's generation and captures the new value. When
the task settles, its captured generation is compared with the slot's
generation *at that moment*; a mismatch means a newer run superseded it and
the outcome is dropped without touching any state and without re-raising.

This is compare-then-discard, not abort. The underlying call keeps running
unless the collaborator watches the CancelToken it was handed; the slot only
guarantees that a late result has no effect. Superseding therefore always
wins, whatever order the calls complete in.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

from settlex import _anchor
from settlex.errors import SupersededError

logger = logging.getLogger("settlex.slot")

T = TypeVar("T")


class CancelToken:
    """Cooperative cancellation signal handed to each run.

    Cancelled when a newer run supersedes this one or the slot is disposed.
    Collaborators may poll `cancelled`, call `check()` between steps, or
    `await wait()`; ignoring it is allowed.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def check(self) -> None:
        """Raise SupersededError if this run has been superseded."""
        if self._event.is_set():
            raise SupersededError("superseded by a newer run")

    async def wait(self) -> None:
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"


class TaskSlot(Generic[T]):
    """Single-flight task holder with a generation counter."""

    __slots__ = ("_id", "_name", "_tasks", "_last_generation")

    def __init__(self, name: str = "slot") -> None:
        self._id = _anchor.new_id()
        self._name = name
        # Strong refs so in-flight tasks are not collected mid-await.
        self._tasks: set[asyncio.Task] = set()
        _anchor.generations[self._id] = 0
        _anchor.cancel_tokens[self._id] = None
        self._last_generation = 0

    @property
    def generation(self) -> int:
        return _anchor.generations.get(self._id, self._last_generation)

    @property
    def disposed(self) -> bool:
        return self._id not in _anchor.generations

    def is_current(self, token: int) -> bool:
        return token == _anchor.generations.get(self._id)

    def supersede(self) -> int:
        """Advance the generation so every in-flight run becomes stale."""
        if self._id not in _anchor.generations:
            return self._last_generation
        previous = _anchor.cancel_tokens[self._id]
        if previous is not None:
            previous.cancel()
            _anchor.cancel_tokens[self._id] = None
        _anchor.generations[self._id] += 1
        return _anchor.generations[self._id]

    def run(
        self,
        factory: Callable[[CancelToken], Awaitable[T]],
        deliver: Callable[[T], None],
        fail: Callable[[Exception], None],
    ) -> asyncio.Future:
        """Start factory(cancel_token) as the slot's only current task.

        deliver(result) or fail(exc) is called only if no newer run (and no
        dispose) happened before the task settled. Returns the task, which
        itself never raises. Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        if self.disposed:
            logger.debug("%s: run() after dispose ignored", self._name)
            done = loop.create_future()
            done.set_result(None)
            return done

        token = self.supersede()
        cancel = CancelToken()
        _anchor.cancel_tokens[self._id] = cancel

        async def _runner() -> None:
            try:
                result = await factory(cancel)
            except Exception as exc:
                if self.is_current(token):
                    fail(exc)
                else:
                    logger.debug(
                        "%s: dropped failure of superseded generation %d: %r",
                        self._name, token, exc,
                    )
                return
            if self.is_current(token):
                deliver(result)
            else:
                logger.debug("%s: dropped result of superseded generation %d", self._name, token)

        task = loop.create_task(_runner(), name=f"{self._name}#{token}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def dispose(self) -> None:
        """Supersede everything in flight, refuse further runs, free the anchor records.

        In-flight tasks are not awaited; they finish on their own and are dropped.
        """
        if self.disposed:
            return
        self.supersede()
        self._last_generation = _anchor.generations.pop(self._id)
        del _anchor.cancel_tokens[self._id]

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else f"generation={self.generation}"
        return f"TaskSlot({self._name}, {state})"

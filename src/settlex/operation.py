"""AsyncOperation — execute/reset state tracking for one async operation.

The generic building block: loading/data/error state published through an
Observable, single-flight execution through a TaskSlot, and a Lifecycle so
nothing is published after teardown.

    idle ──execute──▶ loading ──▶ success | error
                        ▲  │
                        └──┘ execute again (previous run superseded)

Usage:
    styles = AsyncOperation(lambda cancel: store.available_styles())
    await styles.execute()
    if styles.state.get().is_success:
        render(styles.state.get().data)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Generic, TypeVar

from settlex.lifecycle import Lifecycle
from settlex.observable import Observable
from settlex.slot import CancelToken, TaskSlot

logger = logging.getLogger("settlex.operation")

T = TypeVar("T")


@dataclass(frozen=True)
class AsyncOperationState(Generic[T]):
    is_loading: bool = False
    data: T | None = None
    error: Exception | None = None

    @property
    def is_success(self) -> bool:
        return not self.is_loading and self.error is None and self.data is not None

    @property
    def is_error(self) -> bool:
        return not self.is_loading and self.error is not None


class AsyncOperation(Generic[T]):
    """Single-flight wrapper: a new execute() supersedes the running one."""

    def __init__(
        self,
        operation: Callable[[CancelToken], Awaitable[T]],
        *,
        lifecycle: Lifecycle | None = None,
        name: str = "operation",
    ) -> None:
        self.name = name
        self._operation = operation
        self._owns_lifecycle = lifecycle is None
        self._lifecycle = lifecycle if lifecycle is not None else Lifecycle(name)
        self._slot: TaskSlot[T] = TaskSlot(name)
        self._disposed = False
        self.state: Observable[AsyncOperationState[T]] = Observable(AsyncOperationState())
        self._lifecycle.own(self)

    @property
    def is_loading(self) -> bool:
        return self.state.get().is_loading

    @property
    def data(self) -> T | None:
        return self.state.get().data

    @property
    def error(self) -> Exception | None:
        return self.state.get().error

    def execute(self) -> asyncio.Future:
        """Start the operation; loading is visible before this returns.

        The returned task never raises — failures land in `state.error`.
        Data from an earlier success stays visible while loading.
        """
        if not self._disposed:
            self._publish(replace(self.state.get(), is_loading=True, error=None))
        return self._slot.run(self._operation, self._succeed, self._fail)

    def reset(self) -> None:
        """Back to idle; whatever is in flight will be ignored."""
        self._slot.supersede()
        self._publish(AsyncOperationState())

    def _succeed(self, data: T) -> None:
        self._publish(AsyncOperationState(data=data))

    def _fail(self, exc: Exception) -> None:
        logger.debug("%s failed: %r", self.name, exc)
        self._publish(replace(self.state.get(), is_loading=False, error=exc))

    def _publish(self, state: AsyncOperationState[T]) -> None:
        self._lifecycle.guard(lambda: self.state.set(state))

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._slot.dispose()
        self.state.dispose()
        if self._owns_lifecycle:
            self._lifecycle.destroy()
        else:
            self._lifecycle.disown(self)

    def __repr__(self) -> str:
        s = self.state.get()
        if s.is_loading:
            status = "loading"
        elif s.is_error:
            status = "error"
        elif s.is_success:
            status = "success"
        else:
            status = "idle"
        return f"AsyncOperation({self.name}, {status})"

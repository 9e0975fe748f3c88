"""Notification batching.

Writes inside `with transaction()` mark their Observable as pending instead
of notifying. When the outermost scope exits each pending Observable notifies
once, with its final value, so readers never see a half-applied update.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from settlex.observable import Observable

# Batch depth counter. When > 0, notifications are deferred.
_batch_depth: int = 0

# Observables written during a batch, in first-write order.
_pending: dict[Observable, None] = {}


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. The outermost exit flushes pending notifications."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def schedule(observable: Observable) -> None:
    """Notify now, or defer to the end of the enclosing batch."""
    if _batch_depth > 0:
        _pending[observable] = None
    else:
        observable._notify()


def _flush_pending() -> None:
    while _pending:
        # Subscribers may write again while we flush; drain until quiet.
        batch = list(_pending)
        _pending.clear()
        for observable in batch:
            observable._notify()


def get_pending_count() -> int:
    """Number of Observables waiting to notify. Useful for testing."""
    return len(_pending)


@contextmanager
def transaction():
    """Context manager for batching writes.

    Usage:
        with transaction():
            rules.set(merged)
            loading.set(False)
            # subscribers run here, after both are set
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()

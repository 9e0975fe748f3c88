"""Optimistic mutations — show the new value now, resync if the write fails.

Two phases: a synchronous tentative apply, then confirm-or-resync. On a
failed write the visible state is rebuilt from the store (a full reload, not
a local undo), and only then is the failure re-raised, so a caller showing a
notice can rely on the visible state already being consistent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger("settlex.mutation")

T = TypeVar("T")


@dataclass(frozen=True)
class MutationRecord(Generic[T]):
    """One in-progress optimistic write. Lives only for the mutate() call."""

    tentative: T
    prior: Any = None


async def optimistic_mutate(
    value: T,
    *,
    apply: Callable[[T], None],
    persist: Callable[[T], Awaitable[None]],
    reload: Callable[[], Awaitable[Any]],
    snapshot: Callable[[], Any] | None = None,
) -> None:
    """Apply `value` to visible state, persist it, reload on failure.

    apply() runs before the first await. If persist() raises, reload() is
    awaited and the persist error is re-raised. A failing reload is logged;
    the persist error is still the one raised.

    Usage:
        await optimistic_mutate(
            rule,
            apply=lambda r: rules.set(replace_rule(rules.get(), r)),
            persist=lambda r: store.update_rule(style, r),
            reload=refresh,
        )
    """
    record = MutationRecord(value, snapshot() if snapshot is not None else None)
    apply(record.tentative)
    try:
        await persist(record.tentative)
    except Exception:
        logger.warning(
            "Persisting %r failed (was %r); reloading from store",
            record.tentative, record.prior,
        )
        try:
            await reload()
        except Exception:
            logger.exception("Reload after failed write of %r also failed", record.tentative)
        raise

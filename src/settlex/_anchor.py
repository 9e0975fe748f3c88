"""Data anchor — plain Python structures that hold all coordination state.

Observables, debouncers, task slots and lifecycles are thin handles holding
an _id. Each handle owns exactly one record per table below; nothing else
writes to it, so sibling channels of one consumer never share a mutable field.

dispose()/destroy() pops the handle's records. A missing record means the
handle is released; handles check membership instead of keeping tombstones.
"""

import itertools

# Observable state
values: dict[int, object] = {}
subscribers: dict[int, list] = {}  # obs_id -> list of callbacks

# Debouncer state
timers: dict[int, object] = {}  # debouncer_id -> asyncio.TimerHandle | None

# Task slot state
generations: dict[int, int] = {}
cancel_tokens: dict[int, object] = {}  # slot_id -> CancelToken | None

# Lifecycle state
alive: dict[int, bool] = {}
owned: dict[int, list] = {}  # lifecycle_id -> disposables, in ownership order

TABLES = (values, subscribers, timers, generations, cancel_tokens, alive, owned)

# ID generation — itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def record_count() -> int:
    """Records held across every table. Useful for testing."""
    return sum(len(table) for table in TABLES)

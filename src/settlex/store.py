"""SettingsStore — key-based Observable container backed by a ConfigStore.

A SettingsStore wraps a schema of named Observables. load() pulls the
persisted document in one transaction; save() writes one key optimistically
and reloads everything if the write fails.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from settlex._batch import transaction
from settlex.errors import StoreUnavailableError
from settlex.lifecycle import Lifecycle
from settlex.mutation import optimistic_mutate
from settlex.observable import Observable
from settlex.protocols import ConfigStore

logger = logging.getLogger("settlex.store")


class SettingsStore:
    """Named settings with defaults, kept in sync with a ConfigStore."""

    def __init__(
        self,
        schema: Mapping[str, Any],
        store: ConfigStore | None = None,
        *,
        initial: Mapping[str, Any] | None = None,
        lifecycle: Lifecycle | None = None,
    ) -> None:
        self._schema = dict(schema)
        self._store = store
        # Own child lifecycle: dispose() tears down this store, not its parent.
        self._parent = lifecycle
        self._lifecycle = Lifecycle("settings")
        if lifecycle is not None:
            lifecycle.own(self._lifecycle)
        self._observables: dict[str, Observable] = {}
        for key, default in self._schema.items():
            value = initial.get(key, default) if initial else default
            self._observables[key] = self._lifecycle.own(Observable(value))

    def get(self, key: str) -> Any:
        obs = self._observables.get(key)
        return obs.get() if obs is not None else None

    def observable(self, key: str) -> Observable:
        """The cell for `key`, for subscribing. KeyError if not in the schema."""
        return self._observables[key]

    def set(self, key: str, value: Any) -> None:
        """Change the visible value only. Unknown keys are ignored."""
        obs = self._observables.get(key)
        if obs is not None:
            self._lifecycle.guard(lambda: obs.set(value))

    def update(self, values: Mapping[str, Any]) -> None:
        with transaction():
            for key, value in values.items():
                self.set(key, value)

    def snapshot(self) -> dict[str, Any]:
        return {key: obs.get() for key, obs in self._observables.items()}

    async def load(self) -> None:
        """Replace every value with the persisted one (schema default if absent)."""
        if self._store is None:
            raise StoreUnavailableError()
        document = await self._store.load()
        self.update({key: document.get(key, default) for key, default in self._schema.items()})

    async def save(self, key: str, value: Any) -> None:
        """Show `value` under `key` now and persist it.

        On a failed write every value is reloaded from the store before the
        error is re-raised.
        """
        if key not in self._observables:
            raise KeyError(key)
        if self._store is None:
            raise StoreUnavailableError()
        store = self._store
        await optimistic_mutate(
            value,
            apply=lambda v: self.set(key, v),
            persist=lambda v: store.save({key: v}),
            reload=self.load,
            snapshot=lambda: self.get(key),
        )

    def dispose(self) -> None:
        self._lifecycle.destroy()
        if self._parent is not None:
            self._parent.disown(self._lifecycle)

"""Rule lists — a style's rules merged with configured overrides.

Loading goes through an AsyncOperation, so overlapping refreshes collapse to
the newest. Edits are optimistic: the list changes immediately and a failed
write triggers a refresh before the error reaches the caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Iterable

from settlex.errors import StoreUnavailableError
from settlex.lifecycle import Lifecycle
from settlex.mutation import optimistic_mutate
from settlex.observable import Observable
from settlex.operation import AsyncOperation, AsyncOperationState
from settlex.protocols import RuleStore
from settlex.slot import CancelToken

logger = logging.getLogger("settlex.rules")

SEVERITIES = ("default", "suggestion", "warning", "error")


@dataclass(frozen=True)
class RuleInfo:
    """A rule as shipped by its style, with the severity from its YAML."""

    name: str
    default_severity: str | None = None


@dataclass(frozen=True)
class Rule:
    name: str
    severity: str = "default"
    disabled: bool = False
    default_severity: str | None = None

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise ValueError(f"unknown severity {self.severity!r} for rule {self.name}")


def merge_rules(available: Iterable[RuleInfo], configured: Iterable[Rule]) -> tuple[Rule, ...]:
    """One Rule per available rule, in style order.

    A configured override wins but keeps the YAML default severity; anything
    not configured is enabled at severity "default".
    """
    overrides = {rule.name: rule for rule in configured}
    merged = []
    for info in available:
        override = overrides.get(info.name)
        if override is not None:
            merged.append(replace(override, default_severity=info.default_severity))
        else:
            merged.append(Rule(info.name, default_severity=info.default_severity))
    return tuple(merged)


class RuleSet:
    """Rules of one style. Call refresh() once mounted to load them."""

    def __init__(
        self,
        style: str,
        store: RuleStore | None,
        *,
        lifecycle: Lifecycle | None = None,
    ) -> None:
        self.style = style
        self._store = store
        self._owns_lifecycle = lifecycle is None
        self._lifecycle = lifecycle if lifecycle is not None else Lifecycle(f"rules:{style}")
        self._disposed = False
        self.rules: Observable[tuple[Rule, ...]] = Observable(())
        self._fetch: AsyncOperation[tuple[Rule, ...]] = AsyncOperation(
            self._load, lifecycle=self._lifecycle, name=f"rules:{style}"
        )
        self._fetch.state.subscribe(self._on_fetch)
        self._lifecycle.own(self)

    @property
    def loading(self) -> bool:
        return self._fetch.is_loading

    @property
    def error(self) -> Exception | None:
        return self._fetch.error

    def get(self, name: str) -> Rule | None:
        for rule in self.rules.get():
            if rule.name == name:
                return rule
        return None

    def refresh(self) -> asyncio.Future:
        """Reload from the store. Awaiting the result never raises; see `error`."""
        return self._fetch.execute()

    async def update_rule(self, rule: Rule) -> None:
        """Show `rule` now, persist it, and refresh if persisting fails.

        A rule not in the list is persisted but changes nothing visible.
        Raises whatever the store raised, after the refresh has settled.
        """
        if self._store is None:
            raise StoreUnavailableError()
        store = self._store
        await optimistic_mutate(
            rule,
            apply=self._apply,
            persist=lambda r: store.update_rule(self.style, r),
            reload=self.refresh,
            snapshot=lambda: self.get(rule.name),
        )

    async def _load(self, cancel: CancelToken) -> tuple[Rule, ...]:
        if self._store is None:
            raise StoreUnavailableError()
        available, configured = await asyncio.gather(
            self._store.rules_with_defaults(self.style),
            self._store.configured_rules(self.style),
        )
        cancel.check()
        return merge_rules(available, configured)

    def _apply(self, rule: Rule) -> None:
        updated = tuple(rule if r.name == rule.name else r for r in self.rules.get())
        self._lifecycle.guard(lambda: self.rules.set(updated))

    def _on_fetch(self, state: AsyncOperationState[tuple[Rule, ...]]) -> None:
        if state.is_success:
            self.rules.set(state.data)
        elif state.is_error:
            logger.warning("Loading rules for %s failed: %s", self.style, state.error)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._fetch.dispose()
        self.rules.dispose()
        if self._owns_lifecycle:
            self._lifecycle.destroy()
        else:
            self._lifecycle.disown(self)

    def __repr__(self) -> str:
        return f"RuleSet({self.style}, {len(self.rules.get())} rules)"

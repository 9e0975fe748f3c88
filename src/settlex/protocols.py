"""Collaborator interfaces the kernel consumes.

The kernel never checks paths, reads files or runs external tools itself.
It calls these, once per generation, and may call them concurrently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Protocol, Sequence

if TYPE_CHECKING:
    from settlex.rules import Rule, RuleInfo
    from settlex.validation import Verdict

ConfigDocument = Mapping[str, Any]


class Validator(Protocol):
    """Decides whether one raw input is valid.

    Report failure by returning Verdict(valid=False, error=...) or by raising.
    """

    async def check(self, value: str) -> Verdict: ...


class ConfigStore(Protocol):
    """Loads and persists the configuration document.

    save() must raise on failure so optimistic writes can roll back.
    """

    async def load(self) -> ConfigDocument: ...

    async def save(self, update: ConfigDocument) -> None: ...


class RuleStore(Protocol):
    """Rule listing and per-rule overrides for one style."""

    async def rules_with_defaults(self, style: str) -> Sequence[RuleInfo]: ...

    async def configured_rules(self, style: str) -> Sequence[Rule]: ...

    async def update_rule(self, style: str, rule: Rule) -> None: ...

"""Fake collaborators shared by the test modules."""

from __future__ import annotations

import asyncio

import pytest

from settlex import Rule, RuleInfo, Verdict


class GatedValidator:
    """Validator whose checks settle only when the test resolves them."""

    def __init__(self):
        self.calls = []
        self._futures = []

    async def check(self, value):
        future = asyncio.get_running_loop().create_future()
        self.calls.append(value)
        self._futures.append(future)
        return await future

    def resolve(self, index, verdict=None):
        self._futures[index].set_result(verdict if verdict is not None else Verdict(True))

    def reject(self, index, exc):
        self._futures[index].set_exception(exc)


class MemoryConfigStore:
    """ConfigStore over a dict. Set fail_with to make the next saves raise."""

    def __init__(self, document=None):
        self.document = dict(document or {})
        self.fail_with = None
        self.loads = 0
        self.saves = []

    async def load(self):
        self.loads += 1
        if isinstance(self.document, dict):
            return dict(self.document)
        return self.document

    async def save(self, update):
        self.saves.append(dict(update))
        if self.fail_with is not None:
            raise self.fail_with
        self.document.update(update)


class MemoryRuleStore:
    """RuleStore for one style. update_rule can be gated or made to fail."""

    def __init__(self, available, configured=()):
        self.available = list(available)
        self.configured = {rule.name: rule for rule in configured}
        self.fail_with = None
        self.gate = None
        self.updates = []
        self.fetches = 0

    async def rules_with_defaults(self, style):
        self.fetches += 1
        return list(self.available)

    async def configured_rules(self, style):
        return list(self.configured.values())

    async def update_rule(self, style, rule):
        self.updates.append(rule)
        if self.gate is not None:
            await self.gate
        if self.fail_with is not None:
            raise self.fail_with
        self.configured[rule.name] = rule


@pytest.fixture
def gated_validator():
    return GatedValidator()


@pytest.fixture
def config_store():
    return MemoryConfigStore(
        {
            "StylesPath": "styles",
            "*": {"md": {"BasedOnStyles": "Vale"}},
            "vale_path": "/usr/local/bin/vale",
        }
    )


@pytest.fixture
def rule_store():
    return MemoryRuleStore(
        available=[
            RuleInfo("Vale.Spelling", "error"),
            RuleInfo("Vale.Repetition", "error"),
            RuleInfo("Vale.Terms", "warning"),
        ],
        configured=[Rule("Vale.Spelling", severity="warning")],
    )


@pytest.fixture
def make_validator():
    """Factory for tests that need several independent validators."""
    return GatedValidator

"""Validation channels — validate-on-change for a single settings field.

A channel composes one Debouncer, one TaskSlot and a Lifecycle:

    Idle ──input──▶ Scheduled ──quiet period──▶ Running ──▶ Settled(valid|invalid)
      ▲                 │  ▲                       │
      └──blank input────┘  └────new input──────────┘

Any new input supersedes both the pending timer and the running check.
Blank input (None, "", whitespace) never reaches the Validator; the channel
drops straight back to Idle. A settling check publishes only if its
generation is still current and the lifecycle is still alive.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping

from settlex._batch import transaction
from settlex.config import KernelConfig, resolve_interval
from settlex.debounce import Debouncer
from settlex.errors import UNKNOWN_ERROR, error_message
from settlex.lifecycle import Lifecycle
from settlex.observable import Observable
from settlex.protocols import Validator
from settlex.slot import CancelToken, TaskSlot

logger = logging.getLogger("settlex.validation")

# Shown when a validator says "invalid" without saying why.
INVALID_WITHOUT_REASON = "Invalid value"


class Status(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class ValidationResult:
    """Visible state of one channel."""

    valid: bool = False
    error: str | None = None
    is_validating: bool = False

    def __post_init__(self) -> None:
        if self.is_validating and (self.valid or self.error is not None):
            raise ValueError("a validating result carries no verdict")
        if self.valid and self.error is not None:
            raise ValueError("a valid result carries no error")

    @property
    def status(self) -> Status:
        if self.is_validating:
            return Status.VALIDATING
        if self.valid:
            return Status.VALID
        if self.error is not None:
            return Status.INVALID
        return Status.IDLE


IDLE = ValidationResult()
VALIDATING = ValidationResult(is_validating=True)


@dataclass(frozen=True)
class Verdict:
    """A Validator's answer. `value` is an optional parsed form of the input."""

    valid: bool
    error: str | None = None
    value: Any = None

    @classmethod
    def coerce(cls, raw: Any) -> Verdict:
        """Accept a Verdict, a {"valid": ..., "error": ...} mapping, or a bool."""
        if isinstance(raw, Verdict):
            return raw
        if isinstance(raw, Mapping):
            return cls(valid=bool(raw.get("valid")), error=raw.get("error"), value=raw.get("value"))
        if isinstance(raw, bool):
            return cls(valid=raw)
        raise TypeError(f"validator returned {type(raw).__name__}, expected Verdict")


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class ValidationChannel:
    """Debounced, single-flight validation of one field."""

    def __init__(
        self,
        validator: Validator,
        *,
        initial: str | None = None,
        interval: float | None = None,
        config: KernelConfig | None = None,
        lifecycle: Lifecycle | None = None,
        name: str = "field",
        fallback_error: str = UNKNOWN_ERROR,
    ) -> None:
        self.name = name
        self._validator = validator
        self._fallback_error = fallback_error
        self._owns_lifecycle = lifecycle is None
        self._lifecycle = lifecycle if lifecycle is not None else Lifecycle(name)
        self._debouncer = Debouncer(resolve_interval(interval, config))
        self._slot: TaskSlot[Verdict] = TaskSlot(name)
        self._input: str | None = None
        self._disposed = False
        self.state: Observable[ValidationResult] = Observable(IDLE)
        self.parsed: Observable[Any] = Observable(None)
        self._lifecycle.own(self)
        self.set_input(initial)

    @property
    def result(self) -> ValidationResult:
        return self.state.get()

    @property
    def current_input(self) -> str | None:
        return self._input

    @property
    def generation(self) -> int:
        return self._slot.generation

    def set_input(self, value: str | None) -> None:
        """Record a new raw value and (re)arm the debounce timer.

        Needs a running event loop unless the value is blank.
        """
        if self._disposed or value == self._input:
            return
        self._input = value
        self._debouncer.cancel()
        self._slot.supersede()
        if is_blank(value):
            self._publish(IDLE, None)
            return
        self._debouncer.schedule(self._dispatch)

    def revalidate(self) -> asyncio.Future | None:
        """Check the current input now, in a fresh generation."""
        if self._disposed or is_blank(self._input):
            return None
        self._debouncer.cancel()
        return self._dispatch()

    def _dispatch(self) -> asyncio.Future | None:
        value = self._input
        if is_blank(value):
            return None
        self._publish(VALIDATING, None)
        validator = self._validator

        async def _check(cancel: CancelToken) -> Verdict:
            return Verdict.coerce(await validator.check(value))

        return self._slot.run(_check, self._settle, self._fail)

    def _settle(self, verdict: Verdict) -> None:
        if verdict.valid:
            self._publish(ValidationResult(valid=True), verdict.value)
        else:
            self._publish(ValidationResult(error=verdict.error or INVALID_WITHOUT_REASON), None)

    def _fail(self, exc: Exception) -> None:
        logger.debug("%s: validator raised %r", self.name, exc)
        self._publish(ValidationResult(error=error_message(exc, self._fallback_error)), None)

    def _publish(self, result: ValidationResult, parsed: Any) -> None:
        def _deliver() -> None:
            with transaction():
                self.state.set(result)
                self.parsed.set(parsed)

        self._lifecycle.guard(_deliver)

    def dispose(self) -> None:
        """Cancel the pending timer and drop the in-flight check."""
        if self._disposed:
            return
        self._disposed = True
        self._debouncer.dispose()
        self._slot.dispose()
        self.state.dispose()
        self.parsed.dispose()
        if self._owns_lifecycle:
            self._lifecycle.destroy()
        else:
            self._lifecycle.disown(self)

    def __repr__(self) -> str:
        return f"ValidationChannel({self.name}, {self.result.status.value})"


class ValidationGroup:
    """Sibling channels of one consumer, validated independently, unmounted together.

    Each channel keeps its own debounce timer and generation counter; only the
    Lifecycle is shared, so superseding one field never touches another.
    """

    def __init__(
        self,
        validators: Mapping[str, Validator],
        *,
        initial: Mapping[str, str | None] | None = None,
        interval: float | None = None,
        config: KernelConfig | None = None,
        name: str = "group",
    ) -> None:
        self.lifecycle = Lifecycle(name)
        initial = initial or {}
        self._channels: dict[str, ValidationChannel] = {
            key: ValidationChannel(
                validator,
                initial=initial.get(key),
                interval=interval,
                config=config,
                lifecycle=self.lifecycle,
                name=f"{name}.{key}",
            )
            for key, validator in validators.items()
        }

    def __getitem__(self, key: str) -> ValidationChannel:
        return self._channels[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._channels)

    def __len__(self) -> int:
        return len(self._channels)

    def update(self, values: Mapping[str, str | None]) -> None:
        """Feed new inputs; keys not in the group raise KeyError."""
        for key, value in values.items():
            self._channels[key].set_input(value)

    @property
    def results(self) -> dict[str, ValidationResult]:
        return {key: channel.result for key, channel in self._channels.items()}

    def dispose(self) -> None:
        self.lifecycle.destroy()


def path_validation(
    vale_validator: Validator,
    config_validator: Validator,
    *,
    vale_path: str | None = None,
    config_path: str | None = None,
    interval: float | None = None,
    config: KernelConfig | None = None,
) -> ValidationGroup:
    """The binary-path / config-path pair shown on the CLI settings page."""
    return ValidationGroup(
        {"vale_path": vale_validator, "config_path": config_validator},
        initial={"vale_path": vale_path, "config_path": config_path},
        interval=interval,
        config=config,
        name="paths",
    )

"""Kernel configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_DEBOUNCE_SECONDS = 0.5


@dataclass(frozen=True)
class KernelConfig:
    """Timing knobs shared by the channels of one settings surface."""

    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS

    def __post_init__(self) -> None:
        if isinstance(self.debounce_seconds, bool) or not isinstance(
            self.debounce_seconds, (int, float)
        ):
            raise TypeError(
                f"debounce_seconds must be a number, got {type(self.debounce_seconds).__name__}"
            )
        if self.debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be >= 0, got {self.debounce_seconds}")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> KernelConfig:
        """Build from a loaded settings section. Unknown keys are ignored."""
        if not raw:
            return cls()
        return cls(debounce_seconds=raw.get("debounce_seconds", DEFAULT_DEBOUNCE_SECONDS))


DEFAULT_CONFIG = KernelConfig()


def resolve_interval(interval: float | None, config: KernelConfig | None) -> float:
    """An explicit interval wins; otherwise the config's, otherwise the default."""
    if interval is not None:
        return interval
    return (config or DEFAULT_CONFIG).debounce_seconds

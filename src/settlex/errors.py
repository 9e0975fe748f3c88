"""Exceptions and error-message normalization."""

from __future__ import annotations

UNKNOWN_ERROR = "Unknown error"


class SettlexError(Exception):
    """Base class for errors raised by settlex."""


class SupersededError(SettlexError):
    """Raised by CancelToken.check() once a newer run has replaced this one.

    A task that lets it propagate is simply discarded; it never reaches a
    channel's visible state.
    """


class StoreUnavailableError(SettlexError):
    """No ConfigStore/RuleStore is attached to the consumer."""

    def __init__(self, message: str = "Config manager not available") -> None:
        super().__init__(message)


def error_message(exc: BaseException | None, fallback: str = UNKNOWN_ERROR) -> str:
    """Text to show for a raised exception.

    The exception's own message when it carries one, else `fallback`.
    """
    if exc is None:
        return fallback
    message = str(exc)
    return message if message.strip() else fallback

"""Textual integration for settlex. Opt-in — requires textual.

Bridges channel state (Observables) onto widgets. The guard, the NoMatches
swallow and the thread marshal live here, not at every callsite, and the
Textual coupling stays in this one module.

A settings screen rebuilds parts of itself (the rule list after a style
switch, the feedback row after a path change) while other rebuilds may
already be under way, so pauses nest: an app is paused while its depth
count is above zero. Bindings can be owned by the screen's Lifecycle and are
dropped with it.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from textual.css.query import NoMatches

from settlex.lifecycle import Lifecycle
from settlex.observable import Observable

# id(app) -> open pause() blocks; absent means not paused.
_pause_depth: dict[int, int] = {}


@contextmanager
def pause(app) -> Iterator[None]:
    """Suspend bound effects while widgets are being replaced. Nests."""
    key = id(app)
    _pause_depth[key] = _pause_depth.get(key, 0) + 1
    try:
        yield
    finally:
        remaining = _pause_depth[key] - 1
        if remaining:
            _pause_depth[key] = remaining
        else:
            del _pause_depth[key]


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _pause_depth


class Binding:
    """An observable-to-widget subscription. Call it, or dispose() it, to unbind."""

    __slots__ = ("_unsubscribe", "_lifecycle")

    def __init__(self, unsubscribe: Callable[[], None], lifecycle: Lifecycle | None) -> None:
        self._unsubscribe = unsubscribe
        self._lifecycle = lifecycle

    def dispose(self) -> None:
        self._unsubscribe()
        if self._lifecycle is not None:
            self._lifecycle.disown(self)
            self._lifecycle = None

    __call__ = dispose


def bind(
    app,
    observable: Observable,
    effect: Callable[[Any], None],
    *,
    lifecycle: Lifecycle | None = None,
    fire_immediately: bool = False,
) -> Binding:
    """Run effect(value) whenever `observable` changes, safely for Textual.

    Skips while paused, not running, or after `lifecycle` is destroyed;
    swallows NoMatches from widget queries; marshals calls made off the app
    thread via call_from_thread.

    Usage:
        binding = stx.bind(app, channel.state, show_feedback, lifecycle=screen_lifecycle)
        ...
        binding()  # or let screen_lifecycle.destroy() drop it
    """
    main = threading.get_ident()

    def _guarded(value):
        if not is_safe(app):
            return
        if threading.get_ident() != main:
            app.call_from_thread(_deliver, value)
        else:
            _deliver(value)

    def _deliver(value):
        if lifecycle is None:
            _apply(value)
        else:
            lifecycle.guard(lambda: _apply(value))

    def _apply(value):
        try:
            effect(value)
        except NoMatches:
            pass

    if fire_immediately:
        _guarded(observable.get())
    binding = Binding(observable.subscribe(_guarded), lifecycle)
    if lifecycle is not None:
        lifecycle.own(binding)
    return binding

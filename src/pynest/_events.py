"""Minimal listener registry used by the session, account and handles."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

_logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class EventEmitter:
    """Named-event listener registry.

    Listeners run synchronously in registration order.  A failing
    listener is logged and never stops delivery to the others.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, callback: Listener) -> Callable[[], None]:
        """Register *callback* for *event*; returns an unsubscribe callable."""
        self._listeners.setdefault(event, []).append(callback)

        def _unsubscribe() -> None:
            listeners = self._listeners.get(event)
            if listeners and callback in listeners:
                listeners.remove(callback)

        return _unsubscribe

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners.get(event, ())):
            try:
                callback(*args)
            except Exception:
                _logger.exception("Listener for %r failed", event)

"""Per-event-name dispatch for stall events.

Handlers get a copy of the payload (with ``ts`` filled in). A failing
handler is counted and skipped; the registry operation that emitted the
event is never interrupted.
"""
from __future__ import annotations

from threading import RLock
from time import time
from typing import Any, Callable, Dict, List

from stall import metrics

Handler = Callable[[Dict[str, Any]], None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = RLock()

    def subscribe(self, name: str, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for ``name``; returns its unsubscribe call."""
        with self._lock:
            self._handlers.setdefault(name, []).append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(name, [])
                if handler in handlers:
                    handlers.remove(handler)
        return _unsubscribe

    def emit(self, name: str, payload: Dict[str, Any]) -> None:
        payload.setdefault("ts", time())
        with self._lock:
            handlers = list(self._handlers.get(name, ()))
        metrics.inc("events_emitted_total", {"event": name})
        for handler in handlers:
            try:
                handler(dict(payload))
            except Exception:  # noqa: BLE001
                metrics.inc("handler_exceptions_total", {"event": name})

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()


_BUS = EventBus()


def subscribe(name: str, handler: Handler) -> Callable[[], None]:
    return _BUS.subscribe(name, handler)


def emit(name: str, payload: Dict[str, Any]) -> None:
    _BUS.emit(name, payload)


def reset_for_tests() -> None:
    _BUS.clear()


__all__ = ["emit", "subscribe", "EventBus", "reset_for_tests"]

"""Event dataclasses + any-subscriber bridge.

Per-event subscriptions go through `stall.eventbus`. `on(handler)` here
registers a handler(name, payload) receiving every event; the built-in
metrics collector is one such handler.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from time import time
from typing import Any, Callable, Dict, List, Protocol

from stall import metrics as _metrics
from stall.eventbus import emit as _emit_bus

EventHandler = Callable[[str, Dict[str, Any]], None]


class SupportsEvent(Protocol):  # pragma: no cover
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        ...


@dataclass(slots=True)
class BaseEvent:
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        data = asdict(self)
        data["ts"] = data.get("ts") or time()
        return data


@dataclass(slots=True)
class EntryInserted(BaseEvent):
    local: str
    remote: str
    evicted: list[tuple[str, str]] | None = None


@dataclass(slots=True)
class EntryRemoved(BaseEvent):
    key: str  # local|remote
    path: str
    removed: tuple[str, str] | None = None


@dataclass(slots=True)
class StallFormatFallback(BaseEvent):
    """Structured parse failed; list parse attempted instead."""
    reason: str  # syntax|schema|path|empty|decode
    message: str | None = None


@dataclass(slots=True)
class StallLoaded(BaseEvent):
    path: str | None
    format: str  # yaml|list
    entries: int


@dataclass(slots=True)
class StallSaved(BaseEvent):
    path: str
    mode: str  # overwrite|create
    entries: int


@dataclass(slots=True)
class FileTransferred(BaseEvent):
    direction: str  # collect|distribute|move
    source: str
    target: str
    status: str  # copied|skipped|missing|dry-run
    bytes: int = 0


@dataclass(slots=True)
class CommandFailed(BaseEvent):
    command: str
    error_type: str
    message: str | None = None


_ANY_SUBS: List[EventHandler] = []


def _metrics_collector(
    name: str, payload: Dict[str, Any]
) -> None:  # noqa: D401
    if name == "EntryInserted":
        _metrics.inc("stall_entries_inserted_total")
        for _ in payload.get("evicted") or ():
            _metrics.inc("stall_entries_evicted_total")
    elif name == "EntryRemoved":
        if payload.get("removed"):
            _metrics.inc(
                "stall_entries_removed_total", {"key": payload.get("key")}
            )
    elif name == "StallFormatFallback":
        _metrics.inc(
            "stall_format_fallback_total",
            {"reason": payload.get("reason", "unknown")},
        )
    elif name == "StallLoaded":
        _metrics.inc("stall_loaded_total", {"format": payload.get("format")})
    elif name == "StallSaved":
        _metrics.inc("stall_saved_total", {"mode": payload.get("mode")})
    elif name == "FileTransferred":
        direction = payload.get("direction", "unknown")
        _metrics.inc(
            "stall_transfers_total",
            {"direction": direction, "status": payload.get("status")},
        )
        if payload.get("status") == "copied":
            _metrics.observe(
                "stall_transfer_bytes",
                payload.get("bytes", 0),
                {"direction": direction},
            )
    elif name == "CommandFailed":
        _metrics.inc(
            "command_failures_total",
            {
                "command": payload.get("command", "unknown"),
                "error_type": payload.get("error_type", "internal"),
            },
        )


_ANY_SUBS.append(_metrics_collector)


def emit(ev: BaseEvent | SupportsEvent) -> None:
    name = ev.__class__.__name__
    payload = ev.to_event()
    _emit_bus(name, payload)
    for h in list(_ANY_SUBS):  # copy for isolation
        try:
            h(name, dict(payload))
        except Exception:  # noqa: BLE001
            _metrics.inc("handler_exceptions_total", {"event": name})


def on(handler: EventHandler) -> Callable[[], None]:
    _ANY_SUBS.append(handler)

    def _unsub() -> None:  # noqa: D401
        try:
            _ANY_SUBS.remove(handler)
        except ValueError:
            pass
    return _unsub


def reset_listeners_for_tests() -> None:
    _ANY_SUBS.clear()
    _ANY_SUBS.append(_metrics_collector)


__all__ = [
    "emit",
    "on",
    "reset_listeners_for_tests",
    "BaseEvent",
    "EntryInserted",
    "EntryRemoved",
    "StallFormatFallback",
    "StallLoaded",
    "StallSaved",
    "FileTransferred",
    "CommandFailed",
]

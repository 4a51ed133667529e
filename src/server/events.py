"""Utilities for serializing UI events, parsing commands, and preserving sticky state."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.ui_protocol import MESSAGE_COMMAND, STICKY_EVENT_ORDER, STICKY_EVENT_TYPES


@dataclass(frozen=True)
class UICommand:
    """Control command received from a websocket client."""
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def parse_command(message: str | bytes) -> Optional[UICommand]:
    """Decode a `{"type": "command", "command": ..., "arguments": {...}}` message."""
    try:
        raw = json.loads(message)
    except (TypeError, ValueError):
        return None
    if not isinstance(raw, dict) or raw.get("type") != MESSAGE_COMMAND:
        return None

    name = raw.get("command")
    if not isinstance(name, str) or not name.strip():
        return None
    arguments = raw.get("arguments")
    return UICommand(
        name=name.strip().lower(),
        arguments=arguments if isinstance(arguments, dict) else {},
    )


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to new websocket clients."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]

    def latest(self, event_type: str) -> Optional[str]:
        with self._lock:
            return self._events.get(event_type)

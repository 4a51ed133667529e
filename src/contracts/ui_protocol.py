"""Web UI websocket event constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_TIMER = "timer"
EVENT_SESSION = "session"
EVENT_COMMAND_RESULT = "command_result"
EVENT_ERROR = "error"

# Incoming message types
MESSAGE_COMMAND = "command"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_TIMER,
        EVENT_SESSION,
        EVENT_COMMAND_RESULT,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_TIMER,
    EVENT_SESSION,
    EVENT_COMMAND_RESULT,
    EVENT_ERROR,
)

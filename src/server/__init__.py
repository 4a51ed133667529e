"""Websocket UI server streaming timer events and accepting control commands."""

from .config import ServerConfigurationError, UIServerConfig
from .events import StickyEventStore, UICommand, make_event, parse_command
from .service import UIServer

__all__ = [
    "ServerConfigurationError",
    "StickyEventStore",
    "UICommand",
    "UIServerConfig",
    "UIServer",
    "make_event",
    "parse_command",
]

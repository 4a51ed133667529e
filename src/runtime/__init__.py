"""Runtime engine exports."""

from .commands import CommandResult, TimerCommandDispatcher, parse_console_line
from .loop import RuntimeBootstrap, RuntimeEngine

__all__ = [
    "CommandResult",
    "RuntimeBootstrap",
    "RuntimeEngine",
    "TimerCommandDispatcher",
    "parse_console_line",
]

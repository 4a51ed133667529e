"""Dispatcher that executes named control commands against the timer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pomodoro import InvalidTimerOperationError, PomodoroSnapshot, PomodoroTimer
from pomodoro.constants import (
    ACTION_ADD_TIME,
    ACTION_END_WORK,
    ACTION_FULL_RESET,
    ACTION_RESET,
    ACTION_SET_TAG,
    ACTION_SKIP,
    ACTION_TOGGLE,
    REASON_FULL_RESET,
    REASON_INVALID_ARGUMENT,
    REASON_INVALID_FOR_MODE,
    REASON_PAUSED,
    REASON_RESET,
    REASON_SKIPPED,
    REASON_STARTED,
    REASON_TAG_SET,
    REASON_TIME_ADDED,
    REASON_UNSUPPORTED_COMMAND,
    REASON_WORK_ENDED,
)

from .ui import RuntimeUIPublisher

COMMAND_ALIASES: dict[str, str] = {
    "end": ACTION_END_WORK,
    "reset_all": ACTION_FULL_RESET,
    "add": ACTION_ADD_TIME,
}


@dataclass(frozen=True)
class CommandResult:
    """Result envelope returned after applying a control command."""
    command: str
    accepted: bool
    reason: str
    snapshot: PomodoroSnapshot
    message: Optional[str] = None


class TimerCommandDispatcher:
    """Routes named commands to timer operations and publishes the outcome."""
    def __init__(
        self,
        timer: PomodoroTimer,
        *,
        ui: RuntimeUIPublisher,
        logger: Optional[logging.Logger] = None,
    ):
        self._timer = timer
        self._ui = ui
        self._logger = logger or logging.getLogger("focus_timer.commands")
        self._handlers: dict[str, Callable[[dict[str, Any]], str]] = {
            ACTION_TOGGLE: self._toggle,
            ACTION_RESET: self._reset,
            ACTION_SKIP: self._skip,
            ACTION_END_WORK: self._end_work,
            ACTION_FULL_RESET: self._full_reset,
            ACTION_ADD_TIME: self._add_time,
            ACTION_SET_TAG: self._set_tag,
        }

    def handle_command(
        self,
        name: str,
        arguments: Optional[dict[str, Any]] = None,
    ) -> CommandResult:
        command = COMMAND_ALIASES.get(name, name)
        handler = self._handlers.get(command)
        if handler is None:
            self._logger.warning("Unsupported command: %s", name)
            return self._result(name, False, REASON_UNSUPPORTED_COMMAND)

        try:
            reason = handler(arguments or {})
        except InvalidTimerOperationError as error:
            self._logger.warning("Command rejected: %s (%s)", command, error)
            return self._result(command, False, REASON_INVALID_FOR_MODE, str(error))
        except ValueError as error:
            self._logger.warning("Command rejected: %s (%s)", command, error)
            return self._result(command, False, REASON_INVALID_ARGUMENT, str(error))
        return self._result(command, True, reason)

    def _toggle(self, arguments: dict[str, Any]) -> str:
        self._timer.toggle_pause()
        return REASON_STARTED if self._timer.snapshot().is_running else REASON_PAUSED

    def _reset(self, arguments: dict[str, Any]) -> str:
        self._timer.reset()
        return REASON_RESET

    def _skip(self, arguments: dict[str, Any]) -> str:
        self._timer.skip()
        return REASON_SKIPPED

    def _end_work(self, arguments: dict[str, Any]) -> str:
        self._timer.end_work()
        return REASON_WORK_ENDED

    def _full_reset(self, arguments: dict[str, Any]) -> str:
        self._timer.full_reset()
        return REASON_FULL_RESET

    def _add_time(self, arguments: dict[str, Any]) -> str:
        self._timer.add_time(_parse_seconds(arguments.get("seconds")))
        return REASON_TIME_ADDED

    def _set_tag(self, arguments: dict[str, Any]) -> str:
        raw_tag = arguments.get("tag")
        if raw_tag is not None and not isinstance(raw_tag, str):
            raise ValueError("tag must be a string")
        self._timer.set_tag(raw_tag)
        return REASON_TAG_SET

    def _result(
        self,
        command: str,
        accepted: bool,
        reason: str,
        message: Optional[str] = None,
    ) -> CommandResult:
        result = CommandResult(
            command=command,
            accepted=accepted,
            reason=reason,
            snapshot=self._timer.snapshot(),
            message=message,
        )
        self._ui.publish_command_result(
            result.command,
            accepted=result.accepted,
            reason=result.reason,
            snapshot=result.snapshot,
            message=result.message,
        )
        return result


def _parse_seconds(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("seconds must be a positive integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError as error:
            raise ValueError("seconds must be a positive integer") from error
    raise ValueError("seconds must be a positive integer")


def parse_console_line(line: str) -> Optional[tuple[str, dict[str, Any]]]:
    """Parse console input such as ``add 120`` or ``tag deep work``."""
    parts = line.strip().split(maxsplit=1)
    if not parts:
        return None
    name = parts[0].lower().replace("-", "_")
    rest = parts[1].strip() if len(parts) > 1 else ""
    command = COMMAND_ALIASES.get(name, name)
    if command == ACTION_ADD_TIME:
        return command, {"seconds": rest}
    if command == ACTION_SET_TAG:
        return command, {"tag": rest}
    return command, {}

"""Runtime loop pumping the clock and draining queued control commands."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Optional

from app_config import AppConfig
from pomodoro import (
    MonotonicClock,
    PendingSession,
    PomodoroTimer,
    PomodoroUpdate,
    SessionRecorder,
    TimerConfig,
)
from pomodoro.constants import ACTION_SYNC, ACTION_TICK, REASON_STARTUP
from server import UICommand, UIServer

from .commands import TimerCommandDispatcher
from .messages import completion_message, status_message
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    timer_config: TimerConfig
    recorder: SessionRecorder
    clock: MonotonicClock
    ui_server: Optional[UIServer]


class RuntimeEngine:
    """Single-threaded owner of the timer.

    Commands from other threads (websocket server, console reader) only touch
    the command queue; the timer itself is driven from :meth:`run`.
    """

    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._commands: Queue[UICommand] = Queue()
        self._stop_requested = threading.Event()

        self._timer = PomodoroTimer(
            bootstrap.timer_config,
            clock=bootstrap.clock,
            recorder=bootstrap.recorder,
            logger=logging.getLogger("pomodoro"),
            on_update=self._handle_update,
            on_session_event=self._handle_session_event,
        )
        default_tag = bootstrap.app_config.timer.default_tag
        if default_tag:
            self._timer.set_tag(default_tag)

        self._dispatcher = TimerCommandDispatcher(
            self._timer,
            ui=self._ui,
            logger=self._logger.getChild("commands"),
        )

    @property
    def timer(self) -> PomodoroTimer:
        return self._timer

    def submit_command(self, command: UICommand) -> None:
        """Queue a command; safe to call from any thread."""
        self._commands.put(command)

    def request_stop(self) -> None:
        self._stop_requested.set()

    def run(self, poll_interval_seconds: float = 0.2) -> int:
        self._ui.publish_timer_update(
            self._timer.snapshot(),
            action=ACTION_SYNC,
            reason=REASON_STARTUP,
        )
        self._logger.info("Ready: %s", status_message(self._timer.snapshot()))

        try:
            while not self._stop_requested.is_set():
                self._bootstrap.clock.pump()
                try:
                    command = self._commands.get(timeout=poll_interval_seconds)
                except Empty:
                    continue
                self._apply_command(command)
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def _apply_command(self, command: UICommand) -> None:
        result = self._dispatcher.handle_command(command.name, command.arguments)
        if result.accepted:
            self._logger.info("%s -> %s", command.name, status_message(result.snapshot))
        else:
            self._logger.warning(
                "%s rejected (%s)%s",
                command.name,
                result.reason,
                f": {result.message}" if result.message else "",
            )

    def _handle_update(self, update: PomodoroUpdate) -> None:
        message: Optional[str] = None
        if update.completed_phase is not None:
            message = completion_message(update.completed_phase, update.snapshot)
            self._logger.info(message)
        elif update.action == ACTION_TICK:
            self._logger.debug(status_message(update.snapshot))
        self._ui.publish_timer_update(
            update.snapshot,
            action=update.action,
            reason=update.reason,
            completed_phase=update.completed_phase,
            message=message,
        )

    def _handle_session_event(
        self,
        kind: str,
        session: PendingSession,
        duration_seconds: Optional[int],
    ) -> None:
        self._ui.publish_session_event(kind, session, duration_seconds=duration_seconds)

    def _shutdown(self) -> None:
        self._timer.close()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)

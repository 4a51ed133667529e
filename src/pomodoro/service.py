"""Tick-driven work/break state machine for classic and flowtime sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from .clock import ClockSource, ClockSubscription
from .config import TimerConfig, TimerMode
from .constants import (
    ACTION_ADD_TIME,
    ACTION_END_WORK,
    ACTION_FULL_RESET,
    ACTION_RECONFIGURE,
    ACTION_RESET,
    ACTION_SET_TAG,
    ACTION_SKIP,
    ACTION_TICK,
    ACTION_TOGGLE,
    MAX_TAG_LENGTH,
    MODE_FLOWTIME,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
    REASON_COMPLETED,
    REASON_FULL_RESET,
    REASON_PAUSED,
    REASON_RECONFIGURED,
    REASON_RESET,
    REASON_SKIPPED,
    REASON_STARTED,
    REASON_TAG_SET,
    REASON_TICK,
    REASON_TIME_ADDED,
    REASON_WORK_ENDED,
)
from .durations import target_duration
from .errors import InvalidTimerOperationError
from .lifecycle import SessionEventListener, SessionLifecycleCoordinator, SessionRecorder

PomodoroPhase = Literal["work", "shortBreak", "longBreak"]


@dataclass(frozen=True)
class PomodoroSnapshot:
    """Immutable timer snapshot exposed to runtime and UI publishers."""
    phase: PomodoroPhase
    mode: TimerMode
    is_running: bool
    elapsed_seconds: int
    remaining_seconds: int
    target_seconds: Optional[int]
    session_count: int
    tag: Optional[str] = None

    @property
    def is_open_ended(self) -> bool:
        return self.target_seconds is None

    @property
    def progress_percent(self) -> float:
        if not self.target_seconds:
            return 0.0
        done = self.target_seconds - self.remaining_seconds
        return max(0.0, min(100.0, done / self.target_seconds * 100.0))

    @property
    def formatted_time(self) -> str:
        seconds = self.elapsed_seconds if self.is_open_ended else self.remaining_seconds
        return f"{seconds // 60:02d}:{seconds % 60:02d}"


@dataclass(frozen=True)
class PomodoroUpdate:
    """Snapshot emitted after every tick and control operation."""
    action: str
    reason: str
    snapshot: PomodoroSnapshot
    completed_phase: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.completed_phase is not None


UpdateListener = Callable[[PomodoroUpdate], None]


class PomodoroTimer:
    """In-memory focus timer driven by one-second clock ticks.

    Only the current phase, its time counters and the cycle counter are kept;
    every tick and control method mutates them in place and publishes a
    :class:`PomodoroUpdate`. The clock subscription exists exactly while the
    timer is running.
    """

    def __init__(
        self,
        config: Optional[TimerConfig] = None,
        *,
        clock: ClockSource,
        recorder: Optional[SessionRecorder] = None,
        logger: Optional[logging.Logger] = None,
        on_update: Optional[UpdateListener] = None,
        on_session_event: Optional[SessionEventListener] = None,
    ):
        self._config = config or TimerConfig()
        self._clock = clock
        self._logger = logger or logging.getLogger("pomodoro")
        self._on_update = on_update
        self._lifecycle = SessionLifecycleCoordinator(
            recorder,
            logger=self._logger.getChild("lifecycle"),
            on_event=on_session_event,
        )
        self._subscription: Optional[ClockSubscription] = None

        self._phase: PomodoroPhase = PHASE_WORK
        self._session_count = 1
        self._is_running = False
        self._tag: Optional[str] = None
        self._last_work_elapsed_seconds: Optional[int] = None
        self._phase_target_seconds: Optional[int] = None
        self._target_seconds: Optional[int] = None
        self._remaining_seconds = 0
        self._elapsed_seconds = 0
        self._seed_phase()

    @property
    def config(self) -> TimerConfig:
        return self._config

    @property
    def lifecycle(self) -> SessionLifecycleCoordinator:
        return self._lifecycle

    def snapshot(self) -> PomodoroSnapshot:
        if self._target_seconds is None:
            elapsed = self._elapsed_seconds
        else:
            elapsed = max(0, self._target_seconds - self._remaining_seconds)
        return PomodoroSnapshot(
            phase=self._phase,
            mode=self._config.mode,
            is_running=self._is_running,
            elapsed_seconds=elapsed,
            remaining_seconds=self._remaining_seconds,
            target_seconds=self._target_seconds,
            session_count=self._session_count,
            tag=self._tag,
        )

    # -- control surface ---------------------------------------------------

    def toggle_pause(self) -> None:
        if self._is_running:
            self._stop_ticks()
            self._is_running = False
            self._logger.info(
                "Timer paused: phase=%s remaining=%ss elapsed=%ss",
                self._phase,
                self._remaining_seconds,
                self._elapsed_seconds,
            )
            self._publish(ACTION_TOGGLE, REASON_PAUSED)
            return

        self._start_ticks()
        self._is_running = True
        if not self._lifecycle.has_pending:
            self._lifecycle.start(self._phase, self._tag)
        self._logger.info("Timer running: phase=%s", self._phase)
        self._publish(ACTION_TOGGLE, REASON_STARTED)

    def reset(self) -> None:
        """Re-seed the current phase's time without leaving the phase."""
        self._halt_and_cancel()
        target = self._phase_target_seconds
        self._target_seconds = target
        self._remaining_seconds = target or 0
        self._elapsed_seconds = 0
        self._logger.info("Timer reset: phase=%s target=%ss", self._phase, target)
        self._publish(ACTION_RESET, REASON_RESET)

    def skip(self) -> None:
        if self._is_flowtime_work():
            raise InvalidTimerOperationError(
                "skip() is not valid during flowtime work; use end_work()"
            )
        completed = self._phase
        self._advance_phase()
        self._publish(ACTION_SKIP, REASON_SKIPPED, completed_phase=completed)

    def end_work(self) -> None:
        if not self._is_flowtime_work():
            raise InvalidTimerOperationError(
                "end_work() is only valid during flowtime work"
            )
        self._advance_phase()
        self._publish(ACTION_END_WORK, REASON_WORK_ENDED, completed_phase=PHASE_WORK)

    def full_reset(self) -> None:
        self._halt_and_cancel()
        self._phase = PHASE_WORK
        self._session_count = 1
        self._last_work_elapsed_seconds = None
        self._seed_phase()
        self._logger.info("Timer fully reset")
        self._publish(ACTION_FULL_RESET, REASON_FULL_RESET)

    def add_time(self, seconds: int) -> None:
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds <= 0:
            raise ValueError(f"seconds must be a positive integer, got: {seconds!r}")
        if self._target_seconds is None:
            raise InvalidTimerOperationError(
                "add_time() is not valid during open-ended flowtime work"
            )
        # Extensions are uncapped; the target grows with them so progress stays bounded.
        self._remaining_seconds += seconds
        self._target_seconds += seconds
        self._logger.info(
            "Time added: phase=%s added=%ss remaining=%ss",
            self._phase,
            seconds,
            self._remaining_seconds,
        )
        self._publish(ACTION_ADD_TIME, REASON_TIME_ADDED)

    def set_tag(self, tag: Optional[str]) -> None:
        """Label the next work session; an already pending session keeps its tag."""
        self._tag = _sanitize_tag(tag) if tag else None
        self._publish(ACTION_SET_TAG, REASON_TAG_SET)

    def reconfigure(self, config: TimerConfig) -> None:
        self._halt_and_cancel()
        self._config = config
        self._phase = PHASE_WORK
        self._session_count = 1
        self._last_work_elapsed_seconds = None
        self._seed_phase()
        self._logger.info(
            "Timer reconfigured: mode=%s work=%ss short=%ss long=%ss cycle=%s auto_start=%s",
            config.mode,
            config.work_duration_seconds,
            config.short_break_duration_seconds,
            config.long_break_duration_seconds,
            config.sessions_until_long_break,
            config.auto_start,
        )
        self._publish(ACTION_RECONFIGURE, REASON_RECONFIGURED)

    def close(self) -> None:
        """Drop the clock subscription and cancel any session left open."""
        self._halt_and_cancel()

    # -- clock -------------------------------------------------------------

    def tick(self) -> None:
        """Consume one second. Never raises."""
        if not self._is_running:
            return
        completed: Optional[str] = None
        try:
            if self._target_seconds is None:
                self._elapsed_seconds += 1
            else:
                if self._remaining_seconds > 0:
                    self._remaining_seconds -= 1
                if self._remaining_seconds <= 0:
                    completed = self._phase
                    self._advance_phase()
        except Exception as error:
            self._logger.error("Timer tick failed: %s", error, exc_info=True)
            return
        if completed is not None:
            self._publish(ACTION_TICK, REASON_COMPLETED, completed_phase=completed)
        else:
            self._publish(ACTION_TICK, REASON_TICK)

    # -- internals ---------------------------------------------------------

    def _advance_phase(self) -> None:
        completed_phase = self._phase
        if self._target_seconds is None:
            duration = self._elapsed_seconds
            self._last_work_elapsed_seconds = self._elapsed_seconds
        else:
            duration = self._target_seconds

        if self._lifecycle.has_pending:
            self._lifecycle.complete(duration)

        self._phase, self._session_count = self._next_phase()
        self._seed_phase()

        if not self._config.auto_start:
            self._stop_ticks()
            self._is_running = False
        elif self._is_running:
            self._lifecycle.start(self._phase, self._tag)

        self._logger.info(
            "Phase completed: %s -> %s session=%s/%s running=%s",
            completed_phase,
            self._phase,
            self._session_count,
            self._config.sessions_until_long_break,
            self._is_running,
        )

    def _next_phase(self) -> tuple[PomodoroPhase, int]:
        count = self._session_count
        limit = self._config.sessions_until_long_break
        if self._phase == PHASE_WORK:
            if self._config.mode != MODE_FLOWTIME and count >= limit:
                return PHASE_LONG_BREAK, count
            return PHASE_SHORT_BREAK, count
        if self._phase == PHASE_SHORT_BREAK:
            # Flowtime never takes a long break, so its cycle wraps here.
            return PHASE_WORK, count + 1 if count < limit else 1
        return PHASE_WORK, 1

    def _seed_phase(self) -> None:
        target = target_duration(
            self._phase,
            self._config.mode,
            self._config,
            self._last_work_elapsed_seconds,
        )
        self._phase_target_seconds = target
        self._target_seconds = target
        self._remaining_seconds = target or 0
        self._elapsed_seconds = 0

    def _is_flowtime_work(self) -> bool:
        return self._config.mode == MODE_FLOWTIME and self._phase == PHASE_WORK

    def _halt_and_cancel(self) -> None:
        self._stop_ticks()
        self._is_running = False
        if self._lifecycle.has_pending:
            self._lifecycle.cancel()

    def _start_ticks(self) -> None:
        self._stop_ticks()
        self._subscription = self._clock.subscribe(self.tick)

    def _stop_ticks(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _publish(
        self,
        action: str,
        reason: str,
        *,
        completed_phase: Optional[str] = None,
    ) -> None:
        if self._on_update is None:
            return
        update = PomodoroUpdate(
            action=action,
            reason=reason,
            snapshot=self.snapshot(),
            completed_phase=completed_phase,
        )
        try:
            self._on_update(update)
        except Exception as error:
            self._logger.error("Timer update listener failed: %s", error, exc_info=True)


def _sanitize_tag(tag: str) -> Optional[str]:
    compact = " ".join(tag.split())
    compact = compact.strip()[:MAX_TAG_LENGTH]
    return compact or None

from .clock import ClockSource, ClockSubscription, ManualClock, MonotonicClock
from .config import TimerConfig, TimerMode
from .constants import (
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_SHORT_BREAK_SECONDS,
    DEFAULT_WORK_SECONDS,
    MODE_CLASSIC,
    MODE_FLOWTIME,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
)
from .durations import flowtime_break_seconds, target_duration
from .errors import InvalidTimerOperationError, PomodoroError, TimerConfigurationError
from .lifecycle import PendingSession, SessionLifecycleCoordinator, SessionRecorder
from .service import PomodoroPhase, PomodoroSnapshot, PomodoroTimer, PomodoroUpdate

__all__ = [
    "ClockSource",
    "ClockSubscription",
    "DEFAULT_LONG_BREAK_SECONDS",
    "DEFAULT_SHORT_BREAK_SECONDS",
    "DEFAULT_WORK_SECONDS",
    "InvalidTimerOperationError",
    "MODE_CLASSIC",
    "MODE_FLOWTIME",
    "ManualClock",
    "MonotonicClock",
    "PHASE_LONG_BREAK",
    "PHASE_SHORT_BREAK",
    "PHASE_WORK",
    "PendingSession",
    "PomodoroError",
    "PomodoroPhase",
    "PomodoroSnapshot",
    "PomodoroTimer",
    "PomodoroUpdate",
    "SessionLifecycleCoordinator",
    "SessionRecorder",
    "TimerConfig",
    "TimerConfigurationError",
    "TimerMode",
    "flowtime_break_seconds",
    "target_duration",
]

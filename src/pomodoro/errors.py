class PomodoroError(Exception):
    """Base exception for the focus timer core."""


class TimerConfigurationError(PomodoroError, ValueError):
    """Raised when a timer configuration is invalid."""


class InvalidTimerOperationError(PomodoroError):
    """Raised when a control operation is not valid for the current mode and phase."""

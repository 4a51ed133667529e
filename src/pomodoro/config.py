"""Validated timer configuration derived from app settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .constants import (
    ALL_MODES,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_SESSIONS_UNTIL_LONG_BREAK,
    DEFAULT_SHORT_BREAK_SECONDS,
    DEFAULT_WORK_SECONDS,
    MODE_CLASSIC,
)
from .errors import TimerConfigurationError

TimerMode = Literal["classic", "flowtime"]


@dataclass(frozen=True)
class TimerConfig:
    """Immutable timer configuration; replaced as a whole on settings changes."""
    work_duration_seconds: int = DEFAULT_WORK_SECONDS
    short_break_duration_seconds: int = DEFAULT_SHORT_BREAK_SECONDS
    long_break_duration_seconds: int = DEFAULT_LONG_BREAK_SECONDS
    sessions_until_long_break: int = DEFAULT_SESSIONS_UNTIL_LONG_BREAK
    auto_start: bool = False
    mode: TimerMode = MODE_CLASSIC

    def __post_init__(self) -> None:
        for field_name in (
            "work_duration_seconds",
            "short_break_duration_seconds",
            "long_break_duration_seconds",
        ):
            value = getattr(self, field_name)
            if not _is_int(value) or value <= 0:
                raise TimerConfigurationError(
                    f"{field_name} must be a positive integer, got: {value!r}"
                )

        if not _is_int(self.sessions_until_long_break) or self.sessions_until_long_break < 1:
            raise TimerConfigurationError(
                "sessions_until_long_break must be an integer >= 1, "
                f"got: {self.sessions_until_long_break!r}"
            )

        if not isinstance(self.auto_start, bool):
            raise TimerConfigurationError(
                f"auto_start must be a boolean, got: {self.auto_start!r}"
            )

        if self.mode not in ALL_MODES:
            allowed = ", ".join(sorted(ALL_MODES))
            raise TimerConfigurationError(f"mode must be one of: {allowed}")

    @classmethod
    def from_settings(cls, settings) -> "TimerConfig":
        return cls(
            work_duration_seconds=settings.work_minutes * 60,
            short_break_duration_seconds=settings.short_break_minutes * 60,
            long_break_duration_seconds=settings.long_break_minutes * 60,
            sessions_until_long_break=settings.sessions_until_long_break,
            auto_start=bool(settings.auto_start),
            mode=settings.mode,
        )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

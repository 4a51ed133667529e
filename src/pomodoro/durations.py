"""Target duration policy for classic and flowtime phases."""

from __future__ import annotations

from typing import Optional

from .config import TimerConfig
from .constants import (
    BREAK_PHASES,
    FLOWTIME_BREAK_RATIO,
    FLOWTIME_MIN_BREAK_SECONDS,
    MODE_FLOWTIME,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
)


def target_duration(
    phase: str,
    mode: str,
    config: TimerConfig,
    last_work_elapsed_seconds: Optional[int] = None,
) -> Optional[int]:
    """Return the countdown target for *phase* in seconds.

    ``None`` means the phase is open-ended (flowtime work) and the caller
    counts up instead of down. Flowtime breaks scale with the focus time of
    the work phase that preceded them, with a one-minute floor.
    """
    if mode == MODE_FLOWTIME:
        if phase == PHASE_WORK:
            return None
        if phase in BREAK_PHASES:
            return flowtime_break_seconds(last_work_elapsed_seconds or 0)
        raise ValueError(f"Unknown phase: {phase!r}")

    if phase == PHASE_WORK:
        return config.work_duration_seconds
    if phase == PHASE_SHORT_BREAK:
        return config.short_break_duration_seconds
    if phase == PHASE_LONG_BREAK:
        return config.long_break_duration_seconds
    raise ValueError(f"Unknown phase: {phase!r}")


def flowtime_break_seconds(work_elapsed_seconds: int) -> int:
    return max(
        FLOWTIME_MIN_BREAK_SECONDS,
        max(0, int(work_elapsed_seconds)) // FLOWTIME_BREAK_RATIO,
    )

"""Human-readable status lines for timer updates."""

from __future__ import annotations

from pomodoro import PomodoroSnapshot
from pomodoro.constants import PHASE_LABELS, PHASE_WORK


def status_message(snapshot: PomodoroSnapshot) -> str:
    label = PHASE_LABELS.get(snapshot.phase, snapshot.phase)
    if not snapshot.is_running:
        label = f"{label} - PAUSED"
    return f"[ {label} ] {snapshot.formatted_time} (session {snapshot.session_count})"


def completion_message(completed_phase: str, snapshot: PomodoroSnapshot) -> str:
    if completed_phase == PHASE_WORK:
        return f"Focus session finished. Next: {PHASE_LABELS[snapshot.phase].lower()}."
    return "Break is over. Back to work."

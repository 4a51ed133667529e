from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_COMMAND_RESULT, EVENT_SESSION, EVENT_TIMER
from pomodoro import PendingSession, PomodoroSnapshot


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


def snapshot_payload(snapshot: PomodoroSnapshot) -> dict[str, Any]:
    return {
        "phase": snapshot.phase,
        "mode": snapshot.mode,
        "is_running": snapshot.is_running,
        "elapsed_seconds": snapshot.elapsed_seconds,
        "remaining_seconds": snapshot.remaining_seconds,
        "target_seconds": snapshot.target_seconds,
        "session_count": snapshot.session_count,
        "progress_percent": round(snapshot.progress_percent, 2),
        "formatted_time": snapshot.formatted_time,
        "tag": snapshot.tag,
    }


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_timer_update(
        self,
        snapshot: PomodoroSnapshot,
        *,
        action: str,
        reason: str = "",
        completed_phase: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {"action": action, **snapshot_payload(snapshot)}
        if reason:
            payload["reason"] = reason
        if completed_phase:
            payload["completed_phase"] = completed_phase
        if message:
            payload["message"] = message
        self.publish(EVENT_TIMER, **payload)

    def publish_session_event(
        self,
        kind: str,
        session: PendingSession,
        *,
        duration_seconds: Optional[int] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "event": kind,
            "session_id": session.session_id,
            "phase": session.phase,
            "started_at": session.started_at.isoformat(),
        }
        if session.tag:
            payload["tag"] = session.tag
        if duration_seconds is not None:
            payload["duration_seconds"] = duration_seconds
        self.publish(EVENT_SESSION, **payload)

    def publish_command_result(
        self,
        command: str,
        *,
        accepted: bool,
        reason: str,
        snapshot: PomodoroSnapshot,
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "command": command,
            "accepted": accepted,
            "reason": reason,
            **snapshot_payload(snapshot),
        }
        if message:
            payload["message"] = message
        self.publish(EVENT_COMMAND_RESULT, **payload)

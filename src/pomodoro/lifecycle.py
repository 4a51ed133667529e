"""Bridges timer phase boundaries to session-recording side effects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from .constants import (
    PHASE_WORK,
    SESSION_EVENT_CANCELLED,
    SESSION_EVENT_COMPLETED,
    SESSION_EVENT_STARTED,
)


class SessionRecorder(Protocol):
    """Persistence collaborator notified about session start/complete/cancel."""
    def on_session_start(self, phase: str, *, tag: Optional[str] = None) -> str:
        ...

    def on_session_complete(self, session_id: str, duration_seconds: int) -> None:
        ...

    def on_session_cancel(self, session_id: str) -> None:
        ...


@dataclass(frozen=True)
class PendingSession:
    """Session that has been started but not yet completed or cancelled."""
    session_id: Optional[str]
    phase: str
    tag: Optional[str]
    started_at: datetime


SessionEventListener = Callable[[str, PendingSession, Optional[int]], None]


class SessionLifecycleCoordinator:
    """Keeps at most one pending session and forwards its lifecycle to a recorder.

    Recorder calls are one-way notifications: failures are logged and never
    reach the timer. Ordering mistakes (double start, completing or
    cancelling with nothing pending) are logged as warnings and ignored.
    """

    def __init__(
        self,
        recorder: Optional[SessionRecorder] = None,
        *,
        logger: Optional[logging.Logger] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        on_event: Optional[SessionEventListener] = None,
    ):
        self._recorder = recorder
        self._logger = logger or logging.getLogger("pomodoro.lifecycle")
        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))
        self._on_event = on_event
        self._pending: Optional[PendingSession] = None

    @property
    def pending(self) -> Optional[PendingSession]:
        return self._pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def start(self, phase: str, tag: Optional[str] = None) -> Optional[PendingSession]:
        if self._pending is not None:
            self._logger.warning(
                "Session start ignored: phase=%s already pending for phase=%s",
                phase,
                self._pending.phase,
            )
            return None

        # Tags only describe focus work.
        session_tag = tag if phase == PHASE_WORK else None
        session_id: Optional[str] = None
        if self._recorder is not None:
            try:
                session_id = self._recorder.on_session_start(phase, tag=session_tag)
            except Exception as error:
                self._logger.error(
                    "Recorder failed to start session: phase=%s error=%s",
                    phase,
                    error,
                    exc_info=True,
                )

        pending = PendingSession(
            session_id=session_id,
            phase=phase,
            tag=session_tag,
            started_at=self._now_fn(),
        )
        self._pending = pending
        self._logger.info("Session started: phase=%s id=%s", phase, session_id)
        self._notify(SESSION_EVENT_STARTED, pending, None)
        return pending

    def complete(self, duration_seconds: int) -> Optional[PendingSession]:
        pending = self._pending
        if pending is None:
            self._logger.warning("Session complete ignored: no pending session")
            return None

        self._pending = None
        if self._recorder is not None and pending.session_id is not None:
            try:
                self._recorder.on_session_complete(pending.session_id, duration_seconds)
            except Exception as error:
                self._logger.error(
                    "Recorder failed to complete session: id=%s error=%s",
                    pending.session_id,
                    error,
                    exc_info=True,
                )
        self._logger.info(
            "Session completed: phase=%s id=%s duration=%ss",
            pending.phase,
            pending.session_id,
            duration_seconds,
        )
        self._notify(SESSION_EVENT_COMPLETED, pending, duration_seconds)
        return pending

    def cancel(self) -> Optional[PendingSession]:
        pending = self._pending
        if pending is None:
            self._logger.warning("Session cancel ignored: no pending session")
            return None

        self._pending = None
        if self._recorder is not None and pending.session_id is not None:
            try:
                self._recorder.on_session_cancel(pending.session_id)
            except Exception as error:
                self._logger.error(
                    "Recorder failed to cancel session: id=%s error=%s",
                    pending.session_id,
                    error,
                    exc_info=True,
                )
        self._logger.info(
            "Session cancelled: phase=%s id=%s",
            pending.phase,
            pending.session_id,
        )
        self._notify(SESSION_EVENT_CANCELLED, pending, None)
        return pending

    def _notify(
        self,
        kind: str,
        pending: PendingSession,
        duration_seconds: Optional[int],
    ) -> None:
        if self._on_event is None:
            return
        try:
            self._on_event(kind, pending, duration_seconds)
        except Exception as error:
            self._logger.error("Session event listener failed: %s", error, exc_info=True)

"""Session recorders keeping started/completed focus sessions."""

from __future__ import annotations

import json
import logging
import secrets
from dataclasses import asdict, dataclass, replace
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Callable, Iterable, Optional

from pomodoro.constants import PHASE_WORK

from .errors import SessionStoreError

WEEK_DAYS = 7
MONTH_DAYS = 30
DEFAULT_HEATMAP_WEEKS = 12


@dataclass(frozen=True)
class SessionRecord:
    """One started, and possibly completed, session."""
    id: str
    type: str
    started_at: str
    tag: Optional[str] = None
    ended_at: Optional[str] = None
    duration_seconds: Optional[int] = None
    completed: bool = False


@dataclass(frozen=True)
class DailyStats:
    date: str
    total_work_seconds: int
    sessions_completed: int


class InMemorySessionRecorder:
    """Recorder keeping sessions in memory; cancelled sessions are dropped.

    Every mutation builds a new record list and only adopts it once
    :meth:`_persist` accepted it, so a failed write leaves the previous state
    untouched.
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self._logger = logger or logging.getLogger("session_store")
        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))
        self._records: list[SessionRecord] = []

    def sessions(self) -> list[SessionRecord]:
        return list(self._records)

    def on_session_start(self, phase: str, *, tag: Optional[str] = None) -> str:
        now = self._now_fn()
        record = SessionRecord(
            id=_generate_id(now),
            type=phase,
            tag=tag,
            started_at=now.isoformat(),
        )
        self._commit([*self._records, record])
        return record.id

    def on_session_complete(self, session_id: str, duration_seconds: int) -> None:
        for index, record in enumerate(self._records):
            if record.id == session_id:
                updated = list(self._records)
                updated[index] = replace(
                    record,
                    ended_at=self._now_fn().isoformat(),
                    duration_seconds=int(duration_seconds),
                    completed=True,
                )
                self._commit(updated)
                return
        self._logger.warning("Complete for unknown session id=%s", session_id)

    def on_session_cancel(self, session_id: str) -> None:
        remaining = [record for record in self._records if record.id != session_id]
        if len(remaining) == len(self._records):
            self._logger.warning("Cancel for unknown session id=%s", session_id)
            return
        self._commit(remaining)

    # -- statistics --------------------------------------------------------

    def today_stats(self) -> DailyStats:
        today = self._now_fn().date()
        return _summarize(today.isoformat(), self._completed_work_on(today))

    def week_stats(self) -> DailyStats:
        """Completed work over the rolling last seven days."""
        return _summarize("Last 7 days", self._completed_work_since(timedelta(days=WEEK_DAYS)))

    def month_stats(self) -> DailyStats:
        """Completed work over the rolling last thirty days."""
        return _summarize("Last 30 days", self._completed_work_since(timedelta(days=MONTH_DAYS)))

    def daily_breakdown(self, days: int) -> list[DailyStats]:
        """Per-day totals for the last *days* days, newest first, active days only."""
        result = []
        for day in self._recent_days(days):
            records = self._completed_work_on(day)
            if records:
                result.append(_summarize(day.isoformat(), records))
        return result

    def heatmap(self, weeks: int = DEFAULT_HEATMAP_WEEKS) -> dict[str, DailyStats]:
        """Per-day totals for the last *weeks* weeks, including idle days."""
        return {
            day.isoformat(): _summarize(day.isoformat(), self._completed_work_on(day))
            for day in self._recent_days(weeks * WEEK_DAYS)
        }

    def _recent_days(self, days: int) -> list[date]:
        if days < 0:
            raise ValueError(f"days must be >= 0, got: {days}")
        today = self._now_fn().date()
        return [today - timedelta(days=offset) for offset in range(days)]

    def _completed_work(self) -> list[SessionRecord]:
        return [
            record
            for record in self._records
            if record.completed and record.type == PHASE_WORK
        ]

    def _completed_work_on(self, day: date) -> list[SessionRecord]:
        prefix = day.isoformat()
        return [record for record in self._completed_work() if record.started_at.startswith(prefix)]

    def _completed_work_since(self, window: timedelta) -> list[SessionRecord]:
        now = self._now_fn()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        cutoff = now - window
        return [
            record
            for record in self._completed_work()
            if _parse_timestamp(record.started_at) >= cutoff
        ]

    # -- persistence -------------------------------------------------------

    def _commit(self, records: list[SessionRecord]) -> None:
        self._persist(records)
        self._records = records

    def _persist(self, records: list[SessionRecord]) -> None:
        pass


class JsonSessionStore(InMemorySessionRecorder):
    """Recorder persisting every mutation to a JSON file with atomic replace."""

    def __init__(
        self,
        path: str | Path,
        *,
        logger: Optional[logging.Logger] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(logger=logger, now_fn=now_fn)
        self.path = Path(path)
        self._records = self._load()

    def _load(self) -> list[SessionRecord]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as error:
            raise SessionStoreError(f"Failed to read session store {self.path}: {error}") from error

        items = raw.get("sessions") if isinstance(raw, dict) else None
        if not isinstance(items, list):
            raise SessionStoreError(f"Session store {self.path} has no 'sessions' list")
        try:
            return [_record_from_dict(item) for item in items]
        except (TypeError, KeyError) as error:
            raise SessionStoreError(f"Malformed session record in {self.path}: {error}") from error

    def _persist(self, records: list[SessionRecord]) -> None:
        payload = json.dumps(
            {"sessions": [asdict(record) for record in records]},
            ensure_ascii=True,
            indent=2,
        )
        tmp_path: Optional[Path] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                "w",
                delete=False,
                encoding="utf-8",
                dir=str(self.path.parent),
            ) as handle:
                tmp_path = Path(handle.name)
                handle.write(payload)
            tmp_path.replace(self.path)
        except OSError as error:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise SessionStoreError(f"Failed to write session store {self.path}: {error}") from error
        self._logger.debug("Session store saved: %d records", len(records))


def _summarize(label: str, records: Iterable[SessionRecord]) -> DailyStats:
    records = list(records)
    return DailyStats(
        date=label,
        total_work_seconds=sum(record.duration_seconds or 0 for record in records),
        sessions_completed=len(records),
    )


def _parse_timestamp(raw: str) -> datetime:
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _record_from_dict(item: Any) -> SessionRecord:
    if not isinstance(item, dict):
        raise TypeError("session record must be an object")
    return SessionRecord(
        id=str(item["id"]),
        type=str(item["type"]),
        started_at=str(item["started_at"]),
        tag=item.get("tag"),
        ended_at=item.get("ended_at"),
        duration_seconds=item.get("duration_seconds"),
        completed=bool(item.get("completed", False)),
    )


def _generate_id(now: datetime) -> str:
    return f"{int(now.timestamp() * 1000)}-{secrets.token_hex(5)}"

"""Session recorders consumed by the timer lifecycle coordinator."""

from .errors import SessionStoreError
from .store import DailyStats, InMemorySessionRecorder, JsonSessionStore, SessionRecord

__all__ = [
    "DailyStats",
    "InMemorySessionRecorder",
    "JsonSessionStore",
    "SessionRecord",
    "SessionStoreError",
]

"""Phase, mode, action, and reason constants used by the focus timer core."""

from __future__ import annotations

PHASE_WORK = "work"
PHASE_SHORT_BREAK = "shortBreak"
PHASE_LONG_BREAK = "longBreak"

BREAK_PHASES: frozenset[str] = frozenset({PHASE_SHORT_BREAK, PHASE_LONG_BREAK})

PHASE_LABELS: dict[str, str] = {
    PHASE_WORK: "WORKING",
    PHASE_SHORT_BREAK: "SHORT BREAK",
    PHASE_LONG_BREAK: "LONG BREAK",
}

MODE_CLASSIC = "classic"
MODE_FLOWTIME = "flowtime"

ALL_MODES: frozenset[str] = frozenset({MODE_CLASSIC, MODE_FLOWTIME})

DEFAULT_WORK_SECONDS = 25 * 60
DEFAULT_SHORT_BREAK_SECONDS = 5 * 60
DEFAULT_LONG_BREAK_SECONDS = 15 * 60
DEFAULT_SESSIONS_UNTIL_LONG_BREAK = 4

FLOWTIME_MIN_BREAK_SECONDS = 60
FLOWTIME_BREAK_RATIO = 5

MAX_TAG_LENGTH = 60

ACTION_TOGGLE = "toggle"
ACTION_RESET = "reset"
ACTION_SKIP = "skip"
ACTION_END_WORK = "end_work"
ACTION_FULL_RESET = "full_reset"
ACTION_ADD_TIME = "add_time"
ACTION_SET_TAG = "tag"
ACTION_RECONFIGURE = "reconfigure"

ACTION_SYNC = "sync"
ACTION_TICK = "tick"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESET = "reset"
REASON_FULL_RESET = "full_reset"
REASON_SKIPPED = "skipped"
REASON_COMPLETED = "completed"
REASON_WORK_ENDED = "work_ended"
REASON_TIME_ADDED = "time_added"
REASON_TAG_SET = "tag_set"
REASON_RECONFIGURED = "reconfigured"
REASON_TICK = "tick"
REASON_STARTUP = "startup"

REASON_INVALID_FOR_MODE = "invalid_for_mode"
REASON_INVALID_ARGUMENT = "invalid_argument"
REASON_UNSUPPORTED_COMMAND = "unsupported_command"

SESSION_EVENT_STARTED = "started"
SESSION_EVENT_COMPLETED = "completed"
SESSION_EVENT_CANCELLED = "cancelled"

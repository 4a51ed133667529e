import unittest
from datetime import datetime, timezone

from pomodoro import SessionLifecycleCoordinator


class _RecorderStub:
    def __init__(self):
        self.calls: list[tuple] = []

    def on_session_start(self, phase, *, tag=None):
        self.calls.append(("start", phase, tag))
        return f"id-{len(self.calls)}"

    def on_session_complete(self, session_id, duration_seconds):
        self.calls.append(("complete", session_id, duration_seconds))

    def on_session_cancel(self, session_id):
        self.calls.append(("cancel", session_id))


_FIXED_NOW = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


class SessionLifecycleCoordinatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.recorder = _RecorderStub()
        self.events: list[tuple] = []
        self.coordinator = SessionLifecycleCoordinator(
            self.recorder,
            now_fn=lambda: _FIXED_NOW,
            on_event=lambda kind, session, duration: self.events.append(
                (kind, session.session_id, duration)
            ),
        )

    def test_start_then_complete(self) -> None:
        pending = self.coordinator.start("work", "writing")
        self.assertIsNotNone(pending)
        self.assertEqual("id-1", pending.session_id)
        self.assertEqual("writing", pending.tag)
        self.assertEqual(_FIXED_NOW, pending.started_at)
        self.assertTrue(self.coordinator.has_pending)

        completed = self.coordinator.complete(1500)
        self.assertEqual(pending, completed)
        self.assertFalse(self.coordinator.has_pending)
        self.assertEqual(
            [("start", "work", "writing"), ("complete", "id-1", 1500)],
            self.recorder.calls,
        )
        self.assertEqual(
            [("started", "id-1", None), ("completed", "id-1", 1500)],
            self.events,
        )

    def test_break_sessions_drop_tag(self) -> None:
        pending = self.coordinator.start("shortBreak", "writing")
        self.assertIsNone(pending.tag)
        self.assertEqual(("start", "shortBreak", None), self.recorder.calls[0])

    def test_cancel_clears_pending(self) -> None:
        self.coordinator.start("work")
        self.coordinator.cancel()

        self.assertIsNone(self.coordinator.pending)
        self.assertEqual(("cancel", "id-1"), self.recorder.calls[-1])
        self.assertEqual(("cancelled", "id-1", None), self.events[-1])

    def test_double_start_is_ignored_with_warning(self) -> None:
        first = self.coordinator.start("work")
        with self.assertLogs("pomodoro.lifecycle", level="WARNING"):
            second = self.coordinator.start("shortBreak")

        self.assertIsNone(second)
        self.assertEqual(first, self.coordinator.pending)
        self.assertEqual(1, len(self.recorder.calls))

    def test_complete_and_cancel_without_pending_are_ignored(self) -> None:
        with self.assertLogs("pomodoro.lifecycle", level="WARNING") as captured:
            self.assertIsNone(self.coordinator.complete(10))
            self.assertIsNone(self.coordinator.cancel())

        self.assertEqual(2, len(captured.records))
        self.assertEqual([], self.recorder.calls)
        self.assertEqual([], self.events)

    def test_recorder_start_failure_keeps_session_without_id(self) -> None:
        class _Broken(_RecorderStub):
            def on_session_start(self, phase, *, tag=None):
                raise OSError("read-only")

        recorder = _Broken()
        coordinator = SessionLifecycleCoordinator(recorder)
        with self.assertLogs("pomodoro.lifecycle", level="ERROR"):
            pending = coordinator.start("work")

        self.assertIsNone(pending.session_id)
        coordinator.complete(60)
        self.assertEqual([], recorder.calls)
        self.assertFalse(coordinator.has_pending)

    def test_works_without_recorder(self) -> None:
        coordinator = SessionLifecycleCoordinator()
        coordinator.start("work")
        coordinator.complete(25)
        self.assertFalse(coordinator.has_pending)


if __name__ == "__main__":
    unittest.main()

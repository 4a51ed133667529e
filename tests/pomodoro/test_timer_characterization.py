import unittest

from pomodoro import (
    InvalidTimerOperationError,
    ManualClock,
    PomodoroTimer,
    TimerConfig,
)


class _RecorderStub:
    def __init__(self):
        self.calls: list[tuple] = []
        self._next_id = 0

    def on_session_start(self, phase, *, tag=None):
        self._next_id += 1
        session_id = f"s{self._next_id}"
        self.calls.append(("start", phase, tag, session_id))
        return session_id

    def on_session_complete(self, session_id, duration_seconds):
        self.calls.append(("complete", session_id, duration_seconds))

    def on_session_cancel(self, session_id):
        self.calls.append(("cancel", session_id))


def _build(config=None, **kwargs):
    clock = ManualClock()
    recorder = _RecorderStub()
    timer = PomodoroTimer(config or TimerConfig(), clock=clock, recorder=recorder, **kwargs)
    return timer, clock, recorder


class PomodoroTimerCharacterizationTests(unittest.TestCase):
    def test_initial_snapshot_is_paused_work(self) -> None:
        timer, clock, recorder = _build()
        snapshot = timer.snapshot()

        self.assertEqual("work", snapshot.phase)
        self.assertFalse(snapshot.is_running)
        self.assertEqual(1, snapshot.session_count)
        self.assertEqual(1500, snapshot.remaining_seconds)
        self.assertEqual(1500, snapshot.target_seconds)
        self.assertEqual(0.0, snapshot.progress_percent)
        self.assertEqual("25:00", snapshot.formatted_time)
        self.assertEqual(0, clock.active_subscriptions)
        self.assertEqual([], recorder.calls)

    def test_ticks_are_ignored_while_paused(self) -> None:
        timer, clock, _ = _build()
        timer.tick()
        clock.advance(5)
        self.assertEqual(1500, timer.snapshot().remaining_seconds)

    def test_work_phase_completes_after_full_duration(self) -> None:
        timer, clock, recorder = _build()
        timer.toggle_pause()

        clock.advance(1499)
        self.assertEqual("work", timer.snapshot().phase)
        self.assertEqual(1, timer.snapshot().remaining_seconds)

        clock.advance(1)
        snapshot = timer.snapshot()
        self.assertEqual("shortBreak", snapshot.phase)
        self.assertFalse(snapshot.is_running)
        self.assertEqual(300, snapshot.remaining_seconds)
        self.assertEqual(0, clock.active_subscriptions)
        self.assertEqual(
            [("start", "work", None, "s1"), ("complete", "s1", 1500)],
            recorder.calls,
        )

        clock.advance(10)
        self.assertEqual(300, timer.snapshot().remaining_seconds)

    def test_auto_start_pipelines_into_next_phase(self) -> None:
        timer, clock, recorder = _build(TimerConfig(auto_start=True))
        timer.toggle_pause()
        clock.advance(1500)

        snapshot = timer.snapshot()
        self.assertEqual("shortBreak", snapshot.phase)
        self.assertTrue(snapshot.is_running)
        self.assertEqual(1, clock.active_subscriptions)
        self.assertEqual(
            [
                ("start", "work", None, "s1"),
                ("complete", "s1", 1500),
                ("start", "shortBreak", None, "s2"),
            ],
            recorder.calls,
        )

        clock.advance(300)
        snapshot = timer.snapshot()
        self.assertEqual("work", snapshot.phase)
        self.assertEqual(2, snapshot.session_count)
        self.assertTrue(snapshot.is_running)
        self.assertEqual(("complete", "s2", 300), recorder.calls[3])
        self.assertEqual(("start", "work", None, "s3"), recorder.calls[4])

    def test_toggle_pause_keeps_time_and_single_subscription(self) -> None:
        timer, clock, recorder = _build()
        timer.toggle_pause()
        self.assertEqual(1, clock.active_subscriptions)
        clock.advance(10)

        timer.toggle_pause()
        self.assertEqual(0, clock.active_subscriptions)
        self.assertFalse(timer.snapshot().is_running)
        self.assertEqual(1490, timer.snapshot().remaining_seconds)

        timer.toggle_pause()
        self.assertEqual(1, clock.active_subscriptions)
        clock.advance(1)
        self.assertEqual(1489, timer.snapshot().remaining_seconds)

        starts = [call for call in recorder.calls if call[0] == "start"]
        self.assertEqual(1, len(starts))

    def test_long_break_after_configured_sessions(self) -> None:
        config = TimerConfig(
            work_duration_seconds=3,
            short_break_duration_seconds=2,
            long_break_duration_seconds=4,
            sessions_until_long_break=2,
        )
        timer, _, _ = _build(config)

        timer.skip()
        self.assertEqual(("shortBreak", 1), (timer.snapshot().phase, timer.snapshot().session_count))
        timer.skip()
        self.assertEqual(("work", 2), (timer.snapshot().phase, timer.snapshot().session_count))
        timer.skip()
        self.assertEqual("longBreak", timer.snapshot().phase)
        self.assertEqual(4, timer.snapshot().remaining_seconds)
        timer.skip()
        self.assertEqual(("work", 1), (timer.snapshot().phase, timer.snapshot().session_count))

    def test_skip_completes_pending_session_with_full_target(self) -> None:
        timer, clock, recorder = _build()
        timer.toggle_pause()
        clock.advance(60)
        timer.skip()

        self.assertEqual(("complete", "s1", 1500), recorder.calls[-1])
        self.assertEqual("shortBreak", timer.snapshot().phase)
        self.assertFalse(timer.snapshot().is_running)

    def test_skip_without_pending_session_does_not_record(self) -> None:
        timer, _, recorder = _build()
        with self.assertNoLogs("pomodoro.lifecycle", level="WARNING"):
            timer.skip()
        self.assertEqual([], recorder.calls)

    def test_reset_cancels_pending_session_and_reseeds(self) -> None:
        timer, clock, recorder = _build()
        timer.toggle_pause()
        clock.advance(100)

        timer.reset()
        snapshot = timer.snapshot()
        self.assertEqual("work", snapshot.phase)
        self.assertFalse(snapshot.is_running)
        self.assertEqual(1500, snapshot.remaining_seconds)
        self.assertEqual(("cancel", "s1"), recorder.calls[-1])
        self.assertEqual(0, clock.active_subscriptions)
        self.assertNotIn(("complete", "s1", 1500), recorder.calls)

    def test_reset_keeps_phase_and_session_count(self) -> None:
        timer, clock, _ = _build()
        timer.skip()
        timer.skip()
        timer.toggle_pause()
        clock.advance(30)

        timer.reset()
        snapshot = timer.snapshot()
        self.assertEqual("work", snapshot.phase)
        self.assertEqual(2, snapshot.session_count)
        self.assertEqual(1500, snapshot.remaining_seconds)

    def test_resume_after_reset_opens_new_session(self) -> None:
        timer, _, recorder = _build()
        timer.toggle_pause()
        timer.reset()
        timer.toggle_pause()

        self.assertEqual(("start", "work", None, "s2"), recorder.calls[-1])

    def test_add_time_extends_remaining_without_cap(self) -> None:
        timer, clock, _ = _build()
        timer.skip()
        timer.toggle_pause()
        clock.advance(270)
        self.assertEqual(30, timer.snapshot().remaining_seconds)

        timer.add_time(120)
        snapshot = timer.snapshot()
        self.assertEqual(150, snapshot.remaining_seconds)
        self.assertEqual(420, snapshot.target_seconds)
        self.assertTrue(0.0 <= snapshot.progress_percent <= 100.0)

        timer.add_time(10_000)
        self.assertEqual(10_150, timer.snapshot().remaining_seconds)

    def test_add_time_extension_is_reported_on_completion(self) -> None:
        config = TimerConfig(work_duration_seconds=10)
        timer, clock, recorder = _build(config)
        timer.toggle_pause()
        timer.add_time(5)
        clock.advance(15)

        self.assertEqual(("complete", "s1", 15), recorder.calls[-1])

    def test_add_time_rejects_non_positive_values(self) -> None:
        timer, _, _ = _build()
        for value in (0, -5, True, 1.5, "10"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    timer.add_time(value)  # type: ignore[arg-type]
        self.assertEqual(1500, timer.snapshot().remaining_seconds)

    def test_end_work_rejected_in_classic_mode(self) -> None:
        timer, _, _ = _build()
        with self.assertRaises(InvalidTimerOperationError):
            timer.end_work()
        self.assertEqual("work", timer.snapshot().phase)

    def test_set_tag_applies_to_work_sessions_only(self) -> None:
        config = TimerConfig(work_duration_seconds=2, auto_start=True)
        timer, clock, recorder = _build(config)
        timer.set_tag("   deep    work  ")
        timer.toggle_pause()
        clock.advance(2)

        self.assertEqual(("start", "work", "deep work", "s1"), recorder.calls[0])
        self.assertEqual(("start", "shortBreak", None, "s2"), recorder.calls[2])

    def test_reconfigure_cancels_and_pauses(self) -> None:
        timer, clock, recorder = _build(TimerConfig(auto_start=True))
        timer.skip()
        timer.toggle_pause()
        clock.advance(5)

        timer.reconfigure(TimerConfig(work_duration_seconds=600, auto_start=True))
        snapshot = timer.snapshot()
        self.assertEqual("work", snapshot.phase)
        self.assertEqual(1, snapshot.session_count)
        self.assertFalse(snapshot.is_running)
        self.assertEqual(600, snapshot.remaining_seconds)
        self.assertEqual(("cancel", "s1"), recorder.calls[-1])
        self.assertEqual(0, clock.active_subscriptions)

    def test_close_cancels_clock_subscription_and_open_session(self) -> None:
        timer, clock, recorder = _build()
        timer.toggle_pause()
        clock.advance(10)
        timer.close()
        with self.assertNoLogs("pomodoro.lifecycle", level="WARNING"):
            timer.close()

        self.assertEqual(0, clock.active_subscriptions)
        self.assertFalse(timer.lifecycle.has_pending)
        self.assertFalse(timer.snapshot().is_running)
        self.assertEqual(
            [("start", "work", None, "s1"), ("cancel", "s1")],
            recorder.calls,
        )
        clock.advance(3)
        self.assertEqual(1490, timer.snapshot().remaining_seconds)

    def test_recorder_failure_does_not_break_transition(self) -> None:
        class _FailingRecorder(_RecorderStub):
            def on_session_complete(self, session_id, duration_seconds):
                raise RuntimeError("disk full")

        clock = ManualClock()
        timer = PomodoroTimer(
            TimerConfig(work_duration_seconds=2),
            clock=clock,
            recorder=_FailingRecorder(),
        )
        timer.toggle_pause()
        with self.assertLogs("pomodoro.lifecycle", level="ERROR"):
            clock.advance(2)

        self.assertEqual("shortBreak", timer.snapshot().phase)
        self.assertFalse(timer.lifecycle.has_pending)

    def test_update_listener_receives_completion(self) -> None:
        updates = []
        timer, clock, _ = _build(TimerConfig(work_duration_seconds=2), on_update=updates.append)
        timer.toggle_pause()
        clock.advance(2)

        self.assertEqual(["toggle", "tick", "tick"], [update.action for update in updates])
        self.assertFalse(updates[1].completed)
        self.assertTrue(updates[2].completed)
        self.assertEqual("work", updates[2].completed_phase)
        self.assertEqual("shortBreak", updates[2].snapshot.phase)

    def test_listener_failure_is_logged_not_raised(self) -> None:
        def _broken(update):
            raise RuntimeError("ui gone")

        timer, clock, _ = _build(on_update=_broken)
        with self.assertLogs("pomodoro", level="ERROR"):
            timer.toggle_pause()
            clock.advance(1)
        self.assertEqual(1499, timer.snapshot().remaining_seconds)


if __name__ == "__main__":
    unittest.main()

import unittest

from pomodoro import TimerConfig, flowtime_break_seconds, target_duration


class DurationPolicyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = TimerConfig(
            work_duration_seconds=1500,
            short_break_duration_seconds=300,
            long_break_duration_seconds=900,
        )

    def test_classic_uses_configured_durations(self) -> None:
        self.assertEqual(1500, target_duration("work", "classic", self.config))
        self.assertEqual(300, target_duration("shortBreak", "classic", self.config))
        self.assertEqual(900, target_duration("longBreak", "classic", self.config))

    def test_flowtime_work_is_open_ended(self) -> None:
        self.assertIsNone(target_duration("work", "flowtime", self.config, 1200))

    def test_flowtime_break_is_fifth_of_work_with_minimum(self) -> None:
        cases = {
            0: 60,
            287: 60,
            300: 60,
            304: 60,
            305: 61,
            1500: 300,
            3601: 720,
        }
        for elapsed, expected in cases.items():
            with self.subTest(elapsed=elapsed):
                self.assertEqual(
                    expected,
                    target_duration("shortBreak", "flowtime", self.config, elapsed),
                )
                self.assertEqual(expected, flowtime_break_seconds(elapsed))

    def test_flowtime_break_without_elapsed_uses_minimum(self) -> None:
        self.assertEqual(60, target_duration("longBreak", "flowtime", self.config))

    def test_unknown_phase_rejected(self) -> None:
        with self.assertRaises(ValueError):
            target_duration("nap", "classic", self.config)
        with self.assertRaises(ValueError):
            target_duration("nap", "flowtime", self.config)


if __name__ == "__main__":
    unittest.main()

import unittest
import sys
from pathlib import Path

# Ensure src/ is importable when running tests without installation
SYS_PATH_ADDED = str(Path(__file__).resolve().parents[1] / "src")
if SYS_PATH_ADDED not in sys.path:
    sys.path.insert(0, SYS_PATH_ADDED)

from bahn_timetable.clock import ClockTime  # noqa: E402
from bahn_timetable.rollover import RolloverClock, elapsed_from_origin, infer_elapsed  # noqa: E402


def times(*texts):
    return [ClockTime.parse(t) for t in texts]


class RolloverTests(unittest.TestCase):
    def test_rollover_detected_once_at_midnight(self):
        samples = times("08:00", "09:30", "23:50", "00:10", "05:00")
        self.assertEqual(
            elapsed_from_origin(samples, ClockTime(8, 0)),
            [0, 5400, 57000, 58200, 75600],
        )

    def test_days_passed_only_increments_on_earlier_time(self):
        clock = RolloverClock(ClockTime(8, 0))
        seen = []
        for t in times("08:00", "09:30", "23:50", "00:10", "05:00"):
            clock.advance(t)
            seen.append(clock.days_passed)
        self.assertEqual(seen, [0, 0, 0, 1, 1])
        self.assertEqual(clock.last_time, ClockTime(5, 0))

    def test_equal_consecutive_times_do_not_roll_over(self):
        clock = RolloverClock(ClockTime(10, 0))
        for t in times("10:00", "10:00", "11:00"):
            clock.advance(t)
            self.assertEqual(clock.days_passed, 0)
        self.assertEqual(elapsed_from_origin(times("10:00", "10:00", "11:00")), [0, 0, 3600])

    def test_multiple_midnights(self):
        samples = times("20:00", "02:00", "19:00", "01:00")
        self.assertEqual(elapsed_from_origin(samples), [0, 21600, 82800, 104400])

    def test_unanchored_clock_does_not_roll_over_on_first_sample(self):
        clock = RolloverClock(ClockTime(8, 0), anchored=False)
        self.assertIsNone(clock.last_time)
        self.assertEqual(clock.advance(ClockTime(7, 55)), -300)
        self.assertEqual(clock.days_passed, 0)
        self.assertEqual(clock.advance(ClockTime(8, 0)), 0)
        self.assertEqual(clock.advance(ClockTime(7, 0)), 86400 - 3600)
        self.assertEqual(clock.days_passed, 1)

    def test_anchored_clock_rolls_over_before_baseline(self):
        clock = RolloverClock(ClockTime(8, 0))
        self.assertEqual(clock.advance(ClockTime(7, 55)), 86400 - 300)

    def test_empty_input(self):
        self.assertEqual(elapsed_from_origin([]), [])

    def test_infer_elapsed_uses_intermediate_times(self):
        # Without the intermediate 01:55 the 22:00 -> 05:00 gap still rolls over once
        self.assertEqual(infer_elapsed(ClockTime(22, 0), [], ClockTime(5, 0)), 25200)
        self.assertEqual(
            infer_elapsed(ClockTime(22, 0), ["Hannover 23:30", "Frankfurt 01:55"], ClockTime(5, 0)),
            25200,
        )

    def test_infer_elapsed_long_gap_is_a_known_limitation(self):
        # 10:00 -> next day 11:00 looks like a one-hour journey without intermediate times
        self.assertEqual(infer_elapsed(ClockTime(10, 0), [], ClockTime(11, 0)), 3600)
        self.assertEqual(
            infer_elapsed(ClockTime(10, 0), ["A 18:00", "B 02:00"], ClockTime(11, 0)),
            86400 + 3600,
        )

    def test_destination_time_repeated_in_route_text(self):
        self.assertEqual(
            infer_elapsed(ClockTime(7, 0), ["X 08:00", "Y 09:00"], ClockTime(9, 0)),
            7200,
        )


if __name__ == "__main__":
    unittest.main()

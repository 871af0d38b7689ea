"""Elapsed time along a journey from bare times of day.

A journey's times are known only as ``hh:mm`` with no date. Walking them in
travel order, any time earlier than the one before it is taken to be on the
next day. Two consecutive samples 24 hours or more apart cannot be told from a
same-day pair; that case is accepted as is.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from .clock import SECONDS_PER_DAY, ClockTime, difference, find_times


class RolloverClock:
    """Counts midnight crossings while walking a forward-moving journey.

    With ``anchored=False`` there is no previous time until the first sample,
    so a sample before the baseline in the origin row is not a rollover.
    """

    def __init__(self, baseline: ClockTime, anchored: bool = True):
        self.baseline = baseline
        self.last_time: Optional[ClockTime] = baseline if anchored else None
        self.days_passed = 0

    def advance(self, time: ClockTime) -> int:
        """Take the next sample and return its seconds since the baseline."""
        if self.last_time is not None and time < self.last_time:
            self.days_passed += 1
        self.last_time = time
        return self.elapsed(time)

    def elapsed(self, time: ClockTime) -> int:
        return self.days_passed * SECONDS_PER_DAY + difference(time, self.baseline)


def elapsed_from_origin(
    samples: Iterable[ClockTime], baseline: Optional[ClockTime] = None
) -> List[int]:
    """Seconds since ``baseline`` (default: the first sample) for every sample."""
    samples = list(samples)
    if not samples:
        return []
    clock = RolloverClock(baseline if baseline is not None else samples[0])
    return [clock.advance(t) for t in samples]


def infer_elapsed(start: ClockTime, texts: Iterable[str], end: ClockTime) -> int:
    """Estimate seconds from ``start`` to ``end`` using the times found in ``texts``.

    Used for departure board rows, where only the intermediate stop times of a
    service are shown. The full service timetable gives the authoritative value.
    """
    clock = RolloverClock(start)
    for text in texts:
        for time in find_times(text):
            clock.advance(time)
    return clock.advance(end)

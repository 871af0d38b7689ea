from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .errors import FormatError

SECONDS_PER_DAY = 24 * 60 * 60

TIME_PATTERN = re.compile(r"(\d+):(\d+)")


@dataclass(frozen=True, order=True)
class ClockTime:
    """A time of day on a 24-hour clock, without implying any particular date."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise FormatError(f"Time of day out of range: {self.hour}:{self.minute}")

    @classmethod
    def parse(cls, text: str) -> "ClockTime":
        """Parse the first ``hh:mm`` group found in ``text``."""
        match = TIME_PATTERN.search(text or "")
        if match is None:
            raise FormatError(f"Not a time of day: {text!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def parse_optional(cls, text: Optional[str]) -> Optional["ClockTime"]:
        if text is None or not text.strip():
            return None
        return cls.parse(text)

    @property
    def seconds(self) -> int:
        return self.hour * 3600 + self.minute * 60

    def format(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"ClockTime({self.format()})"

    def __sub__(self, other: "ClockTime") -> int:
        if not isinstance(other, ClockTime):
            return NotImplemented
        return difference(self, other)


def difference(a: ClockTime, b: ClockTime) -> int:
    """Seconds from ``b`` to ``a`` when both fall on the same day; may be negative."""
    return a.seconds - b.seconds


def find_times(text: str) -> list[ClockTime]:
    """All ``hh:mm`` groups in ``text``, in order."""
    return [ClockTime(int(h), int(m)) for h, m in TIME_PATTERN.findall(text or "")]

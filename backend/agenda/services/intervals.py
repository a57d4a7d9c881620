"""
Half-open time ranges over UTC-naive instants.

[start, end): the end is exclusive, so back-to-back intervals (a.end ==
b.start) are adjacent, never overlapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self, other)

    def contains(self, other: "Interval") -> bool:
        return self.start <= other.start and other.end <= self.end

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60


def overlaps(a: Interval, b: Interval) -> bool:
    # Strict on both sides: touching is allowed, any shared minute is not.
    return a.start < b.end and a.end > b.start


def overlaps_any(candidate: Interval, busy) -> bool:
    return any(overlaps(candidate, other) for other in busy)


def add_minutes(instant: datetime, minutes: int) -> datetime:
    return instant + timedelta(minutes=minutes)

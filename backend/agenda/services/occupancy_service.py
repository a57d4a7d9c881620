"""
Occupancy aggregator: everything that makes a staff member busy on a day.

Read fresh on every call. The availability view and the booking
transaction both go through load_occupancy, which is what keeps them in
agreement when invoked moments apart.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import or_

from agenda.extensions import db
from agenda.models import Appointment, AvailabilityBlock, APPOINTMENT_CONFIRMED
from agenda.services.intervals import Interval, add_minutes, overlaps_any
from agenda.time_utils import to_naive_utc


@dataclass
class Occupancy:
    appointments: list[Interval] = field(default_factory=list)
    blocks: list[Interval] = field(default_factory=list)

    def conflicts_with(self, candidate: Interval) -> bool:
        return self.taken(candidate) or self.blocked(candidate)

    def taken(self, candidate: Interval) -> bool:
        return overlaps_any(candidate, self.appointments)

    def blocked(self, candidate: Interval) -> bool:
        return overlaps_any(candidate, self.blocks)


def appointment_intervals(store_id: int, staff_id: int, window: Interval) -> list[Interval]:
    """
    Confirmed appointments starting inside the window, each extended by the
    buffer snapshotted when it was booked (not today's buffer setting).
    """
    rows = (
        db.session.query(
            Appointment.start_at,
            Appointment.end_at,
            Appointment.buffer_after_minutes_snapshot,
        )
        .filter(
            Appointment.store_id == store_id,
            Appointment.staff_id == staff_id,
            Appointment.status == APPOINTMENT_CONFIRMED,
            Appointment.start_at >= window.start,
            Appointment.start_at < window.end,
        )
        .all()
    )
    return [
        Interval(to_naive_utc(start_at), add_minutes(to_naive_utc(end_at), buffer or 0))
        for start_at, end_at, buffer in rows
    ]


def block_intervals(store_id: int, staff_id: int, window: Interval) -> list[Interval]:
    """Store-wide blocks plus the staff member's own blocks that touch the window."""
    rows = (
        db.session.query(AvailabilityBlock.start_at, AvailabilityBlock.end_at)
        .filter(
            AvailabilityBlock.store_id == store_id,
            or_(AvailabilityBlock.staff_id.is_(None), AvailabilityBlock.staff_id == staff_id),
            AvailabilityBlock.start_at < window.end,
            AvailabilityBlock.end_at > window.start,
        )
        .all()
    )
    return [Interval(to_naive_utc(start_at), to_naive_utc(end_at)) for start_at, end_at in rows]


def load_occupancy(store_id: int, staff_id: int, window: Interval) -> Occupancy:
    return Occupancy(
        appointments=appointment_intervals(store_id, staff_id, window),
        blocks=block_intervals(store_id, staff_id, window),
    )

"""
Working-hours resolver: a staff member's recurring weekly shifts.

A day is an ordered list of shifts keyed by (staff, weekday, slot). Only open
shifts count. No rows for a day means the staff member does not work that
day; nothing here ever invents a default schedule.
"""

from __future__ import annotations

from datetime import date, time
from zoneinfo import ZoneInfo

from agenda.extensions import db
from agenda.models import WorkingHourRule
from agenda.services import store_service
from agenda.services.intervals import Interval
from agenda.time_utils import local_to_instant
from agenda.validation import ValidationError, parse_hhmm, parse_bool


def resolve_open_shifts(staff_id: int, day_of_week: int) -> list[tuple[time, time]]:
    """Open (start, end) local times for the weekday, in shift order."""
    rules = (
        db.session.query(WorkingHourRule)
        .filter_by(staff_id=staff_id, day_of_week=day_of_week, is_open=True)
        .order_by(WorkingHourRule.slot.asc())
        .all()
    )
    return [
        (rule.start_time, rule.end_time)
        for rule in rules
        if rule.start_time is not None and rule.end_time is not None
    ]


def shift_intervals(day: date, shifts: list[tuple[time, time]], zone: ZoneInfo) -> list[Interval]:
    """Local shifts of `day` as absolute instants."""
    return [
        Interval(local_to_instant(day, start, zone), local_to_instant(day, end, zone))
        for start, end in shifts
    ]


def _parse_day(day_of_week) -> int:
    try:
        day = int(day_of_week)
    except (TypeError, ValueError):
        raise ValidationError("day_of_week must be an integer 0-6")
    if not 0 <= day <= 6:
        raise ValidationError("day_of_week must be an integer 0-6")
    return day


def _parse_shifts(shifts: list[dict]) -> list[tuple[bool, time | None, time | None]]:
    if not isinstance(shifts, list):
        raise ValidationError("shifts must be a list")

    parsed = []
    for position, shift in enumerate(shifts, start=1):
        if not isinstance(shift, dict):
            raise ValidationError(f"shift {position} must be an object")
        is_open = parse_bool(shift.get("is_open", True))
        start = parse_hhmm(shift["start"], f"shift {position} start") if shift.get("start") else None
        end = parse_hhmm(shift["end"], f"shift {position} end") if shift.get("end") else None
        if is_open:
            if start is None or end is None:
                raise ValidationError(f"shift {position} needs start and end when open")
            if start >= end:
                raise ValidationError(f"shift {position} must start before it ends")
        parsed.append((is_open, start, end))

    previous_end = None
    for is_open, start, end in parsed:
        if not is_open:
            continue
        if previous_end is not None and start < previous_end:
            raise ValidationError("Shifts on the same day must not overlap")
        previous_end = end

    return parsed


def set_day_shifts(store_slug: str, staff_id: int, day_of_week, shifts: list[dict]) -> list[WorkingHourRule]:
    """
    Replace one weekday of a staff member's schedule.

    Shifts are upserted by slot (list position + 1); slots beyond the new
    list are removed. An empty list clears the day (closed).
    """
    store = store_service.get_store_by_slug(store_slug)
    staff = store_service.get_staff_in_store(store, staff_id)
    day = _parse_day(day_of_week)
    parsed = _parse_shifts(shifts)

    existing = {
        rule.slot: rule
        for rule in db.session.query(WorkingHourRule).filter_by(staff_id=staff.id, day_of_week=day).all()
    }

    rules = []
    for slot, (is_open, start, end) in enumerate(parsed, start=1):
        rule = existing.pop(slot, None)
        if rule is None:
            rule = WorkingHourRule(store_id=store.id, staff_id=staff.id, day_of_week=day, slot=slot)
            db.session.add(rule)
        rule.is_open = is_open
        rule.start_time = start
        rule.end_time = end
        rules.append(rule)

    for stale in existing.values():
        db.session.delete(stale)

    db.session.commit()
    return rules


def get_week_schedule(store_slug: str, staff_id: int) -> dict[int, list[WorkingHourRule]]:
    store = store_service.get_store_by_slug(store_slug)
    staff = store_service.get_staff_in_store(store, staff_id)

    rules = (
        db.session.query(WorkingHourRule)
        .filter_by(staff_id=staff.id)
        .order_by(WorkingHourRule.day_of_week.asc(), WorkingHourRule.slot.asc())
        .all()
    )
    schedule: dict[int, list[WorkingHourRule]] = {day: [] for day in range(7)}
    for rule in rules:
        schedule[rule.day_of_week].append(rule)
    return schedule

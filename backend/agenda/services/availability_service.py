"""
Slot generator: which local start times can a customer book?

Per open shift, walk a fixed grid from the shift start and admit every
candidate [cursor, cursor + service + buffer) that:
- ends within the shift
- starts no earlier than now + lead time
- overlaps no confirmed appointment (with its buffer) and no block

The result is a sorted, de-duplicated list of store-local "HH:MM" labels.
An empty list is a normal answer (closed day, fully booked).
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from agenda.extensions import db
from agenda.services import store_service
from agenda.services.intervals import Interval, add_minutes
from agenda.services.occupancy_service import Occupancy, load_occupancy
from agenda.services.working_hours_service import resolve_open_shifts, shift_intervals
from agenda.time_utils import (
    utcnow,
    to_naive_utc,
    get_zone,
    day_window,
    local_weekday,
    instant_to_local_hhmm,
)
from agenda.validation import (
    DataAccessError,
    require_text,
    parse_id,
    parse_local_date,
    parse_minutes,
    parse_step_minutes,
)


def generate_slots(
    shifts: list[Interval],
    occupancy: Occupancy,
    *,
    service_minutes: int,
    buffer_minutes: int,
    step_minutes: int,
    lead_minutes: int,
    now: datetime,
    zone: ZoneInfo,
) -> list[str]:
    """Pure and total: no I/O, no failure path for valid numbers."""
    occupy_minutes = service_minutes + buffer_minutes
    min_start_allowed = add_minutes(now, lead_minutes)

    labels: set[str] = set()
    for shift in shifts:
        cursor = shift.start
        while cursor < shift.end:
            candidate = Interval(cursor, add_minutes(cursor, occupy_minutes))
            if (
                candidate.end <= shift.end
                and candidate.start >= min_start_allowed
                and not occupancy.conflicts_with(candidate)
            ):
                labels.add(instant_to_local_hhmm(candidate.start, zone))
            cursor = add_minutes(cursor, step_minutes)

    # Zero-padded HH:MM sorts chronologically
    return sorted(labels)


def get_available_slots(
    store_slug: str,
    staff_id,
    local_date,
    service_minutes=None,
    step_minutes=None,
    lead_minutes=None,
    buffer_after_minutes=None,
    *,
    now: datetime | None = None,
) -> list[str]:
    """
    Bookable start times for (store, staff, date, service length).

    Inputs are validated before touching the database; omitted grid
    parameters fall back to the app's booking defaults. Never cached: every
    call re-reads schedule and occupancy.
    """
    config = current_app.config
    store_slug = require_text(store_slug, "slug")
    staff_id = parse_id(staff_id, "staffId")
    day = parse_local_date(local_date)
    service_minutes = parse_minutes(
        service_minutes,
        "serviceMinutes",
        default=config["BOOKING_SERVICE_MINUTES"],
        allow_zero=False,
        maximum=config["MAX_SERVICE_MINUTES"],
    )
    step_minutes = parse_step_minutes(step_minutes, default=config["BOOKING_STEP_MINUTES"])
    lead_minutes = parse_minutes(
        lead_minutes, "leadMinutes", default=config["BOOKING_LEAD_MINUTES"], maximum=config["BOOKING_MAX_LEAD_MINUTES"]
    )
    buffer_after_minutes = parse_minutes(
        buffer_after_minutes, "bufferAfter", default=config["BOOKING_BUFFER_MINUTES"], maximum=config["MAX_SERVICE_MINUTES"]
    )
    now = to_naive_utc(now) if now else utcnow()

    try:
        store = store_service.get_store_by_slug(store_slug)
        staff = store_service.get_staff_in_store(store, staff_id)
        zone = get_zone(store.timezone)

        return slots_for_day(
            store.id,
            staff.id,
            day,
            zone,
            service_minutes=service_minutes,
            buffer_minutes=buffer_after_minutes,
            step_minutes=step_minutes,
            lead_minutes=lead_minutes,
            now=now,
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to load availability for %s", store_slug)
        raise DataAccessError("Could not load availability") from exc


def slots_for_day(
    store_id: int,
    staff_id: int,
    day: date,
    zone: ZoneInfo,
    *,
    service_minutes: int,
    buffer_minutes: int,
    step_minutes: int,
    lead_minutes: int,
    now: datetime,
) -> list[str]:
    shifts = resolve_open_shifts(staff_id, local_weekday(day, zone))
    if not shifts:
        return []

    window_start, window_end = day_window(day, zone)
    occupancy = load_occupancy(store_id, staff_id, Interval(window_start, window_end))

    return generate_slots(
        shift_intervals(day, shifts, zone),
        occupancy,
        service_minutes=service_minutes,
        buffer_minutes=buffer_minutes,
        step_minutes=step_minutes,
        lead_minutes=lead_minutes,
        now=now,
        zone=zone,
    )

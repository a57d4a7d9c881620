"""
Booking transaction: validate a requested slot and commit it, or reject.

Resolution is the same path availability uses (time zone -> shifts ->
occupancy), ending in a conditional insert instead of a list.

CONCURRENCY: the fit check, the occupancy re-read and the insert run as one
critical section per staff member:
- the staff row is read FOR UPDATE (honoured by PostgreSQL/MySQL)
- the insert bumps Staff.version_id; a concurrent booking that read the
  same version fails with StaleDataError and is re-run from fresh state,
  where it sees the winner's appointment and is rejected
- on PostgreSQL an exclusion constraint on confirmed (staff, range) rows
  turns any remaining overlap into an IntegrityError, reported as a conflict

A booking either commits one Appointment or leaves no trace.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from agenda.extensions import db
from agenda.models import (
    Appointment,
    Service,
    Staff,
    Store,
    APPOINTMENT_CONFIRMED,
    APPOINTMENT_CANCELLED,
)
from agenda.services import store_service
from agenda.services.concurrency import lock_for_update, run_with_retry
from agenda.services.intervals import Interval, add_minutes
from agenda.services.occupancy_service import load_occupancy
from agenda.services.working_hours_service import resolve_open_shifts, shift_intervals
from agenda.time_utils import (
    utcnow,
    to_naive_utc,
    get_zone,
    day_window,
    local_weekday,
    local_to_instant,
    instant_to_local_hhmm,
    to_utc_z,
)
from agenda.validation import (
    ValidationError,
    NotFoundError,
    ConflictError,
    SchedulingConflictError,
    DataAccessError,
    MAX_CUSTOMER_NAME_LENGTH,
    require_text,
    parse_id,
    parse_local_date,
    parse_hhmm,
    parse_minutes,
    parse_step_minutes,
    validate_phone,
)


@dataclass
class BookingConfirmation:
    appointment: Appointment
    store: Store
    staff: Staff
    service: Service
    local_date: date
    local_time: str

    def to_dict(self) -> dict:
        return {
            "id": self.appointment.id,
            "store": self.store.to_public_dict(),
            "staff": self.staff.to_public_dict(),
            "service": self.service.to_public_dict(),
            "date": self.local_date.isoformat(),
            "time": self.local_time,
            "start_at": to_utc_z(self.appointment.start_at),
            "end_at": to_utc_z(self.appointment.end_at),
            "buffer_after_minutes": self.appointment.buffer_after_minutes_snapshot,
        }


def create_booking(
    store_slug: str,
    staff_id,
    service_id,
    local_date,
    local_time,
    customer_name,
    customer_phone,
    buffer_after_minutes=None,
    lead_minutes=None,
    step_minutes=None,
    *,
    now: datetime | None = None,
) -> BookingConfirmation:
    """
    Book `local_time` on `local_date` (store-local) with a staff member.

    The grid is the one availability walks: `step_minutes` apart, counted
    from the start of the shift that holds the booking.

    Raises:
        ValidationError: malformed input (nothing was read), or a time that
            fits a shift but is off that shift's grid
        NotFoundError: unknown store, or staff/service not in that store
        SchedulingConflictError: too soon, outside working hours, or occupied
        DataAccessError: the database failed, or holds an unusable service
    """
    config = current_app.config

    # 1) structural validation, before any data access
    store_slug = require_text(store_slug, "slug")
    staff_id = parse_id(staff_id, "staffId")
    service_id = parse_id(service_id, "serviceId")
    day = parse_local_date(local_date)
    start_time = parse_hhmm(local_time)
    buffer_after_minutes = parse_minutes(
        buffer_after_minutes, "bufferAfter", default=config["BOOKING_BUFFER_MINUTES"], maximum=config["MAX_SERVICE_MINUTES"]
    )
    lead_minutes = parse_minutes(
        lead_minutes, "leadMinutes", default=config["BOOKING_LEAD_MINUTES"], maximum=config["BOOKING_MAX_LEAD_MINUTES"]
    )
    step_minutes = parse_step_minutes(step_minutes, default=config["BOOKING_STEP_MINUTES"])
    customer_name = require_text(customer_name, "customerName", max_length=MAX_CUSTOMER_NAME_LENGTH)
    customer_phone = validate_phone(customer_phone)

    now = to_naive_utc(now) if now else utcnow()

    try:
        return _book(
            store_slug,
            staff_id,
            service_id,
            day,
            start_time,
            customer_name=customer_name,
            customer_phone=customer_phone,
            buffer_after_minutes=buffer_after_minutes,
            lead_minutes=lead_minutes,
            step_minutes=step_minutes,
            now=now,
        )
    except StaleDataError:
        db.session.rollback()
        current_app.logger.info("Booking for staff %s on %s lost repeated races", staff_id, day)
        raise SchedulingConflictError("That time was just taken. Choose another.")
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create booking for %s", store_slug)
        raise DataAccessError("Could not create the booking") from exc


def _book(
    store_slug: str,
    staff_id: int,
    service_id: int,
    day: date,
    start_time: time,
    *,
    customer_name: str,
    customer_phone: str,
    buffer_after_minutes: int,
    lead_minutes: int,
    step_minutes: int,
    now: datetime,
) -> BookingConfirmation:
    # 2) referential validation
    store = store_service.get_store_by_slug(store_slug)
    staff = store_service.get_staff_in_store(store, staff_id)
    service = store_service.get_service_in_store(store, service_id)

    # 3) service duration sanity; a stored row out of range is bad data, not bad input
    duration = service.duration_minutes
    if not duration or duration <= 0 or duration > current_app.config["MAX_SERVICE_MINUTES"]:
        current_app.logger.error("Service %s has unusable duration %r", service.id, duration)
        raise DataAccessError("Service duration is invalid")

    # 4) absolute instants + lead time
    zone = get_zone(store.timezone)
    start_at = local_to_instant(day, start_time, zone)
    requested = Interval(start_at, add_minutes(start_at, duration + buffer_after_minutes))

    if start_at < add_minutes(now, lead_minutes):
        raise SchedulingConflictError(f"Bookings need at least {lead_minutes} minutes notice.")

    store_id = store.id
    window = Interval(*day_window(day, zone))
    weekday = local_weekday(day, zone)

    def _op():
        locked_staff = lock_for_update(
            db.session.query(Staff).filter_by(id=staff_id, store_id=store_id)
        ).populate_existing().first()
        if not locked_staff:
            raise NotFoundError("Staff member not found in this store")

        # 5) must fit inside one open shift, on that shift's grid
        shifts = resolve_open_shifts(locked_staff.id, weekday)
        if not shifts:
            raise SchedulingConflictError("The store is closed that day for this staff member.")
        shift = next((s for s in shift_intervals(day, shifts, zone) if s.contains(requested)), None)
        if shift is None:
            raise SchedulingConflictError("That time is outside working hours.")
        if Interval(shift.start, start_at).minutes % step_minutes:
            raise ValidationError(f"Choose a time on the {step_minutes}-minute grid.")

        # 6) occupancy re-read at commit time
        occupancy = load_occupancy(store_id, locked_staff.id, window)
        if occupancy.taken(requested):
            raise SchedulingConflictError("That time was just taken. Choose another.")
        if occupancy.blocked(requested):
            raise SchedulingConflictError("That time is blocked.")

        # 7) persist; stored end excludes the buffer
        appointment = Appointment(
            store_id=store_id,
            staff_id=locked_staff.id,
            service_id=service_id,
            customer_name=customer_name,
            customer_phone=customer_phone,
            start_at=start_at,
            end_at=add_minutes(start_at, duration),
            buffer_after_minutes_snapshot=buffer_after_minutes,
            status=APPOINTMENT_CONFIRMED,
        )
        db.session.add(appointment)
        locked_staff.last_booked_at = utcnow()

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise SchedulingConflictError("That time was just taken. Choose another.")
        return appointment, locked_staff

    try:
        appointment, booked_staff = run_with_retry(_op)
    except (SchedulingConflictError, ValidationError, NotFoundError) as exc:
        # releases the staff row lock
        db.session.rollback()
        current_app.logger.info(
            "Booking rejected for staff %s at %s %s: %s", staff_id, day, start_time.strftime("%H:%M"), exc
        )
        raise

    current_app.logger.info(
        "Booked appointment %s for staff %s at %s", appointment.id, booked_staff.id, to_utc_z(start_at)
    )
    return BookingConfirmation(
        appointment=appointment,
        store=store,
        staff=booked_staff,
        service=service,
        local_date=day,
        local_time=instant_to_local_hhmm(appointment.start_at, zone),
    )


# =============================================================================
# APPOINTMENT LEDGER
# =============================================================================

def cancel_appointment(store_slug: str, appointment_id, reason: str | None = None, *, now: datetime | None = None) -> Appointment:
    """
    Soft-cancel a confirmed appointment (one-way). The row is kept for
    history and immediately stops occupying time.
    """
    appointment_id = parse_id(appointment_id, "appointmentId")
    reason = (reason or "").strip() or None
    store = store_service.get_store_by_slug(store_slug)
    store_id = store.id
    cancelled_at = to_naive_utc(now) if now else utcnow()

    def _op():
        appointment = lock_for_update(
            db.session.query(Appointment).filter_by(id=appointment_id, store_id=store_id)
        ).first()
        if not appointment:
            raise NotFoundError("Appointment not found")
        if not appointment.is_confirmed:
            raise ConflictError("Appointment is already cancelled")

        appointment.status = APPOINTMENT_CANCELLED
        appointment.cancelled_at = cancelled_at
        appointment.cancelled_reason = reason
        db.session.commit()
        return appointment

    appointment = run_with_retry(_op)
    current_app.logger.info("Cancelled appointment %s", appointment.id)
    return appointment


def list_appointments(
    store_slug: str,
    local_date=None,
    staff_id=None,
    include_cancelled: bool = False,
) -> list[Appointment]:
    """Appointments of a store, optionally for one local day and/or staff member, by start time."""
    store = store_service.get_store_by_slug(store_slug)
    query = db.session.query(Appointment).filter(Appointment.store_id == store.id)

    if local_date:
        start, end = day_window(parse_local_date(local_date), get_zone(store.timezone))
        query = query.filter(Appointment.start_at >= start, Appointment.start_at < end)
    if staff_id:
        query = query.filter(Appointment.staff_id == parse_id(staff_id, "staffId"))
    if not include_cancelled:
        query = query.filter(Appointment.status == APPOINTMENT_CONFIRMED)

    return query.order_by(Appointment.start_at.asc(), Appointment.id.asc()).all()

"""Ad-hoc availability blocks (vacations, closures) for a store or one staff member."""

from __future__ import annotations

from datetime import datetime

from agenda.extensions import db
from agenda.models import AvailabilityBlock
from agenda.services import store_service
from agenda.time_utils import parse_iso_datetime, to_naive_utc
from agenda.validation import (
    ValidationError,
    NotFoundError,
    parse_id,
    require_instant_order,
)


MAX_REASON_LENGTH = 200


def _parse_instant(value, field: str) -> datetime:
    if isinstance(value, datetime):
        return to_naive_utc(value)
    try:
        instant = parse_iso_datetime(value)
    except (AttributeError, TypeError, ValueError):
        raise ValidationError(f"{field} must be an ISO-8601 datetime")
    if instant is None:
        raise ValidationError(f"{field} is required")
    return instant


def create_block(store_slug: str, start_at, end_at, staff_id=None, reason: str | None = None) -> AvailabilityBlock:
    """
    Block [start_at, end_at) for the whole store, or for one staff member
    when staff_id is given. Naive datetimes are read as UTC.
    """
    start = _parse_instant(start_at, "start_at")
    end = _parse_instant(end_at, "end_at")
    require_instant_order(start, end)

    reason = (reason or "").strip() or None
    if reason and len(reason) > MAX_REASON_LENGTH:
        raise ValidationError(f"reason is too long (max {MAX_REASON_LENGTH} characters)")

    store = store_service.get_store_by_slug(store_slug)
    staff = None
    if staff_id not in (None, ""):
        staff = store_service.get_staff_in_store(store, parse_id(staff_id, "staff_id"))

    block = AvailabilityBlock(
        store_id=store.id,
        staff_id=staff.id if staff else None,
        start_at=start,
        end_at=end,
        reason=reason,
    )
    db.session.add(block)
    db.session.commit()
    return block


def list_blocks(store_slug: str, staff_id=None) -> list[AvailabilityBlock]:
    """Blocks of a store; with staff_id, only those that affect that staff member."""
    store = store_service.get_store_by_slug(store_slug)
    query = db.session.query(AvailabilityBlock).filter(AvailabilityBlock.store_id == store.id)
    if staff_id not in (None, ""):
        staff_id = parse_id(staff_id, "staff_id")
        query = query.filter(
            (AvailabilityBlock.staff_id.is_(None)) | (AvailabilityBlock.staff_id == staff_id)
        )
    return query.order_by(AvailabilityBlock.start_at.asc()).all()


def delete_block(store_slug: str, block_id) -> None:
    block_id = parse_id(block_id, "block_id")
    store = store_service.get_store_by_slug(store_slug)
    block = db.session.query(AvailabilityBlock).filter_by(id=block_id, store_id=store.id).first()
    if not block:
        raise NotFoundError("Block not found")
    db.session.delete(block)
    db.session.commit()

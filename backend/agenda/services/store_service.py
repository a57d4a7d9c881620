"""
Store, staff and service catalog.

The booking core only reads from here (store by slug, staff/service within a
store). The write side stands in for the owner's onboarding and dashboard
screens.
"""

from __future__ import annotations

import re
import unicodedata

from flask import current_app
from sqlalchemy.exc import IntegrityError

from agenda.extensions import db
from agenda.models import Store, Staff, Service, Appointment, AvailabilityBlock
from agenda.time_utils import get_zone
from agenda.validation import (
    NotFoundError,
    ConflictError,
    require_text,
    validate_slug,
    parse_minutes,
    parse_whole_number,
)


MAX_SLUG_LENGTH = 60


def slugify(value: str) -> str:
    """'Barbearia São João' -> 'barbearia-sao-joao'"""
    text = unicodedata.normalize("NFD", value.lower().strip())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[^a-z0-9]+", "-", text).strip("-")
    return text[:MAX_SLUG_LENGTH].strip("-")


# =============================================================================
# STORES
# =============================================================================

def create_store(name: str, slug: str | None = None, timezone: str | None = None) -> Store:
    """
    Create a store. The slug is derived from the name when not given and is
    immutable afterwards. A slug already in use is a conflict.
    """
    name = require_text(name, "name", max_length=120)
    slug = validate_slug(slugify(slug) if slug else slugify(name))
    timezone = (timezone or current_app.config["DEFAULT_STORE_TIMEZONE"]).strip()
    get_zone(timezone)

    if db.session.query(Store.id).filter_by(slug=slug).first():
        raise ConflictError("That store link (slug) is already taken. Choose another.")

    store = Store(name=name, slug=slug, timezone=timezone)
    db.session.add(store)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("That store link (slug) is already taken. Choose another.")

    current_app.logger.info("Created store %s (%s)", store.slug, store.timezone)
    return store


def get_store_by_slug(slug: str) -> Store:
    slug = require_text(slug, "slug")
    store = db.session.query(Store).filter_by(slug=slug).first()
    if not store:
        raise NotFoundError("Store not found")
    return store


def list_stores() -> list[Store]:
    return db.session.query(Store).order_by(Store.slug.asc()).all()


# =============================================================================
# STAFF
# =============================================================================

def get_staff_in_store(store: Store, staff_id: int) -> Staff:
    staff = db.session.query(Staff).filter_by(id=staff_id, store_id=store.id).first()
    if not staff:
        raise NotFoundError("Staff member not found in this store")
    return staff


def add_staff(store_slug: str, name: str, email: str | None = None) -> Staff:
    store = get_store_by_slug(store_slug)
    staff = Staff(
        store_id=store.id,
        name=require_text(name, "name", max_length=120),
        email=(email or "").strip() or None,
    )
    db.session.add(staff)
    db.session.commit()
    return staff


def list_staff(store_slug: str) -> list[Staff]:
    store = get_store_by_slug(store_slug)
    return (
        db.session.query(Staff)
        .filter_by(store_id=store.id)
        .order_by(Staff.created_at.asc(), Staff.id.asc())
        .all()
    )


def remove_staff(store_slug: str, staff_id: int) -> None:
    """
    Remove a staff member together with their schedule and personal blocks.

    Refused while appointments reference the staff member: appointment
    history is never deleted.
    """
    store = get_store_by_slug(store_slug)
    staff = get_staff_in_store(store, staff_id)

    has_history = db.session.query(Appointment.id).filter_by(staff_id=staff.id).first()
    if has_history:
        raise ConflictError("Staff member has appointments and cannot be removed")

    db.session.query(AvailabilityBlock).filter_by(staff_id=staff.id).delete()
    db.session.delete(staff)
    db.session.commit()


# =============================================================================
# SERVICES
# =============================================================================

def get_service_in_store(store: Store, service_id: int) -> Service:
    service = db.session.query(Service).filter_by(id=service_id, store_id=store.id).first()
    if not service:
        raise NotFoundError("Service not found in this store")
    return service


def add_service(store_slug: str, name: str, duration_minutes, price_cents=0) -> Service:
    store = get_store_by_slug(store_slug)
    duration = parse_minutes(
        duration_minutes, "duration_minutes", allow_zero=False, maximum=current_app.config["MAX_SERVICE_MINUTES"]
    )
    price = parse_whole_number(price_cents, "price_cents", default=0)

    service = Service(
        store_id=store.id,
        name=require_text(name, "name", max_length=120),
        duration_minutes=duration,
        price_cents=price,
    )
    db.session.add(service)
    db.session.commit()
    return service


def list_services(store_slug: str) -> list[Service]:
    store = get_store_by_slug(store_slug)
    return (
        db.session.query(Service)
        .filter_by(store_id=store.id)
        .order_by(Service.created_at.asc(), Service.id.asc())
        .all()
    )

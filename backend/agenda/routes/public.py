# Overview: Public booking API (no login): catalog listing, availability and booking.

"""
Public Booking Routes

These are the endpoints the store's public booking page calls:
- GET  /api/public/staff?slug=...
- GET  /api/public/services?slug=...
- GET  /api/availability?slug=&staffId=&date=&serviceMinutes=&stepMinutes=&leadMinutes=&bufferAfter=
- POST /api/book

Availability responses are never cacheable: every call re-reads occupancy.
"""

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors, no_store
from ..services import availability_service, booking_service, store_service


public_bp = Blueprint("public", __name__, url_prefix="/api")


@public_bp.get("/public/staff")
@handle_service_errors("list public staff")
def list_public_staff_route():
    staff = store_service.list_staff(request.args.get("slug", ""))
    return jsonify({"staff": [member.to_public_dict() for member in staff]}), 200


@public_bp.get("/public/services")
@handle_service_errors("list public services")
def list_public_services_route():
    services = store_service.list_services(request.args.get("slug", ""))
    return jsonify({"services": [service.to_public_dict() for service in services]}), 200


@public_bp.get("/availability")
@no_store
@handle_service_errors("load availability")
def availability_route():
    """
    Query params:
        slug, staffId, date (YYYY-MM-DD) - required
        serviceMinutes (1-480), stepMinutes (1-60), leadMinutes (0-527040), bufferAfter (0-480)
    """
    args = request.args
    slots = availability_service.get_available_slots(
        store_slug=args.get("slug", ""),
        staff_id=args.get("staffId"),
        local_date=args.get("date"),
        service_minutes=args.get("serviceMinutes"),
        step_minutes=args.get("stepMinutes"),
        lead_minutes=args.get("leadMinutes"),
        buffer_after_minutes=args.get("bufferAfter"),
    )
    return jsonify({"slots": slots}), 200


@public_bp.post("/book")
@handle_service_errors("create booking")
def book_route():
    """
    Request body:
    {
        "slug": "barbearia-central",
        "staffId": 1,
        "serviceId": 2,
        "date": "2026-10-19",
        "time": "10:00",
        "customerName": "Ana Silva",
        "customerPhone": "+351 912 345 678",
        "bufferAfter": 0,        (optional)
        "leadMinutes": 120,      (optional)
        "stepMinutes": 15        (optional)
    }
    """
    data = request.get_json(silent=True) or {}
    confirmation = booking_service.create_booking(
        store_slug=data.get("slug", ""),
        staff_id=data.get("staffId"),
        service_id=data.get("serviceId"),
        local_date=data.get("date"),
        local_time=data.get("time"),
        customer_name=data.get("customerName"),
        customer_phone=data.get("customerPhone"),
        buffer_after_minutes=data.get("bufferAfter"),
        lead_minutes=data.get("leadMinutes"),
        step_minutes=data.get("stepMinutes"),
    )
    return jsonify({"ok": True, "appointment": confirmation.to_dict()}), 201

# Overview: Flask API routes for the store's appointment list and cancellations.

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors
from ..services import booking_service
from ..validation import parse_bool


appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/stores")


@appointments_bp.get("/<slug>/appointments")
@handle_service_errors("list appointments")
def list_appointments_route(slug: str):
    """
    Query params (all optional):
        date (YYYY-MM-DD, store-local day), staffId, includeCancelled (true/false)
    """
    appointments = booking_service.list_appointments(
        slug,
        local_date=request.args.get("date"),
        staff_id=request.args.get("staffId"),
        include_cancelled=parse_bool(request.args.get("includeCancelled")),
    )
    return jsonify({"appointments": [appointment.to_dict() for appointment in appointments]}), 200


@appointments_bp.post("/<slug>/appointments/<int:appointment_id>/cancel")
@handle_service_errors("cancel appointment")
def cancel_appointment_route(slug: str, appointment_id: int):
    data = request.get_json(silent=True) or {}
    appointment = booking_service.cancel_appointment(slug, appointment_id, reason=data.get("reason"))
    return jsonify({"appointment": appointment.to_dict()}), 200

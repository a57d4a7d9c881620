# Overview: Flask API routes for weekly working hours and availability blocks.

"""
Schedule Routes

Working hours are edited one weekday at a time:
    PUT /api/stores/<slug>/staff/<id>/working-hours/<day>
    {"shifts": [{"is_open": true, "start": "09:00", "end": "13:00"},
                {"is_open": true, "start": "14:00", "end": "18:00"}]}

Day numbering: 0=Monday ... 6=Sunday. An empty shift list closes the day.

Blocks are absolute instants (ISO-8601, UTC when no offset is given):
    POST /api/stores/<slug>/blocks
    {"start_at": "2026-08-01T00:00:00Z", "end_at": "2026-08-16T00:00:00Z",
     "staff_id": 3, "reason": "Vacation"}
"""

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors
from ..services import block_service, working_hours_service


schedule_bp = Blueprint("schedule", __name__, url_prefix="/api/stores")


@schedule_bp.get("/<slug>/staff/<int:staff_id>/working-hours")
@handle_service_errors("load working hours")
def get_working_hours_route(slug: str, staff_id: int):
    schedule = working_hours_service.get_week_schedule(slug, staff_id)
    return jsonify({
        "staff_id": staff_id,
        "days": {str(day): [rule.to_dict() for rule in rules] for day, rules in schedule.items()},
    }), 200


@schedule_bp.put("/<slug>/staff/<int:staff_id>/working-hours/<int:day_of_week>")
@handle_service_errors("update working hours")
def set_working_hours_route(slug: str, staff_id: int, day_of_week: int):
    data = request.get_json(silent=True) or {}
    rules = working_hours_service.set_day_shifts(slug, staff_id, day_of_week, data.get("shifts", []))
    return jsonify({"day_of_week": day_of_week, "shifts": [rule.to_dict() for rule in rules]}), 200


@schedule_bp.get("/<slug>/blocks")
@handle_service_errors("list blocks")
def list_blocks_route(slug: str):
    blocks = block_service.list_blocks(slug, staff_id=request.args.get("staffId"))
    return jsonify({"blocks": [block.to_dict() for block in blocks]}), 200


@schedule_bp.post("/<slug>/blocks")
@handle_service_errors("create block")
def create_block_route(slug: str):
    data = request.get_json(silent=True) or {}
    block = block_service.create_block(
        slug,
        start_at=data.get("start_at"),
        end_at=data.get("end_at"),
        staff_id=data.get("staff_id"),
        reason=data.get("reason"),
    )
    return jsonify({"block": block.to_dict()}), 201


@schedule_bp.delete("/<slug>/blocks/<int:block_id>")
@handle_service_errors("delete block")
def delete_block_route(slug: str, block_id: int):
    block_service.delete_block(slug, block_id)
    return jsonify({"ok": True}), 200

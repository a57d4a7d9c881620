# Overview: Flask API routes for store, staff and service setup; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors
from ..services import store_service


stores_bp = Blueprint("stores", __name__, url_prefix="/api/stores")


@stores_bp.get("")
@handle_service_errors("list stores")
def list_stores():
    stores = store_service.list_stores()
    return jsonify([store.to_dict() for store in stores]), 200


@stores_bp.post("")
@handle_service_errors("create store")
def create_store():
    data = request.get_json(silent=True) or {}
    store = store_service.create_store(
        name=data.get("name"),
        slug=data.get("slug"),
        timezone=data.get("timezone"),
    )
    return jsonify(store.to_dict()), 201


@stores_bp.get("/<slug>")
@handle_service_errors("load store")
def get_store(slug: str):
    store = store_service.get_store_by_slug(slug)
    return jsonify(store.to_dict()), 200


@stores_bp.get("/<slug>/staff")
@handle_service_errors("list staff")
def list_staff(slug: str):
    staff = store_service.list_staff(slug)
    return jsonify({"staff": [member.to_dict() for member in staff]}), 200


@stores_bp.post("/<slug>/staff")
@handle_service_errors("add staff")
def add_staff(slug: str):
    data = request.get_json(silent=True) or {}
    staff = store_service.add_staff(slug, name=data.get("name"), email=data.get("email"))
    return jsonify({"staff": staff.to_dict()}), 201


@stores_bp.delete("/<slug>/staff/<int:staff_id>")
@handle_service_errors("remove staff")
def remove_staff(slug: str, staff_id: int):
    store_service.remove_staff(slug, staff_id)
    return jsonify({"ok": True}), 200


@stores_bp.get("/<slug>/services")
@handle_service_errors("list services")
def list_services(slug: str):
    services = store_service.list_services(slug)
    return jsonify({"services": [service.to_dict() for service in services]}), 200


@stores_bp.post("/<slug>/services")
@handle_service_errors("add service")
def add_service(slug: str):
    data = request.get_json(silent=True) or {}
    service = store_service.add_service(
        slug,
        name=data.get("name"),
        duration_minutes=data.get("duration_minutes"),
        price_cents=data.get("price_cents", 0),
    )
    return jsonify({"service": service.to_dict()}), 201

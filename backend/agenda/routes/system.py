# backend/agenda/routes/system.py
"""
System health and version endpoints.

Provides a database round-trip health check and version information for
deployment debugging.
"""

import sys
import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Store, Staff, Appointment
from agenda.time_utils import utcnow, to_utc_z, get_zone

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        store_count = db.session.query(Store).count()
        staff_count = db.session.query(Staff).count()
        appointment_count = db.session.query(Appointment).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "stores": store_count,
                "staff": staff_count,
                "appointments": appointment_count,
            }
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_timezone_health() -> dict:
    """
    Check that the IANA database is available for the default store zone.

    Without it no local time can be converted, so availability is unusable.
    """
    zone_name = current_app.config["DEFAULT_STORE_TIMEZONE"]
    try:
        get_zone(zone_name)
        return {"status": "healthy", "default_zone": zone_name}
    except ValueError:
        current_app.logger.error("Time zone %s is not available", zone_name)
        return {"status": "unhealthy", "default_zone": zone_name, "error": "Unknown time zone"}


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: All systems healthy
    - 503: One or more systems unhealthy
    """
    start_time = time.time()

    database_health = check_database_health()
    timezone_health = check_timezone_health()

    all_checks = [database_health, timezone_health]
    unhealthy = any(check["status"] == "unhealthy" for check in all_checks)

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": "unhealthy" if unhealthy else "healthy",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {
            "database": database_health,
            "timezone": timezone_health,
        }
    }

    return response, 503 if unhealthy else 200


@system_bp.get("/version")
def version():
    """
    Version endpoint for deployment debugging.

    Does NOT expose secret keys, database credentials or internal paths.
    """
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": "1.0.0",
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }

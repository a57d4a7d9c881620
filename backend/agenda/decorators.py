# Overview: Request decorators for API routes (error mapping, cache control).

from functools import wraps
from flask import current_app, jsonify, make_response
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .validation import (
    ValidationError,
    NotFoundError,
    ConflictError,
    SchedulingConflictError,
    DataAccessError,
)


def handle_service_errors(action: str):
    """
    Translate service-layer exceptions into JSON error responses.

    - ValidationError          -> 400
    - NotFoundError            -> 404
    - SchedulingConflictError  -> 409 with "code": "SCHEDULING_CONFLICT"
    - ConflictError            -> 409
    - DataAccessError / SQLAlchemyError / anything else -> 500 (logged)

    `action` names the operation in the log line ("Failed to <action>").
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"error": str(e)}), 400
            except NotFoundError as e:
                return jsonify({"error": e.args[0] if e.args else "Not found"}), 404
            except SchedulingConflictError as e:
                return jsonify({"error": str(e), "code": e.code}), 409
            except ConflictError as e:
                return jsonify({"error": str(e)}), 409
            except DataAccessError as e:
                return jsonify({"error": str(e)}), 500
            except SQLAlchemyError:
                db.session.rollback()
                current_app.logger.exception("Failed to %s", action)
                return jsonify({"error": "Database error"}), 500
            except Exception:
                current_app.logger.exception("Failed to %s", action)
                return jsonify({"error": "Internal server error"}), 500

        return decorated_function

    return decorator


def no_store(f):
    """Mark a response as never cacheable (availability must always be live)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = make_response(f(*args, **kwargs))
        response.headers["Cache-Control"] = "no-store, max-age=0"
        return response

    return decorated_function

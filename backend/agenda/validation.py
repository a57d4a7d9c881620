from __future__ import annotations

import math
import re
from datetime import date, datetime, time
from typing import Any


# Customer-facing field limits
MAX_CUSTOMER_NAME_LENGTH = 80
MIN_PHONE_DIGITS = 9
MAX_PHONE_DIGITS = 16
MAX_STEP_MINUTES = 60

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level: store, staff, service or block does not exist in this store."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate slug)."""


class SchedulingConflictError(ConflictError):
    """
    409-level scheduling rejection: the requested time cannot be booked
    (too soon, outside working hours, or already occupied).

    Kept separate from ValidationError so clients can offer
    "pick another time" instead of "fix your input".
    """
    code = "SCHEDULING_CONFLICT"


class DataAccessError(RuntimeError):
    """500-level: the database failed underneath an operation."""


def require_text(value: Any, field: str, *, max_length: int | None = None) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required")
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} is too long (max {max_length} characters)")
    return text


def parse_local_date(value: Any, field: str = "date") -> date:
    """Strict YYYY-MM-DD calendar date."""
    text = require_text(value, field)
    if not _DATE_RE.match(text):
        raise ValidationError(f"Invalid {field}. Use YYYY-MM-DD.")
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid {field}. Use YYYY-MM-DD.")


def parse_hhmm(value: Any, field: str = "time") -> time:
    """Strict 24-hour HH:MM. Database values like "09:00:00" are accepted by trimming."""
    text = require_text(value, field)
    if len(text) == 8 and text[5] == ":":
        text = text[:5]
    if not _HHMM_RE.match(text):
        raise ValidationError(f"Invalid {field}. Use HH:MM.")
    return time(int(text[:2]), int(text[3:]))


def parse_whole_number(
    value: Any,
    field: str,
    *,
    default: int | None = None,
    allow_zero: bool = True,
    maximum: int | None = None,
) -> int:
    """
    Whole, finite, non-negative number (minutes, cents).

    Integer-valued floats ("30.0", 30.0) are accepted; fractions,
    booleans, NaN and infinities are not. With `maximum`, larger values
    are rejected before any date arithmetic can see them.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError(f"{field} is required")
        value = default

    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}")

    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}")

    if not math.isfinite(number) or number != int(number):
        raise ValidationError(f"Invalid {field}")

    if maximum is not None and number > maximum:
        raise ValidationError(f"{field} must be at most {maximum}")

    whole = int(number)
    if whole < 0 or (whole == 0 and not allow_zero):
        raise ValidationError(f"Invalid {field}")
    return whole


parse_minutes = parse_whole_number


def parse_step_minutes(value: Any, *, default: int | None = None) -> int:
    step = parse_whole_number(value, "stepMinutes", default=default, allow_zero=False)
    if step > MAX_STEP_MINUTES:
        raise ValidationError("Invalid stepMinutes")
    return step


def parse_id(value: Any, field: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}")
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field}")
    if parsed <= 0:
        raise ValidationError(f"Invalid {field}")
    return parsed


def normalize_phone(value: Any) -> str:
    """Collapse whitespace runs; keep the customer's own formatting otherwise."""
    return re.sub(r"\s+", " ", "" if value is None else str(value)).strip()


def validate_phone(value: Any) -> str:
    phone = normalize_phone(value)
    if not phone:
        raise ValidationError("customerPhone is required")
    digits = re.sub(r"\D", "", phone)
    if not MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS:
        raise ValidationError("Invalid customerPhone")
    return phone


def validate_slug(value: Any) -> str:
    slug = require_text(value, "slug", max_length=60)
    if not _SLUG_RE.match(slug):
        raise ValidationError("slug may only contain lowercase letters, digits and single hyphens")
    return slug


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def require_instant_order(start_at: datetime, end_at: datetime) -> None:
    if end_at <= start_at:
        raise ValidationError("end must be after start")

# backend/agenda/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/agenda.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///agenda.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Civil time zone assigned to new stores when none is given
    DEFAULT_STORE_TIMEZONE = os.environ.get("DEFAULT_STORE_TIMEZONE", "Europe/Lisbon")

    # Booking grid defaults, used when a request omits the parameter
    BOOKING_STEP_MINUTES = _int_env("BOOKING_STEP_MINUTES", 15)
    BOOKING_LEAD_MINUTES = _int_env("BOOKING_LEAD_MINUTES", 120)
    BOOKING_BUFFER_MINUTES = _int_env("BOOKING_BUFFER_MINUTES", 0)
    BOOKING_SERVICE_MINUTES = _int_env("BOOKING_SERVICE_MINUTES", 30)

    # Hard ceiling on a single service (8 hours); also caps bufferAfter
    MAX_SERVICE_MINUTES = _int_env("MAX_SERVICE_MINUTES", 8 * 60)

    # Largest accepted leadMinutes (366 days)
    BOOKING_MAX_LEAD_MINUTES = _int_env("BOOKING_MAX_LEAD_MINUTES", 366 * 24 * 60)

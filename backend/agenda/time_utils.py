from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from agenda.validation import ValidationError


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """
    Normalize an instant to UTC-naive.

    Timezone-aware backends hand back aware datetimes; SQLite hands back
    naive ones that are already UTC.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    return to_naive_utc(datetime.fromisoformat(s))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


# =============================================================================
# STORE CIVIL TIME <-> INSTANTS
# =============================================================================

def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown time zone: {name}")


def _offset_at(instant: datetime, zone: ZoneInfo) -> timedelta:
    """UTC offset of `zone` at a UTC-naive instant."""
    return instant.replace(tzinfo=timezone.utc).astimezone(zone).utcoffset()


def local_to_instant(day: date, time_of_day: time, zone: ZoneInfo) -> datetime:
    """
    Convert a store-local civil date + time to a UTC-naive instant.

    The offset depends on the instant we are solving for, so this runs a
    two-pass fixed point:
    1. read the civil value as if it were UTC (first guess)
    2. subtract the zone's offset at the guess -> refined instant
    3. subtract the zone's offset at the refined instant from the guess

    Two passes converge for real DST rules (at most one transition near
    any given day). Civil times inside a spring-forward gap land after the
    gap, repeated times in a fall-back overlap resolve to one of the two
    occurrences deterministically.
    """
    guess = datetime.combine(day, time_of_day.replace(second=0, microsecond=0))
    refined = guess - _offset_at(guess, zone)
    return guess - _offset_at(refined, zone)


def day_window(day: date, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """
    Instants spanning local midnight of `day` to local midnight of the next day.

    The end is exclusive. On DST transition days the span is 23h or 25h.
    """
    start = local_to_instant(day, time(0, 0), zone)
    end = local_to_instant(day + timedelta(days=1), time(0, 0), zone)
    return start, end


def local_weekday(day: date, zone: ZoneInfo) -> int:
    """
    Local weekday (0=Monday .. 6=Sunday) of `day`.

    Anchored at local noon so offset rounding near a transition can never
    push the instant into the adjacent calendar day.
    """
    noon = local_to_instant(day, time(12, 0), zone)
    return noon.replace(tzinfo=timezone.utc).astimezone(zone).weekday()


def instant_to_local(instant: datetime, zone: ZoneInfo) -> datetime:
    return to_naive_utc(instant).replace(tzinfo=timezone.utc).astimezone(zone)


def instant_to_local_hhmm(instant: datetime, zone: ZoneInfo) -> str:
    """Display-only "HH:MM" of an instant in the store's zone."""
    return instant_to_local(instant, zone).strftime("%H:%M")

import math
from datetime import datetime, timezone


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up (not to even)."""
    return math.floor(value + 0.5)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso_millis(value: datetime) -> str:
    """
    Format a datetime as `YYYY-MM-DDTHH:MM:SS.mmmZ`.

    This is the shape JavaScript's Date.toISOString produces, which keeps
    exported payloads readable by the web client.
    """
    value = ensure_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

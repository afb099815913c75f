"""General utility functions."""
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apollusia.core.constants import EVENT_DATE_FORMAT


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_timezone(dt: datetime, tz: ZoneInfo) -> datetime:
    """Convert datetime to specified timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def get_zone(name: Optional[str]) -> ZoneInfo:
    """Resolve an IANA time zone name, falling back to UTC."""
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def render_date(dt: datetime, time_zone: Optional[str] = None) -> str:
    """Format a timestamp for humans in the poll's time zone."""
    return to_timezone(dt, get_zone(time_zone)).strftime(EVENT_DATE_FORMAT)


def render_event(start: datetime, end: datetime, time_zone: Optional[str] = None) -> str:
    return f"{render_date(start, time_zone)} - {render_date(end, time_zone)}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

"""
Timezone utilities for the release service.
Provides consistent UTC datetime handling and the local calendar date that
anchors cache keys and date windows.
"""
from datetime import date, datetime, timezone, tzinfo
from typing import Optional


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.
    Replacement for deprecated datetime.utcnow().
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is UTC and timezone-aware.
    If timezone-naive, assumes it's already UTC and adds UTC timezone.
    If timezone-aware, converts to UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def get_local_time(tz_name: str = "") -> datetime:
    """
    Get current time in the configured timezone.
    An empty name means the server's local time; an unknown name falls back to UTC.
    """
    if not tz_name:
        return datetime.now().astimezone()
    try:
        import zoneinfo
        return datetime.now(zoneinfo.ZoneInfo(tz_name))
    except (ImportError, Exception):
        return utc_now()


def local_today(tz_name: str = "") -> date:
    """Current calendar date (time-of-day stripped) in the configured timezone."""
    return get_local_time(tz_name).date()


def local_tzinfo(tz_name: str = "") -> tzinfo:
    """tzinfo of the configured timezone, with the same fallbacks as get_local_time."""
    return get_local_time(tz_name).tzinfo or timezone.utc


def format_iso_utc(dt: Optional[datetime]) -> str:
    """
    Format datetime as ISO string in UTC.
    Returns empty string if datetime is None.
    """
    if dt is None:
        return ""

    utc_dt = ensure_utc(dt)
    if utc_dt is None:
        return ""

    return utc_dt.isoformat()

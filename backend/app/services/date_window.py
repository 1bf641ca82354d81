"""
date_window.py
- Calendar window for "week" / "month" and the release date filter.
- The week window spans the previous, current and next Monday-based weeks.
- An empty filter result over non-empty input falls back to the unfiltered input.
"""
import calendar
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence, Tuple

from app.core.config import settings
from app.schemas import Release
from app.utils.timezone import local_tzinfo

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d %B %Y", "%B %d, %Y", "%b %d, %Y")


def parse_release_datetime(value: Any, tz_name: Optional[str] = None) -> Optional[datetime]:
    """Parse an upstream date string into an aware datetime, or None.

    Date-only values are taken as UTC midnight. Naive values with a time of
    day are read in the configured timezone (tz_name, else OTT_TIMEZONE).
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    parsed: Optional[datetime] = None
    has_time = False
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        has_time = len(text) > 10
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        if has_time:
            zone = local_tzinfo(settings.ott_timezone if tz_name is None else tz_name)
            return parsed.replace(tzinfo=zone)
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_release_date(value: Any) -> Optional[date]:
    """Calendar date of a release with time-of-day dropped."""
    parsed = parse_release_datetime(value)
    return parsed.date() if parsed else None


def compute_window(timeframe: str, today: date) -> Tuple[date, date]:
    """Inclusive (start, end) dates for the timeframe around today."""
    if timeframe == "month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)

    # 0=Sunday..6=Saturday; Sunday closes the week
    day_of_week = (today.weekday() + 1) % 7
    monday_offset = -6 if day_of_week == 0 else 1 - day_of_week
    monday = today + timedelta(days=monday_offset)
    return monday - timedelta(days=7), monday + timedelta(days=13)


def filter_by_date(releases: Sequence[Release], timeframe: str, today: date) -> List[Release]:
    start, end = compute_window(timeframe, today)

    filtered = []
    for release in releases:
        released_on = parse_release_date(release.release_date)
        if released_on is None:
            continue
        if start <= released_on <= end:
            filtered.append(release)

    if not filtered and releases:
        logger.info(f"[OTT_FILTER] No releases found for exact {timeframe} timeframe ({start}..{end}), showing available releases")
        return list(releases)

    return filtered

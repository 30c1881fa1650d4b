"""
Timezone helpers. Timestamps are stored as naive UTC; calendar days are
interpreted in the configured APP_TIMEZONE.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config.settings import settings


def get_zone(tz_name: str = None) -> ZoneInfo:
    name = tz_name or settings.app_timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {name}")


def to_utc_naive(value: datetime, tz_name: str = None) -> datetime:
    """
    Normalize a timestamp for storage.

    Aware values are converted to UTC; naive values are taken as wall-clock
    time in the configured zone.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=get_zone(tz_name))
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds_utc(day: date, tz_name: str = None) -> Tuple[datetime, datetime]:
    """
    Return [start, end) of a local calendar day as naive UTC datetimes.
    DST days are 23 or 25 hours long.
    """
    zone = get_zone(tz_name)
    start_local = datetime.combine(day, time.min, tzinfo=zone)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return (
        start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )


def parse_day(value: str) -> date:
    """Parse a YYYY-MM-DD query value."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")

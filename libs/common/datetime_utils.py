"""Datetime utilities for timezone-aware timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now
    )
"""

from datetime import date, datetime, time, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from libs.common.config import get_settings


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    This replaces the deprecated datetime.utcnow() which returns naive datetimes.
    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


@lru_cache
def club_timezone() -> ZoneInfo:
    """The local clock schedules are written in."""
    return ZoneInfo(get_settings().TIMEZONE)


def local_datetime(day: date, at: time) -> datetime:
    """Combine a stored schedule date and wall-clock time on the club clock."""
    return datetime.combine(day, at, tzinfo=club_timezone())

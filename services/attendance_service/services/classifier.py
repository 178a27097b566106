"""On-time / late classification of a check-in.

Pure functions with no database dependencies. Classification depends only
on the scheduled start and the check-in instant: no grace period, no
rounding. A check-in exactly at the start is on time.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from libs.common.datetime_utils import local_datetime
from services.attendance_service.models import CheckInStatus


def effective_start(day: date, start_time: time) -> datetime:
    """Scheduled start as an aware datetime on the club clock."""
    return local_datetime(day, start_time)


def classify_check_in(start: datetime, now: datetime) -> CheckInStatus:
    if now > start:
        return CheckInStatus.LATE
    return CheckInStatus.ON_TIME


def within_check_in_window(
    now: datetime,
    day: date,
    start_time: time,
    end_time: time,
    minutes_before: Optional[int],
    minutes_after: Optional[int],
) -> bool:
    """Whether ``now`` falls inside an activity's check-in window.

    A missing bound leaves that side open; no bounds at all means any time.
    """
    if minutes_before is not None:
        opens = local_datetime(day, start_time) - timedelta(minutes=minutes_before)
        if now < opens:
            return False
    if minutes_after is not None:
        closes = local_datetime(day, end_time) + timedelta(minutes=minutes_after)
        if now > closes:
            return False
    return True

"""
Standardized Date/Time Handling Utilities

CRITICAL RULES:
- Timestamps are stored as timezone-aware values (TIMESTAMPTZ)
- Calendar-day logic (streak days, leaderboard periods, the daily points
  cap) uses the application timezone, never the server's local time
- Never mix naive and aware datetimes
"""

import logging
from datetime import datetime, date, time
from typing import Callable
from zoneinfo import ZoneInfo

from progression.config import get_app_timezone

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def now_utc() -> datetime:
    """Current datetime in UTC (timezone-aware)"""
    return datetime.now(ZoneInfo("UTC"))


def now_local() -> datetime:
    """Current datetime in the application timezone"""
    return datetime.now(get_app_timezone())


def local_today(clock: Clock = now_local) -> date:
    """Today's calendar date in the application timezone"""
    return clock().date()


def start_of_day(dt: datetime) -> datetime:
    """Midnight of dt's calendar day, keeping its timezone"""
    return datetime.combine(dt.date(), time.min, tzinfo=dt.tzinfo)


def end_of_day(dt: datetime) -> datetime:
    """Last microsecond of dt's calendar day, keeping its timezone"""
    return datetime.combine(dt.date(), time.max, tzinfo=dt.tzinfo)


def days_between(earlier: date, later: date) -> int:
    """
    Whole calendar days from `earlier` to `later`

    Accepts datetimes too; time of day is ignored.
    """
    if isinstance(earlier, datetime):
        earlier = earlier.date()
    if isinstance(later, datetime):
        later = later.date()
    return (later - earlier).days


def is_weekend(dt: datetime) -> bool:
    """Saturday or Sunday"""
    return dt.weekday() >= 5

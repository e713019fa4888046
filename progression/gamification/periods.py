"""Leaderboard period boundaries"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Tuple

from progression.models.leaderboard import LeaderboardPeriod
from progression.utils.datetime_helpers import end_of_day, start_of_day

ALL_TIME_START = date(2024, 1, 1)
ALL_TIME_END = date(2099, 12, 31)


def period_bounds(period: LeaderboardPeriod, now: datetime) -> Tuple[datetime, datetime]:
    """
    Start and end (inclusive) of the bucket containing `now`

    Boundaries are calendar boundaries in `now`'s timezone:
    - DAILY: midnight to 23:59:59.999999
    - WEEKLY: Sunday to Saturday
    - MONTHLY: first to last day of the month
    - ALL_TIME: 2024-01-01 to 2099-12-31
    """
    tz = now.tzinfo

    if period == LeaderboardPeriod.DAILY:
        return start_of_day(now), end_of_day(now)

    if period == LeaderboardPeriod.WEEKLY:
        # weekday(): Monday=0 ... Sunday=6
        days_since_sunday = (now.weekday() + 1) % 7
        first = now.date() - timedelta(days=days_since_sunday)
        last = first + timedelta(days=6)
        return (
            datetime.combine(first, time.min, tzinfo=tz),
            datetime.combine(last, time.max, tzinfo=tz),
        )

    if period == LeaderboardPeriod.MONTHLY:
        days_in_month = calendar.monthrange(now.year, now.month)[1]
        return (
            datetime.combine(now.date().replace(day=1), time.min, tzinfo=tz),
            datetime.combine(now.date().replace(day=days_in_month), time.max, tzinfo=tz),
        )

    if period == LeaderboardPeriod.ALL_TIME:
        return (
            datetime.combine(ALL_TIME_START, time.min, tzinfo=tz),
            datetime.combine(ALL_TIME_END, time.max, tzinfo=tz),
        )

    raise ValueError(f"Unknown leaderboard period: {period}")

"""Unit tests for Datetime Helpers (progression/utils/datetime_helpers.py)"""
from datetime import datetime, date, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

from progression.utils.datetime_helpers import (
    now_utc,
    now_local,
    local_today,
    start_of_day,
    end_of_day,
    days_between,
    is_weekend,
)


# ============================================================================
# Current Time Tests
# ============================================================================

def test_now_utc_is_current():
    """Test that now_utc returns current time (within 1 second)"""
    before = datetime.now(timezone.utc)
    result = now_utc()
    after = datetime.now(timezone.utc)

    assert before <= result <= after
    assert result.utcoffset().total_seconds() == 0


def test_now_local_uses_app_timezone():
    with patch("progression.config.APP_TIMEZONE", "Asia/Kolkata"):
        result = now_local()

    assert result.tzinfo == ZoneInfo("Asia/Kolkata")


def test_local_today_follows_clock():
    clock = lambda: datetime(2025, 3, 12, 23, 59, tzinfo=ZoneInfo("UTC"))
    assert local_today(clock) == date(2025, 3, 12)


# ============================================================================
# Day Boundary Tests
# ============================================================================

def test_start_and_end_of_day_keep_timezone():
    tz = ZoneInfo("America/New_York")
    dt = datetime(2025, 3, 12, 15, 45, tzinfo=tz)

    start = start_of_day(dt)
    end = end_of_day(dt)

    assert start == datetime(2025, 3, 12, 0, 0, tzinfo=tz)
    assert end.date() == date(2025, 3, 12)
    assert end.microsecond == 999999
    assert start.tzinfo is tz


def test_days_between_dates():
    assert days_between(date(2025, 3, 10), date(2025, 3, 12)) == 2
    assert days_between(date(2025, 3, 12), date(2025, 3, 12)) == 0
    assert days_between(date(2025, 3, 12), date(2025, 3, 10)) == -2


def test_days_between_ignores_time_of_day():
    late = datetime(2025, 3, 11, 23, 59, tzinfo=ZoneInfo("UTC"))
    early = datetime(2025, 3, 12, 0, 1, tzinfo=ZoneInfo("UTC"))
    assert days_between(late, early) == 1


def test_days_between_across_year_end():
    assert days_between(date(2024, 12, 31), date(2025, 1, 1)) == 1


def test_is_weekend():
    assert is_weekend(datetime(2025, 3, 15)) is True   # Saturday
    assert is_weekend(datetime(2025, 3, 16)) is True   # Sunday
    assert is_weekend(datetime(2025, 3, 17)) is False  # Monday

"""Unit tests for Streak System (progression/gamification/streak_system.py)"""
import pytest
from datetime import date, timedelta

from progression.gamification.points_ledger import PointsLedger
from progression.gamification.streak_system import StreakTracker
from progression.models.settings import GameSettings
from progression.models.streak import StreakType


@pytest.fixture
def tracker(fake_db, game_settings, clock, fake_queries):
    ledger = PointsLedger(fake_db, game_settings, clock)
    return StreakTracker(fake_db, game_settings, ledger, clock)


def seed_streak(fake_queries, user_id, streak_type, current, longest, last_date):
    fake_queries.streaks[(user_id, streak_type.value)] = {
        "user_id": user_id,
        "streak_type": streak_type.value,
        "current_count": current,
        "longest_count": longest,
        "last_active_date": last_date,
    }


# ============================================================================
# Streak Update Tests
# ============================================================================

@pytest.mark.asyncio
async def test_first_activity_starts_streak(tracker, fake_queries, test_user, fixed_now):
    """First activity creates streak of 1"""
    result = await tracker.update_streak(test_user, StreakType.TASK_COMPLETION)

    assert result.updated is True
    assert result.current_count == 1
    assert result.longest_count == 1
    assert fake_queries.streaks[(test_user, "TASK_COMPLETION")]["last_active_date"] == fixed_now.date()


@pytest.mark.asyncio
async def test_consecutive_day_continues(tracker, fake_queries, test_user, fixed_now):
    """Activity the day after the last one adds 1"""
    seed_streak(fake_queries, test_user, StreakType.TASK_COMPLETION, 5, 10, fixed_now.date() - timedelta(days=1))

    result = await tracker.update_streak(test_user, StreakType.TASK_COMPLETION)

    assert result.current_count == 6
    assert result.longest_count == 10  # Unchanged
    assert result.bonus_points == 0


@pytest.mark.asyncio
async def test_same_day_is_idempotent(tracker, fake_queries, test_user):
    """Repeated activity on the same day changes nothing"""
    first = await tracker.update_streak(test_user, StreakType.POMODORO_SESSION)
    second = await tracker.update_streak(test_user, StreakType.POMODORO_SESSION)

    assert first.updated is True
    assert second.updated is False
    assert second.current_count == 1
    assert fake_queries.transactions_for(test_user) == []


@pytest.mark.asyncio
async def test_gap_resets_streak(tracker, fake_queries, test_user, fixed_now):
    """Missing a day resets to 1 but keeps the longest streak"""
    seed_streak(fake_queries, test_user, StreakType.DSA_PRACTICE, 3, 3, fixed_now.date() - timedelta(days=3))

    result = await tracker.update_streak(test_user, StreakType.DSA_PRACTICE)

    assert result.current_count == 1
    assert result.longest_count == 3


@pytest.mark.asyncio
async def test_earlier_date_is_ignored(tracker, fake_queries, test_user, fixed_now):
    """A date before the last recorded one leaves the streak alone"""
    seed_streak(fake_queries, test_user, StreakType.TASK_COMPLETION, 4, 4, fixed_now.date())

    result = await tracker.update_streak(
        test_user, StreakType.TASK_COMPLETION, today=fixed_now.date() - timedelta(days=2)
    )

    assert result.updated is False
    assert fake_queries.streaks[(test_user, "TASK_COMPLETION")]["current_count"] == 4


@pytest.mark.asyncio
async def test_streak_types_are_independent(tracker, fake_queries, test_user, fixed_now):
    seed_streak(fake_queries, test_user, StreakType.TASK_COMPLETION, 9, 9, fixed_now.date() - timedelta(days=1))

    result = await tracker.update_streak(test_user, StreakType.POMODORO_SESSION)

    assert result.current_count == 1
    assert fake_queries.streaks[(test_user, "TASK_COMPLETION")]["current_count"] == 9


# ============================================================================
# Bonus Tests
# ============================================================================

@pytest.mark.asyncio
async def test_seventh_day_pays_bonus(tracker, fake_queries, test_user, fixed_now):
    """Day 7 of a streak pays 50 STREAK_BONUS points"""
    seed_streak(fake_queries, test_user, StreakType.TASK_COMPLETION, 6, 6, fixed_now.date() - timedelta(days=1))

    result = await tracker.update_streak(test_user, StreakType.TASK_COMPLETION)

    assert result.current_count == 7
    assert result.bonus_points == 50
    [bonus] = fake_queries.transactions_for(test_user)
    assert bonus["type"] == "STREAK_BONUS"
    assert bonus["description"] == "7-day task completion streak bonus"
    assert fake_queries.users[test_user]["points"] == 50


@pytest.mark.asyncio
async def test_fourteenth_day_pays_double(tracker, fake_queries, test_user, fixed_now):
    seed_streak(fake_queries, test_user, StreakType.TASK_COMPLETION, 13, 13, fixed_now.date() - timedelta(days=1))

    result = await tracker.update_streak(test_user, StreakType.TASK_COMPLETION)

    assert result.bonus_points == 100


def test_bonus_schedule(game_settings):
    tracker = StreakTracker(None, game_settings, None)
    assert [tracker.bonus_for(n) for n in (1, 6, 7, 8, 14, 21)] == [0, 0, 50, 0, 100, 150]


def test_bonus_disabled_with_non_positive_threshold():
    tracker = StreakTracker(None, GameSettings(streak_bonus_threshold=0), None)
    assert tracker.bonus_for(7) == 0


# ============================================================================
# Daily Login Mirror
# ============================================================================

@pytest.mark.asyncio
async def test_daily_login_is_mirrored_on_user(tracker, fake_queries, test_user, fixed_now):
    """The DAILY_LOGIN streak is copied to current_streak/longest_streak"""
    seed_streak(fake_queries, test_user, StreakType.DAILY_LOGIN, 2, 2, fixed_now.date() - timedelta(days=1))

    await tracker.update_streak(test_user, StreakType.DAILY_LOGIN)

    user = fake_queries.users[test_user]
    assert user["current_streak"] == 3
    assert user["longest_streak"] == 3
    assert user["last_activity_date"] == fixed_now.date()


@pytest.mark.asyncio
async def test_other_streaks_are_not_mirrored(tracker, fake_queries, test_user):
    await tracker.update_streak(test_user, StreakType.TASK_COMPLETION)

    assert fake_queries.users[test_user]["current_streak"] == 0


@pytest.mark.asyncio
async def test_get_user_streaks(tracker, fake_queries, test_user):
    await tracker.update_streak(test_user, StreakType.TASK_COMPLETION)
    await tracker.update_streak(test_user, StreakType.DAILY_LOGIN, today=date(2025, 3, 11))
    await tracker.update_streak(test_user, StreakType.DAILY_LOGIN, today=date(2025, 3, 12))

    streaks = await tracker.get_user_streaks(test_user)

    assert [s.streak_type for s in streaks] == [StreakType.DAILY_LOGIN, StreakType.TASK_COMPLETION]
    assert streaks[0].current_count == 2


@pytest.mark.asyncio
async def test_unknown_user(tracker, fake_queries):
    assert await tracker.update_streak("ghost", StreakType.DAILY_LOGIN) is None

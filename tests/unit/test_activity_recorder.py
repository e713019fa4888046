"""Unit tests for ActivityRecorder (progression/services/activity_recorder.py)"""
import pytest
import psycopg
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

from progression.exceptions import QueryError, ValidationError
from progression.gamification.achievement_catalog import default_challenges
from progression.models.achievement import (
    Achievement,
    AchievementCategory,
    AchievementMetric,
    AchievementType,
)
from progression.models.activity import DSADifficulty


# ============================================================================
# Task Completion
# ============================================================================

@pytest.mark.asyncio
async def test_first_task_completion(services, fake_queries, test_user, fixed_now):
    """A brand new user completing a task: 20 points, 15 XP, both streaks at 1"""
    result = await services.recorder.record_task_completion(test_user, "task-1", "Write docs")

    assert result.points_awarded == 20
    assert result.leveled_up is False
    assert result.unlocked_achievement_ids == []
    assert result.user.points == 20
    assert result.user.experience == 15
    assert result.user.level == 1
    assert result.user.total_tasks_completed == 1
    assert result.user.current_streak == 1
    assert result.user.last_activity_date == fixed_now.date()

    [transaction] = fake_queries.transactions_for(test_user)
    assert transaction["type"] == "TASK_COMPLETED"
    assert transaction["related_id"] == "task-1"
    assert fake_queries.streaks[(test_user, "TASK_COMPLETION")]["current_count"] == 1
    assert fake_queries.streaks[(test_user, "DAILY_LOGIN")]["current_count"] == 1


@pytest.mark.asyncio
async def test_background_work_updates_leaderboards(services, fake_queries, test_user):
    """After draining, TOTAL_POINTS and TASK_COMPLETION leaderboards are updated"""
    await services.recorder.record_task_completion(test_user, "task-1", "Write docs")
    await services.dispatcher.drain()

    scores = {
        (key[1], key[2]): entry["score"]
        for key, entry in fake_queries.leaderboard_entries.items()
    }
    assert scores[("TOTAL_POINTS", "ALL_TIME")] == 20
    assert scores[("TASK_COMPLETION", "WEEKLY")] == 1
    assert services.dispatcher.pending == 0


@pytest.mark.asyncio
async def test_unlocked_achievements_are_returned(services, fake_queries, test_user):
    first_steps = fake_queries.add_achievement(Achievement(
        name="First Steps",
        description="Complete your first task",
        category=AchievementCategory.PRODUCTIVITY,
        type=AchievementType.MILESTONE,
        metric=AchievementMetric.TASKS_COMPLETED,
        requirement=1,
        points_reward=10,
        badge_id="first-steps",
    ))

    result = await services.recorder.record_task_completion(test_user, "task-1", "Write docs")

    assert result.unlocked_achievement_ids == [first_steps]
    assert result.user.points == 30
    assert "first-steps" in result.user.profile_badges


@pytest.mark.asyncio
async def test_repeated_same_day_activity(services, fake_queries, test_user):
    """Two tasks on one day: points twice, streaks counted once"""
    await services.recorder.record_task_completion(test_user, "task-1", "One")
    result = await services.recorder.record_task_completion(test_user, "task-2", "Two")

    assert result.user.points == 40
    assert result.user.total_tasks_completed == 2
    assert result.user.current_streak == 1


@pytest.mark.asyncio
async def test_next_day_continues_login_streak(services, clock, fake_queries, test_user):
    await services.recorder.record_task_completion(test_user, "task-1", "One")
    clock.now = clock.now + timedelta(days=1)
    result = await services.recorder.record_pomodoro_completion(test_user, 25)

    assert result.user.current_streak == 2
    assert fake_queries.streaks[(test_user, "POMODORO_SESSION")]["current_count"] == 1


# ============================================================================
# Pomodoro & DSA
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize("duration,expected", [(25, 25), (59, 25), (60, 27), (90, 27), (120, 29)])
async def test_pomodoro_points(services, fake_queries, test_user, duration, expected):
    result = await services.recorder.record_pomodoro_completion(test_user, duration, workspace_id="ws-1")

    assert result.points_awarded == expected
    assert result.user.experience == 20
    assert result.user.total_pomodoro_completed == 1
    assert fake_queries.transactions_for(test_user)[0]["related_id"] == "ws-1"


@pytest.mark.asyncio
@pytest.mark.parametrize("duration", [0, -25, None])
async def test_pomodoro_rejects_non_positive_duration(services, fake_queries, test_user, duration):
    with pytest.raises(ValidationError) as exc_info:
        await services.recorder.record_pomodoro_completion(test_user, duration)

    assert exc_info.value.field == "duration_minutes"
    assert fake_queries.users[test_user]["total_pomodoro_completed"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("difficulty,expected", [
    ("EASY", 30),
    ("medium", 50),
    (DSADifficulty.HARD, 80),
])
async def test_dsa_points(services, fake_queries, test_user, difficulty, expected):
    result = await services.recorder.record_dsa_question_completion(test_user, "q-1", "Two Sum", difficulty)

    assert result.points_awarded == expected
    assert result.user.experience == 0
    assert result.user.total_dsa_completed == 1
    [transaction] = fake_queries.transactions_for(test_user)
    assert transaction["type"] == "DSA_QUESTION_COMPLETED"
    assert transaction["related_id"] == "q-1"


@pytest.mark.asyncio
async def test_dsa_rejects_unknown_difficulty(services, fake_queries, test_user):
    with pytest.raises(ValidationError) as exc_info:
        await services.recorder.record_dsa_question_completion(test_user, "q-1", "Two Sum", "EXTREME")

    assert exc_info.value.field == "difficulty"
    assert fake_queries.point_transactions == []


# ============================================================================
# Failure Handling
# ============================================================================

@pytest.mark.asyncio
async def test_unknown_user_returns_none(services, fake_queries):
    assert await services.recorder.record_task_completion("ghost", "task-1", "Nope") is None
    assert services.dispatcher.pending == 0


@pytest.mark.asyncio
async def test_database_error_is_wrapped(services, fake_queries, test_user):
    with patch.object(fake_queries, "insert_point_transaction", AsyncMock(side_effect=psycopg.OperationalError("connection lost"))):
        with pytest.raises(QueryError) as exc_info:
            await services.recorder.record_task_completion(test_user, "task-1", "Write docs")

    assert exc_info.value.operation == "record_task"
    assert exc_info.value.user_id == test_user


@pytest.mark.asyncio
async def test_achievement_failure_does_not_fail_activity(services, fake_queries, test_user):
    with patch.object(services.achievements, "check_achievements", AsyncMock(side_effect=RuntimeError("boom"))):
        result = await services.recorder.record_task_completion(test_user, "task-1", "Write docs")

    assert result.points_awarded == 20
    assert result.unlocked_achievement_ids == []


@pytest.mark.asyncio
async def test_background_failure_does_not_fail_activity(services, fake_queries, test_user):
    with patch.object(services.leaderboards, "update_leaderboard", AsyncMock(side_effect=RuntimeError("boom"))):
        result = await services.recorder.record_task_completion(test_user, "task-1", "Write docs")
        await services.dispatcher.drain()

    assert result.user.points == 20
    assert fake_queries.users[test_user]["points"] == 20
    assert fake_queries.leaderboard_entries == {}


# ============================================================================
# Special & Challenge Progress
# ============================================================================

@pytest.mark.asyncio
async def test_late_night_task_unlocks_night_owl(services, clock, fake_queries, test_user):
    clock.now = datetime(2025, 3, 12, 23, 15, tzinfo=ZoneInfo("UTC"))
    owl_id = fake_queries.add_achievement(Achievement(
        name="Night Owl",
        description="Complete a task after 10 PM",
        category=AchievementCategory.SPECIAL,
        type=AchievementType.RARE_EVENT,
        metric=AchievementMetric.NIGHT_OWL,
        requirement=1,
        points_reward=75,
    ))

    await services.recorder.record_task_completion(test_user, "task-1", "Late work")
    await services.dispatcher.drain()

    assert fake_queries.user_achievements[(test_user, owl_id)]["is_completed"] is True


@pytest.mark.asyncio
async def test_activity_advances_started_challenges(services, fake_queries, test_user):
    ids = {c.name: fake_queries.add_challenge(c) for c in default_challenges(services.clock())}
    await services.challenges.start_challenge(test_user, ids["Daily Grind"])
    await services.challenges.start_challenge(test_user, ids["Consistency Master"])

    for i in range(3):
        await services.recorder.record_task_completion(test_user, f"task-{i}", "Work")
        await services.dispatcher.drain()

    assert fake_queries.user_challenges[(test_user, ids["Daily Grind"])]["is_completed"] is True
    assert fake_queries.user_challenges[(test_user, ids["Consistency Master"])]["progress"] == 1

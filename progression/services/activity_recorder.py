"""
ActivityRecorder - Progression entry point for collaborator events

Each recorded activity runs in three stages:

1. Critical path, one database transaction: domain counter and
   last_activity_date, points, experience, the activity's streak and the
   DAILY_LOGIN streak. Any failure rolls the whole activity back and is
   raised to the caller, so a retry can't double-count.
2. Achievement check, awaited after commit so unlocked ids can be returned.
   Failures are logged and swallowed.
3. Background work: special (time-of-day/weekend) achievements,
   leaderboards and challenge progress. Never awaited by the caller.

Reward schedule:
- Task completed: 20 points, 15 XP
- Pomodoro session: 25 + 2 per full hour of duration points, 20 XP
- DSA question: 30 / 50 / 80 points for EASY / MEDIUM / HARD, no XP
"""

import logging
import time
from typing import Optional, Union

import psycopg

from progression.db import queries
from progression.db.connection import Database
from progression.exceptions import ValidationError, wrap_database_exception
from progression.gamification.achievement_system import AchievementEngine
from progression.gamification.challenges import ChallengeService
from progression.gamification.leaderboard_system import LeaderboardService
from progression.gamification.points_ledger import PointsLedger
from progression.gamification.streak_system import StreakTracker
from progression.gamification.xp_system import ExperienceService
from progression.models.achievement import SpecialContext
from progression.models.activity import ActivityResult, DSADifficulty
from progression.models.challenge import ChallengeCategory
from progression.models.leaderboard import LeaderboardType
from progression.models.points import PointType
from progression.models.streak import StreakType
from progression.models.user import UserProgress
from progression.observability.metrics import (
    activities_recorded_total,
    activity_record_duration_seconds,
)
from progression.services.background import BackgroundDispatcher
from progression.utils.datetime_helpers import Clock, is_weekend, now_local

logger = logging.getLogger(__name__)

TASK_POINTS = 20
TASK_EXPERIENCE = 15

POMODORO_BASE_POINTS = 25
POMODORO_POINTS_PER_HOUR = 2
POMODORO_EXPERIENCE = 20

DSA_POINTS = {
    DSADifficulty.EASY: 30,
    DSADifficulty.MEDIUM: 50,
    DSADifficulty.HARD: 80,
}


class ActivityRecorder:
    """
    Orchestrates the progression components for one recorded activity.

    Responsibilities:
    - Validate the activity and pick its rewards
    - Run the critical path in a single transaction
    - Check achievements after commit
    - Dispatch best-effort leaderboard, special achievement and challenge work
    """

    def __init__(
        self,
        db: Database,
        ledger: PointsLedger,
        experience: ExperienceService,
        streaks: StreakTracker,
        achievements: AchievementEngine,
        leaderboards: LeaderboardService,
        challenges: ChallengeService,
        dispatcher: BackgroundDispatcher,
        clock: Clock = now_local
    ):
        self.db = db
        self.ledger = ledger
        self.experience = experience
        self.streaks = streaks
        self.achievements = achievements
        self.leaderboards = leaderboards
        self.challenges = challenges
        self.dispatcher = dispatcher
        self.clock = clock
        logger.debug("ActivityRecorder initialized")

    async def record_task_completion(
        self,
        user_id: str,
        task_id: str,
        task_title: str
    ) -> Optional[ActivityResult]:
        """
        Record a completed task

        Returns:
            ActivityResult, or None if the user doesn't exist
        """
        return await self._record(
            activity="task",
            user_id=user_id,
            counter="total_tasks_completed",
            points=TASK_POINTS,
            point_type=PointType.TASK_COMPLETED,
            description=f"Completed task: {task_title}",
            related_id=task_id,
            experience=TASK_EXPERIENCE,
            streak_type=StreakType.TASK_COMPLETION,
            leaderboard_type=LeaderboardType.TASK_COMPLETION,
            challenge_category=ChallengeCategory.TASK_COMPLETION,
        )

    async def record_pomodoro_completion(
        self,
        user_id: str,
        duration_minutes: int,
        workspace_id: Optional[str] = None
    ) -> Optional[ActivityResult]:
        """
        Record a finished Pomodoro session

        Raises:
            ValidationError: duration_minutes is not positive
        """
        if duration_minutes is None or duration_minutes <= 0:
            raise ValidationError(
                "Pomodoro duration must be a positive number of minutes",
                field="duration_minutes",
                value=duration_minutes,
                user_id=user_id,
                operation="record_pomodoro_completion",
            )

        points = POMODORO_BASE_POINTS + (duration_minutes // 60) * POMODORO_POINTS_PER_HOUR

        return await self._record(
            activity="pomodoro",
            user_id=user_id,
            counter="total_pomodoro_completed",
            points=points,
            point_type=PointType.POMODORO_COMPLETED,
            description=f"Completed {duration_minutes}-minute Pomodoro session",
            related_id=workspace_id,
            experience=POMODORO_EXPERIENCE,
            streak_type=StreakType.POMODORO_SESSION,
            leaderboard_type=LeaderboardType.POMODORO_SESSIONS,
            challenge_category=ChallengeCategory.POMODORO_FOCUS,
        )

    async def record_dsa_question_completion(
        self,
        user_id: str,
        question_id: str,
        question_title: str,
        difficulty: Union[DSADifficulty, str]
    ) -> Optional[ActivityResult]:
        """
        Record a solved coding-practice question

        Raises:
            ValidationError: difficulty is not EASY, MEDIUM or HARD
        """
        if isinstance(difficulty, DSADifficulty):
            level = difficulty
        else:
            try:
                level = DSADifficulty(str(difficulty).upper())
            except ValueError:
                level = None

        if level is None:
            raise ValidationError(
                "Difficulty must be one of EASY, MEDIUM, HARD",
                field="difficulty",
                value=difficulty,
                user_id=user_id,
                operation="record_dsa_question_completion",
            )

        return await self._record(
            activity="dsa",
            user_id=user_id,
            counter="total_dsa_completed",
            points=DSA_POINTS[level],
            point_type=PointType.DSA_QUESTION_COMPLETED,
            description=f"Solved {level.value.lower()} DSA question: {question_title}",
            related_id=question_id,
            experience=0,
            streak_type=StreakType.DSA_PRACTICE,
            leaderboard_type=LeaderboardType.DSA_QUESTIONS,
            challenge_category=ChallengeCategory.DSA_PRACTICE,
        )

    async def _record(
        self,
        activity: str,
        user_id: str,
        counter: str,
        points: int,
        point_type: PointType,
        description: str,
        related_id: Optional[str],
        experience: int,
        streak_type: StreakType,
        leaderboard_type: LeaderboardType,
        challenge_category: ChallengeCategory
    ) -> Optional[ActivityResult]:
        start_time = time.time()
        now = self.clock()
        today = now.date()

        try:
            async with self.db.transaction() as conn:
                user = await queries.increment_activity_counter(conn, user_id, counter, today)
                if user is None:
                    logger.warning(f"Cannot record {activity}: user {user_id} not found")
                    return None

                transaction = await self.ledger.award(
                    user_id, points, point_type, description, related_id=related_id, conn=conn
                )
                points_awarded = transaction.points if transaction else 0

                leveled_up = False
                if experience > 0:
                    leveled_up = await self.experience.award_experience(
                        user_id, experience, description, conn=conn
                    )

                await self.streaks.update_streak(user_id, streak_type, conn=conn, today=today)
                login_streak = await self.streaks.update_streak(
                    user_id, StreakType.DAILY_LOGIN, conn=conn, today=today
                )

                user = await queries.get_user(conn, user_id)

        except psycopg.Error as e:
            raise wrap_database_exception(
                e,
                operation=f"record_{activity}",
                user_id=user_id,
                context={"point_type": point_type.value, "related_id": related_id}
            )

        activities_recorded_total.labels(activity=activity).inc()
        activity_record_duration_seconds.labels(activity=activity).observe(time.time() - start_time)
        logger.info(
            f"Recorded {activity} for user {user_id}: {points_awarded} points, "
            f"{experience} XP{' (level up)' if leveled_up else ''}"
        )

        unlocked = []
        try:
            unlocked = await self.achievements.check_achievements(user_id)
            if unlocked:
                async with self.db.connection() as conn:
                    user = await queries.get_user(conn, user_id) or user
        except Exception as e:
            logger.error(f"Achievement check failed for user {user_id}: {e}", exc_info=True)

        self._dispatch_background(
            user_id,
            now,
            point_type,
            points_awarded,
            leaderboard_type,
            challenge_category,
            login_streak.current_count if login_streak else 0,
        )

        return ActivityResult(
            user=UserProgress.model_validate(user),
            points_awarded=points_awarded,
            leveled_up=leveled_up,
            unlocked_achievement_ids=unlocked,
        )

    def _dispatch_background(
        self,
        user_id: str,
        now,
        point_type: PointType,
        points_awarded: int,
        leaderboard_type: LeaderboardType,
        challenge_category: ChallengeCategory,
        login_streak: int
    ) -> None:
        context = SpecialContext(action=point_type.value, timestamp=now, is_weekend=is_weekend(now))
        self.dispatcher.submit(
            f"special_achievements:{user_id}",
            self.achievements.check_special_achievements(user_id, context),
        )

        if points_awarded > 0:
            self.dispatcher.submit(
                f"leaderboard:{user_id}",
                self.leaderboards.update_leaderboard(user_id, LeaderboardType.TOTAL_POINTS, points_awarded, now=now),
            )
        self.dispatcher.submit(
            f"leaderboard:{user_id}",
            self.leaderboards.update_leaderboard(user_id, leaderboard_type, 1, now=now),
        )

        self.dispatcher.submit(
            f"challenges:{user_id}",
            self.challenges.record_progress(user_id, challenge_category),
        )
        self.dispatcher.submit(
            f"challenges:{user_id}",
            self.challenges.record_progress(user_id, ChallengeCategory.CONSISTENCY, value=login_streak),
        )

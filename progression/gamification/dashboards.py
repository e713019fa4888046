"""
Stats Dashboard

Read model combining a user's progression fields, streaks, unlocked
achievements and all-time ranks.
"""

import logging
from typing import Optional

from progression.db import queries
from progression.db.connection import Database
from progression.gamification.leaderboard_system import LeaderboardService
from progression.gamification.level_calculator import LevelCalculator
from progression.models.activity import CompletedAchievement, UserStats
from progression.models.streak import UserStreak

logger = logging.getLogger(__name__)


class StatsService:
    def __init__(self, db: Database, calculator: LevelCalculator, leaderboards: LeaderboardService):
        self.db = db
        self.calculator = calculator
        self.leaderboards = leaderboards

    async def get_user_stats(self, user_id: str) -> Optional[UserStats]:
        """Everything the dashboard shows for one user, or None if unknown"""
        async with self.db.connection() as conn:
            user = await queries.get_user(conn, user_id)
            if user is None:
                return None
            streaks = await queries.get_user_streaks(conn, user_id)
            achievements = await queries.get_completed_user_achievements(conn, user_id)

        ranks = await self.leaderboards.get_user_ranks(user_id)

        level = user["level"]
        return UserStats(
            user_id=user_id,
            username=user["username"],
            level=level,
            experience=user["experience"],
            points=user["points"],
            current_streak=user["current_streak"],
            longest_streak=user["longest_streak"],
            progress_to_next_level=self.calculator.progress_to_next_level(user["experience"], level),
            current_level_xp=self.calculator.experience_for_level(level),
            next_level_xp=self.calculator.experience_for_level(level + 1),
            profile_badges=user["profile_badges"] or [],
            streaks=[UserStreak.model_validate(s) for s in streaks],
            completed_achievements=[CompletedAchievement.model_validate(a) for a in achievements],
            all_time_ranks=ranks,
        )

"""
Achievement System

Evaluates the achievement catalog against a user's aggregates and unlocks
achievements exactly once.

Each achievement names the metric it is measured against:
- User counters (tasks, Pomodoros, DSA questions, streaks, level)
- Counts owned by other features (notes, workspace memberships, chat messages)
- Event-driven progress stored on the user's achievement row (Early Bird,
  Night Owl, Weekend Warrior), advanced only by special-event checks

Unlocking:
- The (user_id, achievement_id) upsert decides the single winner
- Only the winner pays points_reward (ACHIEVEMENT_UNLOCKED) and adds the badge
- Completion is one-way
"""

from typing import Dict, List, Optional
import logging

import psycopg

from progression.db import queries
from progression.db.connection import Database
from progression.gamification.points_ledger import PointsLedger
from progression.models.achievement import (
    Achievement,
    AchievementMetric,
    EVENT_METRICS,
    SpecialContext,
)
from progression.models.points import PointType
from progression.observability.metrics import achievements_unlocked_total

logger = logging.getLogger(__name__)

# Metric -> column on the user row
USER_FIELD_METRICS = {
    AchievementMetric.TASKS_COMPLETED: "total_tasks_completed",
    AchievementMetric.POMODOROS_COMPLETED: "total_pomodoro_completed",
    AchievementMetric.DSA_SOLVED: "total_dsa_completed",
    AchievementMetric.CURRENT_STREAK: "current_streak",
    AchievementMetric.LONGEST_STREAK: "longest_streak",
    AchievementMetric.LEVEL: "level",
}

# Metric -> count query in progression.db.queries
COUNT_QUERY_METRICS = {
    AchievementMetric.NOTES_CREATED: "count_notes",
    AchievementMetric.WORKSPACES_JOINED: "count_workspace_memberships",
    AchievementMetric.CHAT_MESSAGES: "count_chat_messages",
}

EARLY_BIRD_BEFORE_HOUR = 6
NIGHT_OWL_FROM_HOUR = 22


class AchievementEngine:
    """Achievement evaluation and unlocking"""

    def __init__(self, db: Database, ledger: PointsLedger):
        self.db = db
        self.ledger = ledger

    async def _metric_values(
        self,
        conn: psycopg.AsyncConnection,
        user: Dict,
        metrics: set
    ) -> Dict[AchievementMetric, int]:
        """Current value of every non-event metric in `metrics`"""
        values = {}
        for metric in metrics:
            if metric in USER_FIELD_METRICS:
                values[metric] = user[USER_FIELD_METRICS[metric]] or 0
            elif metric in COUNT_QUERY_METRICS:
                count_query = getattr(queries, COUNT_QUERY_METRICS[metric])
                values[metric] = await count_query(conn, user["id"])
        return values

    async def check_achievements(self, user_id: str) -> List[str]:
        """
        Evaluate every uncompleted achievement for a user

        Event-driven achievements are skipped here; see
        check_special_achievements.

        Returns:
            Ids of achievements unlocked by this call
        """
        async with self.db.connection() as conn:
            user = await queries.get_user(conn, user_id)
            if user is None:
                logger.warning(f"Cannot check achievements: user {user_id} not found")
                return []

            catalog = [Achievement.model_validate(row) for row in await queries.get_all_achievements(conn)]
            completed = {
                row["achievement_id"]
                for row in await queries.get_user_achievement_rows(conn, user_id)
                if row["is_completed"]
            }

            pending = [
                a for a in catalog
                if a.id not in completed and a.metric not in EVENT_METRICS
            ]
            if not pending:
                return []

            values = await self._metric_values(conn, user, {a.metric for a in pending})

        unlocked = []
        for achievement in pending:
            progress = values.get(achievement.metric, 0)

            if progress >= achievement.requirement:
                if await self.unlock_achievement(user_id, achievement.id):
                    unlocked.append(achievement.id)
            elif progress > 0:
                async with self.db.transaction() as conn:
                    await queries.upsert_achievement_progress(conn, user_id, achievement.id, progress)

        if unlocked:
            logger.info(f"User {user_id} unlocked {len(unlocked)} achievement(s): {unlocked}")

        return unlocked

    async def unlock_achievement(
        self,
        user_id: str,
        achievement_id: str,
        conn: Optional[psycopg.AsyncConnection] = None
    ) -> bool:
        """
        Complete an achievement and pay its rewards

        Safe to call concurrently: only one caller sees the transition and
        pays the reward.

        Returns:
            True if this call unlocked it; False if it was already unlocked
            or the user/achievement doesn't exist
        """
        async with self.db.transaction(conn) as tx:
            user = await queries.lock_user(tx, user_id)
            if user is None:
                logger.warning(f"Cannot unlock achievement: user {user_id} not found")
                return False

            row = await queries.get_achievement(tx, achievement_id)
            if row is None:
                logger.warning(f"Achievement {achievement_id} not found")
                return False
            achievement = Achievement.model_validate(row)

            won = await queries.mark_achievement_completed(
                tx, user_id, achievement_id, achievement.requirement
            )
            if not won:
                return False

            if achievement.points_reward:
                await self.ledger.award(
                    user_id,
                    achievement.points_reward,
                    PointType.ACHIEVEMENT_UNLOCKED,
                    f"Achievement unlocked: {achievement.name}",
                    related_id=achievement_id,
                    conn=tx,
                )

            if achievement.badge_id:
                await queries.add_profile_badge(tx, user_id, achievement.badge_id)

        achievements_unlocked_total.labels(category=achievement.category.value).inc()
        logger.info(f"User {user_id} unlocked achievement: {achievement.name}")
        return True

    async def check_special_achievements(self, user_id: str, context: SpecialContext) -> List[str]:
        """
        Evaluate time-of-day and weekend achievements for one event

        Only task completions qualify:
        - before 06:00 unlocks Early Bird achievements
        - from 22:00 unlocks Night Owl achievements
        - on a weekend, adds one to Weekend Warrior progress

        Returns:
            Ids of achievements unlocked by this call
        """
        if context.action != PointType.TASK_COMPLETED.value:
            return []

        hour = context.timestamp.hour
        instant_metrics = []
        if hour < EARLY_BIRD_BEFORE_HOUR:
            instant_metrics.append(AchievementMetric.EARLY_BIRD)
        if hour >= NIGHT_OWL_FROM_HOUR:
            instant_metrics.append(AchievementMetric.NIGHT_OWL)

        unlocked = []

        for metric in instant_metrics:
            async with self.db.connection() as conn:
                rows = await queries.get_achievements_by_metric(conn, metric)
            for row in rows:
                if await self.unlock_achievement(user_id, row["id"]):
                    unlocked.append(row["id"])

        if context.is_weekend:
            async with self.db.connection() as conn:
                rows = await queries.get_achievements_by_metric(conn, AchievementMetric.WEEKEND_TASKS)
            for row in rows:
                async with self.db.transaction() as tx:
                    if await queries.lock_user(tx, user_id) is None:
                        return unlocked
                    progress = await queries.increment_achievement_progress(tx, user_id, row["id"])
                    if progress is not None and progress >= row["requirement"]:
                        if await self.unlock_achievement(user_id, row["id"], conn=tx):
                            unlocked.append(row["id"])

        return unlocked

    async def get_user_achievements(self, user_id: str, include_locked: bool = False) -> Optional[Dict[str, any]]:
        """
        Get user's achievements with progress

        Args:
            user_id: User id
            include_locked: Whether to include locked achievements with progress

        Returns:
            {
                'unlocked': [list of unlocked achievements],
                'locked': [list of locked achievements with progress] (if include_locked=True),
                'total_unlocked': int,
                'total_achievements': int,
                'total_points_from_achievements': int
            }
            or None if the user doesn't exist
        """
        async with self.db.connection() as conn:
            user = await queries.get_user(conn, user_id)
            if user is None:
                logger.warning(f"Cannot list achievements: user {user_id} not found")
                return None

            catalog = [Achievement.model_validate(row) for row in await queries.get_all_achievements(conn)]
            progress_rows = {
                row["achievement_id"]: row
                for row in await queries.get_user_achievement_rows(conn, user_id)
            }
            values = {}
            if include_locked:
                values = await self._metric_values(conn, user, {a.metric for a in catalog})

        unlocked = []
        locked = []
        total_points = 0

        for achievement in catalog:
            record = progress_rows.get(achievement.id)
            if record and record["is_completed"]:
                unlocked.append({
                    "id": achievement.id,
                    "name": achievement.name,
                    "description": achievement.description,
                    "category": achievement.category.value,
                    "rarity": achievement.rarity.value,
                    "badge_id": achievement.badge_id,
                    "icon_name": achievement.icon_name,
                    "icon_color": achievement.icon_color,
                    "points_reward": achievement.points_reward,
                    "unlocked_at": record["unlocked_at"],
                })
                total_points += achievement.points_reward
                continue

            if not include_locked:
                continue

            stored = record["progress"] if record else 0
            progress = stored if achievement.metric in EVENT_METRICS else max(
                stored, values.get(achievement.metric, 0)
            )
            progress = min(progress, achievement.requirement)

            if achievement.is_secret:
                locked.append({
                    "id": achievement.id,
                    "name": "???",
                    "description": "Secret achievement",
                    "category": achievement.category.value,
                    "rarity": achievement.rarity.value,
                    "is_secret": True,
                    "progress": progress,
                    "requirement": achievement.requirement,
                })
            else:
                locked.append({
                    "id": achievement.id,
                    "name": achievement.name,
                    "description": achievement.description,
                    "category": achievement.category.value,
                    "rarity": achievement.rarity.value,
                    "is_secret": False,
                    "icon_name": achievement.icon_name,
                    "icon_color": achievement.icon_color,
                    "points_reward": achievement.points_reward,
                    "progress": progress,
                    "requirement": achievement.requirement,
                })

        # Most recent first
        unlocked.sort(key=lambda a: a["unlocked_at"], reverse=True)

        result = {
            "unlocked": unlocked,
            "total_unlocked": len(unlocked),
            "total_achievements": len(catalog),
            "total_points_from_achievements": total_points,
        }
        if include_locked:
            result["locked"] = locked
        return result

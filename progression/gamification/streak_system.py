"""
Streak Tracking System

Tracks independent consecutive-day streaks per user and type:
- DAILY_LOGIN (any recorded activity; mirrored onto the user row)
- TASK_COMPLETION
- POMODORO_SESSION
- DSA_PRACTICE

Day arithmetic uses calendar dates in the application timezone.

Transitions (day diff = today - last active date):
- No previous activity: start at 1
- 0 days: already counted today, no change
- 1 day: continue, +1
- 2+ days: reset to 1
- negative (clock went backwards): no change

Every `streak_bonus_threshold`-th day of a streak pays
(count // threshold) * 50 STREAK_BONUS points.
"""

from datetime import date
import logging
from typing import List, Optional

import psycopg

from progression.db import queries
from progression.db.connection import Database
from progression.gamification.points_ledger import PointsLedger
from progression.models.points import PointType
from progression.models.settings import GameSettings
from progression.models.streak import StreakType, StreakUpdate, UserStreak
from progression.observability.metrics import streak_updates_total
from progression.utils.datetime_helpers import Clock, days_between, local_today, now_local

logger = logging.getLogger(__name__)

STREAK_BONUS_POINTS = 50


class StreakTracker:
    """Per-type daily streaks"""

    def __init__(
        self,
        db: Database,
        settings: GameSettings,
        ledger: PointsLedger,
        clock: Clock = now_local
    ):
        self.db = db
        self.settings = settings
        self.ledger = ledger
        self.clock = clock

    def bonus_for(self, count: int) -> int:
        """Bonus for reaching `count`; zero when bonuses are disabled"""
        threshold = self.settings.streak_bonus_threshold
        if threshold <= 0 or count <= 0 or count % threshold != 0:
            return 0
        return (count // threshold) * STREAK_BONUS_POINTS

    async def update_streak(
        self,
        user_id: str,
        streak_type: StreakType,
        conn: Optional[psycopg.AsyncConnection] = None,
        today: Optional[date] = None
    ) -> Optional[StreakUpdate]:
        """
        Update a streak when activity occurs

        Idempotent within a calendar day: repeated calls on the same day
        leave the streak unchanged and pay no bonus.

        Args:
            user_id: User who was active
            streak_type: Which streak to advance
            conn: Join this connection's transaction instead of opening one
            today: Local calendar date of the activity (defaults to the clock)

        Returns:
            StreakUpdate, or None if the user doesn't exist
        """
        if today is None:
            today = local_today(self.clock)

        async with self.db.transaction(conn) as tx:
            # User row first, then the streak row
            user = await queries.lock_user(tx, user_id)
            if user is None:
                logger.warning(f"Cannot update streak: user {user_id} not found")
                return None

            streak = await queries.lock_user_streak(tx, user_id, streak_type)
            current = streak["current_count"]
            longest = streak["longest_count"]
            last_date = streak["last_active_date"]

            if last_date is None:
                outcome = "started"
                current = 1
            else:
                gap_days = days_between(last_date, today)
                if gap_days == 1:
                    outcome = "continued"
                    current += 1
                elif gap_days >= 2:
                    outcome = "reset"
                    logger.info(
                        f"User {user_id} {streak_type.value} streak broken. "
                        f"Was {current}, gap was {gap_days} days"
                    )
                    current = 1
                else:
                    # Same day, or a date earlier than the last recorded one
                    outcome = "unchanged"

            streak_updates_total.labels(streak_type=streak_type.value, outcome=outcome).inc()

            if outcome == "unchanged":
                return StreakUpdate(
                    streak_type=streak_type,
                    updated=False,
                    current_count=current,
                    longest_count=longest,
                )

            longest = max(longest, current)
            await queries.save_user_streak(tx, user_id, streak_type, current, longest, today)

            if streak_type == StreakType.DAILY_LOGIN:
                await queries.update_user_streak_mirror(tx, user_id, current, longest, today)

            bonus = self.bonus_for(current) if outcome == "continued" else 0
            if bonus > 0:
                await self.ledger.award(
                    user_id,
                    bonus,
                    PointType.STREAK_BONUS,
                    f"{current}-day {streak_type.value.lower().replace('_', ' ')} streak bonus",
                    conn=tx,
                )

        logger.info(
            f"User {user_id} {streak_type.value} streak {outcome}: "
            f"current {current}, longest {longest}"
            + (f", bonus {bonus}" if bonus else "")
        )

        return StreakUpdate(
            streak_type=streak_type,
            updated=True,
            current_count=current,
            longest_count=longest,
            bonus_points=bonus,
        )

    async def get_user_streaks(self, user_id: str) -> List[UserStreak]:
        """All of a user's streaks, longest running first"""
        async with self.db.connection() as conn:
            rows = await queries.get_user_streaks(conn, user_id)
        return [UserStreak.model_validate(row) for row in rows]

"""
Experience and Leveling System

Adds experience to a user, recomputes the level from the configured curve
and pays the level-up bonus.

XP Award Rules:
- Task completed: 15 XP
- Pomodoro completed: 20 XP
- DSA question: no XP
- Challenge completed: the challenge's experience_reward

Level-up bonus: 100 points per level gained, paid as one aggregated
LEVEL_UP_BONUS transaction in the same database transaction as the XP.
"""

import logging
from typing import Optional

import psycopg

from progression.db import queries
from progression.db.connection import Database
from progression.gamification.level_calculator import LevelCalculator
from progression.gamification.points_ledger import PointsLedger
from progression.models.points import PointType
from progression.observability.metrics import level_ups_total

logger = logging.getLogger(__name__)

LEVEL_UP_BONUS_PER_LEVEL = 100


class ExperienceService:
    """Experience & level service"""

    def __init__(self, db: Database, calculator: LevelCalculator, ledger: PointsLedger):
        self.db = db
        self.calculator = calculator
        self.ledger = ledger

    async def award_experience(
        self,
        user_id: str,
        amount: int,
        description: str,
        conn: Optional[psycopg.AsyncConnection] = None
    ) -> bool:
        """
        Award XP and check for level up

        The stored level never goes down, even if the curve was retuned so
        that the computed level is lower than the current one.

        Returns:
            True if the user leveled up, False otherwise (including for an
            unknown user)
        """
        async with self.db.transaction(conn) as tx:
            user = await queries.lock_user(tx, user_id)
            if user is None:
                logger.warning(f"Cannot award experience: user {user_id} not found")
                return False

            old_level = user["level"]
            new_experience = user["experience"] + amount
            new_level = max(old_level, self.calculator.level_for_experience(new_experience))

            await queries.update_user_experience(tx, user_id, new_experience, new_level)

            levels_gained = new_level - old_level
            if levels_gained > 0:
                await self.ledger.award(
                    user_id,
                    LEVEL_UP_BONUS_PER_LEVEL * levels_gained,
                    PointType.LEVEL_UP_BONUS,
                    f"Level up bonus: reached level {new_level}",
                    conn=tx,
                )

        logger.info(
            f"Awarded {amount} XP to user {user_id} ({description}). "
            f"Total: {new_experience} XP, Level: {new_level}"
        )

        if levels_gained > 0:
            level_ups_total.inc(levels_gained)
            logger.info(f"User {user_id} leveled up from {old_level} to {new_level}!")
            return True

        return False

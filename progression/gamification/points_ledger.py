"""
Points Ledger

Append-only record of point transactions plus the running total on the
user row. Both writes happen in one transaction with the user row locked,
so `user.points` always equals the sum of the user's transactions.

Daily cap:
- TASK_COMPLETED, POMODORO_COMPLETED and DSA_QUESTION_COMPLETED awards are
  clipped to what's left of `daily_points_limit` for the local day
- Bonuses and manual adjustments are exempt
- A limit <= 0 disables the cap
"""

import logging
import math
from typing import Optional

import psycopg

from progression.db import queries
from progression.db.connection import Database
from progression.models.points import (
    CAPPED_POINT_TYPES,
    PointHistory,
    PointTransaction,
    PointType,
    PointTypeSummary,
)
from progression.models.settings import GameSettings
from progression.observability.metrics import points_awarded_total
from progression.utils.datetime_helpers import Clock, now_local, start_of_day

logger = logging.getLogger(__name__)


class PointsLedger:
    """Awards points and serves point history"""

    def __init__(self, db: Database, settings: GameSettings, clock: Clock = now_local):
        self.db = db
        self.settings = settings
        self.clock = clock

    async def award(
        self,
        user_id: str,
        points: int,
        point_type: PointType,
        description: str,
        related_id: Optional[str] = None,
        conn: Optional[psycopg.AsyncConnection] = None
    ) -> Optional[PointTransaction]:
        """
        Append a transaction and add `points` to the user's total

        Points may be negative (manual adjustments). No dedup by related_id:
        the same related id can be awarded any number of times.

        Args:
            user_id: User receiving the points
            points: Signed amount
            point_type: Why the points are granted
            description: Human-readable reason
            related_id: Task/question/achievement/workspace id, if any
            conn: Join this connection's transaction instead of opening one

        Returns:
            Stored transaction, or None if the user doesn't exist or the
            daily cap left nothing to award
        """
        async with self.db.transaction(conn) as tx:
            user = await queries.lock_user(tx, user_id)
            if user is None:
                logger.warning(f"Cannot award points: user {user_id} not found")
                return None

            granted = points
            if point_type in CAPPED_POINT_TYPES and self.settings.daily_points_limit > 0 and points > 0:
                earned_today = await queries.sum_points_since(
                    tx, user_id, start_of_day(self.clock()), CAPPED_POINT_TYPES
                )
                remaining = max(0, self.settings.daily_points_limit - earned_today)
                granted = min(points, remaining)
                if granted < points:
                    logger.info(
                        f"Daily points limit reached for user {user_id}: "
                        f"granting {granted} of {points} {point_type.value} points"
                    )
                if granted == 0:
                    return None

            row = await queries.insert_point_transaction(
                tx, user_id, granted, point_type, description, related_id
            )
            new_total = await queries.increment_user_points(tx, user_id, granted)

        points_awarded_total.labels(point_type=point_type.value).inc(max(granted, 0))
        logger.info(
            f"Awarded {granted} points to user {user_id} for {point_type.value}. "
            f"Total: {new_total}"
        )
        return PointTransaction.model_validate(row)

    async def get_history(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        point_type: Optional[PointType] = None
    ) -> Optional[PointHistory]:
        """
        Paginated transactions (newest first) with per-type totals

        Returns:
            PointHistory, or None if the user doesn't exist
        """
        page = max(page, 1)
        limit = max(1, min(limit, 100))
        offset = (page - 1) * limit

        async with self.db.connection() as conn:
            user = await queries.get_user(conn, user_id)
            if user is None:
                return None

            rows = await queries.get_point_transactions(conn, user_id, limit, offset, point_type)
            total_count = await queries.count_point_transactions(conn, user_id, point_type)
            summary = await queries.get_point_type_summary(conn, user_id)

        total_pages = math.ceil(total_count / limit) if total_count else 0
        return PointHistory(
            user_id=user_id,
            total_points=user["points"],
            transactions=[PointTransaction.model_validate(r) for r in rows],
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
            stats={
                s["type"]: PointTypeSummary(total_points=s["total_points"], count=s["count"])
                for s in summary
            },
        )

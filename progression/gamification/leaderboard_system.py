"""
Leaderboard Service

Every score update touches four buckets (DAILY, WEEKLY, MONTHLY and
ALL_TIME for the current time) and re-ranks each touched bucket.

Ranks are dense within a bucket (1..N by score descending, ties in
insertion order). The four score upserts commit together in one
transaction, so buckets never disagree about a delta. Each bucket is then
re-ranked in its own short transaction without a global lock; if a
re-rank fails the next update of the same bucket repairs it.
"""

from datetime import datetime
import logging
from typing import Dict, List, Optional

from progression.db import queries
from progression.db.connection import Database
from progression.gamification.periods import period_bounds
from progression.models.leaderboard import LeaderboardEntry, LeaderboardPeriod, LeaderboardType
from progression.observability.metrics import leaderboard_updates_total
from progression.utils.datetime_helpers import Clock, now_local

logger = logging.getLogger(__name__)


class LeaderboardService:
    """Per-period leaderboards"""

    def __init__(self, db: Database, clock: Clock = now_local):
        self.db = db
        self.clock = clock

    async def update_leaderboard(
        self,
        user_id: str,
        leaderboard_type: LeaderboardType,
        score_delta: int,
        now: Optional[datetime] = None
    ) -> None:
        """Add `score_delta` to the user's score in all current buckets and re-rank them"""
        if now is None:
            now = self.clock()

        buckets = [(period, *period_bounds(period, now)) for period in LeaderboardPeriod]

        async with self.db.transaction() as conn:
            for period, start, end in buckets:
                score = await queries.upsert_leaderboard_score(
                    conn, user_id, leaderboard_type, period, start, end, score_delta
                )
                logger.debug(
                    f"Leaderboard {leaderboard_type.value}/{period.value}: user {user_id} score {score}"
                )

        for period, start, _ in buckets:
            try:
                async with self.db.transaction() as conn:
                    await queries.recompute_bucket_ranks(conn, leaderboard_type, period, start)
            except Exception as e:
                logger.error(
                    f"Failed to re-rank {leaderboard_type.value}/{period.value} bucket "
                    f"starting {start.isoformat()}: {e}",
                    exc_info=True
                )

        leaderboard_updates_total.labels(leaderboard_type=leaderboard_type.value).inc()
        logger.info(f"Updated {leaderboard_type.value} leaderboards for user {user_id} by {score_delta}")

    async def get_top(
        self,
        leaderboard_type: LeaderboardType,
        period: LeaderboardPeriod,
        limit: int = 10,
        now: Optional[datetime] = None
    ) -> List[LeaderboardEntry]:
        """Top `limit` entries of the current bucket, best first"""
        if now is None:
            now = self.clock()
        start, _ = period_bounds(period, now)

        async with self.db.connection() as conn:
            rows = await queries.get_top_entries(conn, leaderboard_type, period, start, limit)
        return [LeaderboardEntry.model_validate(row) for row in rows]

    async def get_user_ranks(
        self,
        user_id: str,
        period: LeaderboardPeriod = LeaderboardPeriod.ALL_TIME,
        now: Optional[datetime] = None
    ) -> Dict[str, int]:
        """
        A user's rank per leaderboard type in the current bucket

        Returns:
            {'TOTAL_POINTS': 3, ...}; types the user has no entry for are omitted
        """
        if now is None:
            now = self.clock()
        start, _ = period_bounds(period, now)

        async with self.db.connection() as conn:
            rows = await queries.get_user_entries(conn, user_id, period, start)
        return {row["leaderboard_type"]: row["rank"] for row in rows if row["rank"] > 0}

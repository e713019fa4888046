"""Leaderboard queries"""
import logging
from datetime import datetime

import psycopg

from progression.models.leaderboard import LeaderboardType, LeaderboardPeriod

logger = logging.getLogger(__name__)


async def upsert_leaderboard_score(
    conn: psycopg.AsyncConnection,
    user_id: str,
    leaderboard_type: LeaderboardType,
    period: LeaderboardPeriod,
    period_start: datetime,
    period_end: datetime,
    score_delta: int
) -> int:
    """
    Add to a user's score in one bucket, creating the entry if absent

    Returns:
        New score
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO leaderboard_entries
                (user_id, leaderboard_type, period, period_start, period_end, score, rank)
            VALUES (%s, %s, %s, %s, %s, %s, 0)
            ON CONFLICT (user_id, leaderboard_type, period, period_start) DO UPDATE
            SET score = leaderboard_entries.score + EXCLUDED.score,
                period_end = EXCLUDED.period_end
            RETURNING score
            """,
            (user_id, leaderboard_type.value, period.value, period_start, period_end, score_delta)
        )
        row = await cur.fetchone()
        return row["score"]


async def recompute_bucket_ranks(
    conn: psycopg.AsyncConnection,
    leaderboard_type: LeaderboardType,
    period: LeaderboardPeriod,
    period_start: datetime
) -> int:
    """
    Reassign ranks 1..N for a whole bucket by score descending

    Ties keep insertion order.

    Returns:
        Number of entries in the bucket
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE leaderboard_entries e
            SET rank = ranked.position
            FROM (
                SELECT id, ROW_NUMBER() OVER (ORDER BY score DESC, created_at ASC, id ASC) AS position
                FROM leaderboard_entries
                WHERE leaderboard_type = %s AND period = %s AND period_start = %s
            ) AS ranked
            WHERE e.id = ranked.id
            """,
            (leaderboard_type.value, period.value, period_start)
        )
        return cur.rowcount


async def get_top_entries(
    conn: psycopg.AsyncConnection,
    leaderboard_type: LeaderboardType,
    period: LeaderboardPeriod,
    period_start: datetime,
    limit: int
) -> list[dict]:
    """Entries with rank <= limit in one bucket, best first"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT e.id, e.user_id, e.leaderboard_type, e.period, e.period_start, e.period_end,
                   e.score, e.rank, u.username, u.level
            FROM leaderboard_entries e
            JOIN users u ON u.id = e.user_id
            WHERE e.leaderboard_type = %s AND e.period = %s AND e.period_start = %s
              AND e.rank BETWEEN 1 AND %s
            ORDER BY e.rank ASC
            """,
            (leaderboard_type.value, period.value, period_start, limit)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def get_user_entries(
    conn: psycopg.AsyncConnection,
    user_id: str,
    period: LeaderboardPeriod,
    period_start: datetime
) -> list[dict]:
    """A user's entries across leaderboard types for one bucket start"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT id, user_id, leaderboard_type, period, period_start, period_end, score, rank
            FROM leaderboard_entries
            WHERE user_id = %s AND period = %s AND period_start = %s
            ORDER BY rank ASC
            """,
            (user_id, period.value, period_start)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]

"""Streak queries"""
import logging
from typing import Optional
from datetime import date

import psycopg

from progression.models.streak import StreakType

logger = logging.getLogger(__name__)


async def lock_user_streak(conn: psycopg.AsyncConnection, user_id: str, streak_type: StreakType) -> dict:
    """
    Get a streak row (creating an empty one if missing) and lock it

    A freshly created row has current_count=0 and last_active_date=NULL.
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO user_streaks (user_id, streak_type)
            VALUES (%s, %s)
            ON CONFLICT (user_id, streak_type) DO NOTHING
            """,
            (user_id, streak_type.value)
        )
        await cur.execute(
            """
            SELECT user_id, streak_type, current_count, longest_count, last_active_date
            FROM user_streaks
            WHERE user_id = %s AND streak_type = %s
            FOR UPDATE
            """,
            (user_id, streak_type.value)
        )
        return dict(await cur.fetchone())


async def save_user_streak(
    conn: psycopg.AsyncConnection,
    user_id: str,
    streak_type: StreakType,
    current_count: int,
    longest_count: int,
    last_active_date: Optional[date]
) -> None:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE user_streaks
            SET current_count = %s,
                longest_count = %s,
                last_active_date = %s,
                updated_at = CURRENT_TIMESTAMP
            WHERE user_id = %s AND streak_type = %s
            """,
            (current_count, longest_count, last_active_date, user_id, streak_type.value)
        )


async def get_user_streaks(conn: psycopg.AsyncConnection, user_id: str) -> list[dict]:
    """All streak rows for a user"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT user_id, streak_type, current_count, longest_count, last_active_date
            FROM user_streaks
            WHERE user_id = %s
            ORDER BY current_count DESC, streak_type
            """,
            (user_id,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]

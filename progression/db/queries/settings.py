"""Game settings queries"""
import logging
from typing import Optional

import psycopg

logger = logging.getLogger(__name__)

SETTINGS_COLUMNS = """
    experience_per_level, experience_multiplier, max_level,
    streak_bonus_threshold, streak_bonus_multiplier, daily_points_limit
"""


async def get_game_settings(conn: psycopg.AsyncConnection) -> Optional[dict]:
    async with conn.cursor() as cur:
        await cur.execute(f"SELECT {SETTINGS_COLUMNS} FROM game_settings WHERE id = 1")
        row = await cur.fetchone()
        return dict(row) if row else None


async def insert_game_settings(conn: psycopg.AsyncConnection, values: dict) -> dict:
    """
    Create the singleton settings row unless another caller got there first

    Returns:
        The stored settings row
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO game_settings (id, experience_per_level, experience_multiplier, max_level,
                                       streak_bonus_threshold, streak_bonus_multiplier, daily_points_limit)
            VALUES (1, %(experience_per_level)s, %(experience_multiplier)s, %(max_level)s,
                    %(streak_bonus_threshold)s, %(streak_bonus_multiplier)s, %(daily_points_limit)s)
            ON CONFLICT (id) DO NOTHING
            """,
            values
        )
        await cur.execute(f"SELECT {SETTINGS_COLUMNS} FROM game_settings WHERE id = 1")
        return dict(await cur.fetchone())

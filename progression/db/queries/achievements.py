"""Achievement queries"""
import logging
from typing import Optional

import psycopg

from progression.models.achievement import AchievementMetric

logger = logging.getLogger(__name__)

ACHIEVEMENT_COLUMNS = """
    id, name, description, category, type, metric, requirement, points_reward,
    badge_id, rarity, is_secret, icon_name, icon_color
"""


async def get_all_achievements(conn: psycopg.AsyncConnection) -> list[dict]:
    """Get the full achievement catalog"""
    async with conn.cursor() as cur:
        await cur.execute(f"SELECT {ACHIEVEMENT_COLUMNS} FROM achievements ORDER BY category, requirement, name")
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def get_achievement(conn: psycopg.AsyncConnection, achievement_id: str) -> Optional[dict]:
    async with conn.cursor() as cur:
        await cur.execute(f"SELECT {ACHIEVEMENT_COLUMNS} FROM achievements WHERE id = %s", (achievement_id,))
        row = await cur.fetchone()
        return dict(row) if row else None


async def get_achievements_by_metric(conn: psycopg.AsyncConnection, metric: AchievementMetric) -> list[dict]:
    async with conn.cursor() as cur:
        await cur.execute(
            f"SELECT {ACHIEVEMENT_COLUMNS} FROM achievements WHERE metric = %s ORDER BY requirement",
            (metric.value,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def get_user_achievement_rows(conn: psycopg.AsyncConnection, user_id: str) -> list[dict]:
    """
    Get a user's progress records

    Returns:
        [{'achievement_id', 'progress', 'is_completed', 'unlocked_at'}, ...]
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT user_id, achievement_id, progress, is_completed, unlocked_at
            FROM user_achievements
            WHERE user_id = %s
            """,
            (user_id,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def upsert_achievement_progress(
    conn: psycopg.AsyncConnection,
    user_id: str,
    achievement_id: str,
    progress: int
) -> None:
    """
    Record progress toward an achievement

    Progress never decreases and completed records are left untouched.
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO user_achievements (user_id, achievement_id, progress)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, achievement_id) DO UPDATE
            SET progress = GREATEST(user_achievements.progress, EXCLUDED.progress)
            WHERE NOT user_achievements.is_completed
            """,
            (user_id, achievement_id, progress)
        )


async def increment_achievement_progress(
    conn: psycopg.AsyncConnection,
    user_id: str,
    achievement_id: str,
    amount: int = 1
) -> Optional[int]:
    """
    Add to an event-counted achievement's progress

    Returns:
        New progress, or None if the achievement is already completed
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO user_achievements (user_id, achievement_id, progress)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, achievement_id) DO UPDATE
            SET progress = user_achievements.progress + EXCLUDED.progress
            WHERE NOT user_achievements.is_completed
            RETURNING progress
            """,
            (user_id, achievement_id, amount)
        )
        row = await cur.fetchone()
        return row["progress"] if row else None


async def mark_achievement_completed(
    conn: psycopg.AsyncConnection,
    user_id: str,
    achievement_id: str,
    requirement: int
) -> bool:
    """
    Flip a user's achievement to completed

    The unique (user_id, achievement_id) upsert is the serialization point:
    only the call that performs the false -> true transition gets True.
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO user_achievements (user_id, achievement_id, progress, is_completed, unlocked_at)
            VALUES (%s, %s, %s, TRUE, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id, achievement_id) DO UPDATE
            SET is_completed = TRUE,
                progress = GREATEST(user_achievements.progress, EXCLUDED.progress),
                unlocked_at = CURRENT_TIMESTAMP
            WHERE NOT user_achievements.is_completed
            RETURNING achievement_id
            """,
            (user_id, achievement_id, requirement)
        )
        return await cur.fetchone() is not None


async def get_completed_user_achievements(conn: psycopg.AsyncConnection, user_id: str) -> list[dict]:
    """Completed achievements joined with their definitions, most recent first"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT a.id AS achievement_id, a.name, a.description, a.badge_id, a.rarity,
                   a.points_reward, ua.unlocked_at
            FROM user_achievements ua
            JOIN achievements a ON a.id = ua.achievement_id
            WHERE ua.user_id = %s AND ua.is_completed
            ORDER BY ua.unlocked_at DESC
            """,
            (user_id,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def upsert_achievement_definition(conn: psycopg.AsyncConnection, achievement: dict) -> str:
    """
    Insert or update a catalog entry keyed by name

    Returns:
        Achievement ID
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO achievements (name, description, category, type, metric, requirement,
                                      points_reward, badge_id, rarity, is_secret, icon_name, icon_color)
            VALUES (%(name)s, %(description)s, %(category)s, %(type)s, %(metric)s, %(requirement)s,
                    %(points_reward)s, %(badge_id)s, %(rarity)s, %(is_secret)s, %(icon_name)s, %(icon_color)s)
            ON CONFLICT (name) DO UPDATE
            SET description = EXCLUDED.description,
                category = EXCLUDED.category,
                type = EXCLUDED.type,
                metric = EXCLUDED.metric,
                requirement = EXCLUDED.requirement,
                points_reward = EXCLUDED.points_reward,
                badge_id = EXCLUDED.badge_id,
                rarity = EXCLUDED.rarity,
                is_secret = EXCLUDED.is_secret,
                icon_name = EXCLUDED.icon_name,
                icon_color = EXCLUDED.icon_color
            RETURNING id
            """,
            achievement
        )
        row = await cur.fetchone()
        return row["id"]

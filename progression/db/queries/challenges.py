"""Challenge queries"""
import logging
from typing import Optional
from datetime import datetime

import psycopg

from progression.models.challenge import ChallengeCategory

logger = logging.getLogger(__name__)

CHALLENGE_COLUMNS = """
    id, name, description, type, category, difficulty, requirement, time_limit_hours,
    points_reward, experience_reward, badge_reward, is_active, start_date, end_date
"""


async def get_active_challenges(conn: psycopg.AsyncConnection, now: datetime) -> list[dict]:
    """Active challenges whose window contains `now`"""
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {CHALLENGE_COLUMNS}
            FROM challenges
            WHERE is_active AND start_date <= %s AND end_date >= %s
            ORDER BY type, difficulty, name
            """,
            (now, now)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def get_challenge(conn: psycopg.AsyncConnection, challenge_id: str) -> Optional[dict]:
    async with conn.cursor() as cur:
        await cur.execute(f"SELECT {CHALLENGE_COLUMNS} FROM challenges WHERE id = %s", (challenge_id,))
        row = await cur.fetchone()
        return dict(row) if row else None


async def get_user_challenges(conn: psycopg.AsyncConnection, user_id: str) -> list[dict]:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT user_id, challenge_id, progress, is_completed, started_at, completed_at
            FROM user_challenges
            WHERE user_id = %s
            """,
            (user_id,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def insert_user_challenge(conn: psycopg.AsyncConnection, user_id: str, challenge_id: str) -> Optional[dict]:
    """
    Start a challenge for a user

    Returns:
        The new row, or None if the user already started it
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO user_challenges (user_id, challenge_id)
            VALUES (%s, %s)
            ON CONFLICT (user_id, challenge_id) DO NOTHING
            RETURNING user_id, challenge_id, progress, is_completed, started_at, completed_at
            """,
            (user_id, challenge_id)
        )
        row = await cur.fetchone()
        return dict(row) if row else None


async def lock_open_user_challenges(
    conn: psycopg.AsyncConnection,
    user_id: str,
    category: ChallengeCategory,
    now: datetime
) -> list[dict]:
    """
    Started, uncompleted, in-window challenges of one category, locked

    Returns:
        Rows combining user progress with the challenge definition
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT uc.challenge_id, uc.progress, c.name, c.requirement, c.points_reward,
                   c.experience_reward, c.badge_reward
            FROM user_challenges uc
            JOIN challenges c ON c.id = uc.challenge_id
            WHERE uc.user_id = %s AND NOT uc.is_completed
              AND c.category = %s AND c.is_active
              AND c.start_date <= %s AND c.end_date >= %s
            FOR UPDATE OF uc
            """,
            (user_id, category.value, now, now)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def update_user_challenge_progress(
    conn: psycopg.AsyncConnection,
    user_id: str,
    challenge_id: str,
    progress: int
) -> None:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE user_challenges
            SET progress = GREATEST(progress, %s)
            WHERE user_id = %s AND challenge_id = %s AND NOT is_completed
            """,
            (progress, user_id, challenge_id)
        )


async def complete_user_challenge(
    conn: psycopg.AsyncConnection,
    user_id: str,
    challenge_id: str,
    requirement: int
) -> bool:
    """
    Mark a challenge completed

    Returns:
        True only for the call that performed the transition
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE user_challenges
            SET is_completed = TRUE, progress = %s, completed_at = CURRENT_TIMESTAMP
            WHERE user_id = %s AND challenge_id = %s AND NOT is_completed
            RETURNING challenge_id
            """,
            (requirement, user_id, challenge_id)
        )
        return await cur.fetchone() is not None


async def upsert_challenge_definition(
    conn: psycopg.AsyncConnection,
    challenge: dict,
    reset_window: bool = False
) -> str:
    """
    Insert or update a challenge keyed by name

    An existing challenge keeps its start_date/end_date unless reset_window
    is set, so reseeding doesn't restart running challenges.

    Returns:
        Challenge ID
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO challenges (name, description, type, category, difficulty, requirement,
                                    time_limit_hours, points_reward, experience_reward, badge_reward,
                                    is_active, start_date, end_date)
            VALUES (%(name)s, %(description)s, %(type)s, %(category)s, %(difficulty)s, %(requirement)s,
                    %(time_limit_hours)s, %(points_reward)s, %(experience_reward)s, %(badge_reward)s,
                    %(is_active)s, %(start_date)s, %(end_date)s)
            ON CONFLICT (name) DO UPDATE
            SET description = EXCLUDED.description,
                requirement = EXCLUDED.requirement,
                points_reward = EXCLUDED.points_reward,
                experience_reward = EXCLUDED.experience_reward,
                badge_reward = EXCLUDED.badge_reward,
                is_active = EXCLUDED.is_active,
                start_date = CASE WHEN %(reset_window)s THEN EXCLUDED.start_date ELSE challenges.start_date END,
                end_date = CASE WHEN %(reset_window)s THEN EXCLUDED.end_date ELSE challenges.end_date END
            RETURNING id
            """,
            {**challenge, "reset_window": reset_window}
        )
        row = await cur.fetchone()
        return row["id"]

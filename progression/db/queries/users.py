"""User progression queries"""
import logging
from typing import Optional
from datetime import date

import psycopg
from psycopg import sql

logger = logging.getLogger(__name__)

USER_COLUMNS = """
    id, username, points, experience, level, current_streak, longest_streak,
    total_tasks_completed, total_pomodoro_completed, total_dsa_completed,
    profile_badges, last_activity_date, created_at
"""

# Counters the activity recorder is allowed to bump
ACTIVITY_COUNTERS = frozenset({
    "total_tasks_completed",
    "total_pomodoro_completed",
    "total_dsa_completed",
})


async def create_user(conn: psycopg.AsyncConnection, user_id: str, username: Optional[str] = None) -> dict:
    """
    Create a user with zeroed progression fields (no-op if it exists)

    Returns:
        The user row
    """
    async with conn.cursor() as cur:
        await cur.execute(
            "INSERT INTO users (id, username) VALUES (%s, %s) ON CONFLICT (id) DO NOTHING",
            (user_id, username)
        )
        await cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
        row = await cur.fetchone()
        return dict(row) if row else None


async def get_user(conn: psycopg.AsyncConnection, user_id: str) -> Optional[dict]:
    """Get a user's progression fields"""
    async with conn.cursor() as cur:
        await cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
        row = await cur.fetchone()
        return dict(row) if row else None


async def lock_user(conn: psycopg.AsyncConnection, user_id: str) -> Optional[dict]:
    """
    Get a user row and hold a row lock until the transaction ends

    All point/experience/streak-mirror mutations for a user serialize here.
    """
    async with conn.cursor() as cur:
        await cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s FOR UPDATE", (user_id,))
        row = await cur.fetchone()
        return dict(row) if row else None


async def increment_activity_counter(
    conn: psycopg.AsyncConnection,
    user_id: str,
    counter: str,
    activity_date: date
) -> Optional[dict]:
    """
    Increment one of the domain counters and stamp last_activity_date

    Returns:
        Updated user row, or None if the user doesn't exist
    """
    if counter not in ACTIVITY_COUNTERS:
        raise ValueError(f"Unknown activity counter: {counter}")

    query = sql.SQL(
        "UPDATE users SET {counter} = {counter} + 1, last_activity_date = %s "
        "WHERE id = %s RETURNING " + USER_COLUMNS
    ).format(counter=sql.Identifier(counter))

    async with conn.cursor() as cur:
        await cur.execute(query, (activity_date, user_id))
        row = await cur.fetchone()
        return dict(row) if row else None


async def increment_user_points(conn: psycopg.AsyncConnection, user_id: str, points: int) -> Optional[int]:
    """
    Atomically add (signed) points to the running total

    Returns:
        New total, or None if the user doesn't exist
    """
    async with conn.cursor() as cur:
        await cur.execute(
            "UPDATE users SET points = points + %s WHERE id = %s RETURNING points",
            (points, user_id)
        )
        row = await cur.fetchone()
        return row["points"] if row else None


async def update_user_experience(
    conn: psycopg.AsyncConnection,
    user_id: str,
    experience: int,
    level: int
) -> None:
    """Persist experience and level"""
    async with conn.cursor() as cur:
        await cur.execute(
            "UPDATE users SET experience = %s, level = %s WHERE id = %s",
            (experience, level, user_id)
        )


async def update_user_streak_mirror(
    conn: psycopg.AsyncConnection,
    user_id: str,
    current_streak: int,
    longest_streak: int,
    activity_date: date
) -> None:
    """Mirror the DAILY_LOGIN streak onto the user row"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE users
            SET current_streak = %s,
                longest_streak = GREATEST(longest_streak, %s),
                last_activity_date = %s
            WHERE id = %s
            """,
            (current_streak, longest_streak, activity_date, user_id)
        )


async def add_profile_badge(conn: psycopg.AsyncConnection, user_id: str, badge_id: str) -> bool:
    """
    Append a badge unless the user already has it

    Returns:
        True if the badge was added
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            UPDATE users
            SET profile_badges = array_append(profile_badges, %s)
            WHERE id = %s AND NOT (%s = ANY(profile_badges))
            RETURNING id
            """,
            (badge_id, user_id, badge_id)
        )
        return await cur.fetchone() is not None


# ==========================================
# Counts owned by other features
# ==========================================

async def count_workspace_memberships(conn: psycopg.AsyncConnection, user_id: str) -> int:
    async with conn.cursor() as cur:
        await cur.execute("SELECT COUNT(*) AS count FROM workspace_memberships WHERE user_id = %s", (user_id,))
        row = await cur.fetchone()
        return row["count"] if row else 0


async def count_chat_messages(conn: psycopg.AsyncConnection, user_id: str) -> int:
    async with conn.cursor() as cur:
        await cur.execute("SELECT COUNT(*) AS count FROM chat_messages WHERE sender_id = %s", (user_id,))
        row = await cur.fetchone()
        return row["count"] if row else 0


async def count_notes(conn: psycopg.AsyncConnection, user_id: str) -> int:
    async with conn.cursor() as cur:
        await cur.execute("SELECT COUNT(*) AS count FROM notes WHERE author_id = %s", (user_id,))
        row = await cur.fetchone()
        return row["count"] if row else 0

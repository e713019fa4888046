"""Point ledger queries"""
import logging
from typing import Iterable, Optional
from datetime import datetime

import psycopg

from progression.models.points import PointType

logger = logging.getLogger(__name__)


async def insert_point_transaction(
    conn: psycopg.AsyncConnection,
    user_id: str,
    points: int,
    point_type: PointType,
    description: str,
    related_id: Optional[str] = None
) -> dict:
    """
    Append a ledger record

    Returns:
        The inserted transaction row
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO point_transactions (user_id, points, type, description, related_id)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id, user_id, points, type, description, related_id, created_at
            """,
            (user_id, points, point_type.value, description, related_id)
        )
        return dict(await cur.fetchone())


async def sum_points_since(
    conn: psycopg.AsyncConnection,
    user_id: str,
    since: datetime,
    point_types: Iterable[PointType]
) -> int:
    """Sum of points of the given types created at or after `since`"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT COALESCE(SUM(points), 0) AS total
            FROM point_transactions
            WHERE user_id = %s AND created_at >= %s AND type = ANY(%s)
            """,
            (user_id, since, [t.value for t in point_types])
        )
        row = await cur.fetchone()
        return int(row["total"]) if row else 0


async def get_point_transactions(
    conn: psycopg.AsyncConnection,
    user_id: str,
    limit: int,
    offset: int,
    point_type: Optional[PointType] = None
) -> list[dict]:
    """Transactions for a user, newest first"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT id, user_id, points, type, description, related_id, created_at
            FROM point_transactions
            WHERE user_id = %s AND (%s::text IS NULL OR type = %s::text)
            ORDER BY created_at DESC, id DESC
            LIMIT %s OFFSET %s
            """,
            (
                user_id,
                point_type.value if point_type else None,
                point_type.value if point_type else None,
                limit,
                offset
            )
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def count_point_transactions(
    conn: psycopg.AsyncConnection,
    user_id: str,
    point_type: Optional[PointType] = None
) -> int:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT COUNT(*) AS count
            FROM point_transactions
            WHERE user_id = %s AND (%s::text IS NULL OR type = %s::text)
            """,
            (
                user_id,
                point_type.value if point_type else None,
                point_type.value if point_type else None
            )
        )
        row = await cur.fetchone()
        return row["count"] if row else 0


async def get_point_type_summary(conn: psycopg.AsyncConnection, user_id: str) -> list[dict]:
    """
    Per-type totals for a user

    Returns:
        [{'type': str, 'total_points': int, 'count': int}, ...]
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT type, COALESCE(SUM(points), 0) AS total_points, COUNT(*) AS count
            FROM point_transactions
            WHERE user_id = %s
            GROUP BY type
            """,
            (user_id,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]

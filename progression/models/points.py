"""Point ledger models"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PointType(str, Enum):
    """Why points were granted (or deducted)"""
    TASK_COMPLETED = "TASK_COMPLETED"
    POMODORO_COMPLETED = "POMODORO_COMPLETED"
    DSA_QUESTION_COMPLETED = "DSA_QUESTION_COMPLETED"
    ACHIEVEMENT_UNLOCKED = "ACHIEVEMENT_UNLOCKED"
    LEVEL_UP_BONUS = "LEVEL_UP_BONUS"
    STREAK_BONUS = "STREAK_BONUS"
    CHALLENGE_COMPLETED = "CHALLENGE_COMPLETED"
    MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT"


# Point types that count against the daily points limit
CAPPED_POINT_TYPES = frozenset({
    PointType.TASK_COMPLETED,
    PointType.POMODORO_COMPLETED,
    PointType.DSA_QUESTION_COMPLETED,
})


class PointTransaction(BaseModel):
    """Immutable ledger record"""
    id: Optional[int] = None
    user_id: str
    points: int
    type: PointType
    description: str
    related_id: Optional[str] = None
    created_at: Optional[datetime] = None


class PointTypeSummary(BaseModel):
    """Aggregated points per transaction type"""
    total_points: int
    count: int


class PointHistory(BaseModel):
    """Paginated transaction history for a user"""
    user_id: str
    total_points: int
    transactions: list[PointTransaction]
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool
    stats: dict[str, PointTypeSummary]

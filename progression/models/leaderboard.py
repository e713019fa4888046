"""Leaderboard models"""
from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class LeaderboardType(str, Enum):
    """Metric a leaderboard ranks by"""
    TOTAL_POINTS = "TOTAL_POINTS"
    TASK_COMPLETION = "TASK_COMPLETION"
    POMODORO_SESSIONS = "POMODORO_SESSIONS"
    DSA_QUESTIONS = "DSA_QUESTIONS"


class LeaderboardPeriod(str, Enum):
    """Time window of a leaderboard bucket"""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    ALL_TIME = "ALL_TIME"


class LeaderboardEntry(BaseModel):
    """One user's score within a bucket"""
    id: Optional[int] = None
    user_id: str
    leaderboard_type: LeaderboardType
    period: LeaderboardPeriod
    period_start: datetime
    period_end: datetime
    score: int
    rank: int = 0
    username: Optional[str] = None
    level: Optional[int] = None

"""Streak models"""
from enum import Enum
from typing import Optional
from datetime import date
from pydantic import BaseModel


class StreakType(str, Enum):
    """Independently tracked streak categories"""
    DAILY_LOGIN = "DAILY_LOGIN"
    TASK_COMPLETION = "TASK_COMPLETION"
    POMODORO_SESSION = "POMODORO_SESSION"
    DSA_PRACTICE = "DSA_PRACTICE"


class UserStreak(BaseModel):
    """Per (user, streak type) consecutive-day counter"""
    user_id: str
    streak_type: StreakType
    current_count: int = 0
    longest_count: int = 0
    last_active_date: Optional[date] = None


class StreakUpdate(BaseModel):
    """Outcome of a streak update"""
    streak_type: StreakType
    updated: bool
    current_count: int
    longest_count: int
    bonus_points: int = 0

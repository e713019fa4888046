"""User progression models"""
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, Field


class UserProgress(BaseModel):
    """Progression-relevant fields of a user row"""
    id: str
    username: Optional[str] = None
    points: int = 0
    experience: int = 0
    level: int = 1
    current_streak: int = 0
    longest_streak: int = 0
    total_tasks_completed: int = 0
    total_pomodoro_completed: int = 0
    total_dsa_completed: int = 0
    profile_badges: list[str] = Field(default_factory=list)
    last_activity_date: Optional[date] = None
    created_at: Optional[datetime] = None

"""Activity recording and stats models"""
from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from progression.models.user import UserProgress
from progression.models.streak import UserStreak


class DSADifficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class ActivityResult(BaseModel):
    """Returned to the collaborator that reported an activity"""
    user: UserProgress
    points_awarded: int
    leveled_up: bool
    unlocked_achievement_ids: list[str] = Field(default_factory=list)


class CompletedAchievement(BaseModel):
    achievement_id: str
    name: str
    description: str
    badge_id: Optional[str] = None
    rarity: str
    points_reward: int
    unlocked_at: Optional[datetime] = None


class UserStats(BaseModel):
    """Dashboard read model"""
    user_id: str
    username: Optional[str] = None
    level: int
    experience: int
    points: int
    current_streak: int
    longest_streak: int
    progress_to_next_level: float
    current_level_xp: int
    next_level_xp: int
    profile_badges: list[str] = Field(default_factory=list)
    streaks: list[UserStreak] = Field(default_factory=list)
    completed_achievements: list[CompletedAchievement] = Field(default_factory=list)
    all_time_ranks: dict[str, int] = Field(default_factory=dict)

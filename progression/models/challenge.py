"""Challenge models"""
from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class ChallengeType(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class ChallengeCategory(str, Enum):
    TASK_COMPLETION = "TASK_COMPLETION"
    POMODORO_FOCUS = "POMODORO_FOCUS"
    DSA_PRACTICE = "DSA_PRACTICE"
    CONSISTENCY = "CONSISTENCY"


class ChallengeDifficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class Challenge(BaseModel):
    """Time-boxed objective"""
    id: Optional[str] = None
    name: str
    description: str
    type: ChallengeType
    category: ChallengeCategory
    difficulty: ChallengeDifficulty
    requirement: int
    time_limit_hours: int
    points_reward: int
    experience_reward: int = 0
    badge_reward: Optional[str] = None
    is_active: bool = True
    start_date: datetime
    end_date: datetime


class UserChallenge(BaseModel):
    """User's progress on a started challenge"""
    user_id: str
    challenge_id: str
    progress: int = 0
    is_completed: bool = False
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ChallengeWithProgress(BaseModel):
    """Challenge listing entry with the user's progress"""
    challenge: Challenge
    progress: int = 0
    is_started: bool = False
    is_completed: bool = False
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

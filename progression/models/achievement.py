"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AchievementCategory(str, Enum):
    """Achievement categories"""
    PRODUCTIVITY = "PRODUCTIVITY"
    CONSISTENCY = "CONSISTENCY"
    MASTERY = "MASTERY"
    COLLABORATION = "COLLABORATION"
    SOCIAL = "SOCIAL"
    SPECIAL = "SPECIAL"


class AchievementType(str, Enum):
    """How an achievement is earned"""
    MILESTONE = "MILESTONE"
    CUMULATIVE = "CUMULATIVE"
    STREAK = "STREAK"
    RARE_EVENT = "RARE_EVENT"


class AchievementRarity(str, Enum):
    """Achievement rarity, COMMON to LEGENDARY"""
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


class AchievementMetric(str, Enum):
    """The aggregate an achievement's progress is measured against"""
    TASKS_COMPLETED = "TASKS_COMPLETED"
    POMODOROS_COMPLETED = "POMODOROS_COMPLETED"
    DSA_SOLVED = "DSA_SOLVED"
    NOTES_CREATED = "NOTES_CREATED"
    WORKSPACES_JOINED = "WORKSPACES_JOINED"
    CHAT_MESSAGES = "CHAT_MESSAGES"
    CURRENT_STREAK = "CURRENT_STREAK"
    LONGEST_STREAK = "LONGEST_STREAK"
    LEVEL = "LEVEL"
    # Event-driven: progress lives on the user_achievements row
    EARLY_BIRD = "EARLY_BIRD"
    NIGHT_OWL = "NIGHT_OWL"
    WEEKEND_TASKS = "WEEKEND_TASKS"


EVENT_METRICS = frozenset({
    AchievementMetric.EARLY_BIRD,
    AchievementMetric.NIGHT_OWL,
    AchievementMetric.WEEKEND_TASKS,
})


class Achievement(BaseModel):
    """Achievement definition"""
    id: Optional[str] = None
    name: str
    description: str
    category: AchievementCategory
    type: AchievementType
    metric: AchievementMetric
    requirement: int
    points_reward: int
    badge_id: Optional[str] = None
    rarity: AchievementRarity = AchievementRarity.COMMON
    is_secret: bool = False
    icon_name: Optional[str] = None
    icon_color: Optional[str] = None


class UserAchievement(BaseModel):
    """User's progress toward one achievement"""
    user_id: str
    achievement_id: str
    progress: int = 0
    is_completed: bool = False
    unlocked_at: Optional[datetime] = None


class SpecialContext(BaseModel):
    """Event context for time-of-day and weekend achievements"""
    action: str
    timestamp: datetime
    is_weekend: bool = False

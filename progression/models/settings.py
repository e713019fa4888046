"""Game settings model"""
from pydantic import BaseModel

from progression import config


class GameSettings(BaseModel):
    """
    Tunable constants for the progression curve and bonuses.

    Loaded once at startup (created with defaults if the row is missing)
    and passed to each component's constructor.
    """
    experience_per_level: int = config.DEFAULT_EXPERIENCE_PER_LEVEL
    experience_multiplier: float = config.DEFAULT_EXPERIENCE_MULTIPLIER
    max_level: int = config.DEFAULT_MAX_LEVEL
    streak_bonus_threshold: int = config.DEFAULT_STREAK_BONUS_THRESHOLD
    streak_bonus_multiplier: float = config.DEFAULT_STREAK_BONUS_MULTIPLIER
    daily_points_limit: int = config.DEFAULT_DAILY_POINTS_LIMIT

    @property
    def is_curve_valid(self) -> bool:
        return (
            self.experience_per_level > 0
            and self.experience_multiplier > 0
            and self.max_level >= 1
        )

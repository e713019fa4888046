"""
Level Calculator

Pure mapping between cumulative experience and level.

Leveling Curve:
- Level n requires floor(experience_per_level * multiplier^(n-1)) XP
- Level 1 is the floor, max_level the ceiling

With non-positive curve parameters the calculator fails closed: every
user is level 1 and no experience is needed for it.
"""

import logging
import math
from typing import Optional

from progression.models.settings import GameSettings

logger = logging.getLogger(__name__)


class LevelCalculator:
    """Experience curve driven by GameSettings"""

    def __init__(self, settings: GameSettings):
        self.settings = settings
        if not settings.is_curve_valid:
            logger.error(
                "Invalid experience curve "
                f"(experience_per_level={settings.experience_per_level}, "
                f"experience_multiplier={settings.experience_multiplier}, "
                f"max_level={settings.max_level}); all users stay at level 1"
            )

    def _requirement(self, level: int) -> Optional[int]:
        """XP threshold for `level`; None when it overflows (unreachable)"""
        try:
            value = self.settings.experience_per_level * math.pow(
                self.settings.experience_multiplier, level - 1
            )
        except OverflowError:
            return None
        if math.isinf(value):
            return None
        return math.floor(value)

    def level_for_experience(self, experience: int) -> int:
        """
        Level reached with `experience` total XP

        Non-decreasing in experience and never above max_level.
        """
        if not self.settings.is_curve_valid:
            return 1

        level = 1
        required_xp = self._requirement(1)
        while (
            required_xp is not None
            and experience >= required_xp
            and level < self.settings.max_level
        ):
            level += 1
            required_xp = self._requirement(level)

        return level

    def experience_for_level(self, level: int) -> int:
        """Cumulative XP of all levels below `level`"""
        if not self.settings.is_curve_valid:
            return 0

        total_xp = 0
        for i in range(1, min(level, self.settings.max_level + 1)):
            requirement = self._requirement(i)
            if requirement is None:
                break
            total_xp += requirement
        return total_xp

    def progress_to_next_level(self, experience: int, level: int) -> float:
        """Percentage through the current level, clamped to [0, 100]"""
        if not self.settings.is_curve_valid or level >= self.settings.max_level:
            return 100.0

        current_level_xp = self.experience_for_level(level)
        next_level_xp = self.experience_for_level(level + 1)
        span = next_level_xp - current_level_xp
        if span <= 0:
            return 100.0

        progress = (experience - current_level_xp) / span * 100
        return max(0.0, min(100.0, progress))

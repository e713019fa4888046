"""Unit tests for the level curve (progression/gamification/level_calculator.py)"""
import pytest

from progression.gamification.level_calculator import LevelCalculator
from progression.models.settings import GameSettings


@pytest.fixture
def calculator(game_settings):
    return LevelCalculator(game_settings)


# ============================================================================
# level_for_experience
# ============================================================================

class TestLevelForExperience:
    """Experience -> level"""

    def test_zero_experience_is_level_one(self, calculator):
        assert calculator.level_for_experience(0) == 1

    def test_just_below_first_threshold(self, calculator):
        assert calculator.level_for_experience(999) == 1

    def test_first_threshold_reaches_level_two(self, calculator):
        assert calculator.level_for_experience(1000) == 2

    def test_second_threshold_uses_multiplier(self, calculator):
        # Level 2 -> 3 requires floor(1000 * 1.5) = 1500
        assert calculator.level_for_experience(1499) == 2
        assert calculator.level_for_experience(1500) == 3

    def test_large_award_crosses_several_levels(self, calculator):
        # Thresholds 1000, 1500, 2250, 3375
        assert calculator.level_for_experience(2600) == 4

    def test_non_decreasing_in_experience(self, calculator):
        levels = [calculator.level_for_experience(xp) for xp in range(0, 50_000, 250)]
        assert levels == sorted(levels)

    def test_capped_at_max_level(self):
        calculator = LevelCalculator(GameSettings(max_level=5))
        assert calculator.level_for_experience(10 ** 12) == 5

    def test_overflowing_threshold_stops_the_climb(self):
        calculator = LevelCalculator(GameSettings(experience_multiplier=1e200, max_level=100))
        # Level 3 would need 1000 * 1e400 XP, which overflows a float
        assert calculator.level_for_experience(10 ** 210) == 3

    @pytest.mark.parametrize("overrides", [
        {"experience_per_level": 0},
        {"experience_per_level": -10},
        {"experience_multiplier": 0},
        {"experience_multiplier": -1.5},
    ])
    def test_invalid_curve_fails_closed(self, overrides):
        calculator = LevelCalculator(GameSettings(**overrides))
        assert calculator.level_for_experience(10 ** 9) == 1


# ============================================================================
# experience_for_level / progress
# ============================================================================

class TestExperienceForLevel:
    """Level -> cumulative experience"""

    def test_level_one_needs_nothing(self, calculator):
        assert calculator.experience_for_level(1) == 0

    def test_cumulative_sum(self, calculator):
        assert calculator.experience_for_level(2) == 1000
        assert calculator.experience_for_level(3) == 2500
        assert calculator.experience_for_level(4) == 4750

    def test_invalid_curve_needs_nothing(self):
        calculator = LevelCalculator(GameSettings(experience_per_level=0))
        assert calculator.experience_for_level(10) == 0


class TestProgressToNextLevel:
    """Percentage through the current level"""

    def test_halfway(self, calculator):
        # Level 2 spans 1000..2500
        assert calculator.progress_to_next_level(1750, 2) == pytest.approx(50.0)

    def test_clamped_below_zero(self, calculator):
        assert calculator.progress_to_next_level(0, 3) == 0.0

    def test_clamped_above_hundred(self, calculator):
        assert calculator.progress_to_next_level(10_000, 2) == 100.0

    def test_max_level_is_complete(self):
        calculator = LevelCalculator(GameSettings(max_level=3))
        assert calculator.progress_to_next_level(5000, 3) == 100.0

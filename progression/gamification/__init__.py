"""
Progression engine

Converts recorded activity into points, experience, levels, streaks,
achievements, challenge progress and leaderboard standings.

Components are classes constructed with the database and the GameSettings
loaded at startup; see progression.services.container for the wiring.
"""

from progression.gamification.level_calculator import LevelCalculator
from progression.gamification.settings_provider import load_game_settings
from progression.gamification.points_ledger import PointsLedger
from progression.gamification.xp_system import ExperienceService
from progression.gamification.streak_system import StreakTracker
from progression.gamification.achievement_system import AchievementEngine
from progression.gamification.leaderboard_system import LeaderboardService
from progression.gamification.periods import period_bounds
from progression.gamification.challenges import ChallengeService
from progression.gamification.dashboards import StatsService

__all__ = [
    "LevelCalculator",
    "load_game_settings",
    "PointsLedger",
    "ExperienceService",
    "StreakTracker",
    "AchievementEngine",
    "LeaderboardService",
    "period_bounds",
    "ChallengeService",
    "StatsService",
]

"""
Default achievement and challenge catalog

Seeded by scripts/init_db.py. Seeding upserts by name, so it can be re-run
after editing the catalog.
"""

from datetime import datetime, timedelta
import logging
from typing import List, Optional

from progression.db import queries
from progression.db.connection import Database
from progression.models.achievement import (
    Achievement,
    AchievementCategory as Category,
    AchievementMetric as Metric,
    AchievementRarity as Rarity,
    AchievementType as Kind,
)
from progression.models.challenge import (
    Challenge,
    ChallengeCategory,
    ChallengeDifficulty,
    ChallengeType,
)
from progression.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)


def _achievement(
    name: str,
    description: str,
    category: Category,
    kind: Kind,
    metric: Metric,
    requirement: int,
    points_reward: int,
    rarity: Rarity,
    icon_name: str,
    icon_color: str,
    is_secret: bool = False
) -> Achievement:
    return Achievement(
        name=name,
        description=description,
        category=category,
        type=kind,
        metric=metric,
        requirement=requirement,
        points_reward=points_reward,
        badge_id=name.lower().replace(" ", "-"),
        rarity=rarity,
        is_secret=is_secret,
        icon_name=icon_name,
        icon_color=icon_color,
    )


DEFAULT_ACHIEVEMENTS: List[Achievement] = [
    # Tasks
    _achievement("First Task", "Complete your first task", Category.PRODUCTIVITY, Kind.MILESTONE,
                 Metric.TASKS_COMPLETED, 1, 10, Rarity.COMMON, "CheckCircle", "#10B981"),
    _achievement("Task Warrior", "Complete 10 tasks", Category.PRODUCTIVITY, Kind.CUMULATIVE,
                 Metric.TASKS_COMPLETED, 10, 50, Rarity.UNCOMMON, "Trophy", "#F59E0B"),
    _achievement("Task Master", "Complete 100 tasks", Category.PRODUCTIVITY, Kind.CUMULATIVE,
                 Metric.TASKS_COMPLETED, 100, 200, Rarity.RARE, "Crown", "#8B5CF6"),
    _achievement("Task Legend", "Complete 1000 tasks", Category.PRODUCTIVITY, Kind.CUMULATIVE,
                 Metric.TASKS_COMPLETED, 1000, 1000, Rarity.LEGENDARY, "Star", "#EF4444"),

    # Notes
    _achievement("First Note", "Create your first note", Category.PRODUCTIVITY, Kind.MILESTONE,
                 Metric.NOTES_CREATED, 1, 15, Rarity.COMMON, "FileText", "#10B981"),
    _achievement("Note Taker", "Create 10 notes", Category.PRODUCTIVITY, Kind.CUMULATIVE,
                 Metric.NOTES_CREATED, 10, 75, Rarity.UNCOMMON, "BookOpen", "#F59E0B"),
    _achievement("Note Master", "Create 50 notes", Category.PRODUCTIVITY, Kind.CUMULATIVE,
                 Metric.NOTES_CREATED, 50, 250, Rarity.RARE, "Library", "#8B5CF6"),
    _achievement("Note Legend", "Create 200 notes", Category.PRODUCTIVITY, Kind.CUMULATIVE,
                 Metric.NOTES_CREATED, 200, 800, Rarity.EPIC, "Archive", "#EF4444"),

    # Pomodoro
    _achievement("Focus Beginner", "Complete your first Pomodoro session", Category.PRODUCTIVITY, Kind.MILESTONE,
                 Metric.POMODOROS_COMPLETED, 1, 15, Rarity.COMMON, "Clock", "#10B981"),
    _achievement("Focus Expert", "Complete 25 Pomodoro sessions", Category.PRODUCTIVITY, Kind.CUMULATIVE,
                 Metric.POMODOROS_COMPLETED, 25, 100, Rarity.UNCOMMON, "Timer", "#F59E0B"),
    _achievement("Focus Master", "Complete 100 Pomodoro sessions", Category.PRODUCTIVITY, Kind.CUMULATIVE,
                 Metric.POMODOROS_COMPLETED, 100, 300, Rarity.RARE, "Zap", "#8B5CF6"),

    # Consistency (measured against the longest daily streak)
    _achievement("Getting Started", "Maintain a 3-day streak", Category.CONSISTENCY, Kind.STREAK,
                 Metric.LONGEST_STREAK, 3, 25, Rarity.COMMON, "Calendar", "#10B981"),
    _achievement("Dedicated User", "Maintain a 7-day streak", Category.CONSISTENCY, Kind.STREAK,
                 Metric.LONGEST_STREAK, 7, 75, Rarity.UNCOMMON, "CalendarDays", "#F59E0B"),
    _achievement("Consistency Champion", "Maintain a 30-day streak", Category.CONSISTENCY, Kind.STREAK,
                 Metric.LONGEST_STREAK, 30, 250, Rarity.RARE, "Fire", "#EF4444"),
    _achievement("Unstoppable Force", "Maintain a 100-day streak", Category.CONSISTENCY, Kind.STREAK,
                 Metric.LONGEST_STREAK, 100, 1000, Rarity.LEGENDARY, "Flame", "#DC2626"),

    # DSA
    _achievement("Code Explorer", "Solve your first DSA question", Category.MASTERY, Kind.MILESTONE,
                 Metric.DSA_SOLVED, 1, 20, Rarity.COMMON, "Code", "#10B981"),
    _achievement("Algorithm Apprentice", "Solve 25 DSA questions", Category.MASTERY, Kind.CUMULATIVE,
                 Metric.DSA_SOLVED, 25, 150, Rarity.UNCOMMON, "Brain", "#F59E0B"),
    _achievement("Data Structure Guru", "Solve 100 DSA questions", Category.MASTERY, Kind.CUMULATIVE,
                 Metric.DSA_SOLVED, 100, 500, Rarity.RARE, "Cpu", "#8B5CF6"),

    # Collaboration / social
    _achievement("Team Player", "Join your first workspace", Category.COLLABORATION, Kind.MILESTONE,
                 Metric.WORKSPACES_JOINED, 1, 30, Rarity.COMMON, "Users", "#10B981"),
    _achievement("Social Butterfly", "Send 50 chat messages", Category.SOCIAL, Kind.CUMULATIVE,
                 Metric.CHAT_MESSAGES, 50, 100, Rarity.UNCOMMON, "MessageCircle", "#F59E0B"),

    # Special
    _achievement("Early Bird", "Complete a task before 6 AM", Category.SPECIAL, Kind.RARE_EVENT,
                 Metric.EARLY_BIRD, 1, 50, Rarity.RARE, "Sunrise", "#F59E0B", is_secret=True),
    _achievement("Night Owl", "Complete a task after 10 PM", Category.SPECIAL, Kind.RARE_EVENT,
                 Metric.NIGHT_OWL, 1, 50, Rarity.RARE, "Moon", "#8B5CF6", is_secret=True),
    _achievement("Weekend Warrior", "Complete 10 tasks on weekends", Category.SPECIAL, Kind.CUMULATIVE,
                 Metric.WEEKEND_TASKS, 10, 150, Rarity.RARE, "Calendar", "#EF4444"),

    # Levels
    _achievement("Level Up", "Reach level 5", Category.MASTERY, Kind.MILESTONE,
                 Metric.LEVEL, 5, 100, Rarity.COMMON, "TrendingUp", "#10B981"),
    _achievement("Rising Star", "Reach level 10", Category.MASTERY, Kind.MILESTONE,
                 Metric.LEVEL, 10, 250, Rarity.UNCOMMON, "Star", "#F59E0B"),
    _achievement("Elite Player", "Reach level 25", Category.MASTERY, Kind.MILESTONE,
                 Metric.LEVEL, 25, 500, Rarity.RARE, "Award", "#8B5CF6"),
    _achievement("Legendary Master", "Reach level 50", Category.MASTERY, Kind.MILESTONE,
                 Metric.LEVEL, 50, 1500, Rarity.LEGENDARY, "Crown", "#EF4444"),
]


def default_challenges(now: Optional[datetime] = None) -> List[Challenge]:
    """Challenge catalog with windows starting at `now`"""
    if now is None:
        now = now_utc()

    def challenge(
        name: str,
        description: str,
        kind: ChallengeType,
        category: ChallengeCategory,
        difficulty: ChallengeDifficulty,
        requirement: int,
        hours: int,
        points_reward: int,
        experience_reward: int,
        badge_reward: Optional[str] = None
    ) -> Challenge:
        return Challenge(
            name=name,
            description=description,
            type=kind,
            category=category,
            difficulty=difficulty,
            requirement=requirement,
            time_limit_hours=hours,
            points_reward=points_reward,
            experience_reward=experience_reward,
            badge_reward=badge_reward,
            start_date=now,
            end_date=now + timedelta(hours=hours),
        )

    return [
        challenge("Daily Grind", "Complete 3 tasks today", ChallengeType.DAILY,
                  ChallengeCategory.TASK_COMPLETION, ChallengeDifficulty.EASY, 3, 24, 50, 25),
        challenge("Focus Sprint", "Complete 2 Pomodoro sessions today", ChallengeType.DAILY,
                  ChallengeCategory.POMODORO_FOCUS, ChallengeDifficulty.EASY, 2, 24, 40, 20),
        challenge("Productivity Beast", "Complete 25 tasks this week", ChallengeType.WEEKLY,
                  ChallengeCategory.TASK_COMPLETION, ChallengeDifficulty.MEDIUM, 25, 168, 300, 150,
                  badge_reward="productivity-beast"),
        challenge("Deep Focus", "Complete 15 Pomodoro sessions this week", ChallengeType.WEEKLY,
                  ChallengeCategory.POMODORO_FOCUS, ChallengeDifficulty.MEDIUM, 15, 168, 250, 125),
        challenge("Code Warrior", "Solve 10 DSA questions this week", ChallengeType.WEEKLY,
                  ChallengeCategory.DSA_PRACTICE, ChallengeDifficulty.HARD, 10, 168, 400, 200,
                  badge_reward="code-warrior"),
        challenge("Consistency Master", "Maintain a 20-day streak this month", ChallengeType.MONTHLY,
                  ChallengeCategory.CONSISTENCY, ChallengeDifficulty.HARD, 20, 720, 1000, 500,
                  badge_reward="consistency-master"),
    ]


async def seed_catalog(
    database: Database,
    now: Optional[datetime] = None,
    reset_windows: bool = False
) -> dict:
    """
    Upsert the default achievements and challenges

    Challenges already in the catalog keep their start/end dates unless
    reset_windows is set.

    Returns:
        {'achievements': int, 'challenges': int} counts written
    """
    challenges = default_challenges(now)

    async with database.transaction() as conn:
        for achievement in DEFAULT_ACHIEVEMENTS:
            await queries.upsert_achievement_definition(
                conn, achievement.model_dump(exclude={"id"}, mode="json")
            )
        for challenge in challenges:
            await queries.upsert_challenge_definition(
                conn, challenge.model_dump(exclude={"id"}), reset_window=reset_windows
            )

    logger.info(
        f"Seeded {len(DEFAULT_ACHIEVEMENTS)} achievements and {len(challenges)} challenges"
    )
    return {"achievements": len(DEFAULT_ACHIEVEMENTS), "challenges": len(challenges)}

"""
Database queries - Re-export all functions.

Every function takes an open psycopg connection as its first argument so
that callers decide the transaction boundary.

Module organization:
- users.py: User progression fields, activity counters, badges, external counts
- points.py: Point ledger
- streaks.py: Per-type streak rows
- achievements.py: Achievement catalog and per-user progress
- leaderboard.py: Leaderboard buckets and ranks
- settings.py: Game settings singleton
- challenges.py: Challenge catalog and per-user progress
"""

# User operations
from progression.db.queries.users import (
    create_user,
    get_user,
    lock_user,
    increment_activity_counter,
    increment_user_points,
    update_user_experience,
    update_user_streak_mirror,
    add_profile_badge,
    count_workspace_memberships,
    count_chat_messages,
    count_notes,
)

# Point ledger
from progression.db.queries.points import (
    insert_point_transaction,
    sum_points_since,
    get_point_transactions,
    count_point_transactions,
    get_point_type_summary,
)

# Streaks
from progression.db.queries.streaks import (
    lock_user_streak,
    save_user_streak,
    get_user_streaks,
)

# Achievements
from progression.db.queries.achievements import (
    get_all_achievements,
    get_achievement,
    get_achievements_by_metric,
    get_user_achievement_rows,
    upsert_achievement_progress,
    increment_achievement_progress,
    mark_achievement_completed,
    get_completed_user_achievements,
    upsert_achievement_definition,
)

# Leaderboards
from progression.db.queries.leaderboard import (
    upsert_leaderboard_score,
    recompute_bucket_ranks,
    get_top_entries,
    get_user_entries,
)

# Settings
from progression.db.queries.settings import (
    get_game_settings,
    insert_game_settings,
)

# Challenges
from progression.db.queries.challenges import (
    get_active_challenges,
    get_challenge,
    get_user_challenges,
    insert_user_challenge,
    lock_open_user_challenges,
    update_user_challenge_progress,
    complete_user_challenge,
    upsert_challenge_definition,
)

__all__ = [
    "create_user",
    "get_user",
    "lock_user",
    "increment_activity_counter",
    "increment_user_points",
    "update_user_experience",
    "update_user_streak_mirror",
    "add_profile_badge",
    "count_workspace_memberships",
    "count_chat_messages",
    "count_notes",
    "insert_point_transaction",
    "sum_points_since",
    "get_point_transactions",
    "count_point_transactions",
    "get_point_type_summary",
    "lock_user_streak",
    "save_user_streak",
    "get_user_streaks",
    "get_all_achievements",
    "get_achievement",
    "get_achievements_by_metric",
    "get_user_achievement_rows",
    "upsert_achievement_progress",
    "increment_achievement_progress",
    "mark_achievement_completed",
    "get_completed_user_achievements",
    "upsert_achievement_definition",
    "upsert_leaderboard_score",
    "recompute_bucket_ranks",
    "get_top_entries",
    "get_user_entries",
    "get_game_settings",
    "insert_game_settings",
    "get_active_challenges",
    "get_challenge",
    "get_user_challenges",
    "insert_user_challenge",
    "lock_open_user_challenges",
    "update_user_challenge_progress",
    "complete_user_challenge",
    "upsert_challenge_definition",
]

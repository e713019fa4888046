"""Database schema for the progression engine"""
import logging

from progression.db.connection import Database

logger = logging.getLogger(__name__)


SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT,
        points BIGINT NOT NULL DEFAULT 0,
        experience BIGINT NOT NULL DEFAULT 0,
        level INTEGER NOT NULL DEFAULT 1,
        current_streak INTEGER NOT NULL DEFAULT 0,
        longest_streak INTEGER NOT NULL DEFAULT 0,
        total_tasks_completed INTEGER NOT NULL DEFAULT 0,
        total_pomodoro_completed INTEGER NOT NULL DEFAULT 0,
        total_dsa_completed INTEGER NOT NULL DEFAULT 0,
        profile_badges TEXT[] NOT NULL DEFAULT '{}',
        last_activity_date DATE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS point_transactions (
        id BIGSERIAL PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id),
        points INTEGER NOT NULL,
        type TEXT NOT NULL,
        description TEXT NOT NULL,
        related_id TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_point_transactions_user_created ON point_transactions (user_id, created_at DESC)",
    """
    CREATE TABLE IF NOT EXISTS user_streaks (
        id BIGSERIAL PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id),
        streak_type TEXT NOT NULL,
        current_count INTEGER NOT NULL DEFAULT 0,
        longest_count INTEGER NOT NULL DEFAULT 0,
        last_active_date DATE,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (user_id, streak_type)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS achievements (
        id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
        name TEXT NOT NULL UNIQUE,
        description TEXT NOT NULL,
        category TEXT NOT NULL,
        type TEXT NOT NULL,
        metric TEXT NOT NULL,
        requirement INTEGER NOT NULL,
        points_reward INTEGER NOT NULL DEFAULT 0,
        badge_id TEXT,
        rarity TEXT NOT NULL DEFAULT 'COMMON',
        is_secret BOOLEAN NOT NULL DEFAULT FALSE,
        icon_name TEXT,
        icon_color TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_achievements (
        id BIGSERIAL PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id),
        achievement_id TEXT NOT NULL REFERENCES achievements(id),
        progress INTEGER NOT NULL DEFAULT 0,
        is_completed BOOLEAN NOT NULL DEFAULT FALSE,
        unlocked_at TIMESTAMPTZ,
        UNIQUE (user_id, achievement_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS leaderboard_entries (
        id BIGSERIAL PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id),
        leaderboard_type TEXT NOT NULL,
        period TEXT NOT NULL,
        period_start TIMESTAMPTZ NOT NULL,
        period_end TIMESTAMPTZ NOT NULL,
        score BIGINT NOT NULL DEFAULT 0,
        rank INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (user_id, leaderboard_type, period, period_start)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_leaderboard_bucket ON leaderboard_entries (leaderboard_type, period, period_start, rank)",
    """
    CREATE TABLE IF NOT EXISTS game_settings (
        id INTEGER PRIMARY KEY DEFAULT 1 CHECK (id = 1),
        experience_per_level INTEGER NOT NULL,
        experience_multiplier DOUBLE PRECISION NOT NULL,
        max_level INTEGER NOT NULL,
        streak_bonus_threshold INTEGER NOT NULL,
        streak_bonus_multiplier DOUBLE PRECISION NOT NULL,
        daily_points_limit INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS challenges (
        id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
        name TEXT NOT NULL UNIQUE,
        description TEXT NOT NULL,
        type TEXT NOT NULL,
        category TEXT NOT NULL,
        difficulty TEXT NOT NULL,
        requirement INTEGER NOT NULL,
        time_limit_hours INTEGER NOT NULL,
        points_reward INTEGER NOT NULL DEFAULT 0,
        experience_reward INTEGER NOT NULL DEFAULT 0,
        badge_reward TEXT,
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        start_date TIMESTAMPTZ NOT NULL,
        end_date TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_challenges (
        id BIGSERIAL PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id),
        challenge_id TEXT NOT NULL REFERENCES challenges(id),
        progress INTEGER NOT NULL DEFAULT 0,
        is_completed BOOLEAN NOT NULL DEFAULT FALSE,
        started_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        completed_at TIMESTAMPTZ,
        UNIQUE (user_id, challenge_id)
    )
    """,
    # Owned by the workspace/chat/notes features; read here for achievement counts
    """
    CREATE TABLE IF NOT EXISTS workspace_memberships (
        id BIGSERIAL PRIMARY KEY,
        user_id TEXT NOT NULL,
        workspace_id TEXT NOT NULL,
        UNIQUE (user_id, workspace_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS chat_messages (
        id BIGSERIAL PRIMARY KEY,
        sender_id TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notes (
        id BIGSERIAL PRIMARY KEY,
        author_id TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
]


async def ensure_schema(database: Database) -> None:
    """Create all tables and indexes if they don't exist"""
    async with database.transaction() as conn:
        async with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                await cur.execute(statement)
    logger.info(f"Schema ensured ({len(SCHEMA_STATEMENTS)} statements)")

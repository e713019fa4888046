"""Game settings loading (create-with-defaults-if-absent)"""

import logging

from progression.db import queries
from progression.db.connection import Database
from progression.models.settings import GameSettings

logger = logging.getLogger(__name__)


async def load_game_settings(database: Database) -> GameSettings:
    """
    Load the settings singleton, creating it with defaults if it's missing.

    Call once at startup and pass the result to each component. Concurrent
    first calls are safe: the insert is conflict-tolerant and every caller
    reads back the stored row.
    """
    async with database.transaction() as conn:
        row = await queries.get_game_settings(conn)
        if row is None:
            row = await queries.insert_game_settings(conn, GameSettings().model_dump())
            logger.info("Created game settings with defaults")

    settings = GameSettings.model_validate(row)
    if not settings.is_curve_valid:
        logger.error(f"Stored game settings have an invalid experience curve: {settings}")

    logger.info(
        f"Game settings loaded: {settings.experience_per_level} XP/level x{settings.experience_multiplier}, "
        f"max level {settings.max_level}, streak bonus every {settings.streak_bonus_threshold} days, "
        f"daily limit {settings.daily_points_limit}"
    )
    return settings

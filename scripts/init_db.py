#!/usr/bin/env python3
"""
Database Initialization Script

Prepares a database for the progression engine:
- Creates all tables and indexes (idempotent)
- Creates the game settings row with defaults if it's missing
- Upserts the default achievement and challenge catalog by name

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --skip-catalog
    python scripts/init_db.py --reset-challenge-windows

Requirements:
    - Database connection configured (DATABASE_URL env var)
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from progression.config import validate_config
from progression.db.connection import db
from progression.db.schema import ensure_schema
from progression.gamification.achievement_catalog import seed_catalog
from progression.gamification.settings_provider import load_game_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main(skip_catalog: bool = False, reset_challenge_windows: bool = False) -> int:
    validate_config()

    try:
        await db.init_pool()
        logger.info("Database connection established")
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        return 1

    try:
        await ensure_schema(db)
        settings = await load_game_settings(db)
        logger.info(f"Game settings: {settings.model_dump()}")

        if not skip_catalog:
            counts = await seed_catalog(db, reset_windows=reset_challenge_windows)
            logger.info(
                f"Catalog ready: {counts['achievements']} achievements, "
                f"{counts['challenges']} challenges"
            )

        logger.info("Database initialization complete")
        return 0

    except Exception as e:
        logger.error(f"Initialization failed: {e}", exc_info=True)
        return 1

    finally:
        await db.close_pool()
        logger.info("Database connection closed")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the progression database")
    parser.add_argument(
        "--skip-catalog",
        action="store_true",
        help="Create schema and settings only, without seeding achievements/challenges"
    )
    parser.add_argument(
        "--reset-challenge-windows",
        action="store_true",
        help="Restart the start/end dates of challenges that already exist"
    )
    args = parser.parse_args()

    exit_code = asyncio.run(main(
        skip_catalog=args.skip_catalog,
        reset_challenge_windows=args.reset_challenge_windows
    ))
    sys.exit(exit_code)

"""Global test fixtures and utilities for progression engine tests"""
import pytest
from contextlib import ExitStack
from datetime import datetime
from unittest.mock import patch
from zoneinfo import ZoneInfo

from progression.models.settings import GameSettings
from progression.services.container import ServiceContainer
from tests.fakes import FakeClock, FakeDatabase, FakeQueries

# Every module that talks to the database through `progression.db.queries`
QUERY_MODULES = [
    "progression.gamification.points_ledger",
    "progression.gamification.xp_system",
    "progression.gamification.streak_system",
    "progression.gamification.achievement_system",
    "progression.gamification.leaderboard_system",
    "progression.gamification.challenges",
    "progression.gamification.dashboards",
    "progression.gamification.settings_provider",
    "progression.gamification.achievement_catalog",
    "progression.services.activity_recorder",
]

# Wednesday mid-morning
FIXED_NOW = datetime(2025, 3, 12, 10, 30, tzinfo=ZoneInfo("UTC"))


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def fixed_now():
    """Reference instant shared by clock-driven tests"""
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    """Settable clock; assign clock.now to move time"""
    return FakeClock(fixed_now)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def fake_db(fake_queries):
    """Database double that rolls the in-memory store back on failure"""
    return FakeDatabase(store=fake_queries)


@pytest.fixture
def fake_queries(clock):
    """In-memory query layer patched into every component module"""
    fake = FakeQueries(clock=clock)
    with ExitStack() as stack:
        for module in QUERY_MODULES:
            stack.enter_context(patch(f"{module}.queries", fake))
        yield fake


# ============================================================================
# Settings & Services Fixtures
# ============================================================================

@pytest.fixture
def game_settings():
    """Default curve: 1000 XP x1.5, max level 100, bonus every 7 days, cap 1000/day"""
    return GameSettings(
        experience_per_level=1000,
        experience_multiplier=1.5,
        max_level=100,
        streak_bonus_threshold=7,
        streak_bonus_multiplier=1.5,
        daily_points_limit=1000,
    )


@pytest.fixture
async def services(fake_db, game_settings, clock, fake_queries):
    """Fully wired container over the in-memory query layer"""
    container = ServiceContainer(db=fake_db, settings=game_settings, clock=clock)
    yield container
    # Finish background work while the fake query layer is still patched in
    await container.dispatcher.drain()


# ============================================================================
# User & Auth Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def test_user(fake_queries, test_user_id):
    """A freshly created user with zeroed progression fields"""
    fake_queries.add_user(test_user_id, username="tester")
    return test_user_id


@pytest.fixture
def test_api_key():
    """Standard test API key"""
    return "test_api_key_12345"

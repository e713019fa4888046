"""
Service Container - Dependency Injection Container

Builds the progression components once, sharing the database, the
GameSettings loaded at startup and the clock. Components are created lazily
on first access.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from progression.db.connection import Database
from progression.models.settings import GameSettings
from progression.utils.datetime_helpers import Clock, now_local

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Infrastructure dependencies (db, settings, clock) are injected.
    """

    # Infrastructure dependencies (injected)
    db: Database
    settings: GameSettings
    clock: Clock = now_local

    # Services (lazy-loaded via properties)
    _calculator: Optional[object] = field(default=None, init=False, repr=False)
    _ledger: Optional[object] = field(default=None, init=False, repr=False)
    _experience: Optional[object] = field(default=None, init=False, repr=False)
    _streaks: Optional[object] = field(default=None, init=False, repr=False)
    _achievements: Optional[object] = field(default=None, init=False, repr=False)
    _leaderboards: Optional[object] = field(default=None, init=False, repr=False)
    _challenges: Optional[object] = field(default=None, init=False, repr=False)
    _stats: Optional[object] = field(default=None, init=False, repr=False)
    _dispatcher: Optional[object] = field(default=None, init=False, repr=False)
    _recorder: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def calculator(self):
        """Get LevelCalculator instance (lazy-loaded)"""
        if self._calculator is None:
            from progression.gamification.level_calculator import LevelCalculator
            self._calculator = LevelCalculator(self.settings)
        return self._calculator

    @property
    def ledger(self):
        """Get PointsLedger instance (lazy-loaded)"""
        if self._ledger is None:
            from progression.gamification.points_ledger import PointsLedger
            self._ledger = PointsLedger(self.db, self.settings, self.clock)
            logger.debug("PointsLedger instantiated")
        return self._ledger

    @property
    def experience(self):
        """Get ExperienceService instance (lazy-loaded)"""
        if self._experience is None:
            from progression.gamification.xp_system import ExperienceService
            self._experience = ExperienceService(self.db, self.calculator, self.ledger)
            logger.debug("ExperienceService instantiated")
        return self._experience

    @property
    def streaks(self):
        """Get StreakTracker instance (lazy-loaded)"""
        if self._streaks is None:
            from progression.gamification.streak_system import StreakTracker
            self._streaks = StreakTracker(self.db, self.settings, self.ledger, self.clock)
            logger.debug("StreakTracker instantiated")
        return self._streaks

    @property
    def achievements(self):
        """Get AchievementEngine instance (lazy-loaded)"""
        if self._achievements is None:
            from progression.gamification.achievement_system import AchievementEngine
            self._achievements = AchievementEngine(self.db, self.ledger)
            logger.debug("AchievementEngine instantiated")
        return self._achievements

    @property
    def leaderboards(self):
        """Get LeaderboardService instance (lazy-loaded)"""
        if self._leaderboards is None:
            from progression.gamification.leaderboard_system import LeaderboardService
            self._leaderboards = LeaderboardService(self.db, self.clock)
            logger.debug("LeaderboardService instantiated")
        return self._leaderboards

    @property
    def challenges(self):
        """Get ChallengeService instance (lazy-loaded)"""
        if self._challenges is None:
            from progression.gamification.challenges import ChallengeService
            self._challenges = ChallengeService(self.db, self.ledger, self.experience, self.clock)
            logger.debug("ChallengeService instantiated")
        return self._challenges

    @property
    def stats(self):
        """Get StatsService instance (lazy-loaded)"""
        if self._stats is None:
            from progression.gamification.dashboards import StatsService
            self._stats = StatsService(self.db, self.calculator, self.leaderboards)
        return self._stats

    @property
    def dispatcher(self):
        """Get BackgroundDispatcher instance (lazy-loaded)"""
        if self._dispatcher is None:
            from progression.services.background import BackgroundDispatcher
            self._dispatcher = BackgroundDispatcher()
        return self._dispatcher

    @property
    def recorder(self):
        """Get ActivityRecorder instance (lazy-loaded)"""
        if self._recorder is None:
            from progression.services.activity_recorder import ActivityRecorder
            self._recorder = ActivityRecorder(
                self.db,
                self.ledger,
                self.experience,
                self.streaks,
                self.achievements,
                self.leaderboards,
                self.challenges,
                self.dispatcher,
                self.clock,
            )
            logger.debug("ActivityRecorder instantiated")
        return self._recorder


# Global container instance (initialized by the API lifespan)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() at startup before using services."
        )
    return _container


def init_container(db: Database, settings: GameSettings, clock: Clock = now_local) -> ServiceContainer:
    """
    Initialize the global service container.

    Should be called once after the pool is open and GameSettings are loaded.
    """
    global _container

    _container = ServiceContainer(db=db, settings=settings, clock=clock)

    logger.info("Service container initialized")
    return _container

"""
Challenge System

Time-boxed objectives a user opts into. Progress comes from recorded
activities:
- TASK_COMPLETION, POMODORO_FOCUS, DSA_PRACTICE: +1 per matching activity
- CONSISTENCY: the user's current daily streak (never decreases)

Completion is one-way and pays the challenge's points (CHALLENGE_COMPLETED),
experience and badge once.
"""

from datetime import datetime
import logging
from typing import List, Optional

from progression.db import queries
from progression.db.connection import Database
from progression.exceptions import ChallengeError
from progression.gamification.points_ledger import PointsLedger
from progression.gamification.xp_system import ExperienceService
from progression.models.challenge import (
    Challenge,
    ChallengeCategory,
    ChallengeWithProgress,
    UserChallenge,
)
from progression.models.points import PointType
from progression.observability.metrics import challenges_completed_total
from progression.utils.datetime_helpers import Clock, now_local

logger = logging.getLogger(__name__)


class ChallengeService:
    """Challenge listing, opt-in and progress tracking"""

    def __init__(
        self,
        db: Database,
        ledger: PointsLedger,
        experience: ExperienceService,
        clock: Clock = now_local
    ):
        self.db = db
        self.ledger = ledger
        self.experience = experience
        self.clock = clock

    async def list_challenges(self, user_id: str, now: Optional[datetime] = None) -> List[ChallengeWithProgress]:
        """Active challenges with the user's progress on each"""
        if now is None:
            now = self.clock()

        async with self.db.connection() as conn:
            challenges = await queries.get_active_challenges(conn, now)
            progress = {
                row["challenge_id"]: row
                for row in await queries.get_user_challenges(conn, user_id)
            }

        listing = []
        for row in challenges:
            record = progress.get(row["id"])
            listing.append(ChallengeWithProgress(
                challenge=Challenge.model_validate(row),
                progress=record["progress"] if record else 0,
                is_started=record is not None,
                is_completed=record["is_completed"] if record else False,
                started_at=record["started_at"] if record else None,
                completed_at=record["completed_at"] if record else None,
            ))
        return listing

    async def start_challenge(self, user_id: str, challenge_id: str) -> Optional[UserChallenge]:
        """
        Opt a user into a challenge

        Returns:
            The new UserChallenge, or None if the user doesn't exist

        Raises:
            ChallengeError: unknown, inactive, outside its window, or already started
        """
        now = self.clock()

        async with self.db.transaction() as conn:
            if await queries.get_user(conn, user_id) is None:
                logger.warning(f"Cannot start challenge: user {user_id} not found")
                return None

            row = await queries.get_challenge(conn, challenge_id)
            if row is None:
                raise ChallengeError(
                    f"Challenge '{challenge_id}' not found",
                    challenge_id=challenge_id,
                    user_id=user_id
                )

            challenge = Challenge.model_validate(row)
            if not challenge.is_active or not (challenge.start_date <= now <= challenge.end_date):
                raise ChallengeError(
                    f"Challenge '{challenge.name}' is not currently active",
                    challenge_id=challenge_id,
                    user_id=user_id
                )

            created = await queries.insert_user_challenge(conn, user_id, challenge_id)
            if created is None:
                raise ChallengeError(
                    f"You're already working on '{challenge.name}'",
                    challenge_id=challenge_id,
                    user_id=user_id
                )

        logger.info(f"User {user_id} started challenge '{challenge.name}'")
        return UserChallenge.model_validate(created)

    async def record_progress(
        self,
        user_id: str,
        category: ChallengeCategory,
        amount: int = 1,
        value: Optional[int] = None
    ) -> List[str]:
        """
        Advance the user's open challenges of one category

        Args:
            user_id: User who was active
            category: Which challenges the activity counts toward
            amount: Increment for counting challenges
            value: Absolute progress (CONSISTENCY: the current streak)

        Returns:
            Ids of challenges completed by this call
        """
        now = self.clock()
        completed = []

        async with self.db.transaction() as conn:
            if await queries.lock_user(conn, user_id) is None:
                return []

            open_challenges = await queries.lock_open_user_challenges(conn, user_id, category, now)

            for row in open_challenges:
                new_progress = value if value is not None else row["progress"] + amount
                new_progress = max(row["progress"], new_progress)

                if new_progress < row["requirement"]:
                    await queries.update_user_challenge_progress(
                        conn, user_id, row["challenge_id"], new_progress
                    )
                    continue

                won = await queries.complete_user_challenge(
                    conn, user_id, row["challenge_id"], row["requirement"]
                )
                if not won:
                    continue

                if row["points_reward"]:
                    await self.ledger.award(
                        user_id,
                        row["points_reward"],
                        PointType.CHALLENGE_COMPLETED,
                        f"Completed challenge: {row['name']}",
                        related_id=row["challenge_id"],
                        conn=conn,
                    )
                if row["experience_reward"]:
                    await self.experience.award_experience(
                        user_id,
                        row["experience_reward"],
                        f"Completed challenge: {row['name']}",
                        conn=conn,
                    )
                if row["badge_reward"]:
                    await queries.add_profile_badge(conn, user_id, row["badge_reward"])

                completed.append(row["challenge_id"])
                challenges_completed_total.labels(category=category.value).inc()
                logger.info(f"User {user_id} completed challenge '{row['name']}'")

        return completed

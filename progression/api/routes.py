"""API routes for the progression engine"""
import logging
from datetime import datetime
from enum import Enum
from typing import Optional, Type
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from progression.api.models import (
    TaskCompletionRequest, PomodoroCompletionRequest, DSACompletionRequest,
    AchievementResponse, LeaderboardResponse, ChallengeListResponse,
    HealthCheckResponse,
)
from progression.api.auth import verify_api_key
from progression.api.middleware import limiter
from progression.db.connection import db
from progression.exceptions import UserNotFoundError, ValidationError
from progression.models.activity import ActivityResult, UserStats
from progression.models.challenge import UserChallenge
from progression.models.leaderboard import LeaderboardPeriod, LeaderboardType
from progression.models.points import PointHistory, PointType
from progression.services.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter()


def get_services() -> ServiceContainer:
    """Service container dependency"""
    return get_container()


def _parse_enum(enum_cls: Type[Enum], value: str, field: str):
    try:
        return enum_cls(value.upper())
    except ValueError:
        raise ValidationError(
            f"must be one of {', '.join(m.value for m in enum_cls)}",
            field=field,
            value=value
        )


# ==========================================
# Read endpoints
# ==========================================

@router.get("/api/v1/users/{user_id}/stats", response_model=UserStats)
@limiter.limit("30/minute")
async def get_stats(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Level, experience, points, streaks, achievements and ranks (Rate limit: 30/minute)"""
    stats = await services.stats.get_user_stats(user_id)
    if stats is None:
        raise UserNotFoundError(user_id)
    return stats


@router.get("/api/v1/users/{user_id}/points", response_model=PointHistory)
@limiter.limit("30/minute")
async def get_points_history(
    request: Request,
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: Optional[str] = None,
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Paginated point transactions with per-type totals (Rate limit: 30/minute)"""
    point_type = _parse_enum(PointType, type, "type") if type else None

    history = await services.ledger.get_history(user_id, page=page, limit=limit, point_type=point_type)
    if history is None:
        raise UserNotFoundError(user_id)
    return history


@router.get("/api/v1/users/{user_id}/achievements", response_model=AchievementResponse)
@limiter.limit("30/minute")
async def get_achievements_endpoint(
    request: Request,
    user_id: str,
    include_locked: bool = False,
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Get user achievements (Rate limit: 30/minute)"""
    data = await services.achievements.get_user_achievements(user_id, include_locked=include_locked)
    if data is None:
        raise UserNotFoundError(user_id)
    return AchievementResponse(user_id=user_id, **data)


@router.get("/api/v1/leaderboard", response_model=LeaderboardResponse)
@limiter.limit("60/minute")
async def get_leaderboard(
    request: Request,
    type: str = "TOTAL_POINTS",
    period: str = "WEEKLY",
    limit: int = Query(10, ge=1, le=100),
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Top entries of the current period (Rate limit: 60/minute)"""
    leaderboard_type = _parse_enum(LeaderboardType, type, "type")
    leaderboard_period = _parse_enum(LeaderboardPeriod, period, "period")

    entries = await services.leaderboards.get_top(leaderboard_type, leaderboard_period, limit)
    return LeaderboardResponse(
        leaderboard_type=leaderboard_type.value,
        period=leaderboard_period.value,
        entries=entries
    )


# ==========================================
# Challenges
# ==========================================

@router.get("/api/v1/users/{user_id}/challenges", response_model=ChallengeListResponse)
@limiter.limit("30/minute")
async def list_challenges(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Active challenges with the user's progress (Rate limit: 30/minute)"""
    challenges = await services.challenges.list_challenges(user_id)
    return ChallengeListResponse(user_id=user_id, challenges=challenges)


@router.post(
    "/api/v1/users/{user_id}/challenges/{challenge_id}/start",
    response_model=UserChallenge,
    status_code=status.HTTP_201_CREATED
)
@limiter.limit("20/minute")
async def start_challenge(
    request: Request,
    user_id: str,
    challenge_id: str,
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Opt into a challenge (Rate limit: 20/minute)"""
    started = await services.challenges.start_challenge(user_id, challenge_id)
    if started is None:
        raise UserNotFoundError(user_id)
    return started


# ==========================================
# Activity recording
# ==========================================

@router.post("/api/v1/users/{user_id}/activities/task", response_model=ActivityResult)
@limiter.limit("60/minute")
async def record_task(
    request: Request,
    user_id: str,
    body: TaskCompletionRequest,
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Record a completed task (Rate limit: 60/minute)"""
    result = await services.recorder.record_task_completion(user_id, body.task_id, body.task_title)
    if result is None:
        raise UserNotFoundError(user_id)
    return result


@router.post("/api/v1/users/{user_id}/activities/pomodoro", response_model=ActivityResult)
@limiter.limit("60/minute")
async def record_pomodoro(
    request: Request,
    user_id: str,
    body: PomodoroCompletionRequest,
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Record a finished Pomodoro session (Rate limit: 60/minute)"""
    result = await services.recorder.record_pomodoro_completion(
        user_id, body.duration_minutes, body.workspace_id
    )
    if result is None:
        raise UserNotFoundError(user_id)
    return result


@router.post("/api/v1/users/{user_id}/activities/dsa", response_model=ActivityResult)
@limiter.limit("60/minute")
async def record_dsa(
    request: Request,
    user_id: str,
    body: DSACompletionRequest,
    api_key: str = Depends(verify_api_key),
    services: ServiceContainer = Depends(get_services)
):
    """Record a solved DSA question (Rate limit: 60/minute)"""
    result = await services.recorder.record_dsa_question_completion(
        user_id, body.question_id, body.question_title, body.difficulty
    )
    if result is None:
        raise UserNotFoundError(user_id)
    return result


# ==========================================
# Operations
# ==========================================

@router.get("/health", response_model=HealthCheckResponse)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint (Rate limit: 60/minute for monitoring systems)"""
    try:
        async with db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()

        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "degraded",
        database=db_status,
        timestamp=datetime.now()
    )


@router.get("/metrics")
async def metrics_endpoint():
    """Expose Prometheus metrics"""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )

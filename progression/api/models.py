"""Pydantic models for API request/response validation"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime

from progression.models.challenge import ChallengeWithProgress
from progression.models.leaderboard import LeaderboardEntry


class TaskCompletionRequest(BaseModel):
    """A task was completed"""
    task_id: str = Field(..., description="Task identifier")
    task_title: str = Field(..., description="Task title, used in the ledger description")


class PomodoroCompletionRequest(BaseModel):
    """A Pomodoro session finished"""
    duration_minutes: int = Field(..., description="Session length in minutes (must be positive)")
    workspace_id: Optional[str] = Field(default=None, description="Workspace the session ran in")


class DSACompletionRequest(BaseModel):
    """A coding-practice question was solved"""
    question_id: str = Field(..., description="Question identifier")
    question_title: str = Field(..., description="Question title")
    difficulty: str = Field(..., description="EASY, MEDIUM or HARD")


class AchievementResponse(BaseModel):
    """Response with achievement info"""
    user_id: str
    unlocked: List[Dict[str, Any]]
    locked: List[Dict[str, Any]] = Field(default_factory=list)
    total_unlocked: int
    total_achievements: int
    total_points_from_achievements: int


class LeaderboardResponse(BaseModel):
    """Top entries of the current bucket"""
    leaderboard_type: str
    period: str
    entries: List[LeaderboardEntry]


class ChallengeListResponse(BaseModel):
    """Active challenges with the user's progress"""
    user_id: str
    challenges: List[ChallengeWithProgress]


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    database: str = Field(..., description="Database connection status")
    timestamp: datetime = Field(..., description="Check timestamp")


"""
Prometheus metrics definitions for the progression engine.

This module defines all metrics collected by the application, organized by category:
- HTTP/API metrics: Request counts, latency
- Progression metrics: Points, levels, streaks, achievements, leaderboards
- Activity metrics: Recorded activities and their latency
- Background work: Failures of best-effort tasks

Metrics are exposed at the /metrics endpoint for Prometheus scraping.
"""

import logging
import os
import sys

from prometheus_client import Counter, Gauge, Histogram, Info

logger = logging.getLogger(__name__)

# =============================================================================
# HTTP/API Metrics
# =============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests received",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

# =============================================================================
# Progression Metrics
# =============================================================================

points_awarded_total = Counter(
    "points_awarded_total",
    "Total points written to the ledger",
    ["point_type"],
)

level_ups_total = Counter(
    "level_ups_total",
    "Total levels gained across all users",
)

streak_updates_total = Counter(
    "streak_updates_total",
    "Streak updates by outcome",
    ["streak_type", "outcome"],  # outcome: started/continued/reset/unchanged
)

achievements_unlocked_total = Counter(
    "achievements_unlocked_total",
    "Total achievements unlocked",
    ["category"],
)

leaderboard_updates_total = Counter(
    "leaderboard_updates_total",
    "Total leaderboard score updates",
    ["leaderboard_type"],
)

challenges_completed_total = Counter(
    "challenges_completed_total",
    "Total challenges completed",
    ["category"],
)

# =============================================================================
# Activity Metrics
# =============================================================================

activities_recorded_total = Counter(
    "activities_recorded_total",
    "Total activities recorded",
    ["activity"],  # activity: task/pomodoro/dsa
)

activity_record_duration_seconds = Histogram(
    "activity_record_duration_seconds",
    "Time spent on the critical path of recording an activity",
    ["activity"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# =============================================================================
# Background Work
# =============================================================================

background_task_failures_total = Counter(
    "background_task_failures_total",
    "Best-effort background tasks that raised",
    ["task"],
)

background_tasks_in_progress = Gauge(
    "background_tasks_in_progress",
    "Best-effort background tasks currently running",
)

# =============================================================================
# Application Info
# =============================================================================

app_info = Info(
    "app_info",
    "Application information",
)


def init_metrics():
    """
    Initialize metrics with application information.

    This should be called once at application startup to set
    static metadata about the application.
    """
    app_info.info(
        {
            "version": os.getenv("GIT_COMMIT_SHA", "dev")[:7],
            "python_version": f"{sys.version_info.major}.{sys.version_info.minor}",
        }
    )

    logger.info("Prometheus metrics initialized")

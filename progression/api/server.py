"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from progression.api.routes import router
from progression.api.middleware import setup_cors, setup_rate_limiting
from progression.config import LOG_LEVEL, validate_config
from progression.db.connection import db
from progression.exceptions import (
    ChallengeError,
    DatabaseError,
    ProgressionError,
    RecordNotFoundError,
    ValidationError,
)
from progression.gamification.settings_provider import load_game_settings
from progression.observability.metrics import init_metrics
from progression.observability.metrics_middleware import setup_metrics_middleware
from progression.services.container import init_container

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)

logger = logging.getLogger(__name__)

BACKGROUND_DRAIN_TIMEOUT_SECONDS = 10


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting API server...")
    validate_config()
    init_metrics()
    await db.init_pool()
    logger.info("Database pool initialized")

    settings = await load_game_settings(db)
    container = init_container(db, settings)

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    await container.dispatcher.drain(timeout=BACKGROUND_DRAIN_TIMEOUT_SECONDS)
    await db.close_pool()
    logger.info("Database pool closed")


def _status_for(exc: ProgressionError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, RecordNotFoundError):
        return 404
    if isinstance(exc, ChallengeError):
        return 409
    if isinstance(exc, DatabaseError):
        return 503
    return 500


def create_api_application() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Progression Engine API",
        description="Points, levels, streaks, achievements, challenges and leaderboards",
        version="1.0.0",
        lifespan=lifespan
    )

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)
    setup_metrics_middleware(app)

    # Include routes
    app.include_router(router)

    @app.exception_handler(ProgressionError)
    async def progression_exception_handler(request: Request, exc: ProgressionError):
        return JSONResponse(status_code=_status_for(exc), content=exc.to_dict())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)}
        )

    logger.info("FastAPI application created")

    return app

"""Main entry point for the progression API server"""
import logging
import asyncio
import uvicorn

from progression.config import validate_config, LOG_LEVEL, API_HOST, API_PORT
from progression.api.server import create_api_application

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point"""
    logger.info("Validating configuration...")
    validate_config()

    app = create_api_application()
    server = uvicorn.Server(
        uvicorn.Config(app, host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())
    )

    logger.info(f"Serving progression API on {API_HOST}:{API_PORT}")
    await server.serve()
    logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())

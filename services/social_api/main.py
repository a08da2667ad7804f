"""
Main application for the Social API Service.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.utils.exceptions import describe_validation_error
from shared.utils.redis_manager import RedisManager
from services.social_api.router import user_router, thought_router
from services.social_api.repository import SocialRepository

# Configure logging
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(redis_manager: Optional[RedisManager] = None) -> FastAPI:
    """Create the Social API application.

    Args:
        redis_manager: Optional Redis manager. One is built from the REDIS_*
            environment variables if not provided.

    Returns:
        FastAPI: The application.
    """
    app = FastAPI(
        title="Social API Service",
        description="Service for managing users, their thoughts and reactions",
        version="0.1.0"
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # For development; restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Initialize Redis manager and repository
    redis_manager = redis_manager or RedisManager(
        host=os.environ.get("REDIS_HOST", "localhost"),
        port=int(os.environ.get("REDIS_PORT", 6379)),
        db=int(os.environ.get("REDIS_DB", 0)),
        password=os.environ.get("REDIS_PASSWORD")
    )
    app.state.redis_manager = redis_manager
    app.state.repository = SocialRepository(redis_manager)

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Render HTTP errors as {"message": ...}."""
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Report unparseable request bodies and parameters as 400."""
        logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"message": describe_validation_error("Request", exc.errors())}
        )

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        """Handle exceptions."""
        logger.error(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error"}
        )

    # Startup event
    @app.on_event("startup")
    async def startup_event():
        """Initialize the service on startup."""
        logger.info("Starting Social API Service")

        # Connect to Redis
        await redis_manager.connect()

        # Initialize repository
        await app.state.repository.initialize()

        logger.info("Social API Service started successfully")

    # Shutdown event
    @app.on_event("shutdown")
    async def shutdown_event():
        """Clean up resources on shutdown."""
        logger.info("Shutting down Social API Service")
        await redis_manager.disconnect()

    # Health check endpoint, registered before the user routes so that
    # "/health" is not taken for a user id
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        redis_healthy = bool(redis_manager.redis_client) and await redis_manager.redis_client.ping()

        return {
            "status": "healthy" if redis_healthy else "unhealthy",
            "redis": "connected" if redis_healthy else "disconnected"
        }

    # Thought routes go first so that "/thoughts" is not taken for a user id
    app.include_router(thought_router)
    app.include_router(user_router)

    return app


app = create_app()


# Run the application
if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("SOCIAL_API_PORT", 8000))
    host = os.environ.get("SOCIAL_API_HOST", "0.0.0.0")

    uvicorn.run(
        "services.social_api.main:app",
        host=host,
        port=port,
        reload=True
    )

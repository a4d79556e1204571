"""
Main FastAPI application.

WHY: This is the entry point for the application. It configures logging,
middleware, routes and exception handlers.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from protosync.api import users
from protosync.core.config import settings
from protosync.core.exception_handlers import (
    app_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from protosync.core.exceptions import AppException
from protosync.db.session import get_db
from protosync.middleware import RequestContextMiddleware

logger = logging.getLogger(__name__)

_started_at = time.monotonic()


def configure_logging() -> None:
    """Configure root logging once, using LOG_LEVEL from settings."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    WHY: Factory pattern allows easier testing with different configurations.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="User management REST API",
        version=settings.VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Every error leaves the API in the response envelope
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(RequestContextMiddleware)

    # Only the configured frontend may call the API from a browser
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def health_check(session: AsyncSession = Depends(get_db)) -> dict:
        """
        Health check endpoint.

        WHY: Reports database reachability without failing the request, so
        load balancers can tell "process up, database down" apart.
        """
        try:
            await session.execute(text("SELECT 1"))
            database = {"status": "connected", "connected": True}
        except (SQLAlchemyError, OSError) as exc:
            logger.warning(f"Health check database probe failed: {exc}")
            database = {"status": "disconnected", "connected": False}

        return {
            "status": "healthy" if database["connected"] else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - _started_at, 3),
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "database": database,
        }

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/api/docs",
            "users": f"{settings.API_PREFIX}/users",
        }

    app.include_router(users.router, prefix=settings.API_PREFIX)

    return app


configure_logging()

# Imported by uvicorn and by the test client
app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Development entry point: python -m protosync.main
    uvicorn.run(
        "protosync.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )

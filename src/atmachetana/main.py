"""
Atma-Chethana FastAPI Application

Student counselling appointment management backend.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from atmachetana import __version__
from atmachetana.auth import ensure_default_admin
from atmachetana.config import Settings, settings
from atmachetana.core.database import Database
from atmachetana.core.errors import register_exception_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Startup:
    - Verify database connection
    - Seed the default admin if there is no staff account yet

    Shutdown:
    - Dispose of the connection pool
    """
    database: Database = app.state.database
    app_settings: Settings = app.state.settings
    logger.info(f"{app_settings.APP_NAME} starting ({app_settings.ENVIRONMENT})")

    try:
        await database.ping()
    except Exception:
        logger.exception("Database connection failed")
        raise
    logger.info("Database connection verified")

    async with database.session_factory() as session:
        await ensure_default_admin(session, app_settings)

    logger.info(f"{app_settings.APP_NAME} ready")

    yield

    logger.info(f"{app_settings.APP_NAME} shutting down")
    await database.dispose()
    logger.info("Shutdown complete")


def create_app(
    app_settings: Settings | None = None, database: Database | None = None
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the environment)
        database: Storage handle (defaults to one built from settings)

    Returns:
        Configured FastAPI app instance
    """
    app_settings = app_settings or settings
    logging.basicConfig(
        level=app_settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Student counselling appointment management API",
        version=__version__,
        docs_url="/docs" if not app_settings.is_production else None,
        redoc_url="/redoc" if not app_settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.database = database or Database.from_settings(app_settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if app_settings.is_local else [app_settings.APP_URL],
        allow_credentials=not app_settings.is_local,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app, debug=app_settings.DEBUG)

    @app.get("/", tags=["Health"])
    async def root() -> dict[str, Any]:
        """Service information."""
        return {
            "success": True,
            "message": f"{app_settings.APP_NAME} API",
            "version": __version__,
            "environment": app_settings.ENVIRONMENT,
        }

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Liveness check."""
        return {
            "status": "OK",
            "message": f"{app_settings.APP_NAME} API is running",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": __version__,
        }

    # Register API routers
    from atmachetana.api.v1 import appointments, auth, email, stats, students

    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(students.router, prefix="/api/students", tags=["Students"])
    app.include_router(appointments.router, prefix="/api/appointments", tags=["Appointments"])
    app.include_router(email.router, prefix="/api/email", tags=["Email"])
    app.include_router(stats.router, prefix="/api/stats", tags=["Stats"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "atmachetana.main:app",
        host="0.0.0.0",  # nosec B104 - Intentional for containerized deployment
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional, Sequence

import uvicorn
from fastapi import Depends, FastAPI, status
from fastapi.responses import JSONResponse

from students_api.api.deps import get_repository
from students_api.api.v1.router import api_router
from students_api.core.config import Settings, must_load
from students_api.core.database import create_db_engine, init_db
from students_api.core.exceptions import StorageError
from students_api.core.handlers import register_exception_handlers
from students_api.core.logging import setup_logging
from students_api.services.student.student import StudentRepository, StudentStorage

logger = logging.getLogger(__name__)

# Seconds in-flight requests get to finish after SIGINT/SIGTERM
SHUTDOWN_GRACE_PERIOD = 5


def create_app(settings: Settings, repository: StudentStorage) -> FastAPI:
    """
    Build the application around an already initialized repository.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.project_name} started (env={settings.env})")
        yield
        logger.info("Shutting down server")

    app = FastAPI(
        title=settings.project_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.student_repository = repository

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/")
    def root():
        """
        Health check endpoint
        """
        return {
            "message": f"Welcome to {settings.project_name}",
            "docs": "/docs",
            "version": settings.app_version
        }

    @app.get("/health/ready")
    def readiness_check(repository: StudentStorage = Depends(get_repository)):
        """Readiness probe, includes database connectivity."""
        if not repository.ping():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "reason": "database_unavailable"},
            )
        return {"status": "ready", "checks": {"database": "healthy"}}

    return app


def run(argv: Optional[Sequence[str]] = None) -> None:
    """Load config, open the store and serve until SIGINT/SIGTERM."""
    settings = must_load(argv)
    setup_logging(settings.log_level)

    engine = create_db_engine(settings.get_database_url(), echo=settings.db_echo_sql)
    try:
        init_db(engine)
    except StorageError as e:
        logger.critical(f"Failed to connect to database: {e.error}")
        sys.exit(1)

    logger.info(f"Database initialized (env={settings.env}, storage_path={settings.storage_path})")

    app = create_app(settings, StudentRepository(engine))

    logger.info(f"Server started at {settings.http_server.address}")
    try:
        uvicorn.run(
            app,
            host=settings.http_server.host,
            port=settings.http_server.port,
            timeout_graceful_shutdown=SHUTDOWN_GRACE_PERIOD,
        )
    finally:
        engine.dispose()
        logger.info("Server shutdown successfully")


if __name__ == "__main__":
    run()

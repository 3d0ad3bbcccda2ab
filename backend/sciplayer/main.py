"""SciPlayer API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map every failure to {"error": ...}
    - The store is opened in the lifespan before the first request and closed on
      shutdown; SchemaInitError at startup stops the process
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sciplayer.api.error_handlers import register_error_handlers
from sciplayer.api.routes import devices, health
from sciplayer.config import get_settings
from sciplayer.core.errors import SchemaInitError
from sciplayer.infrastructure.observability import install_access_log, setup_logging
from sciplayer.infrastructure.playlist_store import init_store, shutdown_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    try:
        await init_store(
            settings.db_path,
            busy_timeout_seconds=settings.busy_timeout_seconds,
            operation_timeout_seconds=settings.operation_timeout_seconds,
        )
    except SchemaInitError as e:
        logger.critical(
            f"Failed to initialize playlist store: {e.message}",
            extra={"error_code": e.code},
        )
        raise
    logger.info("SciPlayer API started")
    try:
        yield
    finally:
        await shutdown_store()
        logger.info("SciPlayer API shut down")


def create_app() -> FastAPI:
    app = FastAPI(title="SciPlayer API", version="1.0.0", lifespan=lifespan)
    install_access_log(app)
    app.include_router(health.router)
    app.include_router(devices.router)
    register_error_handlers(app)
    return app


app = create_app()

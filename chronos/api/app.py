"""Standalone FastAPI app serving the chronos debug endpoints.

The app installs a debug-mode chronos context whose sink writes every
delivered record to the log, which makes it handy for watching measures from
a browser or curl while developing instrumentation.
"""

import json
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI

from chronos.core.config import settings
from chronos.core.logging import configure_logging, get_logger
from chronos.services.instance import create_chronos, get_chronos, set_chronos
from chronos.services.null_chronos import NullChronos
from .debug import router as debug_router

logger = get_logger("chronos.api")


def log_sink(record: Dict[str, Any]) -> None:
    """Sink writing each delivered record as one JSON log line."""
    logger.info(f"measure {json.dumps(record, default=str, sort_keys=True)}")


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Startup
    configure_logging()
    set_chronos(create_chronos(sink=log_sink, debug_mode=True))
    get_chronos().measure_from_navigation_start("server_ready")
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} debug server started")

    yield

    # Shutdown
    chronos = get_chronos()
    if chronos.sink is not None:
        # The loop is going away, so deliver now rather than in an idle slice
        try:
            chronos.flush()
        except Exception as e:
            logger.error(f"Error flushing measures on shutdown: {e}")
    set_chronos(NullChronos())
    logger.info("Debug server stopped")


def create_app() -> FastAPI:
    app = FastAPI(title=f"{settings.PROJECT_NAME} Debug API", version=settings.VERSION, lifespan=lifespan)
    app.include_router(debug_router, prefix="/api/v1")
    return app


app = create_app()

"""
Main FastAPI application entry point.
"""

import asyncio
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from around.core.config import settings
from around.core.env_validation import validate_or_exit
from around.core.errors import RecordStoreError, register_exception_handlers
from around.core.logging import get_logger, setup_logging
from around.core.preflight import PreflightMiddleware
from around.db.bootstrap import ensure_indices
from around.db.search import (
    RecordStore,
    close_record_store,
    get_record_store,
    init_record_store,
)

# Setup logging
setup_logging()
logger = get_logger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan events.

    Startup validates the environment and makes sure both indices exist;
    any failure here stops the process before it serves traffic.
    """
    logger.info(
        "starting_application",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        version=VERSION,
    )

    validate_or_exit()

    store = init_record_store()
    try:
        await asyncio.to_thread(ensure_indices, store)
    except RecordStoreError as e:
        logger.critical("index_bootstrap_failed", error=str(e))
        sys.exit(1)

    yield

    logger.info("shutting_down_application")
    close_record_store()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Geo-tagged posts - Backend API",
    version=VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Answers every OPTIONS request and stamps the CORS headers
app.add_middleware(PreflightMiddleware, allowed_origins=settings.ALLOWED_ORIGINS)

register_exception_handlers(app)


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check(store: RecordStore = Depends(get_record_store)) -> JSONResponse:
    """
    Health check endpoint for monitoring.
    Includes record store connectivity check.
    """
    store_healthy = await asyncio.to_thread(store.ping)

    return JSONResponse(
        status_code=200 if store_healthy else 503,
        content={
            "status": "healthy" if store_healthy else "unhealthy",
            "app_name": settings.APP_NAME,
            "environment": settings.APP_ENV,
            "version": VERSION,
            "record_store": "connected" if store_healthy else "disconnected",
        }
    )


# Include API routers
from around.api import api_router  # noqa: E402
app.include_router(api_router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "around.main:app",
        host="0.0.0.0",
        port=8080,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )

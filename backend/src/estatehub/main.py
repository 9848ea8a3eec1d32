"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from estatehub import __version__
from estatehub.api.errors import register_exception_handlers
from estatehub.api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from estatehub.api.router import api_router
from estatehub.config import settings
from estatehub.context import build_context
from estatehub.database import check_db, close_db
from estatehub.logging import setup_logging

logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.sentry_dsn:
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    The database is required; a failed connectivity check aborts startup.
    The token store is optional and degrades to 503s on auth routes.
    """
    setup_logging()
    await check_db()
    logger.info("Database connected")

    app.state.context = await build_context(settings)
    try:
        yield
    finally:
        await app.state.context.aclose()
        await close_db()


app = FastAPI(
    title="EstateHub API",
    description="Real estate marketplace with moderated agents and listings",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug_enabled else None,
    redoc_url="/api/redoc" if settings.debug_enabled else None,
    openapi_url="/api/openapi.json" if settings.debug_enabled else None,
)

register_exception_handlers(app)

app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]
# Must wrap the logging middleware so the request ID is set
app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]

# CORS middleware
app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    from estatehub.logging import get_uvicorn_log_config

    uvicorn.run(
        "estatehub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_config=get_uvicorn_log_config(),
    )

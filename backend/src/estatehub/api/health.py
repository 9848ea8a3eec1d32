"""Health check endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from estatehub.api.deps import ContextDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health_check():
    """Basic health check - just confirms the service is running."""
    return {"status": "ok"}


@router.get("/db")
async def health_check_db(session: SessionDep):
    try:
        await session.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except Exception as e:
        logger.error(f"Database health check failed: {e!r}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "disconnected"},
        )


@router.get("/cache")
async def health_check_cache(ctx: ContextDep):
    """Token store connectivity. Sessions and OTPs are unavailable without it."""
    if await ctx.token_store.ping():
        return {"status": "ok", "cache": "connected", "rate_limiting": ctx.rate_limiter.enabled}
    return JSONResponse(
        status_code=503,
        content={"status": "error", "cache": "disconnected", "rate_limiting": False},
    )


@router.get("/ready")
async def readiness_check(session: SessionDep, ctx: ContextDep):
    """Readiness check - 503 if the database or token store is unavailable."""
    errors = {}

    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Database readiness check failed: {e!r}")
        db_status = "disconnected"
        errors["database"] = str(e)

    if await ctx.token_store.ping():
        cache_status = "connected"
    else:
        cache_status = "disconnected"
        errors["cache"] = "Token store unavailable"

    response = {
        "status": "degraded" if errors else "ok",
        "database": db_status,
        "cache": cache_status,
    }
    if errors:
        return JSONResponse(status_code=503, content=response)
    return response

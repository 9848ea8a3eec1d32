"""Main API router that aggregates all route modules."""

from fastapi import APIRouter

from estatehub.api import admin, auth, health, properties
from estatehub.schemas.common import ErrorResponse

# Documented failure envelope shared by every route
ERROR_RESPONSES: dict[int | str, dict] = {
    status_code: {"model": ErrorResponse}
    for status_code in (400, 401, 403, 404, 429, 500, 503)
}

api_router = APIRouter(responses=ERROR_RESPONSES)

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/user", tags=["user"])
api_router.include_router(properties.router, prefix="/property", tags=["property"])

# Admin endpoints
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])

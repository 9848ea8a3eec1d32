"""Pydantic schemas for API requests/responses."""

from estatehub.schemas.common import (
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    Pagination,
    PaginationParams,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "MessageResponse",
    "Pagination",
    "PaginationParams",
]

"""Common schemas used across the API."""

import math

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """Pagination query parameters."""

    page: int = Field(default=1, ge=1, description="1-based page number")
    limit: int = Field(default=10, ge=1, le=100, description="Number of items per page")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    """Pagination block returned alongside list results."""

    current_page: int
    total_pages: int
    total: int

    @classmethod
    def build(cls, params: PaginationParams, total: int) -> "Pagination":
        return cls(
            current_page=params.page,
            total_pages=math.ceil(total / params.limit) if total else 0,
            total=total,
        )


class ErrorDetail(BaseModel):
    """A single violated field."""

    field: str
    message: str
    code: str | None = None


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    message: str
    errors: list[ErrorDetail] | None = None


class MessageResponse(BaseModel):
    """Standard success envelope."""

    message: str

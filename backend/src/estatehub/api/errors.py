"""Exception handlers that render every failure as ``{message, errors?}``."""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from estatehub.config import settings
from estatehub.schemas.common import ErrorDetail, ErrorResponse
from estatehub.services.errors import AppError

logger = logging.getLogger(__name__)


def _field_name(loc: tuple) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI adds
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def _error_message(err: dict) -> str:
    ctx = err.get("ctx") or {}
    if err.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return err.get("msg", "Invalid value")


def format_validation_errors(exc: RequestValidationError) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field=_field_name(tuple(err.get("loc", ()))),
            message=_error_message(err),
            code=err.get("type"),
        )
        for err in exc.errors()
    ]


def error_body(message: str, errors: list[ErrorDetail] | None = None) -> dict:
    return ErrorResponse(message=message, errors=errors or None).model_dump(exclude_none=True)


async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    details = [ErrorDetail.model_validate(e) for e in exc.errors] if exc.errors else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, details))


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = format_validation_errors(exc)
    message = errors[0].message if errors else "Validation Error"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, errors),
    )


async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}", exc_info=exc)
    content = error_body("Internal Server Error")
    if not settings.is_production:
        content["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)

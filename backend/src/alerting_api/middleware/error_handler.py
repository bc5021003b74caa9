"""Global error handling to render errors as ``{code, message}`` bodies."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from alerting_api.config import get_settings
from alerting_api.exceptions import AlertingAPIError
from alerting_api.utils.secure_logging import log_error

logger = logging.getLogger(__name__)

# Error codes by HTTP status for errors raised outside the service layer
CODES_BY_STATUS = {
    400: "invalid",
    401: "unauthorized",
    403: "forbidden",
    404: "not found",
    405: "method not allowed",
    409: "conflict",
    422: "invalid",
    500: "internal error",
    502: "unavailable",
}


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """Build an error response."""
    return JSONResponse(status_code=status_code, content={"code": code, "message": message})


async def alerting_api_exception_handler(request: Request, exc: AlertingAPIError) -> JSONResponse:
    """Handle service-layer errors.

    Args:
        request: FastAPI request
        exc: Service-layer error

    Returns:
        JSONResponse carrying the error code and message
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.code} for {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{exc.code} for {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle routing and framework HTTP exceptions."""
    code = CODES_BY_STATUS.get(exc.status_code, "internal error")
    message = exc.detail if isinstance(exc.detail, str) else code
    return error_response(exc.status_code, code, message)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors as invalid arguments."""
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    messages = []
    for error in exc.errors()[:3]:
        loc = error.get("loc", [])
        field = loc[-1] if loc else "request"
        messages.append(f"{field}: {error.get('msg', 'invalid value')}")
    return error_response(status.HTTP_400_BAD_REQUEST, "invalid", "; ".join(messages) or "invalid request")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking information."""
    settings = get_settings()
    log_error(logger, f"Unhandled exception for {request.method} {request.url.path}", exc)
    message = f"{type(exc).__name__}: {exc}" if settings.debug else "Internal server error"
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error", message)


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy exceptions without leaking database details."""
    log_error(logger, f"Database error for {request.method} {request.url.path}", exc)

    if isinstance(exc, IntegrityError):
        lowered = str(exc).lower()
        if "unique" in lowered or "duplicate" in lowered:
            return error_response(status.HTTP_409_CONFLICT, "conflict", "Resource already exists")
        if "foreign key" in lowered:
            return error_response(status.HTTP_400_BAD_REQUEST, "invalid", "Referenced resource not found")

    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error", "Database error occurred")

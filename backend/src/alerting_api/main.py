"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from alerting_api.config import get_settings
from alerting_api.exceptions import AlertingAPIError
from alerting_api.middleware.error_handler import (
    alerting_api_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)
from alerting_api.routers import notification_rules
from alerting_api.services.platform import PlatformClient

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, max-age=0"
        response.headers.setdefault("Vary", "Accept, Authorization, Origin")
        # Strict Transport Security (HSTS) - only in production
        if not get_settings().debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    logger.info(
        f"Starting {settings.app_name} ({settings.environment}) "
        f"with {settings.rule_store_backend} rule store"
    )
    yield
    # Close shared HTTP clients to release connections
    await PlatformClient.close_client()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_settings()

    app = FastAPI(
        title=config.app_name,
        version="0.1.0",
        description="Notification Rule Management API",
        lifespan=lifespan,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
    )

    # Errors are rendered as {code, message}
    app.add_exception_handler(AlertingAPIError, alerting_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    allowed_origins = []
    for origin in config.cors_origins_list:
        # Reject wildcard origins when credentials are enabled (security requirement)
        if origin == "*":
            raise ValueError(
                "CORS_ORIGINS cannot contain '*' wildcard when allow_credentials=True. "
                "Specify explicit origins."
            )
        if origin.startswith("http://") or origin.startswith("https://"):
            allowed_origins.append(origin)

    # Security headers middleware (runs last on request, first on response)
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - added last so it runs first on incoming requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.include_router(
        notification_rules.router,
        prefix=f"{config.api_prefix}/notificationRules",
        tags=["Notification Rules"],
    )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()

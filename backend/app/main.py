"""
Main FastAPI application.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.error_responses import ApiError, ErrorMessages
from app.core.logging_config import setup_logging
from app.middleware import (
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from app.models import database

# Initialize logging configuration at startup
setup_logging()

logger = logging.getLogger(__name__)


def init_sentry(
    dsn: str,
    traces_sample_rate: float,
    environment: str,
    release: str,
) -> bool:
    """
    Initialize Sentry error tracking.

    Returns:
        True if Sentry was initialized, False when no DSN is configured
    """
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=traces_sample_rate,
        environment=environment,
        release=release,
        send_default_pii=False,
        integrations=[StarletteIntegration(), FastApiIntegration()],
    )
    logger.info(
        f"Sentry initialized for environment '{environment}' "
        f"with {traces_sample_rate:.0%} trace sampling"
    )
    return True


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan event handler.

    - On startup: initializes Sentry and connects the database
    - On shutdown: releases the connection pool
    """
    init_sentry(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        environment=settings.ENV,
        release=settings.APP_VERSION,
    )

    database.connect()
    if database.is_sqlite:
        # Local development database; server databases are provisioned separately
        database.create_all()
    logger.info("Database connected")

    yield

    database.dispose()
    logger.info("Database connections released")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


# OpenAPI tags metadata
tags_metadata = [
    {
        "name": "health",
        "description": "Health check endpoint for monitoring application status",
    },
    {
        "name": "auth",
        "description": "Login and current-user endpoints",
    },
    {
        "name": "tests",
        "description": "Test authoring, taking, submission, results and review",
    },
    {
        "name": "departments",
        "description": "Department management (changes are admin-only)",
    },
]


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        description=(
            "**SuiteTest API** - backend for an online testing platform.\n\n"
            "* Test authoring by admins and employers\n"
            "* Timed test taking with saved progress\n"
            "* One-time submission with automatic grading\n\n"
            "## Authentication\n\n"
            "Endpoints require a JWT Bearer token obtained from "
            f"`{settings.API_PREFIX}/auth/login`."
        ),
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        openapi_tags=tags_metadata,
    )

    # Security: Explicitly list allowed methods and headers instead of wildcards
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    # HSTS is enabled only in production to avoid issues with local development
    app.add_middleware(
        SecurityHeadersMiddleware,
        hsts_enabled=settings.ENV == "production",
    )

    app.add_middleware(RequestSizeLimitMiddleware, max_body_size=1024 * 1024)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        """Typed domain errors carry their own status and user-facing message."""
        if exc.status_code >= 500:
            logger.error(
                "Server error on %s %s: %s",
                request.method,
                request.url.path,
                exc.message,
            )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Framework errors (404 routes, missing bearer token) use the same envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """
        Malformed request bodies are client errors (400).
        """
        errors = [
            {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "")),
            }
            for error in exc.errors()
        ]
        logger.info(
            "Validation failed on %s %s: %s",
            request.method,
            request.url.path,
            errors,
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": ErrorMessages.INVALID_REQUEST,
                "errors": errors,
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions.

        A unique error_id is logged with the full exception so support can
        trace it; the client only sees a generic message.
        """
        error_id = str(uuid.uuid4())

        logger.exception(
            f"Unhandled exception [error_id={error_id}]: {exc}",
            extra={"error_id": error_id},
        )
        sentry_sdk.capture_exception(exc)

        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorMessages.UNEXPECTED_ERROR
        )

    return app


app = create_application()


@app.get("/")
def root():
    """
    Root endpoint.
    """
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": f"{settings.API_PREFIX}/docs",
    }

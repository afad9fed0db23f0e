"""
Security middleware for response headers and request size limits.
"""
import json

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from typing import Callable

# Restrictive CSP for a JSON API (no script execution needed)
_CSP_DIRECTIVES = "; ".join(
    [
        "default-src 'self'",
        "script-src 'none'",
        "object-src 'none'",
        "frame-ancestors 'none'",
    ]
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add standard security headers to every response.

    HSTS is only sent when ``hsts_enabled`` is set, which the application
    does in production.
    """

    def __init__(
        self,
        app: ASGIApp,
        hsts_enabled: bool = False,
        hsts_max_age: int = 31536000,  # 1 year
    ):
        super().__init__(app)
        self.hsts_enabled = hsts_enabled
        self.hsts_max_age = hsts_max_age

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = _CSP_DIRECTIVES

        if self.hsts_enabled:
            response.headers[
                "Strict-Transport-Security"
            ] = f"max-age={self.hsts_max_age}; includeSubDomains"

        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject request bodies larger than ``max_body_size`` bytes with 413.

    Only the Content-Length header is checked.
    """

    def __init__(self, app: ASGIApp, max_body_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if (
            content_length
            and content_length.isdigit()
            and int(content_length) > self.max_body_size
        ):
            return Response(
                content=json.dumps(
                    {"success": False, "message": "Request body too large"}
                ),
                status_code=413,
                media_type="application/json",
            )

        return await call_next(request)

"""
Request Middleware Module
=========================

Starlette middleware applied to every request.

Features:
- Request ID generation for tracing (X-Request-ID)
- Request timing (X-Process-Time) and request logging
- Security headers
- Login rate limiting

Note:
    Authentication itself happens in the dependency layer
    (app.core.dependencies.auth), not here.
"""

import time
import uuid
from collections import defaultdict
from typing import Callable, Dict, List

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.core.config import settings
from app.core.exceptions import LoginRateLimitError
from app.core.logging import get_logger, request_id_context, security_logger

# Initialize logger
logger = get_logger(__name__)

_QUIET_PATHS = {"/", "/health", "/ready"}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id and log its outcome.

    An incoming X-Request-ID header is reused so traces can span the
    frontend and the API.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_context.set(request_id)
        request.state.request_id = request_id

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request processing error",
                error=str(e),
                path=request.url.path,
                method=request.method,
            )
            request_id_context.reset(token)
            raise

        process_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        self._log_request(request, response, process_time)
        request_id_context.reset(token)
        return response

    def _log_request(self, request: Request, response: Response, process_time: float) -> None:
        if request.url.path in _QUIET_PATHS:
            return

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "ip_address": request.client.host if request.client else None,
        }

        if response.status_code >= 500:
            logger.error("Request completed with error", **log_data)
        elif response.status_code >= 400:
            logger.warning("Request completed with client error", **log_data)
        else:
            logger.info("Request completed", **log_data)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all responses.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy
    - Content-Security-Policy
    - Strict-Transport-Security (in production)
    """

    # Swagger UI and ReDoc load assets from cdn.jsdelivr.net
    _DOCS_PATHS = {"/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if settings.DEBUG and request.url.path in self._DOCS_PATHS:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com; "
                "frame-ancestors 'none';"
            )
        else:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; frame-ancestors 'none';"
            )

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class LoginRateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window limit on POST /auth/login per client IP.

    Note:
        State is per process. Several workers each keep their own window.
    """

    WINDOW_SECONDS = 60

    def __init__(self, app: ASGIApp, max_requests: int = None):
        super().__init__(app)
        self.max_requests = max_requests or settings.LOGIN_RATE_LIMIT
        self._requests: Dict[str, List[float]] = defaultdict(list)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        if request.method == "POST" and request.url.path == "/auth/login":
            client_ip = request.client.host if request.client else "unknown"
            if self._is_rate_limited(client_ip):
                security_logger.log_rate_limit_exceeded(
                    ip_address=client_ip,
                    endpoint=request.url.path,
                )
                error = LoginRateLimitError(retry_after=self.WINDOW_SECONDS)
                return JSONResponse(
                    status_code=error.status_code,
                    content={"message": error.message, "details": error.details},
                    headers={"Retry-After": str(self.WINDOW_SECONDS)},
                )

        return await call_next(request)

    def _is_rate_limited(self, key: str) -> bool:
        now = time.time()
        window_start = now - self.WINDOW_SECONDS

        recent = [ts for ts in self._requests[key] if ts > window_start]
        if len(recent) >= self.max_requests:
            self._requests[key] = recent
            return True

        recent.append(now)
        self._requests[key] = recent
        return False

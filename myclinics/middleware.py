import time
import uuid
import logging
from typing import Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .core.config import settings
from .exceptions import create_error_response
from . import messages
from .application.ports.rate_limiter import RateLimiter
from .infrastructure.rate_limit.factory import get_rate_limiter

logger = logging.getLogger(__name__)

# Paths that never count against the per-IP limit
EXEMPT_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def _client_ip(request: Request) -> str:
    # Peer address only; X-Forwarded-For is client controlled
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed per-minute budget for each client IP, shared with the auth throttles' backend."""

    def __init__(self, app: ASGIApp, limiter: Optional[RateLimiter] = None, per_minute: Optional[int] = None):
        super().__init__(app)
        self.limiter = limiter
        self.per_minute = per_minute or settings.RATE_LIMIT_PER_MINUTE

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path.startswith(EXEMPT_PATHS):
            return await call_next(request)

        ip = _client_ip(request)
        limiter = self.limiter or get_rate_limiter()
        if limiter.allow(f"ip:{ip}", self.per_minute, 60):
            return await call_next(request)

        logger.warning(f"Too many requests from {ip} on {request.url.path}")
        body = create_error_response(messages.message_for(429, messages.RATE_LIMITED), messages.RATE_LIMITED)
        return JSONResponse(status_code=429, content=body, headers={"Retry-After": "60"})


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f}ms, {_client_ip(request)})"
        )
        response.headers["X-Request-ID"] = request_id
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            detail = messages.status_message(500)
            if settings.DEBUG:
                detail = f"{detail} ({e})"
            return JSONResponse(status_code=500, content=create_error_response(detail))


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, max_bytes: Optional[int] = None):
        super().__init__(app)
        # A clinic form may carry a full gallery of images
        self.max_bytes = max_bytes or settings.MAX_FILE_SIZE * max(settings.MAX_CLINIC_IMAGES, 1)

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            return JSONResponse(status_code=413, content=create_error_response(messages.FILE_TOO_LARGE))
        return await call_next(request)

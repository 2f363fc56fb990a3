"""
HTTP Middleware
===============

Request ID tagging, HTTPS promotion and access logging for every request,
API and static files alike.
"""

import time
import uuid
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from starlette.responses import RedirectResponse, Response

from wavesynth.config.logging import get_access_logger
from wavesynth.config.settings import Settings

CallNext = Callable[[Request], Awaitable[Response]]

# Paths answered on plain HTTP so load balancer probes keep working
PROMOTION_EXEMPT_PATHS = frozenset({"/health"})


def effective_scheme(request: Request) -> str:
    """Scheme the client used; X-Forwarded-Proto wins over the connection scheme."""
    forwarded = request.headers.get("x-forwarded-proto")
    if forwarded:
        return forwarded.split(",")[0].strip().lower()
    return request.url.scheme


def https_url(request: Request) -> str:
    """HTTPS equivalent of the requested URL, keeping host, path and query."""
    host = request.headers.get("host") or request.url.netloc
    target = f"https://{host}{request.url.path}"
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return target


def promotion_target(request: Request) -> Optional[str]:
    """Redirect location for a request that must move to HTTPS, else None."""
    if request.url.path in PROMOTION_EXEMPT_PATHS:
        return None
    if effective_scheme(request) != "http":
        return None
    return https_url(request)


def install_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Register middleware on ``app``.

    Starlette runs the last registered middleware first, so the order here is
    innermost to outermost: HTTPS promotion, access logging, request ID.
    """
    if settings.https_promote:
        hsts_value = f"max-age={settings.hsts_max_age}; preload"

        @app.middleware("http")
        async def promote_https(request: Request, call_next: CallNext) -> Response:
            target = promotion_target(request)
            if target is not None:
                return RedirectResponse(target, status_code=301)

            response = await call_next(request)
            if effective_scheme(request) == "https":
                response.headers["Strict-Transport-Security"] = hsts_value
            return response

    if settings.enable_logging:
        access_logger = get_access_logger()

        @app.middleware("http")
        async def log_access(request: Request, call_next: CallNext) -> Response:
            started = time.perf_counter()
            status_code = 500
            try:
                response = await call_next(request)
                status_code = response.status_code
                return response
            finally:
                access_logger.info(
                    "request",
                    method=request.method,
                    path=request.url.path,
                    query=request.url.query or None,
                    status=status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000.0, 3),
                    client=request.client.host if request.client else None,
                    scheme=effective_scheme(request),
                    request_id=getattr(request.state, "request_id", None),
                )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next: CallNext) -> Response:
        """Add request ID to all requests."""
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

"""Middleware: CORS, rate limiting and request accounting."""

import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address

from playback_relay.config import Settings
from playback_relay.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

# Module level so routers can decorate endpoints at import time.
# No default limits: only the command endpoints opt in.
limiter = Limiter(key_func=get_remote_address)


def setup_middleware(app: FastAPI, settings: Settings) -> Limiter:
    """Attach CORS, the limiter and the request counter to the app.

    Returns:
        The shared limiter
    """
    origins = settings.get_cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    log_with_context(logger, "info", "CORS configured", origins=origins, event_type="security_config")

    app.state.limiter = limiter

    @app.middleware("http")
    async def account_request(request: Request, call_next):
        """Count requests for /debug and log each one with its duration."""
        app.state.request_count = getattr(app.state, "request_count", 0) + 1
        started = time.perf_counter()
        response = await call_next(request)
        log_with_context(
            logger,
            "debug",
            f"{request.method} {request.url.path} {response.status_code}",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
            event_type="http_access",
        )
        return response

    return limiter

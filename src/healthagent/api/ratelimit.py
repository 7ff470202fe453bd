"""Rate limiting configuration for API endpoints.

Uses slowapi with in-memory storage; every chat request costs up to two model
calls, so the chat endpoint is limited per caller.
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from healthagent.shared.logging import get_logger

logger = get_logger(__name__)

RATE_LIMIT_CHAT = "20/minute"
RATE_LIMIT_HEALTH = "60/minute"


def _get_rate_limit_key(request: Request) -> str:
    """Get rate limit key based on identity or IP.

    Admitted identities are keyed by identity, everyone else by IP address.
    """
    identity = getattr(request.state, "identity", None)
    if identity:
        return f"user:{identity}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=_get_rate_limit_key,
    storage_uri="memory://",
    strategy="fixed-window",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Custom handler for rate limit exceeded errors."""
    retry_after = getattr(exc, "retry_after", 60)
    logger.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        method=request.method,
        limit=str(exc.detail),
    )

    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests. Please wait a moment and try again."},
        headers={"Retry-After": str(retry_after)},
    )

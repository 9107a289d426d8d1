"""
Rate Limiting

slowapi limiter shared by the routers, backed by Redis when REDIS_URL is
set and by process memory otherwise. Requests are keyed by client address.

Usage:
    from utils.rate_limit import limiter, RATE_LIMITS

    @router.post("/upload")
    @limiter.limit(RATE_LIMITS["upload"])
    async def upload_form(request: Request, ...):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from config.settings import settings
from utils.logging import get_logger

logger = get_logger(__name__)


# Limits per endpoint group
RATE_LIMITS = {
    "voice": "60/minute",      # each call reaches the chat-completion upstream
    "upload": "20/minute",     # parse and transform a whole document
    "export": "30/minute",
    "default": "200/minute",
}


def get_client_ip(request: Request) -> str:
    """
    Address a request is counted against.

    X-Forwarded-For is client supplied, so its first hop is used only when
    TRUST_PROXY_HEADERS says a reverse proxy in front of us rewrites it.
    """
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        if forwarded:
            return forwarded
    return get_remote_address(request)


def _storage_uri() -> str:
    if settings.REDIS_URL:
        logger.info("Rate limiter using Redis storage")
        return settings.REDIS_URL
    logger.info("Rate limiter using in-memory storage")
    return "memory://"


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=[RATE_LIMITS["default"]],
    storage_uri=_storage_uri(),
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 with the limit that was hit and a Retry-After hint."""
    logger.warning(f"Rate limit exceeded for {get_client_ip(request)} on {request.url.path}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitExceeded",
            "message": f"Too many requests. Limit: {exc.detail}",
            "retry_after": "60 seconds",
        },
        headers={"Retry-After": "60"},
    )

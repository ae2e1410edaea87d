import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

logger = structlog.get_logger()


def client_key_func(request: Request) -> str:
    """Rate limit key: the original client behind the reverse proxy.

    Uses the first ``X-Forwarded-For`` hop when present, else the peer address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    client = forwarded_for.split(",")[0].strip()
    return client or get_remote_address(request)


limiter = Limiter(key_func=client_key_func)


async def rate_limit_handler(request: Request, exc: Exception):
    """Return 429 with a JSON error body when a route limit is exceeded."""
    if isinstance(exc, RateLimitExceeded):
        logger.warning(
            "rate_limit_exceeded",
            path=request.url.path,
            limit=str(getattr(exc, "detail", "")),
        )
        return JSONResponse(
            status_code=429,
            content={"message": "Rate limit exceeded"},
        )


def setup_rate_limiter(app: FastAPI):
    """Attach the shared limiter and its 429 handler to ``app``."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


def get_limiter():
    """Shared limiter used by route decorators."""
    return limiter

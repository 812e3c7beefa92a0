"""Rate limiting dependency for /api routes"""
from fastapi import HTTPException, Request, status
import logging

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a few minutes and try again."


class RateLimitExceeded(HTTPException):
    """Raised when the process-wide request budget is spent"""

    def __init__(self):
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=RATE_LIMIT_MESSAGE)


async def enforce_rate_limit(request: Request) -> None:
    """Count the request against the limiter stored on app.state"""
    limiter = request.app.state.rate_limiter
    if not limiter.hit():
        logger.warning(f"Rate limit exceeded for {request.url.path} from {request.client.host if request.client else 'unknown'}")
        raise RateLimitExceeded()

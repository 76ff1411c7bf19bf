from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from codenotes.config import logger
from codenotes.data.repositories.redis import redis_client

rate_limit_logger = logger.getChild("rate_limit")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request limit per client address, counted in Redis."""

    def __init__(self, app, limit: int = 100, window: int = 60):
        super().__init__(app)
        self.limit = limit
        self.window = window  # seconds

    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        key = f"rate_limit:{client_ip}"

        try:
            if int(await redis_client.get(key) or 0) >= self.limit:
                rate_limit_logger.warning(f"Rate limit exceeded for {client_ip}")
                return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})
            await redis_client.hit(key, self.window)
        except HTTPException as e:
            # Counter store is down: requests are served unthrottled
            rate_limit_logger.error(f"Rate limiter unavailable: {e.detail}")

        return await call_next(request)

"""
Rate limiting middleware using a Redis fixed window per client IP
"""

import logging
from typing import Dict, Optional, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

# Configure logging
logger = logging.getLogger(__name__)


class RateLimitConfig:
    """Rate limits for the public admission endpoints"""

    APPLICATION_LIMITS = {
        "requests": 5,   # 5 applications per window
        "window": 3600,  # 1 hour
    }

    INVITATION_LIMITS = {
        "requests": 30,  # 30 lookups/registrations per window
        "window": 300,   # 5 minutes
    }

    AUTH_LIMITS = {
        "requests": 10,  # 10 login attempts per window
        "window": 300,   # 5 minutes
    }

    @classmethod
    def get_limits_for_endpoint(cls, endpoint_type: str) -> Dict[str, int]:
        limits_map = {
            "application": cls.APPLICATION_LIMITS,
            "invitation": cls.INVITATION_LIMITS,
            "auth": cls.AUTH_LIMITS,
        }
        return limits_map.get(
            endpoint_type,
            {"requests": settings.rate_limit_requests, "window": settings.rate_limit_window_seconds},
        )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Throttles unauthenticated endpoints that accept tokens or new applications"""

    def __init__(self, app, redis_client=None, prefix: str = settings.api_v1_prefix):
        super().__init__(app)
        self.redis_client = redis_client
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next):
        # Skip rate limiting if Redis is not available
        if not self.redis_client:
            return await call_next(request)

        endpoint_type = self._get_endpoint_type(request)
        if not endpoint_type:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key = f"rate_limit:{endpoint_type}:{client_ip}"
        limits = RateLimitConfig.get_limits_for_endpoint(endpoint_type)

        is_allowed, retry_after = await self._check_rate_limit(key, limits)
        if not is_allowed:
            logger.warning(f"Rate limit exceeded for key: {key}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "detail": "Rate limit exceeded",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)
        await self._record_request(key, limits["window"])
        return response

    def _get_endpoint_type(self, request: Request) -> Optional[str]:
        if request.method != "POST":
            return None

        path = request.url.path
        if path == f"{self.prefix}/applications":
            return "application"
        if path in (f"{self.prefix}/invitations/lookup", f"{self.prefix}/members/register"):
            return "invitation"
        if path.startswith(f"{self.prefix}/auth/"):
            return "auth"
        return None

    async def _check_rate_limit(self, key: str, limits: Dict[str, int]) -> Tuple[bool, int]:
        try:
            request_count = await self.redis_client.get(key)
            request_count = int(request_count) if request_count else 0

            if request_count >= limits["requests"]:
                ttl = await self.redis_client.ttl(key)
                retry_after = max(1, ttl) if ttl > 0 else limits["window"]
                return False, retry_after

            return True, 0

        except RedisError as e:
            logger.error(f"Error checking rate limit for key {key}: {e}")
            # Allow request if rate limiting fails
            return True, 0

    async def _record_request(self, key: str, window: int):
        try:
            pipe = self.redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, window)
            await pipe.execute()
        except RedisError as e:
            logger.error(f"Error recording request for key {key}: {e}")

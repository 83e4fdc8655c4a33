"""
Redis clients: async for the web app, blocking for Celery workers
"""

import os
from typing import Optional

import redis
import redis.asyncio as aioredis

from app.core.config import settings

REDIS_URL = os.environ.get("REDIS_URL", settings.redis_url)

# Rate limiting middleware
redis_client = aioredis.from_url(REDIS_URL, decode_responses=True)

_sync_client: Optional[redis.Redis] = None


def get_sync_redis() -> redis.Redis:
    """Lazily create the blocking client used by notification tasks"""
    global _sync_client
    if _sync_client is None:
        _sync_client = redis.from_url(REDIS_URL, decode_responses=True)
    return _sync_client

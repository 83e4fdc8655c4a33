"""
Unit tests for the rate limiting middleware
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.middleware.rate_limit import RateLimitConfig, RateLimitMiddleware


class FakePipeline:
    def __init__(self, redis_client):
        self.redis = redis_client
        self.ops = []

    def incr(self, key):
        self.ops.append(("incr", key))

    def expire(self, key, seconds):
        self.ops.append(("expire", key, seconds))

    async def execute(self):
        for op in self.ops:
            if op[0] == "incr":
                self.redis.counts[op[1]] = self.redis.counts.get(op[1], 0) + 1
            else:
                self.redis.ttls[op[1]] = op[2]


class FakeAsyncRedis:
    def __init__(self):
        self.counts = {}
        self.ttls = {}

    async def get(self, key):
        value = self.counts.get(key)
        return str(value) if value is not None else None

    async def ttl(self, key):
        return self.ttls.get(key, -1)

    def pipeline(self):
        return FakePipeline(self)


def _build_app(redis_client):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, redis_client=redis_client, prefix="/api/v1")

    @app.post("/api/v1/applications")
    async def submit():
        return {"ok": True}

    @app.get("/api/v1/health")
    async def health():
        return {"ok": True}

    return app


@pytest.fixture
async def limited_client():
    redis_client = FakeAsyncRedis()
    transport = ASGITransport(app=_build_app(redis_client))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, redis_client


async def test_application_endpoint_is_throttled(limited_client):
    client, redis_client = limited_client
    limit = RateLimitConfig.APPLICATION_LIMITS["requests"]

    for _ in range(limit):
        assert (await client.post("/api/v1/applications")).status_code == 200

    response = await client.post("/api/v1/applications")
    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) == RateLimitConfig.APPLICATION_LIMITS["window"]


async def test_unlisted_endpoints_are_not_throttled(limited_client):
    client, redis_client = limited_client

    for _ in range(20):
        assert (await client.get("/api/v1/health")).status_code == 200
    assert redis_client.counts == {}


async def test_without_redis_nothing_is_throttled():
    transport = ASGITransport(app=_build_app(None))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        for _ in range(10):
            assert (await client.post("/api/v1/applications")).status_code == 200

"""
BizCircle FastAPI Application
Main entry point for the application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from fastapi.responses import Response
from fastapi import Request
import asyncio
import logging
import os
import subprocess
import time

from app.core.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Sentry integration
if os.getenv("SENTRY_DSN"):
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.redis import RedisIntegration

    sentry_sdk.init(
        dsn=os.getenv("SENTRY_DSN"),
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            RedisIntegration(),
        ],
        traces_sample_rate=0.1,
        environment=settings.app_env,
    )

from app.api.errors import register_exception_handlers
from app.api.health import router as health_router
from app.api.v1.applications import router as applications_router
from app.api.v1.auth import router as auth_router
from app.api.v1.invitations import router as invitations_router
from app.api.v1.members import router as members_router
from app.api.v1.referrals import router as referrals_router
from app.core.metrics import REQUEST_COUNT, REQUEST_DURATION, ACTIVE_CONNECTIONS
from app.middleware.rate_limit import RateLimitMiddleware
from app.services.notifications import drain_pending

# Create FastAPI app instance
app = FastAPI(
    title="BizCircle API",
    description="Membership admission and referral exchange for a professional networking group",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


def run_migrations() -> None:
    result = subprocess.run(
        ["alembic", "upgrade", "head"],
        capture_output=True,
        text=True,
        timeout=60
    )
    if result.returncode != 0:
        raise RuntimeError(f"alembic upgrade failed: {result.stderr}")


@app.on_event("startup")
async def startup_event():
    """Run database migrations on startup when enabled"""
    if not settings.run_migrations_on_startup:
        return

    logger.info("Running database migrations...")
    await asyncio.to_thread(run_migrations)
    logger.info("Database migrations completed successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Let in-flight notifications reach the sender before exiting"""
    await drain_pending(timeout=settings.notification_timeout_seconds)


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add rate limiting middleware
if settings.rate_limit_enabled:
    from app.core.redis_client import redis_client
    app.add_middleware(RateLimitMiddleware, redis_client=redis_client)


# Add metrics middleware
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start_time = time.time()
    ACTIVE_CONNECTIONS.inc()
    response = None

    try:
        response = await call_next(request)
        return response
    finally:
        duration = time.time() - start_time
        ACTIVE_CONNECTIONS.dec()

        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code if response else 500
        ).inc()
        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(duration)


# Add metrics endpoint
@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


register_exception_handlers(app)

# Include routers
app.include_router(health_router, prefix=settings.api_v1_prefix, tags=["health"])
app.include_router(auth_router, prefix=settings.api_v1_prefix, tags=["authentication"])
app.include_router(applications_router, prefix=settings.api_v1_prefix, tags=["applications"])
app.include_router(invitations_router, prefix=settings.api_v1_prefix, tags=["invitations"])
app.include_router(members_router, prefix=settings.api_v1_prefix, tags=["members"])
app.include_router(referrals_router, prefix=settings.api_v1_prefix, tags=["referrals"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )

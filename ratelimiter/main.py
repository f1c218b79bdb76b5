from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ratelimiter.dependencies import build_rate_limiter
from ratelimiter.limits.api.routes.limit_routes import router as limit_router
from ratelimiter.limits.api.routes.proxy_routes import router as proxy_router
from ratelimiter.limits.api.routes.tenant_routes import router as tenant_router
from ratelimiter.shared.config import get_settings
from ratelimiter.shared.database import dispose_engine
from ratelimiter.shared.exceptions import register_exception_handlers
from ratelimiter.shared.health import router as health_router
from ratelimiter.shared.logging import get_logger, setup_logging
from ratelimiter.shared.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from ratelimiter.shared.redis import close_redis

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if getattr(app.state, "rate_limiter", None) is None:
        app.state.rate_limiter = await build_rate_limiter(settings)
    logger.info("Rate limiter started", settings=settings.safe_dict())
    try:
        yield
    finally:
        await close_redis()
        await dispose_engine()
        logger.info("Rate limiter stopped")


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="Multi-tenant Rate Limiter API",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "X-Correlation-ID"],
    )
    # Last added runs first: correlation id wraps request logging.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    # Routers
    app.include_router(tenant_router)
    app.include_router(proxy_router)
    app.include_router(limit_router)
    app.include_router(health_router)

    # Centralized error handling → {code, message, details?, correlation_id?}
    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": "Multi-tenant Rate Limiter API",
            "docs": "/docs",
            "proxy": "/api/proxy",
            "health": "/_health/redis",
        }

    return app


app = create_app()

from time import perf_counter

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ratelimiter.shared.database import db_session
from ratelimiter.shared.logging import get_logger
from ratelimiter.shared.redis import get_redis

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


@router.get("/_health/redis")
async def health_redis(r: Redis = Depends(get_redis)):
    try:
        pong = await r.ping()
        return {"service": "redis", "status": "ok" if pong else "degraded"}
    except Exception as e:
        logger.warning("Redis health check failed", error_type=type(e).__name__)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"service": "redis", "status": "unavailable"},
        )


@router.get("/_health/db", status_code=status.HTTP_200_OK)
async def health_db(session: AsyncSession = Depends(db_session)):
    t0 = perf_counter()
    try:
        await session.execute(text("SELECT 1"))
        dt_ms = int((perf_counter() - t0) * 1000)
        return {"ok": True, "checks": {"db_select_1_ms": dt_ms}}
    except Exception as e:
        logger.warning("DB health check failed", error_type=type(e).__name__)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "ok": False,
                "checks": {"db": "SELECT 1 failed"},
                "error": type(e).__name__,
            },
        )

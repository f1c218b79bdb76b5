from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ratelimiter.dependencies import get_rate_limiter
from ratelimiter.limits.api.schemas import RateLimitCheckRequest, RateLimitDecisionResponse
from ratelimiter.limits.application.services.rate_limit_evaluator import RateLimitEvaluator

router = APIRouter(prefix="/api/v1/limits", tags=["limits"])


@router.post("/check", response_model=RateLimitDecisionResponse)
async def check_limit(payload: RateLimitCheckRequest, limiter: RateLimitEvaluator = Depends(get_rate_limiter)):
    decision = await limiter.check_rate_limit(payload.tenant_id, payload.source_address, payload.target)
    return RateLimitDecisionResponse.model_validate(decision)


@router.post("/cache/flush", status_code=status.HTTP_204_NO_CONTENT)
async def flush_rule_cache(limiter: RateLimitEvaluator = Depends(get_rate_limiter)):
    limiter.rule_cache.invalidate()

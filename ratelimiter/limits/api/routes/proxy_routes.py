from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ratelimiter.dependencies import get_rate_limiter
from ratelimiter.limits.api.schemas import ProxyRequest, ProxyResponse
from ratelimiter.limits.application.services.rate_limit_evaluator import RateLimitEvaluator
from ratelimiter.shared.exceptions import RateLimitedError
from ratelimiter.shared.logging import bind_request_context

router = APIRouter(prefix="/api/proxy", tags=["proxy"])

DEFAULT_CLIENT_IP = "127.0.0.1"


def client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return DEFAULT_CLIENT_IP


@router.post("", response_model=ProxyResponse)
async def proxy(payload: ProxyRequest, request: Request, limiter: RateLimitEvaluator = Depends(get_rate_limiter)):
    ip = client_ip(request)
    bind_request_context(tenant_id=payload.tenant_id, client_ip=ip)

    decision = await limiter.check_rate_limit(payload.tenant_id, ip, payload.api_url)
    headers = decision.headers()

    if not decision.allowed:
        raise RateLimitedError(
            decision.explanation or "Too many requests",
            details={
                "limit": decision.limit,
                "remaining": decision.remaining,
                "reset": decision.reset_epoch_seconds,
            },
            headers=headers,
        )

    # Forwarding is simulated; the upstream call is out of scope.
    body = ProxyResponse(
        message="Request processed successfully",
        proxied_to=payload.api_url,
        tenant_id=payload.tenant_id,
        client_ip=ip,
        payload=payload.payload(),
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(content=body.model_dump(mode="json"), headers=headers)


@router.get("")
async def proxy_info():
    return {
        "success": True,
        "message": "Rate limiter proxy endpoint",
        "usage": "Send POST requests with tenant_id and api_url in the body",
        "example": {
            "tenant_id": "uuid-here",
            "api_url": "https://api.example.com/endpoint",
            "additionalPayload": "...",
        },
    }

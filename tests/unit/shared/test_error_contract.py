from fastapi import FastAPI
from fastapi.testclient import TestClient

from ratelimiter.shared.exceptions import ConflictError, RateLimitedError, register_exception_handlers
from ratelimiter.shared.middleware import CorrelationIdMiddleware


def _app():
    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("Tenant with this name already exists.", code="tenant_conflict")

    @app.get("/limited")
    async def limited():
        raise RateLimitedError("slow down", details={"limit": 1}, headers={"X-RateLimit-Limit": "1"})

    @app.get("/items/{n}")
    async def item(n: int):
        return {"n": n}

    return app


def test_domain_error_shape():
    r = TestClient(_app()).get("/conflict", headers={"X-Correlation-ID": "abc-123"})
    assert r.status_code == 409
    assert r.json() == {
        "code": "tenant_conflict",
        "message": "Tenant with this name already exists.",
        "correlation_id": "abc-123",
    }
    assert r.headers["X-Correlation-ID"] == "abc-123"


def test_domain_error_carries_headers():
    r = TestClient(_app()).get("/limited")
    assert r.status_code == 429
    assert r.headers["X-RateLimit-Limit"] == "1"
    body = r.json()
    assert body["code"] == "rate_limited"
    assert body["details"] == {"limit": 1}
    assert body["correlation_id"]


def test_request_validation_maps_to_400():
    r = TestClient(_app()).get("/items/abc")
    assert r.status_code == 400
    data = r.json()
    assert data["code"] == "validation_error"
    assert data["details"]["errors"]

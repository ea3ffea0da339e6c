"""
Tests — HTTP middleware on a bare FastAPI app.
"""

from collections import deque

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request
from starlette.responses import JSONResponse

from tournament_registration.api import middleware
from tournament_registration.api.middleware import (
    AdvancedRateLimitMiddleware,
    InputValidationMiddleware,
    LoggingMiddleware,
    SecurityHeadersMiddleware,
)


def build_app(*middlewares):
    app = FastAPI()

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/auth/login")
    async def login():
        return {"ok": True}

    @app.get("/api/v1/images/fig/{fig_id}")
    async def image(fig_id: str):
        return {"figId": fig_id}

    @app.post("/echo")
    async def echo():
        return {"ok": True}

    for cls, kwargs in middlewares:
        app.add_middleware(cls, **kwargs)
    return app


@pytest.fixture
async def make_client():
    clients = []

    def make(*middlewares):
        client = AsyncClient(transport=ASGITransport(app=build_app(*middlewares)), base_url="http://test")
        clients.append(client)
        return client

    yield make
    for client in clients:
        await client.aclose()


async def test_rate_limit_per_path_prefix(make_client):
    client = make_client((AdvancedRateLimitMiddleware, {
        "default_calls": 100,
        "default_period": 60,
        "limits": {"/auth/login": {"calls": 2, "period": 300}},
    }))

    first = await client.get("/auth/login")
    assert first.headers["x-ratelimit-limit"] == "2"
    assert first.headers["x-ratelimit-remaining"] == "1"
    assert (await client.get("/auth/login")).status_code == 200

    blocked = await client.get("/auth/login")
    assert blocked.status_code == 429
    assert blocked.json()["code"] == "RATE_LIMIT_ERROR"
    assert int(blocked.headers["retry-after"]) >= 1

    # Other paths use their own window
    assert (await client.get("/api/v1/images/fig/1")).status_code == 200


async def test_health_is_never_limited(make_client):
    client = make_client((AdvancedRateLimitMiddleware, {"default_calls": 1, "default_period": 60, "limits": {}}))

    for _ in range(3):
        assert (await client.get("/health")).status_code == 200


async def test_security_headers(make_client):
    client = make_client((SecurityHeadersMiddleware, {}))

    response = await client.get("/health")
    assert response.headers["x-frame-options"] == "DENY"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert "cross-origin-resource-policy" not in response.headers

    image = await client.get("/api/v1/images/fig/123")
    assert image.headers["cross-origin-resource-policy"] == "cross-origin"


async def test_logging_middleware_tags_requests(make_client):
    client = make_client((LoggingMiddleware, {}))

    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["x-request-id"] == "abc123"
    assert float(response.headers["x-process-time"]) >= 0


async def test_input_validation_rejects_suspicious_urls(make_client):
    client = make_client((InputValidationMiddleware, {}))

    response = await client.get("/api/v1/images/fig/1?next=javascript:alert(1)")
    assert response.status_code == 400
    assert (await client.get("/api/v1/images/fig/1")).status_code == 200


async def test_input_validation_rejects_large_bodies(make_client, monkeypatch):
    monkeypatch.setattr(middleware, "MAX_BODY_SIZE", 10)
    client = make_client((InputValidationMiddleware, {}))

    response = await client.post("/echo", content=b"x" * 11)
    assert response.status_code == 413
    assert (await client.post("/echo", content=b"x" * 5)).status_code == 200


def test_rate_limit_prunes_idle_windows():
    limiter = AdvancedRateLimitMiddleware(FastAPI(), default_period=60, limits={"/auth/login": {"calls": 5, "period": 300}})
    limiter.windows["idle"].append(1000.0)
    limiter.windows["recent"].append(1250.0)
    limiter.windows["empty"] = deque()

    assert limiter.longest_period == 300
    assert limiter.prune(now=1301.0) == 2
    assert list(limiter.windows) == ["recent"]


async def test_rate_limit_prunes_while_serving(monkeypatch):
    monkeypatch.setattr(middleware, "PRUNE_EVERY", 2)
    limiter = AdvancedRateLimitMiddleware(FastAPI(), default_calls=10, default_period=60, limits={})
    limiter.windows["gone"].append(0.0)

    async def call_next(request):
        return JSONResponse({"ok": True})

    def request(agent):
        return Request({
            "type": "http",
            "method": "GET",
            "path": "/echo",
            "query_string": b"",
            "headers": [(b"user-agent", agent.encode())],
            "client": ("10.0.0.1", 1234),
        })

    await limiter.dispatch(request("first"), call_next)
    assert "gone" in limiter.windows

    await limiter.dispatch(request("second"), call_next)
    assert "gone" not in limiter.windows
    assert len(limiter.windows) == 2

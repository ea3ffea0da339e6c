"""
Tests — FIG image proxy (fig/image_proxy.py) and the /api/v1/images routes.

The upstream is a fake aiohttp session; nothing leaves the process.
"""

import asyncio

import aiohttp
import pytest

from tournament_registration.api.main import app
from tournament_registration.api.providers import get_image_proxy
from tournament_registration.errors import (
    BadGatewayError,
    ImageNotFound,
    ImageTooLarge,
    InvalidFigId,
    UpstreamRateLimited,
    UpstreamTimeout,
)
from tournament_registration.fig import image_proxy
from tournament_registration.fig.cache import InMemoryCache
from tournament_registration.fig.image_proxy import FigImageProxy

JPEG = b"\xff\xd8\xff\xe0" + b"x" * 60


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeResponse:
    def __init__(self, status=200, body=JPEG, headers=None):
        self.status = status
        self.body = body
        self.headers = {"Content-Type": "image/jpeg"} if headers is None else headers

    async def read(self):
        return self.body

    async def text(self):
        return self.body.decode("latin-1")


class _RequestContext:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Answers every GET with ``outcome`` (a FakeResponse or an exception)."""

    def __init__(self, outcome=None):
        self.outcome = outcome if outcome is not None else FakeResponse()
        self.calls = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append(url)
        return _RequestContext(self.outcome)

    async def close(self):
        self.closed = True


def make_proxy(outcome=None, clock=None, **kwargs):
    session = FakeSession(outcome)
    proxy = FigImageProxy(
        InMemoryCache(clock=clock or FakeClock()),
        session=session,
        base_url="https://fig.test",
        timeout=1,
        cache_ttl=60,
        max_image_size=1024,
        **kwargs,
    )
    return proxy, session


# ─────────────────────────── Caching ─────────────────────────────────────────

async def test_second_request_is_served_from_cache():
    proxy, session = make_proxy()

    first = await proxy.get_image("12345")
    second = await proxy.get_image(" 12345 ")

    assert first.data == second.data == JPEG
    assert session.calls == ["https://fig.test/asset.php?id=bpic_12345"]
    assert proxy.request_count == 1
    assert await proxy.is_cached("12345")


async def test_expired_entry_is_refetched():
    clock = FakeClock()
    proxy, session = make_proxy(clock=clock)

    await proxy.get_image("12345")
    clock.now += 61
    await proxy.get_image("12345")

    assert len(session.calls) == 2


async def test_default_etag_and_last_modified():
    proxy, _ = make_proxy()
    image = await proxy.get_image("7")

    assert image.etag == f'"fig-7-{len(JPEG)}"'
    assert image.last_modified.endswith("GMT")
    assert image.content_type == "image/jpeg"


async def test_upstream_headers_are_kept():
    response = FakeResponse(headers={
        "Content-Type": "image/png; charset=binary",
        "ETag": '"upstream"',
        "Last-Modified": "Mon, 01 Jul 2024 10:00:00 GMT",
    })
    proxy, _ = make_proxy(response)
    image = await proxy.get_image("7")

    assert image.content_type == "image/png"
    assert image.etag == '"upstream"'
    assert image.last_modified == "Mon, 01 Jul 2024 10:00:00 GMT"


# ─────────────────────────── Upstream failures ───────────────────────────────

@pytest.mark.parametrize("outcome,error,status_code", [
    (FakeResponse(status=404), ImageNotFound, 404),
    (FakeResponse(status=429), UpstreamRateLimited, 429),
    (FakeResponse(status=500), BadGatewayError, 502),
    (FakeResponse(headers={"Content-Type": "text/html"}), BadGatewayError, 502),
    (FakeResponse(headers={"Content-Type": "image/jpeg", "Content-Length": "4096"}), ImageTooLarge, 413),
    (FakeResponse(body=b"x" * 2048), ImageTooLarge, 413),
    (FakeResponse(body=b""), BadGatewayError, 502),
    (asyncio.TimeoutError(), UpstreamTimeout, 504),
    (aiohttp.ClientConnectionError("refused"), BadGatewayError, 502),
])
async def test_upstream_failures_are_mapped(outcome, error, status_code):
    proxy, _ = make_proxy(outcome)

    with pytest.raises(error) as exc_info:
        await proxy.get_image("12345")

    assert exc_info.value.status_code == status_code
    assert proxy.error_count == 1
    assert not await proxy.is_cached("12345")


async def test_blank_fig_id_is_rejected():
    proxy, session = make_proxy()
    with pytest.raises(InvalidFigId):
        await proxy.get_image("   ")
    assert session.calls == []


# ─────────────────────────── Management ──────────────────────────────────────

async def test_info_without_download():
    proxy, session = make_proxy()

    info = await proxy.info("42")
    assert info["cached"] is False
    assert info["image_url"] == "https://fig.test/asset.php?id=bpic_42"
    assert info["proxy_url"] == "/api/v1/images/fig/42"
    assert session.calls == []

    await proxy.get_image("42")
    info = await proxy.info("42")
    assert info["cached"] is True
    assert info["content_length"] == len(JPEG)


async def test_preload_counts_successes_and_failures(monkeypatch):
    monkeypatch.setattr(image_proxy, "PRELOAD_BATCH_DELAY", 0)
    proxy, session = make_proxy()

    result = await proxy.preload([str(i) for i in range(7)] + ["", "  "])

    assert result == {"success": 7, "failed": 0}
    assert len(session.calls) == 7


async def test_preload_never_raises(monkeypatch):
    monkeypatch.setattr(image_proxy, "PRELOAD_BATCH_DELAY", 0)
    proxy, _ = make_proxy(FakeResponse(status=404))

    assert await proxy.preload(["1", "2"]) == {"success": 0, "failed": 2}


async def test_clear_cache_and_stats():
    proxy, _ = make_proxy()
    await proxy.get_image("1")
    await proxy.get_image("2")

    stats = await proxy.cache_stats()
    assert stats["cached_images"] == 2
    assert stats["fig_ids"] == ["1", "2"]
    assert stats["total_requests"] == 2

    assert await proxy.clear_cache("1") == 1
    assert await proxy.clear_cache("1") == 0
    assert await proxy.clear_cache() == 1
    assert (await proxy.cache_stats())["cached_images"] == 0


async def test_close_closes_session():
    proxy, session = make_proxy()
    async with proxy:
        pass
    assert session.closed


# ─────────────────────────── HTTP routes ─────────────────────────────────────

@pytest.fixture
def proxy_override():
    def install(outcome=None):
        proxy, session = make_proxy(outcome)
        app.dependency_overrides[get_image_proxy] = lambda: proxy
        return proxy, session

    return install


async def test_image_route_serves_bytes(client, proxy_override):
    _, session = proxy_override()

    response = await client.get("/api/v1/images/fig/12345")
    assert response.status_code == 200
    assert response.content == JPEG
    assert response.headers["content-type"] == "image/jpeg"
    assert response.headers["cache-control"] == "public, max-age=60, immutable"
    assert response.headers["x-content-source"] == "FIG-Proxy-Cache"
    assert response.headers["etag"]

    await client.get("/api/v1/images/fig/12345")
    assert len(session.calls) == 1


async def test_image_route_maps_upstream_404(client, proxy_override):
    proxy_override(FakeResponse(status=404))

    response = await client.get("/api/v1/images/fig/404404")
    assert response.status_code == 404
    assert response.json()["detail"] == "Image not found for FIG ID: 404404"


async def test_image_info_route(client, proxy_override):
    proxy_override()

    body = (await client.get("/api/v1/images/fig/9/info")).json()
    assert body["figId"] == "9"
    assert body["cached"] is False
    assert body["proxyUrl"] == "/api/v1/images/fig/9"


async def test_preload_route_is_admin_only(client, proxy_override, usa_headers, admin_headers, monkeypatch):
    monkeypatch.setattr(image_proxy, "PRELOAD_BATCH_DELAY", 0)
    proxy_override()
    payload = {"figIds": ["1", "2", "3"]}

    assert (await client.post("/api/v1/images/preload", json=payload, headers=usa_headers)).status_code == 403

    response = await client.post("/api/v1/images/preload", json=payload, headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Preload completed", "total": 3, "success": 3, "failed": 0}


async def test_cache_management_routes(client, proxy_override, admin_headers):
    proxy_override()
    await client.get("/api/v1/images/fig/1")

    stats = (await client.get("/api/v1/images/cache/stats", headers=admin_headers)).json()
    assert stats["cachedImages"] == 1
    assert stats["ttlSeconds"] == 60

    response = await client.delete("/api/v1/images/cache", headers=admin_headers)
    assert response.json()["removed"] == 1

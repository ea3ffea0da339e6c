"""
Tests — FIG athletes client (fig/client.py) and /api/v1/gymnasts/fig.
"""

import json

import pytest

from tournament_registration.api.main import app
from tournament_registration.api.providers import get_fig_client, warm_fig_cache
from tournament_registration.errors import BadGatewayError, UpstreamRateLimited
from tournament_registration.fig.cache import InMemoryCache
from tournament_registration.fig.client import FigApiClient, map_athlete

RECORD = {
    "gymnastid": 24680,
    "preferredfirstname": "Lucia",
    "preferredlastname": "Torres",
    "gender": "Female",
    "country": "MEX",
    "birth": "2001-04-09",
    "discipline": "AER",
    "validto": "2026-12-31",
}


class FakeResponse:
    def __init__(self, status=200, payload=None, raw=None):
        self.status = status
        self.raw = raw if raw is not None else json.dumps(payload if payload is not None else [RECORD])

    async def text(self):
        return self.raw

    async def json(self, content_type="application/json"):
        return json.loads(self.raw)


class _RequestContext:
    def __init__(self, response):
        self.response = response

    async def __aenter__(self):
        return self.response

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, response=None):
        self.response = response or FakeResponse()
        self.requests = []
        self.closed = False

    def get(self, url, params=None, **kwargs):
        self.requests.append((url, params))
        return _RequestContext(self.response)

    async def close(self):
        self.closed = True


def make_client(response=None):
    session = FakeSession(response)
    client = FigApiClient(InMemoryCache(), session=session, base_url="https://fig.test/", timeout=1, cache_ttl=60)
    return client, session


def test_map_athlete():
    assert map_athlete(RECORD) == {
        "fig_id": "24680",
        "first_name": "Lucia",
        "last_name": "Torres",
        "gender": "FEMALE",
        "country": "MEX",
        "birth_date": "2001-04-09",
        "discipline": "AER",
        "license_valid_to": "2026-12-31",
        "is_licensed": True,
    }
    assert map_athlete({"gender": "MALE"})["gender"] == "MALE"


async def test_search_queries_fig_once_per_ttl():
    client, session = make_client()

    first = await client.search_athletes("mex")
    second = await client.search_athletes("MEX")

    assert first == second
    assert first[0]["fig_id"] == "24680"
    assert len(session.requests) == 1

    url, params = session.requests[0]
    assert url == "https://fig.test/api/athletes.php"
    assert params["function"] == "searchLicenses"
    assert params["discipline"] == "AER"
    assert params["country"] == "MEX"


async def test_cache_key_is_per_country():
    client, session = make_client()

    await client.search_athletes("USA")
    await client.search_athletes(None)

    assert len(session.requests) == 2
    assert session.requests[1][1]["country"] == ""
    assert FigApiClient.cache_key("usa") == "fig-gymnasts-USA"
    assert FigApiClient.cache_key() == "fig-gymnasts"


async def test_non_dict_records_are_skipped():
    client, _ = make_client(FakeResponse(payload=[RECORD, "junk", 3]))
    assert len(await client.search_athletes("MEX")) == 1


@pytest.mark.parametrize("response,error", [
    (FakeResponse(status=429), UpstreamRateLimited),
    (FakeResponse(status=500, raw="boom"), BadGatewayError),
    (FakeResponse(payload={"error": "nope"}), BadGatewayError),
    (FakeResponse(raw="<html>"), BadGatewayError),
])
async def test_upstream_failures(response, error):
    client, _ = make_client(response)

    with pytest.raises(error):
        await client.search_athletes("USA")
    assert await client.cache.get(FigApiClient.cache_key("USA")) is None


async def test_get_athlete_uses_cached_search():
    client, session = make_client()

    assert (await client.get_athlete("24680", "MEX"))["last_name"] == "Torres"
    assert await client.get_athlete("99999", "MEX") is None
    assert len(session.requests) == 1


async def test_clear_cache_drops_every_country():
    client, session = make_client()
    await client.search_athletes("USA")
    await client.search_athletes(None)
    await client.cache.set("fig-image-1", {"data": ""}, 60)

    assert await client.clear_cache() == 2
    assert await client.cache.get("fig-image-1") is not None

    await client.search_athletes("USA")
    assert len(session.requests) == 3


async def test_close():
    client, session = make_client()
    await client.close()
    assert session.closed


# ─────────────────────────── HTTP route ──────────────────────────────────────

class StubFigClient:
    def __init__(self):
        self.countries = []

    async def search_athletes(self, country=None):
        self.countries.append(country)
        return [map_athlete(dict(RECORD, country=country or "MEX"))]


@pytest.fixture
def stub_client():
    stub = StubFigClient()
    app.dependency_overrides[get_fig_client] = lambda: stub
    return stub


async def test_fig_search_is_scoped_to_delegate_country(client, stub_client, usa_headers):
    response = await client.get("/api/v1/gymnasts/fig?country=USA", headers=usa_headers)

    assert response.status_code == 200
    assert stub_client.countries == ["USA"]
    assert response.json()[0]["figId"] == "24680"
    assert response.json()[0]["licenseValidTo"] == "2026-12-31"


async def test_fig_search_rejects_other_country(client, stub_client, usa_headers):
    response = await client.get("/api/v1/gymnasts/fig?country=MEX", headers=usa_headers)
    assert response.status_code == 403
    assert stub_client.countries == []


async def test_admin_searches_every_country(client, stub_client, admin_headers):
    await client.get("/api/v1/gymnasts/fig", headers=admin_headers)
    assert stub_client.countries == [None]


async def test_fig_search_requires_token(client, stub_client):
    assert (await client.get("/api/v1/gymnasts/fig")).status_code == 401


@pytest.fixture
def fig_client():
    fig, session = make_client()
    app.dependency_overrides[get_fig_client] = lambda: fig
    return fig, session


async def test_get_fig_athlete_by_id(client, fig_client, mex_headers):
    response = await client.get("/api/v1/gymnasts/fig/24680", headers=mex_headers)

    assert response.status_code == 200
    assert response.json()["firstName"] == "Lucia"
    assert fig_client[1].requests[0][1]["country"] == "MEX"


async def test_get_unknown_fig_athlete_is_404(client, fig_client, mex_headers):
    response = await client.get("/api/v1/gymnasts/fig/11111", headers=mex_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND_ERROR"


async def test_only_admins_clear_fig_cache(client, fig_client, usa_headers, admin_headers):
    fig, session = fig_client
    await fig.search_athletes("USA")

    assert (await client.delete("/api/v1/gymnasts/cache", headers=usa_headers)).status_code == 403
    assert (await client.delete("/api/v1/gymnasts/cache", headers=admin_headers)).status_code == 204

    await fig.search_athletes("USA")
    assert len(session.requests) == 2


# ─────────────────────────── Warm-up ─────────────────────────────────────────

class RecordingProxy:
    def __init__(self):
        self.preloaded = []

    async def preload(self, fig_ids):
        self.preloaded.extend(fig_ids)
        return {"success": len(fig_ids), "failed": 0}


async def test_warm_up_loads_athletes_then_pictures():
    fig, session = make_client(FakeResponse(payload=[dict(RECORD, gymnastid=i) for i in range(3)]))
    proxy = RecordingProxy()

    stats = await warm_fig_cache(fig, proxy, image_limit=2)

    assert stats == {"athletes": 3, "images": {"success": 2, "failed": 0}}
    assert proxy.preloaded == ["0", "1"]
    assert session.requests[0][1]["country"] == ""


async def test_warm_up_never_raises():
    fig, _ = make_client(FakeResponse(status=503, raw="down"))
    proxy = RecordingProxy()

    stats = await warm_fig_cache(fig, proxy)

    assert stats["athletes"] == 0
    assert proxy.preloaded == []

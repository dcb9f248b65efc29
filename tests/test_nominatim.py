import asyncio

import httpx
import pytest

from conftest import GANGNAM_ROW, NOMINATIM_HOST
from mapchat.services.nominatim import NominatimClient, run_nominatim_search
from mapchat.utils.results import SearchQuery
from mapchat.utils.ttl_cache import TTLCache


@pytest.fixture
def cache(clock):
    return TTLCache(300, 600, clock=clock)


@pytest.fixture
def nominatim(http_client, cache):
    return NominatimClient(cache=cache, http_client=http_client, user_agent="MapChatTest/1.0")


def _search(client, query, **kwargs):
    return asyncio.run(run_nominatim_search(query, client=client, **kwargs))


def test_polygon_search_returns_polygon_feature(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[GANGNAM_ROW]))

    result = _search(nominatim, "Gangnam-gu, Seoul", limit=1, polygon=True)

    assert result.ok
    assert result.source == "nominatim"
    [feature] = result.features
    assert feature["geometry"]["type"] in ("Polygon", "MultiPolygon")
    assert feature["properties"]["display_name"]

    [request] = router.requests
    assert request.url.params["q"] == "Gangnam-gu, Seoul"
    assert request.url.params["format"] == "jsonv2"
    assert request.url.params["addressdetails"] == "1"
    assert request.url.params["limit"] == "1"
    assert request.url.params["polygon_geojson"] == "1"
    assert request.headers["User-Agent"] == "MapChatTest/1.0"
    assert "Accept-Language" not in request.headers


def test_optional_params_and_language_header(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[]))

    result = _search(
        nominatim, "Myeongdong", polygon=False, countrycodes="kr", language="ko"
    )

    assert result.ok
    assert result.features == []
    [request] = router.requests
    assert "polygon_geojson" not in request.url.params
    assert request.url.params["countrycodes"] == "kr"
    assert request.headers["Accept-Language"] == "ko"


def test_bias_becomes_bounded_viewbox(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[]))

    _search(nominatim, "coffee", near={"lat": 0.0, "lng": 100.0, "radius_km": 1.11})

    [request] = router.requests
    left, top, right, bottom = map(float, request.url.params["viewbox"].split(","))
    assert request.url.params["bounded"] == "1"
    assert top == pytest.approx(0.01)
    assert bottom == pytest.approx(-0.01)
    assert left == pytest.approx(99.99)
    assert right == pytest.approx(100.01)


def test_short_query_fails_without_network(router, nominatim):
    result = _search(nominatim, "a")

    assert not result.ok
    assert result.error == "Query too short"
    assert router.requests == []


def test_repeated_query_is_served_from_cache(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[GANGNAM_ROW]))

    first = _search(nominatim, "Gangnam-gu, Seoul")
    second = _search(nominatim, "  gangnam-gu, SEOUL ")

    assert second is first
    assert len(router.requests) == 1


def test_bias_float_noise_hits_cache(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[]))

    _search(nominatim, "coffee", near={"lat": 37.49791, "lng": 127.02761})
    _search(nominatim, "coffee", near={"lat": 37.4979100003, "lng": 127.0276099998})

    assert len(router.requests) == 1


def test_success_expires_after_ten_minutes(router, nominatim, clock):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[GANGNAM_ROW]))

    _search(nominatim, "Gangnam-gu")
    clock.advance(599)
    _search(nominatim, "Gangnam-gu")
    assert len(router.requests) == 1
    clock.advance(2)
    _search(nominatim, "Gangnam-gu")
    assert len(router.requests) == 2


def test_upstream_error_is_cached_briefly(router, nominatim, clock):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(503))

    first = _search(nominatim, "Gangnam-gu")
    assert not first.ok
    assert first.status == 503
    assert first.error == "Nominatim 503"

    clock.advance(60)
    second = _search(nominatim, "Gangnam-gu")
    assert second is first
    assert len(router.requests) == 1

    clock.advance(61)
    third = _search(nominatim, "Gangnam-gu")
    assert third.status == 503
    assert len(router.requests) == 2


def test_network_error_becomes_failure(router, nominatim, clock):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    router.add(NOMINATIM_HOST, refuse)

    result = _search(nominatim, "Gangnam-gu")
    assert not result.ok
    assert result.error.startswith("Network error:")
    assert result.status is None

    clock.advance(121)
    _search(nominatim, "Gangnam-gu")
    assert len(router.requests) == 2


def test_invalid_json_is_a_failure(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, text="<html>"))

    result = _search(nominatim, "Gangnam-gu")
    assert not result.ok
    assert result.status == 200


def test_lookup_first_returns_first_row(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[GANGNAM_ROW]))

    row = asyncio.run(nominatim.lookup_first("1 Main St", viewbox=(1, 2, 3, 4)))

    assert row["osm_id"] == 2297418
    [request] = router.requests
    assert request.url.params["limit"] == "1"
    assert request.url.params["polygon_geojson"] == "0"
    assert request.url.params["viewbox"] == "1,2,3,4"
    assert request.url.params["bounded"] == "1"


def test_lookup_first_no_match_or_error(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[]))
    assert asyncio.run(nominatim.lookup_first("nowhere")) is None

    router.add(NOMINATIM_HOST, lambda request: httpx.Response(500))
    assert asyncio.run(nominatim.lookup_first("nowhere")) is None


def test_query_objects_can_be_searched_directly(router, nominatim):
    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[GANGNAM_ROW]))
    result = asyncio.run(nominatim.search(SearchQuery.build("Gangnam-gu", limit=1)))
    assert result.ok


def test_cancelled_search_leaves_cache_untouched(router, nominatim, cache):
    async def abandon():
        started = asyncio.Event()

        async def stall(request):
            started.set()
            await asyncio.sleep(3600)

        router.add(NOMINATIM_HOST, stall)
        task = asyncio.create_task(nominatim.search(SearchQuery.build("Gangnam-gu")))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(abandon())
    assert len(cache) == 0

    router.add(NOMINATIM_HOST, lambda request: httpx.Response(200, json=[GANGNAM_ROW]))
    result = asyncio.run(nominatim.search(SearchQuery.build("Gangnam-gu")))
    assert result.ok
    assert len(router.requests) == 2
    assert len(cache) == 1

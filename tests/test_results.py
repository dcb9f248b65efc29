from mapchat.utils.results import NearBias, SearchQuery, ToolResult


def test_limit_is_clamped():
    assert SearchQuery.build("Seoul", limit=50).limit == 10
    assert SearchQuery.build("Seoul", limit=0).limit == 1
    assert SearchQuery.build("Seoul").limit == 5


def test_near_dict_defaults_radius():
    query = SearchQuery.build("cafe", near={"lat": 37.5, "lng": 127.0})
    assert query.near == NearBias(37.5, 127.0, 2.0)


def test_cache_key_ignores_case_whitespace_and_float_noise():
    a = SearchQuery.build(
        "  Gangnam-gu, Seoul ", near={"lat": 37.49791, "lng": 127.02761, "radius_km": 2.0}
    )
    b = SearchQuery.build(
        "gangnam-gu, seoul",
        near={"lat": 37.4979100000001, "lng": 127.0276099999, "radius_km": 2.04},
    )
    assert a.cache_key() == b.cache_key()


def test_cache_key_differs_by_options():
    base = SearchQuery.build("Seoul")
    assert base.cache_key() != SearchQuery.build("Seoul", polygon=False).cache_key()
    assert base.cache_key() != SearchQuery.build("Seoul", language="ko").cache_key()
    assert base.cache_key() != SearchQuery.build("Seoul", countrycodes="kr").cache_key()


def test_too_short_query():
    assert SearchQuery.build(" a ").is_too_short
    assert SearchQuery.build("").is_too_short
    assert not SearchQuery.build("ab").is_too_short


def test_tool_result_round_trip():
    fc = {"type": "FeatureCollection", "features": []}
    ok = ToolResult.success(fc, "nominatim")
    assert ok.to_dict() == {"ok": True, "data": fc, "source": "nominatim"}
    assert ToolResult.from_dict(ok.to_dict()) == ok

    failed = ToolResult.failure("Nominatim 503", status=503)
    assert failed.to_dict() == {"ok": False, "error": "Nominatim 503", "status": 503}
    assert ToolResult.failure("Query too short").to_dict() == {
        "ok": False,
        "error": "Query too short",
    }


def test_from_dict_on_unexpected_payload():
    result = ToolResult.from_dict("boom")
    assert not result.ok
    assert "boom" in result.error

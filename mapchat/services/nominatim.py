#!/usr/bin/env python3
"""
Nominatim (OpenStreetMap) place search with optional bias box and TTL cache.

Successful lookups are cached for ten minutes, failures for two so a
transient outage is retried sooner. Every request carries the configured
User-Agent, which the Nominatim usage policy requires.
"""

import logging

import httpx

from mapchat.config import Config
from mapchat.utils.geo_utils import bias_viewbox
from mapchat.utils.http_client import get_http_client
from mapchat.utils.normalizers import nominatim_rows_to_features
from mapchat.utils.results import SearchQuery, ToolResult, feature_collection
from mapchat.utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


def build_search_params(query: SearchQuery):
    """Query-string parameters for a Nominatim /search request."""
    params = {
        "q": query.query,
        "format": "jsonv2",
        "addressdetails": "1",
        "limit": str(query.limit),
    }
    if query.polygon:
        params["polygon_geojson"] = "1"
    if query.countrycodes:
        params["countrycodes"] = query.countrycodes
    if query.near:
        left, top, right, bottom = bias_viewbox(
            query.near.lat, query.near.lng, query.near.radius_km
        )
        params["viewbox"] = f"{left:.6f},{top:.6f},{right:.6f},{bottom:.6f}"
        # the box is a hard filter, not just a ranking hint
        params["bounded"] = "1"
    return params


def new_place_cache():
    return TTLCache(
        Config.PLACE_CACHE_MAX, Config.PLACE_CACHE_TTL, name="nominatim-cache"
    )


class NominatimClient:
    """Resolve free-text place names to GeoJSON features."""

    def __init__(self, cache=None, http_client=None, user_agent=None, url=None):
        self.cache = cache if cache is not None else new_place_cache()
        self.user_agent = user_agent or Config.USER_AGENT
        self.url = url or Config.NOMINATIM_URL
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client()

    def headers(self, language=None):
        headers = {"User-Agent": self.user_agent}
        if language:
            headers["Accept-Language"] = language
        return headers

    async def search(self, query: SearchQuery) -> ToolResult:
        """Run a place search, answering from the cache when possible."""
        key = query.cache_key()
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        if query.is_too_short:
            result = ToolResult.failure("Query too short")
            self.cache.set(key, result)
            return result

        logger.info(f"Nominatim search: {query.query!r} (limit={query.limit})")
        try:
            resp = await self.http_client.get(
                self.url,
                params=build_search_params(query),
                headers=self.headers(query.language),
            )
        except httpx.HTTPError as e:
            logger.warning(f"Nominatim network error for {query.query!r}: {e}")
            result = ToolResult.failure(f"Network error: {e}")
            self.cache.set(key, result, Config.PLACE_CACHE_ERROR_TTL)
            return result

        if not resp.is_success:
            logger.warning(f"Nominatim returned {resp.status_code} for {query.query!r}")
            result = ToolResult.failure(
                f"Nominatim {resp.status_code}", status=resp.status_code
            )
            self.cache.set(key, result, Config.PLACE_CACHE_ERROR_TTL)
            return result

        try:
            rows = resp.json()
        except ValueError:
            result = ToolResult.failure(
                "Nominatim returned invalid JSON", status=resp.status_code
            )
            self.cache.set(key, result, Config.PLACE_CACHE_ERROR_TTL)
            return result

        features = nominatim_rows_to_features(rows, prefer_polygon=query.polygon)
        result = ToolResult.success(feature_collection(features), "nominatim")
        self.cache.set(key, result)
        return result

    async def lookup_first(self, address, viewbox=None):
        """
        Single-result, point-only geocode of an address.

        Returns the first jsonv2 row, or None on no match, HTTP error or
        network failure. Not cached here; see FallbackGeocoder.
        """
        params = {
            "q": address,
            "format": "jsonv2",
            "addressdetails": "1",
            "polygon_geojson": "0",
            "limit": "1",
        }
        if viewbox:
            params["viewbox"] = ",".join(str(v) for v in viewbox)
            params["bounded"] = "1"
        try:
            resp = await self.http_client.get(
                self.url, params=params, headers=self.headers()
            )
        except httpx.HTTPError as e:
            logger.warning(f"Address geocode failed for {address!r}: {e}")
            return None
        if not resp.is_success:
            logger.warning(f"Address geocode returned {resp.status_code} for {address!r}")
            return None
        try:
            rows = resp.json()
        except ValueError:
            return None
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            return rows[0]
        return None


_default_client: NominatimClient = None


def get_nominatim_client() -> NominatimClient:
    """Get the process-wide Nominatim client and its cache."""
    global _default_client
    if _default_client is None:
        _default_client = NominatimClient()
    return _default_client


async def run_nominatim_search(
    query,
    limit=None,
    countrycodes=None,
    polygon=True,
    language=None,
    near=None,
    client: NominatimClient = None,
) -> ToolResult:
    """Convenience wrapper used by the tools."""
    client = client or get_nominatim_client()
    return await client.search(
        SearchQuery.build(query, limit, countrycodes, polygon, language, near)
    )

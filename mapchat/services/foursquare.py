#!/usr/bin/env python3
"""
Foursquare Places nearby search.
Searches around a lat/lng centre and returns GeoJSON Point features.
"""

import logging

import httpx

from mapchat.config import Config
from mapchat.utils.http_client import get_http_client
from mapchat.utils.normalizers import foursquare_results_to_features
from mapchat.utils.results import ToolResult, clamp, feature_collection

logger = logging.getLogger(__name__)


class BearerAuth(httpx.Auth):
    """Attach a Places API key as a bearer token."""

    def __init__(self, api_key):
        self._api_key = api_key

    def auth_flow(self, request):
        request.headers["Authorization"] = f"Bearer {self._api_key}"
        yield request


class FoursquareClient:
    """Thin async client for the Foursquare place search endpoint."""

    def __init__(self, api_key=None, http_client=None, url=None):
        self._auth = None
        self._http_client = http_client
        self.url = url or Config.FOURSQUARE_URL
        self.auth(api_key if api_key is not None else Config.FOURSQUARE_API_KEY)

    def auth(self, api_key):
        """Set the API key used for subsequent requests."""
        self._auth = BearerAuth(api_key) if api_key else None

    @property
    def has_credentials(self):
        return self._auth is not None

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client()

    async def search(
        self,
        lat,
        lng,
        query=None,
        radius_meters=3000,
        limit=Config.DEFAULT_POI_LIMIT,
        categories=None,
        fields=None,
    ) -> ToolResult:
        """
        Search places near (lat, lng).

        The limit is capped at the provider maximum of 50 whatever the caller asks.
        """
        if not self.has_credentials:
            return ToolResult.failure("Missing FOURSQUARE_API_KEY")

        params = {
            "ll": f"{lat},{lng}",
            "radius": int(radius_meters),
            "limit": clamp(int(limit), 1, Config.FOURSQUARE_MAX_LIMIT),
        }
        if query:
            params["query"] = query
        if categories:
            params["fsq_category_ids"] = categories
        if fields:
            params["fields"] = ",".join(fields)
        headers = {
            "Accept": "application/json",
            "X-Places-Api-Version": Config.FOURSQUARE_API_VERSION,
        }

        logger.info(f"Foursquare search: {query!r} near {lat:.5f},{lng:.5f}")
        try:
            resp = await self.http_client.get(
                self.url, params=params, headers=headers, auth=self._auth
            )
        except httpx.HTTPError as e:
            logger.warning(f"Foursquare network error: {e}")
            return ToolResult.failure(f"Network error: {e}")

        if not resp.is_success:
            logger.warning(f"Foursquare returned {resp.status_code}")
            return ToolResult.failure(
                f"Foursquare {resp.status_code}", status=resp.status_code
            )

        try:
            payload = resp.json()
        except ValueError:
            return ToolResult.failure(
                "Foursquare returned invalid JSON", status=resp.status_code
            )
        results = payload.get("results") if isinstance(payload, dict) else None
        features = foursquare_results_to_features(results or [])
        return ToolResult.success(feature_collection(features), "fsq")

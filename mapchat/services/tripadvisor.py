#!/usr/bin/env python3
"""
TripAdvisor Content API nearby search.
Returns the raw location items; coordinates are often missing and are
filled in by the caller.
"""

import logging

import httpx

from mapchat.config import Config
from mapchat.utils.http_client import get_http_client

logger = logging.getLogger(__name__)

CATEGORIES = ("hotels", "restaurants", "attractions")


class TripAdvisorError(Exception):
    """Nearby search failed; carries the HTTP status when there was one."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class TripAdvisorClient:
    """Async client for /location/nearby_search."""

    def __init__(self, api_key=None, http_client=None, base_url=None):
        self.api_key = api_key if api_key is not None else Config.TRIPADVISOR_API_KEY
        self.base_url = (base_url or Config.TRIPADVISOR_URL).rstrip("/")
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client()

    async def nearby_search(self, lat, lng, category, radius_km):
        """Return the list of location items near (lat, lng)."""
        if category not in CATEGORIES:
            raise TripAdvisorError(f"Unsupported category: {category}")

        params = {
            "key": self.api_key,
            "latLong": f"{lat},{lng}",
            "category": category,
            "radius": str(radius_km),
            "radiusUnit": "km",
        }
        url = f"{self.base_url}/location/nearby_search"
        logger.info(f"TripAdvisor nearby search: {category} near {lat:.5f},{lng:.5f}")
        try:
            resp = await self.http_client.get(
                url, params=params, headers={"Accept": "application/json"}
            )
        except httpx.HTTPError as e:
            raise TripAdvisorError(f"Network error: {e}") from e

        if not resp.is_success:
            raise TripAdvisorError(
                f"TripAdvisor error {resp.status_code}", status=resp.status_code
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise TripAdvisorError(
                "TripAdvisor returned invalid JSON", status=resp.status_code
            ) from e
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            items = payload.get("data") or payload.get("results") or []
            return items if isinstance(items, list) else []
        return []

#!/usr/bin/env python3
"""
TripAdvisor-by-place tool for MapChat.
"""

from typing import Annotated, Literal

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from mapchat.config import Config
from mapchat.services.recommendations import tripadvisor_by_place


def register_tripadvisor_tool(app: FastMCP):
    """Register the TripAdvisor-by-place tool with the FastMCP app."""

    @app.tool(
        name="tripadvisor_by_place",
        description=(
            "Given a place name and a category (hotels/restaurants/attractions), "
            "resolve the place with Nominatim, take its centroid, then call "
            "TripAdvisor nearby_search around that coordinate. Falls back to "
            "per-POI geocoding (cached) when TripAdvisor items lack coordinates. "
            "Returns a GeoJSON FeatureCollection."
        ),
    )
    async def tripadvisor_by_place_tool(
        place: Annotated[str, Field(min_length=2)],
        category: Literal["hotels", "restaurants", "attractions"],
        radius_km: Annotated[int, Field(ge=1, le=5)] = Config.DEFAULT_RADIUS_KM,
    ):
        result = await tripadvisor_by_place(place, category, radius_km=radius_km)
        return result.to_dict()

#!/usr/bin/env python3
"""
Foursquare-by-place tool for MapChat.
Finds recommendations (restaurants, coffee, hotels...) near a named place.
"""

from typing import Annotated, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from mapchat.config import Config
from mapchat.services.recommendations import foursquare_by_place


def register_foursquare_tool(app: FastMCP):
    """Register the Foursquare-by-place tool with the FastMCP app."""

    @app.tool(
        name="foursquare_by_place",
        description=(
            "Resolve a place name to a centroid (via Nominatim) then search "
            "Foursquare for nearby POIs (restaurants, hotels, attractions). Only "
            "able to filter by distance to search center and by rating. Returns a "
            "GeoJSON FeatureCollection with recommendations as Points and the "
            "search center as the first feature."
        ),
    )
    async def foursquare_by_place_tool(
        place: Annotated[str, Field(min_length=2)],
        query: str = Config.DEFAULT_POI_QUERY,
        radius_km: Annotated[int, Field(ge=1, le=5)] = Config.DEFAULT_RADIUS_KM,
        limit: Annotated[int, Field(ge=1, le=20)] = Config.DEFAULT_POI_LIMIT,
        include_details: bool = True,
        min_rating: Annotated[Optional[float], Field(ge=0, le=10)] = None,
        categories: Optional[str] = None,
    ):
        """
        Args:
            place: Place to search around, e.g. "Jurong Point"
            query: Free text like "restaurants", "coffee", "hotels"
            radius_km: Search radius in km (1-5)
            limit: Maximum number of recommendations (1-20)
            include_details: Request rating details
            min_rating: Keep only places rated at least this (0-10)
            categories: Comma-separated Foursquare category ids
        """
        result = await foursquare_by_place(
            place,
            query=query,
            radius_km=radius_km,
            limit=limit,
            min_rating=min_rating,
            include_details=include_details,
            categories=categories,
        )
        return result.to_dict()

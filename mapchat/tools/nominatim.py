#!/usr/bin/env python3
"""
Nominatim place search tool for MapChat.
Resolves a place name to GeoJSON, preferring polygon outlines.
"""

from typing import Annotated, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, Field

from mapchat.config import Config
from mapchat.services.nominatim import run_nominatim_search


class NearBiasInput(BaseModel):
    """Optional bias centre; results are limited to a box of this radius."""

    lat: float
    lng: float
    radius_km: Annotated[float, Field(ge=0.1, le=10)] = Config.DEFAULT_BIAS_RADIUS_KM


def register_nominatim_tool(app: FastMCP):
    """Register the Nominatim search tool with the FastMCP app."""

    @app.tool(
        name="nominatim_search",
        description=(
            "Search places with Nominatim (OpenStreetMap). Returns a GeoJSON "
            "FeatureCollection; prefers polygon geometry when available."
        ),
    )
    async def nominatim_search(
        query: Annotated[str, Field(min_length=2)],
        limit: Annotated[int, Field(ge=1, le=10)] = Config.DEFAULT_PLACE_LIMIT,
        countrycodes: Optional[str] = None,
        polygon: bool = True,
        language: Optional[str] = None,
        near: Optional[NearBiasInput] = None,
    ):
        """
        Args:
            query: Free-text place name, e.g. "Gangnam-gu, Seoul"
            limit: Number of results (1-10)
            countrycodes: Comma-separated ISO codes, e.g. "kr,us,gb"
            polygon: Ask for polygon outlines when available
            language: Accept-Language value, e.g. "en" or "ko"
            near: Optional centre and radius to restrict results to
        """
        result = await run_nominatim_search(
            query,
            limit=limit,
            countrycodes=countrycodes,
            polygon=polygon,
            language=language,
            near=near.model_dump() if near else None,
        )
        return result.to_dict()

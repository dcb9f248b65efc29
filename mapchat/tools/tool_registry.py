#!/usr/bin/env python3
"""
Tool registry for the MapChat MCP server.
Centralizes tool registration and management.
"""

from mcp.server.fastmcp import FastMCP

from mapchat.tools.foursquare_by_place import register_foursquare_tool
from mapchat.tools.nominatim import register_nominatim_tool
from mapchat.tools.tripadvisor_by_place import register_tripadvisor_tool


def register_all_tools(app: FastMCP):
    """Register all MapChat tools with the FastMCP app."""

    register_nominatim_tool(app)  # Locate a place
    register_foursquare_tool(app)  # Recommendations near a place
    register_tripadvisor_tool(app)  # Hotels/restaurants/attractions near a place

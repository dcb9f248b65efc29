#!/usr/bin/env python3
"""
Configuration module for the MapChat MCP server.
Centralizes API keys, provider endpoints, cache settings and environment variables.
"""

import os


class Config:
    """Configuration class for MapChat settings."""

    # API Keys
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
    FOURSQUARE_API_KEY = os.getenv("FOURSQUARE_API_KEY")
    TRIPADVISOR_API_KEY = os.getenv("TRIPADVISOR_API_KEY")

    # OpenAI/OpenRouter Settings
    OPENAI_MODEL_NAME = os.getenv("OPENAI_MODEL_NAME", "gpt-4.1-nano")
    OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "gpt-4o-mini")

    # HTTP Settings
    HTTP_TIMEOUT = 20.0
    HTTP_CONNECT_TIMEOUT = 10.0
    # Nominatim usage policy requires an identifying UA on every request
    USER_AGENT = os.getenv("APP_USER_AGENT", "MapChat/1.0")

    # Provider endpoints
    NOMINATIM_URL = os.getenv(
        "NOMINATIM_URL", "https://nominatim.openstreetmap.org/search"
    )
    FOURSQUARE_URL = os.getenv(
        "FOURSQUARE_URL", "https://places-api.foursquare.com/places/search"
    )
    FOURSQUARE_API_VERSION = "2025-06-17"
    TRIPADVISOR_URL = os.getenv(
        "TRIPADVISOR_URL", "https://api.content.tripadvisor.com/api/v1"
    )

    # Server Settings
    SERVER_HOST = os.getenv("SERVER_HOST", "localhost")
    SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))
    MCP_SERVER_URL = os.getenv("MCP_SERVER_URL", f"http://{SERVER_HOST}:{SERVER_PORT}")

    # Cache Settings
    PLACE_CACHE_MAX = 300
    PLACE_CACHE_TTL = 10 * 60
    PLACE_CACHE_ERROR_TTL = 2 * 60
    ADDRESS_CACHE_MAX = 500
    ADDRESS_CACHE_TTL = 24 * 60 * 60

    # Tool Settings
    DEFAULT_PLACE_LIMIT = 5
    MAX_PLACE_LIMIT = 10
    DEFAULT_BIAS_RADIUS_KM = 2.0
    DEFAULT_POI_QUERY = "restaurants"
    DEFAULT_RADIUS_KM = 3
    DEFAULT_POI_LIMIT = 10
    FOURSQUARE_MAX_LIMIT = 50
    GEOCODE_THROTTLE_SECONDS = float(os.getenv("GEOCODE_THROTTLE_SECONDS", "1.1"))

    # Map Settings
    FIT_BOUNDS_PADDING = 40
    FIT_BOUNDS_DURATION_MS = 500

    # File Paths
    LOG_DIR = os.getenv("LOG_DIR", "logs")

    @classmethod
    def get_openai_api_key(cls):
        """Get OpenAI API key, preferring OpenRouter if available."""
        return cls.OPENROUTER_API_KEY or cls.OPENAI_API_KEY

    @classmethod
    def validate_tool_params(cls, tool_name, params):
        """Basic parameter validation for tools."""
        validation_errors = []

        if not isinstance(params, dict):
            validation_errors.append("Parameters must be a dictionary")
            return validation_errors

        if tool_name == "nominatim_search":
            if not params.get("query"):
                validation_errors.append("Missing required field: query")

        elif tool_name in ["foursquare_by_place", "tripadvisor_by_place"]:
            if not params.get("place"):
                validation_errors.append("Missing required field: place")
            if tool_name == "tripadvisor_by_place" and not params.get("category"):
                validation_errors.append("Missing required field: category")

        return validation_errors

#!/usr/bin/env python3
"""
Per-POI address geocoding for providers that omit coordinates.

Results are cached for a day. Fresh lookups go through a fixed-delay
throttle so a batch of POIs never hits public Nominatim faster than about
once per second; cache hits are never throttled.
"""

import logging

from mapchat.config import Config
from mapchat.services.nominatim import NominatimClient, get_nominatim_client
from mapchat.utils.geo_utils import to_number
from mapchat.utils.rate_limit import FixedDelayThrottle
from mapchat.utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

# ~2 km box around the bias centre
BIAS_DELTA_DEG = 0.02


def address_cache_key(address, near=None):
    key = address.strip().lower()
    if near:
        key += f"|{near[1]:.3f},{near[0]:.3f}"
    else:
        key += "|"
    return key


class FallbackGeocoder:
    """Cached, throttled single-address geocoder."""

    def __init__(self, nominatim: NominatimClient = None, cache=None, throttle=None):
        self._nominatim = nominatim
        self.cache = cache if cache is not None else TTLCache(
            Config.ADDRESS_CACHE_MAX, Config.ADDRESS_CACHE_TTL, name="address-cache"
        )
        self.throttle = throttle or FixedDelayThrottle(Config.GEOCODE_THROTTLE_SECONDS)

    @property
    def nominatim(self):
        return self._nominatim or get_nominatim_client()

    async def geocode(self, address, near=None):
        """
        Resolve an address to (lng, lat), biased to a box around `near`.

        `near` is a (lng, lat) pair. Returns None when nothing usable comes
        back; the caller skips that POI rather than failing the batch.
        """
        if not isinstance(address, str) or not address.strip():
            return None

        key = address_cache_key(address, near)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        viewbox = None
        if near:
            lng, lat = near
            viewbox = (
                lng - BIAS_DELTA_DEG,
                lat + BIAS_DELTA_DEG,
                lng + BIAS_DELTA_DEG,
                lat - BIAS_DELTA_DEG,
            )

        await self.throttle.wait()
        logger.info(f"Fallback geocode: {address!r}")
        row = await self.nominatim.lookup_first(address, viewbox=viewbox)
        if not isinstance(row, dict):
            return None

        lng, lat = to_number(row.get("lon")), to_number(row.get("lat"))
        if lng is None or lat is None:
            return None
        value = (lng, lat)
        self.cache.set(key, value)
        return value


_default_geocoder: FallbackGeocoder = None


def get_fallback_geocoder() -> FallbackGeocoder:
    """Get the process-wide fallback geocoder and its address cache."""
    global _default_geocoder
    if _default_geocoder is None:
        _default_geocoder = FallbackGeocoder()
    return _default_geocoder

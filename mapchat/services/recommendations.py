#!/usr/bin/env python3
"""
Place-then-nearby recommendation resolvers.

Both resolvers first resolve a place name with Nominatim, collapse the
resulting geometry to a centroid, and then search a POI provider around it.
The resolved place is returned as the first feature so the map can draw it
alongside the POI pins.
"""

import logging

from mapchat.config import Config
from mapchat.services.fallback_geocoder import FallbackGeocoder, get_fallback_geocoder
from mapchat.services.foursquare import FoursquareClient
from mapchat.services.nominatim import NominatimClient, get_nominatim_client
from mapchat.services.tripadvisor import TripAdvisorClient, TripAdvisorError
from mapchat.utils.geo_utils import first_vertex, geometry_centroid, to_number
from mapchat.utils.normalizers import (
    filter_by_min_rating,
    search_center_feature,
    to_feature_collection,
    tripadvisor_address,
    tripadvisor_feature,
)
from mapchat.utils.results import SearchQuery, ToolResult, clamp, point

logger = logging.getLogger(__name__)

DETAIL_FIELDS = (
    "fsq_place_id",
    "name",
    "latitude",
    "longitude",
    "location",
    "categories",
    "distance",
    "rating",
)


async def _resolve_place(nominatim: NominatimClient, place):
    """First feature for a place name, or None."""
    result = await nominatim.search(SearchQuery.build(place, limit=1))
    if not result.ok or not result.features:
        return None
    return result.features[0]


async def foursquare_by_place(
    place,
    query=Config.DEFAULT_POI_QUERY,
    radius_km=Config.DEFAULT_RADIUS_KM,
    limit=Config.DEFAULT_POI_LIMIT,
    min_rating=None,
    include_details=True,
    categories=None,
    nominatim: NominatimClient = None,
    foursquare: FoursquareClient = None,
) -> ToolResult:
    """Resolve `place`, then find Foursquare POIs matching `query` around it."""
    nominatim = nominatim or get_nominatim_client()
    foursquare = foursquare or FoursquareClient()
    if not foursquare.has_credentials:
        return ToolResult.failure("Missing FOURSQUARE_API_KEY")

    place_feature = await _resolve_place(nominatim, place)
    if place_feature is None:
        return ToolResult.failure(f'Could not locate "{place}"')

    geometry = place_feature.get("geometry")
    center = geometry_centroid(geometry)
    if center is None:
        return ToolResult.failure("No usable centroid from place geometry")
    lng, lat = center

    radius_km = clamp(radius_km, 1, 5)
    limit = clamp(int(limit), 1, 20)
    fields = DETAIL_FIELDS if (include_details or min_rating is not None) else None

    searched = await foursquare.search(
        lat,
        lng,
        query=query,
        radius_meters=round(radius_km * 1000),
        limit=limit,
        categories=categories,
        fields=fields,
    )
    if not searched.ok:
        return searched

    features = filter_by_min_rating(searched.features, min_rating)
    features.insert(0, search_center_feature(place, geometry))
    logger.info(f"foursquare_by_place {place!r}: {len(features) - 1} POI(s)")
    return ToolResult.success(to_feature_collection(features), "fsq")


async def tripadvisor_by_place(
    place,
    category,
    radius_km=Config.DEFAULT_RADIUS_KM,
    nominatim: NominatimClient = None,
    tripadvisor: TripAdvisorClient = None,
    geocoder: FallbackGeocoder = None,
) -> ToolResult:
    """
    Resolve `place`, then list TripAdvisor hotels/restaurants/attractions nearby.

    Items without coordinates are geocoded from their address; items with
    neither are skipped.
    """
    nominatim = nominatim or get_nominatim_client()
    tripadvisor = tripadvisor or TripAdvisorClient()
    geocoder = geocoder or get_fallback_geocoder()
    if not tripadvisor.api_key:
        return ToolResult.failure("Missing TRIPADVISOR_API_KEY (server env var)")

    place_feature = await _resolve_place(nominatim, place)
    if place_feature is None:
        return ToolResult.failure(f'Could not locate "{place}" via Nominatim')

    geometry = place_feature.get("geometry")
    center = geometry_centroid(geometry) or first_vertex(geometry)
    if center is None:
        return ToolResult.failure("No usable coordinate from Nominatim geometry")
    lng, lat = center

    try:
        items = await tripadvisor.nearby_search(
            lat, lng, category, clamp(int(radius_km), 1, 5)
        )
    except TripAdvisorError as e:
        return ToolResult.failure(str(e), status=e.status)

    features = [search_center_feature(place, point(lng, lat))]
    skipped = 0
    for item in items:
        if not isinstance(item, dict):
            continue
        item_lat, item_lng = to_number(item.get("latitude")), to_number(item.get("longitude"))
        if item_lat is not None and item_lng is not None:
            features.append(tripadvisor_feature(item, item_lng, item_lat))
            continue

        address = tripadvisor_address(item)
        if not address:
            skipped += 1
            continue
        found = await geocoder.geocode(address, near=(lng, lat))
        if found is None:
            skipped += 1
            continue
        features.append(tripadvisor_feature(item, found[0], found[1]))

    if skipped:
        logger.info(f"tripadvisor_by_place {place!r}: skipped {skipped} item(s)")
    return ToolResult.success(to_feature_collection(features), "tripadvisor")

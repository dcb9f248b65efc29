#!/usr/bin/env python3
"""
Normalizers that project raw provider rows into GeoJSON features.

Each provider gets a fixed property schema with a mandatory `source` tag.
Rows that cannot produce a geometry are skipped, never raised on.
"""

import logging

from mapchat.utils.geo_utils import to_number
from mapchat.utils.results import (
    feature_collection,
    feature_properties,
    make_feature,
    point,
)

logger = logging.getLogger(__name__)

SEARCH_CENTER = "search-center"
_GEOMETRY_TYPES = {
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
}


def _valid_geometry(geometry):
    return (
        isinstance(geometry, dict)
        and geometry.get("type") in _GEOMETRY_TYPES
        and bool(geometry.get("coordinates"))
    )


def nominatim_rows_to_features(rows, prefer_polygon=True):
    """Map Nominatim jsonv2 rows to features, preferring the native polygon."""
    features = []
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, dict):
            continue
        geometry = row.get("geojson") if prefer_polygon else None
        if not _valid_geometry(geometry):
            lng, lat = to_number(row.get("lon")), to_number(row.get("lat"))
            if lng is None or lat is None:
                logger.debug(f"Skipping Nominatim row without geometry: {row.get('osm_id')}")
                continue
            geometry = point(lng, lat)
        features.append(
            make_feature(
                geometry,
                {
                    "source": "nominatim",
                    "display_name": row.get("display_name"),
                    "category": row.get("category"),
                    "type": row.get("type"),
                    "importance": row.get("importance"),
                    "osm_type": row.get("osm_type"),
                    "osm_id": row.get("osm_id"),
                },
            )
        )
    return features


def _foursquare_coordinates(row):
    lat, lng = to_number(row.get("latitude")), to_number(row.get("longitude"))
    if lat is None or lng is None:
        main = _as_dict(_as_dict(row.get("geocodes")).get("main"))
        lat, lng = to_number(main.get("latitude")), to_number(main.get("longitude"))
    return lat, lng


def _as_dict(value):
    return value if isinstance(value, dict) else {}


def _category_names(categories):
    if not isinstance(categories, list):
        return []
    return [
        c["name"]
        for c in categories
        if isinstance(c, dict) and isinstance(c.get("name"), str) and c["name"]
    ]


def foursquare_results_to_features(results):
    """Map Foursquare place search results to Point features."""
    features = []
    for row in results if isinstance(results, list) else []:
        if not isinstance(row, dict):
            continue
        lat, lng = _foursquare_coordinates(row)
        if lat is None or lng is None:
            continue

        location = _as_dict(row.get("location"))
        properties = {
            "source": "foursquare",
            "fsq_id": row.get("fsq_place_id") or row.get("fsq_id"),
            "name": row.get("name"),
            "address": location.get("address") or location.get("formatted_address"),
            "categories": _category_names(row.get("categories")),
        }
        # only present when the search is centred on ll/radius
        distance = to_number(row.get("distance"))
        if distance is not None:
            properties["distance"] = row.get("distance")
        rating = to_number(row.get("rating"))
        if rating is not None:
            properties["rating"] = rating
        features.append(make_feature(point(lng, lat), properties))
    return features


def tripadvisor_address(item):
    """Street address of a TripAdvisor item, or None when there is no usable text."""
    for address in (
        item.get("address"),
        _as_dict(item.get("address_obj")).get("address_string"),
    ):
        if isinstance(address, str) and address.strip():
            return address.strip()
    return None


def tripadvisor_feature(item, lng, lat):
    """Point feature for a TripAdvisor nearby_search item."""
    return make_feature(
        point(lng, lat),
        {
            "source": "tripadvisor",
            "location_id": item.get("location_id"),
            "name": item.get("name"),
            "address": tripadvisor_address(item),
            "category": "poi",
        },
    )


def search_center_feature(place, geometry):
    """Marker for the resolved place a nearby search was centred on."""
    return make_feature(
        geometry,
        {"source": "nominatim", "name": place, "category": SEARCH_CENTER},
    )


def filter_by_min_rating(features, min_rating):
    """
    Keep features whose rating meets the threshold.

    Features without a numeric rating are dropped. With no threshold the
    features pass through untouched.
    """
    if min_rating is None:
        return list(features)
    kept = []
    for feature in features:
        rating = feature_properties(feature).get("rating")
        if isinstance(rating, (int, float)) and not isinstance(rating, bool):
            if rating >= min_rating:
                kept.append(feature)
    return kept


def to_feature_collection(features):
    return feature_collection(f for f in features if f.get("geometry"))

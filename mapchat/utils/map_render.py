#!/usr/bin/env python3
"""
Render instructions for the map widget.

Turns a successful tool result into the layer data, marker popups and
viewport the map needs: replace the named layers, refresh markers, then fit
the view to every coordinate in the collection.
"""

from mapchat.config import Config
from mapchat.utils.geo_utils import collect_coordinates, first_vertex
from mapchat.utils.results import ToolResult, feature_collection, feature_properties

SEARCH_LAYER = "search-result"
RECOMMENDATION_LAYER = "recommendation-result"


def marker_popup(properties):
    """Plain-text popup for a recommendation marker; '-' where data is missing."""
    name = properties.get("name") or "-"
    address = properties.get("address") or "-"
    distance = properties.get("distance")
    distance_text = f"{distance}m from location" if distance is not None else "-"
    tags = properties.get("categories")
    tags = [t for t in tags if isinstance(t, str)] if isinstance(tags, list) else []
    tags_text = ", ".join(tags) if tags else "-"
    return f"{name}\n{address}\n{distance_text}\nTags: {tags_text}"


def fit_bounds(fc):
    """[[min_lng, min_lat], [max_lng, max_lat]] over all coordinates, or None."""
    coords = collect_coordinates(fc)
    if not coords:
        return None
    lngs = [c[0] for c in coords]
    lats = [c[1] for c in coords]
    return [[min(lngs), min(lats)], [max(lngs), max(lats)]]


def build_map_update(result: ToolResult):
    """
    Render update for one tool result, or None if there is nothing to draw.

    Features tagged `nominatim` go to the search layer; everything else is a
    recommendation and also gets a marker when it is a Point.
    """
    if not result.ok or not isinstance(result.data, dict):
        return None

    fc = result.data
    search, recommendations = [], []
    for feature in result.features:
        if feature_properties(feature).get("source") == "nominatim":
            search.append(feature)
        else:
            recommendations.append(feature)

    markers = []
    for feature in recommendations:
        geometry = feature.get("geometry")
        if not isinstance(geometry, dict) or geometry.get("type") != "Point":
            continue
        position = first_vertex(geometry)
        if position is None:
            continue
        markers.append(
            {
                "lnglat": list(position),
                "popup": marker_popup(feature_properties(feature)),
            }
        )

    layers = {SEARCH_LAYER: feature_collection(search)}
    if result.source != "nominatim":
        layers[RECOMMENDATION_LAYER] = feature_collection(recommendations)

    bounds = fit_bounds(fc)
    return {
        "source": result.source,
        "layers": layers,
        "markers": markers,
        "fit_bounds": (
            {
                "bounds": bounds,
                "padding": Config.FIT_BOUNDS_PADDING,
                "duration": Config.FIT_BOUNDS_DURATION_MS,
            }
            if bounds
            else None
        ),
    }

#!/usr/bin/env python3
"""
Geographic utilities for MapChat.
Handles GeoJSON centroids, coordinate collection and bias boxes.

All positions are GeoJSON order: (longitude, latitude).
"""

import math

KM_PER_DEGREE = 111.0
_MIN_COS = 0.0001


def is_position(value):
    """True for a [lng, lat, ...] sequence whose first two members are numbers."""
    return (
        isinstance(value, (list, tuple))
        and len(value) >= 2
        and all(
            isinstance(v, (int, float)) and not isinstance(v, bool) for v in value[:2]
        )
    )


def close_ring(ring):
    """Return the ring with its first position repeated at the end if it isn't already."""
    if not ring:
        return list(ring)
    first, last = ring[0], ring[-1]
    if first[0] == last[0] and first[1] == last[1]:
        return list(ring)
    return list(ring) + [first]


def ring_centroid(ring):
    """
    Area-weighted centroid of a single ring via the shoelace formula.

    Returns (cx, cy, signed_area), or None when the ring is degenerate
    (fewer than three positions or zero signed area).
    """
    if not isinstance(ring, (list, tuple)) or not all(is_position(p) for p in ring):
        return None
    closed = close_ring(ring)
    if len(closed) < 4:
        return None

    twice_area = 0.0
    sum_x = 0.0
    sum_y = 0.0
    for (x0, y0, *_), (x1, y1, *_) in zip(closed, closed[1:]):
        cross = x0 * y1 - x1 * y0
        twice_area += cross
        sum_x += (x0 + x1) * cross
        sum_y += (y0 + y1) * cross

    if twice_area == 0:
        return None
    return sum_x / (3 * twice_area), sum_y / (3 * twice_area), twice_area / 2


def mean_coordinate(positions):
    """Unweighted arithmetic mean of positions, or None if there are none."""
    if not positions:
        return None
    sx = sum(p[0] for p in positions)
    sy = sum(p[1] for p in positions)
    return sx / len(positions), sy / len(positions)


def _ring_fallback(ring):
    if len(ring) < 3:
        return (ring[0][0], ring[0][1]) if ring else None
    return mean_coordinate(ring)


def geometry_centroid(geometry):
    """
    Compute a representative (lng, lat) for any GeoJSON geometry.

    - Point: the point itself
    - MultiPoint / LineString / MultiLineString: mean of all positions
    - Polygon: outer-ring centroid (holes ignored), mean of the ring if degenerate
    - MultiPolygon: outer-ring centroids weighted by absolute area, mean of all
      positions if the total area is zero

    Returns None for empty, missing or unsupported geometries.
    """
    if not isinstance(geometry, dict):
        return None

    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    if not coords:
        return None

    try:
        if kind == "Point":
            return (coords[0], coords[1]) if is_position(coords) else None

        if kind in ("MultiPoint", "LineString"):
            return mean_coordinate(coords)

        if kind == "MultiLineString":
            return mean_coordinate([p for line in coords for p in line])

        if kind == "Polygon":
            outer = coords[0]
            if not outer:
                return None
            rc = ring_centroid(outer)
            if rc:
                return rc[0], rc[1]
            return _ring_fallback(outer)

        if kind == "MultiPolygon":
            sum_cx = sum_cy = sum_area = 0.0
            for polygon in coords:
                if not polygon or not polygon[0]:
                    continue
                rc = ring_centroid(polygon[0])
                if rc:
                    cx, cy, area = rc
                    weight = abs(area)
                    sum_cx += cx * weight
                    sum_cy += cy * weight
                    sum_area += weight
            if sum_area > 0:
                return sum_cx / sum_area, sum_cy / sum_area
            return mean_coordinate(
                [p for polygon in coords for ring in polygon for p in ring]
            )
    except (TypeError, IndexError, KeyError, ValueError):
        return None

    return None


def first_vertex(geometry):
    """First position of a Point, Polygon or MultiPolygon, else None."""
    if not isinstance(geometry, dict):
        return None
    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    try:
        if kind == "Point":
            position = coords
        elif kind == "Polygon":
            position = coords[0][0]
        elif kind == "MultiPolygon":
            position = coords[0][0][0]
        else:
            return None
    except (TypeError, IndexError, KeyError):
        return None
    return (position[0], position[1]) if is_position(position) else None


def _members(value):
    return value if isinstance(value, (list, tuple)) else []


def geometry_coordinates(geometry):
    """Flatten every well-formed position of a single geometry, preserving order."""
    if not isinstance(geometry, dict):
        return []
    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    if kind == "Point":
        positions = [coords]
    elif kind in ("MultiPoint", "LineString"):
        positions = _members(coords)
    elif kind in ("MultiLineString", "Polygon"):
        positions = [p for part in _members(coords) for p in _members(part)]
    elif kind == "MultiPolygon":
        positions = [
            p
            for polygon in _members(coords)
            for ring in _members(polygon)
            for p in _members(ring)
        ]
    else:
        return []
    return [p for p in positions if is_position(p)]


def collect_coordinates(feature_collection):
    """Flatten every position across all features of a FeatureCollection."""
    if not isinstance(feature_collection, dict):
        return []
    points = []
    for feature in _members(feature_collection.get("features")):
        if isinstance(feature, dict):
            points.extend(geometry_coordinates(feature.get("geometry")))
    return points


def bias_viewbox(lat, lng, radius_km):
    """
    Bounding box of roughly radius_km around a centre.

    Returns (left, top, right, bottom) in degrees, the order Nominatim's
    viewbox parameter expects.
    """
    d_lat = radius_km / KM_PER_DEGREE
    cos_lat = max(abs(math.cos(math.radians(lat))), _MIN_COS)
    d_lng = radius_km / (KM_PER_DEGREE * cos_lat)
    return lng - d_lng, lat + d_lat, lng + d_lng, lat - d_lat


def to_number(value):
    """Parse a float from a number or numeric string, None if not finite."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None

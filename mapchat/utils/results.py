#!/usr/bin/env python3
"""
Result and query types passed across the MapChat tool boundary.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from mapchat.config import Config


def clamp(value, low, high):
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


@dataclass(frozen=True)
class ToolResult:
    """
    Tagged outcome of a tool call.

    Success carries a GeoJSON FeatureCollection and a provenance tag naming the
    provider that produced it. Failure carries a message the UI can show as-is
    and, when the provider answered, its HTTP status.
    """

    ok: bool
    data: Optional[Dict[str, Any]] = None
    source: Optional[str] = None
    error: Optional[str] = None
    status: Optional[int] = None

    @classmethod
    def success(cls, data, source):
        return cls(ok=True, data=data, source=source)

    @classmethod
    def failure(cls, error, status=None):
        return cls(ok=False, error=error, status=status)

    @property
    def features(self):
        if not self.ok or not isinstance(self.data, dict):
            return []
        features = self.data.get("features")
        if not isinstance(features, list):
            return []
        return [f for f in features if isinstance(f, dict)]

    def to_dict(self):
        """Serialise to the JSON shape returned by the MCP tools."""
        if self.ok:
            return {"ok": True, "data": self.data, "source": self.source}
        out = {"ok": False, "error": self.error}
        if self.status is not None:
            out["status"] = self.status
        return out

    @classmethod
    def from_dict(cls, payload):
        """Rebuild a result from its serialised form; anything else is a failure."""
        if not isinstance(payload, dict):
            return cls.failure(f"Unexpected tool result: {str(payload)[:200]}")
        if payload.get("ok"):
            return cls.success(payload.get("data"), payload.get("source"))
        return cls.failure(
            payload.get("error") or "Unknown error", payload.get("status")
        )


@dataclass(frozen=True)
class NearBias:
    """Centre and radius used to build a Nominatim bias box."""

    lat: float
    lng: float
    radius_km: float = Config.DEFAULT_BIAS_RADIUS_KM


@dataclass(frozen=True)
class SearchQuery:
    """One Nominatim place search, with the limit already clamped to [1, 10]."""

    query: str
    limit: int = Config.DEFAULT_PLACE_LIMIT
    countrycodes: Optional[str] = None
    polygon: bool = True
    language: Optional[str] = None
    near: Optional[NearBias] = None

    @classmethod
    def build(
        cls,
        query,
        limit=None,
        countrycodes=None,
        polygon=True,
        language=None,
        near=None,
    ):
        if limit is None:
            limit = Config.DEFAULT_PLACE_LIMIT
        if isinstance(near, dict):
            near = NearBias(
                lat=float(near["lat"]),
                lng=float(near["lng"]),
                radius_km=float(
                    near.get("radius_km") or Config.DEFAULT_BIAS_RADIUS_KM
                ),
            )
        return cls(
            query=query or "",
            limit=clamp(int(limit), 1, Config.MAX_PLACE_LIMIT),
            countrycodes=countrycodes or None,
            polygon=polygon is not False,
            language=language or None,
            near=near,
        )

    @property
    def is_too_short(self):
        return len(self.query.strip()) < 2

    def cache_key(self):
        """
        Stable key for the cache.

        The bias centre is rounded to 4 decimals and the radius to 0.1 km so
        float noise in repeated calls still hits the same entry.
        """
        key = {
            "q": self.query.strip().lower(),
            "limit": self.limit,
            "cc": self.countrycodes or "",
            "poly": self.polygon,
            "lang": self.language or "",
            "near": (
                {
                    "lat": round(self.near.lat, 4),
                    "lng": round(self.near.lng, 4),
                    "r": round(self.near.radius_km, 1),
                }
                if self.near
                else None
            ),
        }
        return json.dumps(key, sort_keys=True)


def feature_collection(features=None):
    """Wrap features in a GeoJSON FeatureCollection."""
    return {"type": "FeatureCollection", "features": list(features or [])}


def make_feature(geometry, properties):
    return {"type": "Feature", "properties": properties, "geometry": geometry}


def point(lng, lat):
    return {"type": "Point", "coordinates": [lng, lat]}


def feature_properties(feature):
    """Properties dict of a feature; empty when missing or malformed."""
    props = feature.get("properties") if isinstance(feature, dict) else None
    return props if isinstance(props, dict) else {}

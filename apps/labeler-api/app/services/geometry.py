"""
GeoJSON <-> map coordinate conversion.

GeoJSON stores positions as [lng, lat]; the map client wants (lat, lng).
Only the outer ring of a polygon is used, holes are dropped. Malformed
input converts to an empty list so the caller simply draws nothing.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence, Tuple

LatLng = Tuple[float, float]
Bounds = Tuple[LatLng, LatLng]


def _swap(position: Any) -> Optional[LatLng]:
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        return None
    lng, lat = position[0], position[1]
    if isinstance(lng, bool) or isinstance(lat, bool):
        return None
    if not isinstance(lng, (int, float)) or not isinstance(lat, (int, float)):
        return None
    return (float(lat), float(lng))


def _swap_all(positions: Any) -> List[LatLng]:
    if not isinstance(positions, (list, tuple)):
        return []
    out: List[LatLng] = []
    for position in positions:
        pair = _swap(position)
        if pair is None:
            return []
        out.append(pair)
    return out


def outer_ring(geometry: Any) -> list:
    """Raw outer ring of a Polygon geometry, or [] for anything else."""
    if not isinstance(geometry, dict) or geometry.get("type") != "Polygon":
        return []
    rings = geometry.get("coordinates")
    if not isinstance(rings, (list, tuple)) or not rings:
        return []
    ring = rings[0]
    return list(ring) if isinstance(ring, (list, tuple)) else []


def to_latlngs(geometry: Any) -> List[LatLng]:
    """Convert a Polygon / LineString / Point geometry into (lat, lng) pairs."""
    if not isinstance(geometry, dict):
        return []
    kind = geometry.get("type")
    if kind == "Polygon":
        return _swap_all(outer_ring(geometry))
    if kind == "LineString":
        return _swap_all(geometry.get("coordinates"))
    if kind == "Point":
        pair = _swap(geometry.get("coordinates"))
        return [pair] if pair else []
    return []


def latlng_bounds(latlngs: Sequence[LatLng]) -> Optional[Bounds]:
    """((south, west), (north, east)) around the points, or None."""
    if not latlngs:
        return None
    lats = [p[0] for p in latlngs]
    lngs = [p[1] for p in latlngs]
    if not all(math.isfinite(v) for v in lats + lngs):
        return None
    return (min(lats), min(lngs)), (max(lats), max(lngs))


def bounds_are_valid(bounds: Optional[Bounds]) -> bool:
    """True when south <= north, west <= east and all four are on the globe."""
    if bounds is None:
        return False
    (south, west), (north, east) = bounds
    if south > north or west > east:
        return False
    lats_ok = -90.0 <= south and north <= 90.0
    lngs_ok = -180.0 <= west and east <= 180.0
    return lats_ok and lngs_ok

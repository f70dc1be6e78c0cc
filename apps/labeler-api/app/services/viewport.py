"""
Pick the initial map viewport for a substation.

Fits the boundary feature's outer ring when there is one, otherwise
falls back to a fixed view over the continental US.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from app.services.geometry import Bounds, bounds_are_valid, latlng_bounds, to_latlngs
from app.services.labels import BOUNDARY_LABEL

DEFAULT_CENTER: Tuple[float, float] = (40.0, -95.0)
DEFAULT_ZOOM = 4
FIT_PADDING: Tuple[int, int] = (20, 20)


@dataclass(frozen=True)
class ViewportRequest:
    mode: str  # fit_bounds | set_view
    bounds: Optional[Bounds] = None
    padding: Optional[Tuple[int, int]] = None
    center: Optional[Tuple[float, float]] = None
    zoom: Optional[int] = None

    def to_dict(self) -> dict:
        if self.mode == "fit_bounds":
            return {
                "mode": self.mode,
                "bounds": [list(self.bounds[0]), list(self.bounds[1])],
                "padding": list(self.padding),
            }
        return {"mode": self.mode, "center": list(self.center), "zoom": self.zoom}


DEFAULT_VIEW = ViewportRequest(mode="set_view", center=DEFAULT_CENTER, zoom=DEFAULT_ZOOM)


def find_boundary(features: Iterable):
    for feature in features:
        if feature.label == BOUNDARY_LABEL:
            return feature
    return None


def fit_viewport(features: Iterable) -> ViewportRequest:
    boundary = find_boundary(features)
    if boundary is None:
        return DEFAULT_VIEW
    geometry = boundary.geometry
    if not isinstance(geometry, dict) or geometry.get("type") != "Polygon":
        return DEFAULT_VIEW

    bounds = latlng_bounds(to_latlngs(geometry))
    if not bounds_are_valid(bounds):
        return DEFAULT_VIEW
    return ViewportRequest(mode="fit_bounds", bounds=bounds, padding=FIT_PADDING)

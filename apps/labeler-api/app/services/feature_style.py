"""
Per-feature styling and the map legend.

Color precedence for a feature:
  boundary  -> red outline, not interactive
  confirmed -> green
  unsaved   -> yellow
  otherwise -> LABEL_COLORS lookup, blue when the label is unknown
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Iterable, List, Optional

from app.services.geometry import LatLng, to_latlngs
from app.services.labels import (
    BOUNDARY_COLOR,
    CONFIRMED_COLOR,
    DEFAULT_COLOR,
    LABEL_COLORS,
    PENDING_COLOR,
)
from app.services.records import AnnotationRecord

SHAPE_FOR_GEOMETRY = {
    "Polygon": "polygon",
    "LineString": "polyline",
    "Point": "circle_marker",
}


@dataclass(frozen=True)
class FeatureStyle:
    color: str
    weight: int = 3
    fill: bool = False
    fill_color: Optional[str] = None
    fill_opacity: Optional[float] = None
    radius: Optional[int] = None
    interactive: bool = True


@dataclass
class RenderedFeature:
    key: str
    shape: str
    positions: List[LatLng]
    style: FeatureStyle
    clickable: bool
    record: Optional[dict] = None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "shape": self.shape,
            "positions": [list(p) for p in self.positions],
            "style": asdict(self.style),
            "clickable": self.clickable,
            "record": self.record,
        }


@dataclass(frozen=True)
class LegendRow:
    label: str
    color: str
    filled: bool = True


def label_color(label: str) -> str:
    return LABEL_COLORS.get(label, DEFAULT_COLOR)


def feature_color(feature: AnnotationRecord) -> str:
    if feature.is_boundary:
        return BOUNDARY_COLOR
    if feature.confirmed:
        return CONFIRMED_COLOR
    if feature.is_unsaved:
        return PENDING_COLOR
    return label_color(feature.label)


def style_for(feature: AnnotationRecord) -> FeatureStyle:
    color = feature_color(feature)
    if feature.is_boundary:
        return FeatureStyle(color=color, weight=2, fill=False, interactive=False)

    kind = (feature.geometry or {}).get("type")
    if kind == "Point":
        return FeatureStyle(
            color=color, fill=True, fill_color=color, fill_opacity=1.0, radius=5
        )
    return FeatureStyle(color=color, weight=3, fill=False)


def render_feature(feature: AnnotationRecord) -> Optional[RenderedFeature]:
    geometry = feature.geometry if isinstance(feature.geometry, dict) else {}
    kind = geometry.get("type")
    if feature.is_boundary and kind != "Polygon":
        return None
    shape = SHAPE_FOR_GEOMETRY.get(kind)
    if shape is None:
        return None
    positions = to_latlngs(geometry)
    if not positions:
        return None

    clickable = not feature.is_boundary
    return RenderedFeature(
        key=feature.key.wire,
        shape=shape,
        positions=positions,
        style=style_for(feature),
        clickable=clickable,
        record=feature.to_dict() if clickable else None,
    )


def render_features(features: Iterable[AnnotationRecord]) -> List[RenderedFeature]:
    rendered = []
    for feature in features:
        item = render_feature(feature)
        if item is not None:
            rendered.append(item)
    return rendered


def build_legend(features: Iterable[AnnotationRecord]) -> List[LegendRow]:
    seen: List[str] = []
    for feature in features:
        if feature.is_boundary or feature.is_unsaved:
            continue
        if feature.label not in seen:
            seen.append(feature.label)

    rows = [LegendRow(label=label, color=label_color(label)) for label in seen]
    rows.append(LegendRow(label="Newly Drawn", color=PENDING_COLOR))
    rows.append(LegendRow(label="Confirmed", color=CONFIRMED_COLOR))
    rows.append(LegendRow(label="Substation Boundary", color=BOUNDARY_COLOR, filled=False))
    return rows

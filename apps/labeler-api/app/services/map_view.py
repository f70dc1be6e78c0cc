"""Assemble everything the map client needs to draw one substation."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from app.core.config import settings
from app.services.feature_style import build_legend, render_features
from app.services.records import AnnotationRecord
from app.services.viewport import fit_viewport

MAX_NATIVE_ZOOM = 19
MAX_ZOOM = 24


def build_map_view(features: List[AnnotationRecord]) -> Dict[str, Any]:
    return {
        "tile_layer": {
            "url": settings.TILE_URL,
            "max_native_zoom": MAX_NATIVE_ZOOM,
            "max_zoom": MAX_ZOOM,
        },
        "viewport": fit_viewport(features).to_dict(),
        "features": [item.to_dict() for item in render_features(features)],
        "legend": [asdict(row) for row in build_legend(features)],
    }


def substation_features(substation, annotations: List[AnnotationRecord]) -> List[AnnotationRecord]:
    """Boundary first, then the component annotations."""
    if substation is None:
        return list(annotations)
    return [AnnotationRecord.boundary_for(substation), *annotations]

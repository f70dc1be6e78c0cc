"""Export of completed substations with their nested annotations."""

from __future__ import annotations

from typing import Any, Dict, List

from app.services.gateway import PersistenceGateway

EXPORT_FILENAME = "annotations.json"


class NoAnnotatedData(LookupError):
    pass


def _iso(value):
    return value.isoformat() if value else None


def _polygon_dict(row) -> Dict[str, Any]:
    return {
        "id": row.id,
        "substation_id": row.substation_id,
        "substation_full_id": row.substation_full_id,
        "label": row.label,
        "confirmed": row.confirmed,
        "geometry": row.geometry,
        "created_by": row.created_by,
        "created_at": _iso(row.created_at),
    }


def _point_dict(row) -> Dict[str, Any]:
    return {
        "id": row.id,
        "x": row.x,
        "y": row.y,
        "labels": list(row.labels or []),
        "custom_label": row.custom_label,
        "created_by": row.created_by,
        "created_at": _iso(row.created_at),
    }


def build_export(gateway: PersistenceGateway) -> List[Dict[str, Any]]:
    substations = gateway.list_completed_with_annotations()
    if not substations:
        raise NoAnnotatedData("No annotated data available")

    return [
        {
            "id": s.id,
            "kind": s.kind,
            "full_id": s.full_id,
            "name": s.name,
            "substation_type": s.substation_type,
            "geometry": s.geometry,
            "image_url": s.image_url,
            "uploaded_by": s.uploaded_by,
            "annotated_by": s.annotated_by,
            "completed": s.completed,
            "created_at": _iso(s.created_at),
            "completed_at": _iso(s.completed_at),
            "component_polygons": [_polygon_dict(p) for p in s.component_polygons],
            "point_annotations": [_point_dict(p) for p in s.point_annotations],
        }
        for s in substations
    ]

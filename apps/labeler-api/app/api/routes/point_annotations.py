"""
Point annotation routes (image-space pins):
- GET    /substations/{id}/points
- POST   /substations/{id}/points
- PATCH  /points/{id}
- DELETE /points/{id}
"""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_current_user, get_gateway, service_errors
from app.schemas.point_annotation import (
    PointAnnotationCreate,
    PointAnnotationOut,
    PointAnnotationUpdate,
)
from app.services.gateway import PersistenceGateway

router = APIRouter(tags=["point-annotations"])


def _clean_labels(labels: list[str]) -> list[str]:
    out: list[str] = []
    for label in labels:
        label = label.strip()
        if label and label not in out:
            out.append(label)
    return out


@router.get("/substations/{substation_id}/points", response_model=list[PointAnnotationOut])
def list_points(
    substation_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    with service_errors():
        if not gateway.get_substation(substation_id):
            raise HTTPException(status_code=404, detail="Substation not found")
        return gateway.list_point_annotations(substation_id)


@router.post("/substations/{substation_id}/points", response_model=PointAnnotationOut)
def create_point(
    substation_id: str,
    payload: PointAnnotationCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    with service_errors():
        if not gateway.get_substation(substation_id):
            raise HTTPException(status_code=404, detail="Substation not found")
        return gateway.insert_point_annotation(
            substation_id=substation_id,
            x=payload.x,
            y=payload.y,
            labels=_clean_labels(payload.labels),
            custom_label=(payload.custom_label or "").strip() or None,
            created_by=user.display_name,
        )


@router.patch("/points/{point_id}", response_model=PointAnnotationOut)
def update_point(
    point_id: str,
    payload: PointAnnotationUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    changes = payload.model_dump(exclude_unset=True)
    for coord in ("x", "y"):
        if coord in changes and changes[coord] is None:
            raise HTTPException(status_code=400, detail=f"{coord} cannot be null")
    if changes.get("labels") is not None:
        changes["labels"] = _clean_labels(changes["labels"])
    with service_errors():
        return gateway.update_point_annotation(point_id, **changes)


@router.delete("/points/{point_id}")
def delete_point(
    point_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    with service_errors():
        gateway.delete_point_annotation(point_id)
    return {"ok": True}

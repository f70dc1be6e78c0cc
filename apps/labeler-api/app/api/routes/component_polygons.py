"""
Component annotation CRUD:
- GET    /substations/{id}/components
- POST   /component-polygons
- PATCH  /component-polygons/{id}
- DELETE /component-polygons/{id}

The annotate screen goes through /session; these are for scripts and
bulk fixes.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_current_user, get_gateway, service_errors
from app.schemas.component_polygon import (
    ComponentPolygonCreate,
    ComponentPolygonOut,
    ComponentPolygonUpdate,
)
from app.services.gateway import PersistenceGateway

router = APIRouter(tags=["component-polygons"])


@router.get("/substations/{substation_id}/components", response_model=list[ComponentPolygonOut])
def list_components(
    substation_id: str,
    include_unassigned: bool = Query(default=True),
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    with service_errors():
        if not gateway.get_substation(substation_id):
            raise HTTPException(status_code=404, detail="Substation not found")
        return gateway.list_component_polygons(substation_id, include_unassigned=include_unassigned)


@router.post("/component-polygons", response_model=ComponentPolygonOut)
def create_component(
    payload: ComponentPolygonCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    with service_errors():
        if payload.substation_id and not gateway.get_substation(payload.substation_id):
            raise HTTPException(status_code=404, detail="Substation not found")
        return gateway.insert_component_polygon(
            substation_id=payload.substation_id,
            substation_full_id=payload.substation_full_id,
            label=payload.label.strip(),
            confirmed=payload.confirmed,
            geometry=payload.geometry.model_dump(),
            created_by=user.display_name,
        )


@router.patch("/component-polygons/{polygon_id}", response_model=ComponentPolygonOut)
def update_component(
    polygon_id: str,
    payload: ComponentPolygonUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    changes = payload.model_dump(exclude_unset=True)
    for field in ("label", "confirmed"):
        if field in changes and changes[field] is None:
            del changes[field]
    if "label" in changes:
        changes["label"] = changes["label"].strip()
    with service_errors():
        if changes.get("substation_id") and not gateway.get_substation(changes["substation_id"]):
            raise HTTPException(status_code=404, detail="Substation not found")
        return gateway.update_component_polygon(polygon_id, **changes)


@router.delete("/component-polygons/{polygon_id}")
def delete_component(
    polygon_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    with service_errors():
        gateway.delete_component_polygon(polygon_id)
    return {"ok": True}

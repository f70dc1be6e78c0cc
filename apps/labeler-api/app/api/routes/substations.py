"""
Substation routes:
- GET   /substations?completed=false|true|all
- POST  /substations                 (owner/admin: register an OSM substation)
- GET   /substations/{id}
- PATCH /substations/{id}/type
- GET   /substations/{id}/map        (styled features, viewport, legend)
- GET   /substations/{id}/summary    (per-label totals)
- GET   /substations/{id}/preview    (JPEG of the uploaded raster)
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from app.api.deps import (
    get_current_user,
    get_gateway,
    get_storage,
    require_role,
    service_errors,
)
from app.core.config import settings
from app.schemas.substation import SubstationCreate, SubstationOut, SubstationTypeIn
from app.services.gateway import PersistenceGateway
from app.services.labels import OTHER_TYPE, SUBSTATION_TYPES
from app.services.map_view import build_map_view, substation_features
from app.services.raster import RasterError, raster_preview
from app.services.records import AnnotationRecord, component_summary
from app.services.storage import ObjectStorage

router = APIRouter(prefix="/substations", tags=["substations"])


def _get_or_404(gateway: PersistenceGateway, substation_id: str):
    with service_errors():
        row = gateway.get_substation(substation_id)
    if not row:
        raise HTTPException(status_code=404, detail="Substation not found")
    return row


@router.get("", response_model=list[SubstationOut])
def list_substations(
    completed: Literal["true", "false", "all"] = Query(default="false"),
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    flag = None if completed == "all" else completed == "true"
    with service_errors():
        return gateway.list_substations(completed=flag)


@router.post("", response_model=SubstationOut)
def create_substation(
    payload: SubstationCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(require_role("owner", "admin")),
):
    with service_errors():
        return gateway.insert_substation(
            kind="substation",
            full_id=payload.full_id,
            name=payload.name,
            substation_type=payload.substation_type,
            geometry=payload.geometry.model_dump() if payload.geometry else None,
            uploaded_by=user.display_name,
            completed=False,
        )


@router.get("/{substation_id}", response_model=SubstationOut)
def get_substation(
    substation_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    return _get_or_404(gateway, substation_id)


@router.patch("/{substation_id}/type", response_model=SubstationOut)
def update_substation_type(
    substation_id: str,
    payload: SubstationTypeIn,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    if payload.value not in SUBSTATION_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown substation type: {payload.value}")
    final = payload.other_text.strip() if payload.value == OTHER_TYPE else payload.value
    if not final:
        raise HTTPException(status_code=400, detail="Enter a substation type")
    _get_or_404(gateway, substation_id)
    with service_errors():
        return gateway.update_substation(substation_id, substation_type=final)


@router.get("/{substation_id}/map")
def substation_map(
    substation_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    row = _get_or_404(gateway, substation_id)
    with service_errors():
        rows = gateway.list_component_polygons(substation_id, include_unassigned=not row.completed)
    records = [AnnotationRecord.from_row(r) for r in rows]
    return build_map_view(substation_features(row, records))


@router.get("/{substation_id}/summary")
def substation_summary(
    substation_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    _get_or_404(gateway, substation_id)
    with service_errors():
        rows = gateway.list_component_polygons(substation_id, include_unassigned=False)
    return component_summary(AnnotationRecord.from_row(r) for r in rows)


@router.get("/{substation_id}/preview")
def substation_preview(
    substation_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
    storage: ObjectStorage = Depends(get_storage),
    user=Depends(get_current_user),
):
    row = _get_or_404(gateway, substation_id)
    prefix = f"{settings.PUBLIC_BASE_URL.rstrip('/')}/storage/{settings.IMAGE_BUCKET}/"
    if not row.image_url or not row.image_url.startswith(prefix):
        raise HTTPException(status_code=404, detail="No raster for this substation")
    path = storage.local_path(settings.IMAGE_BUCKET, row.image_url[len(prefix):])
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Raster file missing")
    try:
        data = raster_preview(str(path))
    except RasterError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return Response(content=data, media_type="image/jpeg")

"""
Download route:
- GET /downloads/annotations.json

Completed substations with nested annotations, as an attachment.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_current_user, get_gateway, service_errors
from app.services.export import EXPORT_FILENAME, build_export
from app.services.gateway import PersistenceGateway

router = APIRouter(prefix="/downloads", tags=["downloads"])


@router.get(f"/{EXPORT_FILENAME}")
def download_annotations(
    gateway: PersistenceGateway = Depends(get_gateway),
    user=Depends(get_current_user),
):
    with service_errors():
        payload = build_export(gateway)
    return JSONResponse(
        content=payload,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )

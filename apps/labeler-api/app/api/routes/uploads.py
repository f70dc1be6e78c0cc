"""
Upload route:
- POST /uploads   multipart, field "files": one .tif/.tiff and any .zip

Validation happens before anything is stored. Per-feature failures are
reported in the returned log, not as an HTTP error.
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from app.api.deps import get_current_user, get_gateway, get_storage, service_errors
from app.models.user import User
from app.schemas.upload import UploadReportOut
from app.services.gateway import PersistenceGateway
from app.services.ingest import UploadedFile, ingest_upload
from app.services.storage import ObjectStorage

router = APIRouter(prefix="/uploads", tags=["uploads"])

ACCEPTED_EXTS = (".tif", ".tiff", ".zip")


@router.post("", response_model=UploadReportOut)
def upload_files(
    files: List[UploadFile] = File(...),
    gateway: PersistenceGateway = Depends(get_gateway),
    storage: ObjectStorage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    # anything that is not a raster or a zip is dropped without reading it
    selection = [
        UploadedFile(filename=f.filename, data=f.file.read())
        for f in files
        if f.filename and f.filename.lower().endswith(ACCEPTED_EXTS)
    ]
    with service_errors():
        report = ingest_upload(gateway, storage, selection, uploaded_by=user.display_name)
    return UploadReportOut(
        substation_id=report.substation_id,
        image_url=report.image_url,
        inserted=report.inserted,
        failed=report.failed,
        log=report.log,
    )

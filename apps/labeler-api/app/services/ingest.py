"""
Upload ingestion: one GeoTIFF plus any number of zipped shapefiles.

1) store the raster and get its public URL
2) insert the substation row pointing at it
3) parse each zip and insert one component row per feature

Steps 1-2 are all-or-nothing. Step 3 is best-effort: a bad archive or a
failed insert is written to the status log and the loop moves on.
Inserts run one at a time, in file order.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from app.core.config import settings
from app.services.gateway import GatewayError, PersistenceGateway
from app.services.raster import RasterError, is_raster, raster_footprint
from app.services.shapefile import ShapefileError, parse_shapefile_archive
from app.services.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)


class UploadValidationError(ValueError):
    pass


@dataclass
class UploadedFile:
    filename: str
    data: bytes


@dataclass
class UploadReport:
    substation_id: Optional[str] = None
    image_url: Optional[str] = None
    inserted: int = 0
    failed: int = 0
    log: List[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        logger.info(message)
        self.log.append(message)


def split_selection(
    files: Sequence[UploadedFile],
) -> Tuple[UploadedFile, List[UploadedFile]]:
    """Exactly one raster is required; .zip files are archives; the rest is ignored."""
    rasters = [f for f in files if is_raster(f.filename)]
    archives = [f for f in files if f.filename.lower().endswith(".zip")]
    if not rasters:
        raise UploadValidationError("No TIF file selected")
    if len(rasters) > 1:
        raise UploadValidationError("Select exactly one TIF file")
    return rasters[0], archives


def archive_label(filename: str) -> str:
    base = os.path.basename(filename)
    stem, ext = os.path.splitext(base)
    return stem if ext.lower() == ".zip" else base


def _object_name(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower()
    return f"{int(time.time() * 1000)}-{uuid4().hex[:8]}.{ext}"


def ingest_upload(
    gateway: PersistenceGateway,
    storage: ObjectStorage,
    files: Sequence[UploadedFile],
    uploaded_by: str,
    parser: Callable[[bytes], List[Dict]] = parse_shapefile_archive,
) -> UploadReport:
    raster, archives = split_selection(files)
    report = UploadReport()
    bucket = settings.IMAGE_BUCKET

    report.add(f"Uploading TIF: {raster.filename}")
    object_name = storage.upload(bucket, _object_name(raster.filename), raster.data)
    image_url = storage.public_url(bucket, object_name)
    if not image_url:
        raise StorageError("Failed to get public URL for .tif")

    geometry = None
    try:
        geometry = raster_footprint(str(storage.local_path(bucket, object_name)))
    except RasterError as exc:
        report.add(f"Could not read raster footprint: {exc}")

    report.add("Inserting row into substations table...")
    substation = gateway.insert_substation(
        kind="image",
        name=raster.filename,
        image_url=image_url,
        geometry=geometry,
        uploaded_by=uploaded_by,
        completed=False,
    )
    report.substation_id = substation.id
    report.image_url = image_url
    report.add(f"Created image record: ID = {substation.id}")

    if not archives:
        report.add("No .zip files selected => no shapefiles to parse")

    for archive in archives:
        report.add(f"Parsing zip: {archive.filename}")
        try:
            collections = parser(archive.data)
        except ShapefileError as exc:
            report.failed += 1
            report.add(f"Error parsing zip {archive.filename}: {exc}")
            continue

        label = archive_label(archive.filename)
        for collection in collections:
            if collection.get("type") != "FeatureCollection":
                continue
            features = collection.get("features") or []
            report.add(f"Found {len(features)} features in {archive.filename}")
            for feature in features:
                feature_geometry = (feature or {}).get("geometry")
                if not feature_geometry:
                    report.failed += 1
                    report.add(f"Skipping feature without geometry in {archive.filename}")
                    continue
                try:
                    gateway.insert_component_polygon(
                        substation_id=substation.id,
                        label=label,
                        geometry=feature_geometry,
                        confirmed=False,
                        created_by=uploaded_by,
                    )
                except GatewayError as exc:
                    report.failed += 1
                    report.add(f"Error inserting polygon for zip {archive.filename}: {exc}")
                    continue
                report.inserted += 1

    report.add("All done! Upload completed successfully.")
    return report

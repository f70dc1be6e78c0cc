"""
Shapefile archive parsing.

One zip may hold several shapefiles; each becomes one GeoJSON
FeatureCollection in EPSG:4326.
"""

from __future__ import annotations

import io
import json
import logging
import os
import tempfile
import zipfile
import zlib
from typing import Any, Dict, List

import geopandas as gpd

logger = logging.getLogger(__name__)

WGS84 = "EPSG:4326"

# Damaged members only surface on extraction: bad CRC, truncated deflate
# stream, encrypted or unsupported compression, short writes.
EXTRACT_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    RuntimeError,
    NotImplementedError,
    OSError,
)


class ShapefileError(ValueError):
    pass


def _shp_paths(root: str) -> List[str]:
    found = []
    for dirpath, _, filenames in os.walk(root):
        for filename in filenames:
            if filename.lower().endswith(".shp") and not filename.startswith("._"):
                found.append(os.path.join(dirpath, filename))
    return sorted(found)


def read_feature_collection(shp_path: str) -> Dict[str, Any]:
    gdf = gpd.read_file(shp_path)
    if gdf.crs is not None and gdf.crs.to_epsg() != 4326:
        gdf = gdf.to_crs(WGS84)
    return json.loads(gdf.to_json(default=str))


def parse_shapefile_archive(data: bytes) -> List[Dict[str, Any]]:
    """Return every shapefile in the zip as a FeatureCollection dict."""
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except EXTRACT_ERRORS as exc:
        raise ShapefileError("Not a valid zip archive") from exc

    with archive, tempfile.TemporaryDirectory(prefix="shp-") as tmp:
        try:
            archive.extractall(tmp)
        except EXTRACT_ERRORS as exc:
            raise ShapefileError(f"Could not extract archive: {exc}") from exc
        paths = _shp_paths(tmp)
        if not paths:
            raise ShapefileError("No .shp file found in archive")

        collections = []
        for path in paths:
            try:
                collections.append(read_feature_collection(path))
            except Exception as exc:  # noqa: BLE001
                raise ShapefileError(
                    f"Could not read {os.path.basename(path)}: {exc}"
                ) from exc
            logger.debug("Read %s", os.path.basename(path))
    return collections

"""
GeoTIFF helpers.

- Footprint of a georeferenced raster as a GeoJSON polygon in EPSG:4326
- Small JPEG preview for the completed-substations view
"""

from __future__ import annotations

from io import BytesIO
from typing import Any, Dict, Tuple

import numpy as np
import rasterio
from PIL import Image
from rasterio.enums import Resampling
from rasterio.errors import RasterioError
from rasterio.warp import transform_bounds

RASTER_EXTS = (".tif", ".tiff")


class RasterError(ValueError):
    pass


def is_raster(filename: str) -> bool:
    return filename.lower().endswith(RASTER_EXTS)


def bounds_polygon(west: float, south: float, east: float, north: float) -> Dict[str, Any]:
    return {
        "type": "Polygon",
        "coordinates": [
            [[west, south], [east, south], [east, north], [west, north], [west, south]]
        ],
    }


def raster_footprint(path: str) -> Dict[str, Any]:
    """Boundary polygon of the raster, reprojected to lon/lat."""
    try:
        with rasterio.open(path) as src:
            if src.crs is None:
                raise RasterError("Raster has no coordinate reference system")
            west, south, east, north = transform_bounds(
                src.crs, "EPSG:4326", *src.bounds, densify_pts=21
            )
    except RasterioError as exc:
        raise RasterError(f"Could not read raster: {exc}") from exc
    return bounds_polygon(west, south, east, north)


def _stretch(arr: np.ndarray) -> np.ndarray:
    arr = arr.astype(np.float32)
    lo, hi = np.percentile(arr, (2, 98))
    arr = np.clip(arr, lo, hi)
    arr = (arr - lo) / (hi - lo + 1e-6) * 255.0
    return arr.astype(np.uint8)


def raster_preview(path: str, size: Tuple[int, int] = (512, 512)) -> bytes:
    """
    JPEG preview of the first three bands (or the first band as grey).
    Reads a decimated overview instead of the full raster.
    """
    try:
        with rasterio.open(path) as src:
            scale = max(src.width / size[0], src.height / size[1], 1.0)
            out_shape = (max(1, int(src.height / scale)), max(1, int(src.width / scale)))
            bands = [1, 2, 3] if src.count >= 3 else [1]
            data = src.read(
                bands, out_shape=(len(bands), *out_shape), resampling=Resampling.bilinear
            )
    except RasterioError as exc:
        raise RasterError(f"Could not read raster: {exc}") from exc

    if len(bands) == 3:
        img = Image.fromarray(np.dstack([_stretch(b) for b in data]))
    else:
        img = Image.fromarray(_stretch(data[0])).convert("RGB")

    img.thumbnail(size)
    buf = BytesIO()
    img.save(buf, format="JPEG", quality=85)
    return buf.getvalue()

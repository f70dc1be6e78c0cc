"""Shared fixtures: in-memory database, temp storage, authenticated client."""

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="labeler-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LABELER_HOME"] = _TMP
os.environ["STORAGE_ROOT"] = os.path.join(_TMP, "storage")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["STRICT_COMPLETION"] = "true"

import pytest
from fastapi.testclient import TestClient

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.services.annotation_session import session_store
from app.services.gateway import PersistenceGateway
from app.services.storage import ObjectStorage



@pytest.fixture
def client():
    """Fresh schema, seeded admin, empty session store."""
    Base.metadata.drop_all(bind=engine)
    session_store.clear()
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    response = client.post(
        "/auth/login", json={"email": "admin@local.dev", "password": "password"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway(db):
    return PersistenceGateway(db)


@pytest.fixture
def storage(tmp_path):
    return ObjectStorage(str(tmp_path / "storage"), "http://testserver")


@pytest.fixture
def make_geotiff(tmp_path):
    """Write a small georeferenced RGB GeoTIFF and return its bytes."""
    import numpy as np
    import rasterio
    from rasterio.transform import from_origin

    def _make(west=-95.01, north=40.01, size=20, pixel=0.001):
        path = tmp_path / f"raster-{west}-{north}.tif"
        data = (np.arange(size * size * 3, dtype=np.uint16) % 255).astype(np.uint8)
        data = data.reshape(3, size, size)
        with rasterio.open(
            path,
            "w",
            driver="GTiff",
            width=size,
            height=size,
            count=3,
            dtype="uint8",
            crs="EPSG:4326",
            transform=from_origin(west, north, pixel, pixel),
        ) as dst:
            dst.write(data)
        return path.read_bytes()

    return _make


@pytest.fixture
def make_shapefile_zip(tmp_path):
    """Zip up a shapefile holding the given shapely geometries."""
    import zipfile

    import geopandas as gpd

    def _make(name, geometries, crs="EPSG:4326"):
        folder = tmp_path / f"shp-{name}"
        folder.mkdir()
        gdf = gpd.GeoDataFrame({"idx": list(range(len(geometries)))}, geometry=geometries, crs=crs)
        gdf.to_file(folder / f"{name}.shp")
        archive = tmp_path / f"{name}.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            for part in folder.iterdir():
                zf.write(part, arcname=part.name)
        return archive.read_bytes()

    return _make

"""Upload ingestion: raster storage, substation row, shapefile features."""

import io
import struct
import zipfile

import pytest
from shapely.geometry import LineString, Point, Polygon

from app.services.ingest import (
    UploadValidationError,
    UploadedFile,
    archive_label,
    ingest_upload,
    split_selection,
)
from app.services.gateway import GatewayError
from app.services.raster import raster_footprint, raster_preview
from app.services.shapefile import ShapefileError, parse_shapefile_archive


def _collection(*geometries):
    return {
        "type": "FeatureCollection",
        "features": [{"type": "Feature", "properties": {}, "geometry": g} for g in geometries],
    }


LINE = {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}


def _flip_byte(data, suffix, at=10):
    """Damage one byte inside the member ending with `suffix`; the CRC no longer matches."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        info = next(i for i in zf.infolist() if i.filename.endswith(suffix))
    raw = bytearray(data)
    name_len, extra_len = struct.unpack("<HH", raw[info.header_offset + 26 : info.header_offset + 30])
    start = info.header_offset + 30 + name_len + extra_len
    raw[start + at] ^= 0xFF
    return bytes(raw)


class FlakyGateway:
    """Real gateway whose first component insert fails."""

    def __init__(self, gateway):
        self._gateway = gateway
        self.attempts = 0

    def insert_component_polygon(self, **fields):
        self.attempts += 1
        if self.attempts == 1:
            raise GatewayError("insert component polygon failed: OperationalError")
        return self._gateway.insert_component_polygon(**fields)

    def __getattr__(self, name):
        return getattr(self._gateway, name)


class TestSelection:
    def test_requires_one_raster(self):
        with pytest.raises(UploadValidationError, match="No TIF file selected"):
            split_selection([UploadedFile("a.zip", b"")])

    def test_rejects_two_rasters(self):
        with pytest.raises(UploadValidationError):
            split_selection([UploadedFile("a.tif", b""), UploadedFile("b.TIFF", b"")])

    def test_ignores_other_files(self):
        raster, archives = split_selection(
            [UploadedFile("notes.txt", b""), UploadedFile("A.TIF", b""), UploadedFile("x.zip", b"")]
        )
        assert raster.filename == "A.TIF"
        assert [a.filename for a in archives] == ["x.zip"]

    def test_archive_label_is_file_stem(self):
        assert archive_label("breakers.zip") == "breakers"
        assert archive_label("dir/Power Tower.ZIP") == "Power Tower"


class TestIngestUpload:
    def test_raster_only_creates_one_substation(self, gateway, storage, make_geotiff):
        report = ingest_upload(
            gateway, storage, [UploadedFile("site.tif", make_geotiff())], uploaded_by="Ann"
        )
        row = gateway.get_substation(report.substation_id)
        assert row.kind == "image"
        assert row.completed is False
        assert row.uploaded_by == "Ann"
        assert row.image_url == report.image_url
        assert report.image_url.startswith("http://testserver/storage/images/")
        assert row.geometry["type"] == "Polygon"
        assert report.inserted == 0
        assert gateway.list_component_polygons(row.id, include_unassigned=False) == []
        assert "No .zip files selected => no shapefiles to parse" in report.log

    def test_unreadable_raster_is_still_stored(self, gateway, storage):
        report = ingest_upload(
            gateway, storage, [UploadedFile("site.tif", b"not a tiff")], uploaded_by="Ann"
        )
        assert gateway.get_substation(report.substation_id).geometry is None
        assert any(line.startswith("Could not read raster footprint") for line in report.log)

    def test_features_are_labelled_by_archive(self, gateway, storage):
        def parser(data):
            return [_collection(LINE, LINE)]

        report = ingest_upload(
            gateway,
            storage,
            [UploadedFile("site.tif", b"x"), UploadedFile("Power Line.zip", b"zip")],
            uploaded_by="Ann",
            parser=parser,
        )
        rows = gateway.list_component_polygons(report.substation_id, include_unassigned=False)
        assert report.inserted == 2
        assert [r.label for r in rows] == ["Power Line", "Power Line"]
        assert all(r.confirmed is False for r in rows)
        assert rows[0].geometry == LINE

    def test_bad_archive_does_not_stop_the_rest(self, gateway, storage):
        def parser(data):
            if data == b"bad":
                raise ShapefileError("Not a valid zip archive")
            return [_collection(LINE, None)]

        report = ingest_upload(
            gateway,
            storage,
            [
                UploadedFile("site.tif", b"x"),
                UploadedFile("broken.zip", b"bad"),
                UploadedFile("good.zip", b"good"),
            ],
            uploaded_by="Ann",
            parser=parser,
        )
        assert report.inserted == 1
        assert report.failed == 2
        assert any("Error parsing zip broken.zip" in line for line in report.log)
        assert report.log[-1] == "All done! Upload completed successfully."

    def test_validation_happens_before_storage(self, gateway, storage):
        with pytest.raises(UploadValidationError):
            ingest_upload(gateway, storage, [UploadedFile("a.zip", b"")], uploaded_by="Ann")
        assert gateway.list_substations(completed=None) == []


class TestShapefileArchive:
    def test_reads_every_shapefile(self, make_shapefile_zip):
        data = make_shapefile_zip(
            "towers", [Point(-95.0, 40.0), Point(-95.001, 40.001)]
        )
        collections = parse_shapefile_archive(data)
        assert len(collections) == 1
        features = collections[0]["features"]
        assert len(features) == 2
        assert features[0]["geometry"]["type"] == "Point"

    def test_reprojects_to_wgs84(self, make_shapefile_zip):
        data = make_shapefile_zip(
            "lines", [LineString([(500000, 4400000), (500100, 4400100)])], crs="EPSG:32615"
        )
        [collection] = parse_shapefile_archive(data)
        lng, lat = collection["features"][0]["geometry"]["coordinates"][0]
        assert -94 < lng < -92
        assert 39 < lat < 41

    def test_polygon_survives(self, make_shapefile_zip):
        square = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
        [collection] = parse_shapefile_archive(make_shapefile_zip("pads", [square]))
        assert collection["features"][0]["geometry"]["type"] == "Polygon"

    def test_not_a_zip(self):
        with pytest.raises(ShapefileError):
            parse_shapefile_archive(b"definitely not a zip")

    def test_zip_without_shapefile(self, tmp_path):
        import zipfile

        path = tmp_path / "empty.zip"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("readme.txt", "nothing here")
        with pytest.raises(ShapefileError, match="No .shp file"):
            parse_shapefile_archive(path.read_bytes())


class TestRaster:
    def test_footprint_and_preview(self, tmp_path, make_geotiff):
        path = tmp_path / "site.tif"
        path.write_bytes(make_geotiff(west=-95.01, north=40.01, size=20, pixel=0.001))

        footprint = raster_footprint(str(path))
        ring = footprint["coordinates"][0]
        assert ring[0] == ring[-1]
        assert ring[0][0] == pytest.approx(-95.01)
        assert ring[2][1] == pytest.approx(40.01)

        jpeg = raster_preview(str(path), size=(16, 16))
        assert jpeg[:2] == b"\xff\xd8"


class TestBestEffort:
    def test_corrupt_archive_member_does_not_stop_later_archives(
        self, gateway, storage, make_shapefile_zip
    ):
        broken = _flip_byte(make_shapefile_zip("broken", [Point(-95.0, 40.0)]), ".shp")
        good = make_shapefile_zip(
            "Power Line", [LineString([(-95.0, 40.0), (-94.99, 40.01)])]
        )

        report = ingest_upload(
            gateway,
            storage,
            [
                UploadedFile("site.tif", b"x"),
                UploadedFile("broken.zip", broken),
                UploadedFile("Power Line.zip", good),
            ],
            uploaded_by="Ann",
        )

        assert report.failed == 1
        assert report.inserted == 1
        assert any(
            "Error parsing zip broken.zip: Could not extract archive" in line
            for line in report.log
        )
        rows = gateway.list_component_polygons(report.substation_id, include_unassigned=False)
        assert [r.label for r in rows] == ["Power Line"]
        assert len(gateway.list_substations(completed=None)) == 1

    def test_corrupt_member_raises_shapefile_error(self, make_shapefile_zip):
        broken = _flip_byte(make_shapefile_zip("towers", [Point(-95.0, 40.0)]), ".shp")
        with pytest.raises(ShapefileError, match="Could not extract archive"):
            parse_shapefile_archive(broken)

    def test_failed_insert_is_logged_and_loop_continues(self, gateway, storage):
        flaky = FlakyGateway(gateway)

        def parser(data):
            return [_collection(LINE, LINE, LINE)]

        report = ingest_upload(
            flaky,
            storage,
            [UploadedFile("site.tif", b"x"), UploadedFile("Bus bar.zip", b"zip")],
            uploaded_by="Ann",
            parser=parser,
        )

        assert report.failed == 1
        assert report.inserted == 2
        assert any("Error inserting polygon for zip Bus bar.zip" in line for line in report.log)
        assert report.log[-1] == "All done! Upload completed successfully."
        rows = gateway.list_component_polygons(report.substation_id, include_unassigned=False)
        assert [r.label for r in rows] == ["Bus bar", "Bus bar"]

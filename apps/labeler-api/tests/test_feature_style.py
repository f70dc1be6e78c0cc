"""Feature styling, render payloads and the legend."""

from app.services.feature_style import (
    build_legend,
    feature_color,
    render_feature,
    render_features,
)
from app.services.labels import BOUNDARY_LABEL
from app.services.map_view import build_map_view, substation_features
from app.services.records import AnnotationRecord, Persisted, Unsaved

SQUARE = {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]]}
POINT = {"type": "Point", "coordinates": [-95.0, 40.0]}
LINE = {"type": "LineString", "coordinates": [[0, 0], [2, 2]]}


def rec(label="", confirmed=False, geometry=SQUARE, key=None):
    return AnnotationRecord(
        key=key or Persisted("row-1"), label=label, confirmed=confirmed, geometry=geometry
    )


class TestColors:
    def test_boundary_wins_over_everything(self):
        assert feature_color(rec(BOUNDARY_LABEL, confirmed=True)) == "red"

    def test_confirmed_is_green(self):
        assert feature_color(rec("Power Transformer", confirmed=True)) == "green"

    def test_confirmed_beats_unsaved(self):
        assert feature_color(rec("Bus bar", confirmed=True, key=Unsaved("abc"))) == "green"

    def test_unsaved_is_yellow(self):
        assert feature_color(rec("Power Transformer", key=Unsaved("abc"))) == "yellow"

    def test_known_label_color(self):
        assert feature_color(rec("Power Transformer")) == "#FF00AA"

    def test_unknown_label_is_blue(self):
        assert feature_color(rec("something else")) == "blue"


class TestRenderFeature:
    def test_boundary_is_outline_only(self):
        item = render_feature(rec(BOUNDARY_LABEL, key=Persisted("substation_s1")))
        assert item.shape == "polygon"
        assert item.style.color == "red"
        assert item.style.weight == 2
        assert item.style.fill is False
        assert item.style.interactive is False
        assert item.clickable is False
        assert item.record is None

    def test_non_polygon_boundary_is_skipped(self):
        assert render_feature(rec(BOUNDARY_LABEL, geometry=POINT)) is None

    def test_point_is_filled_circle(self):
        item = render_feature(rec("Power Tower", geometry=POINT))
        assert item.shape == "circle_marker"
        assert item.positions == [(40.0, -95.0)]
        assert item.style.radius == 5
        assert item.style.fill is True
        assert item.style.fill_color == "#0000FF"

    def test_line_is_polyline(self):
        item = render_feature(rec("Power Line", geometry=LINE))
        assert item.shape == "polyline"
        assert item.style.weight == 3

    def test_clickable_feature_carries_record(self):
        item = render_feature(rec("Bus bar"))
        assert item.clickable is True
        assert item.record["key"] == "row-1"
        assert item.to_dict()["positions"][0] == [0.0, 0.0]

    def test_unsaved_key_is_tagged(self):
        item = render_feature(rec("", key=Unsaved("abc")))
        assert item.key == "temp-abc"
        assert item.record["persisted"] is False

    def test_unrenderable_features_are_dropped(self):
        features = [
            rec(geometry={"type": "MultiPolygon", "coordinates": []}),
            rec(geometry=None),
            rec(geometry={"type": "Polygon", "coordinates": [[[0, 0], ["bad"]]]}),
            rec("Bus bar"),
        ]
        assert len(render_features(features)) == 1


class TestLegend:
    def test_distinct_labels_then_fixed_rows(self):
        features = [
            rec(BOUNDARY_LABEL),
            rec("Power Transformer"),
            rec("Power Transformer", key=Persisted("row-2")),
            rec("odd label", key=Persisted("row-3")),
            rec("Never saved", key=Unsaved("x")),
        ]
        rows = build_legend(features)
        assert [r.label for r in rows] == [
            "Power Transformer",
            "odd label",
            "Newly Drawn",
            "Confirmed",
            "Substation Boundary",
        ]
        assert rows[1].color == "blue"
        assert rows[-1].filled is False

    def test_empty_features_still_have_fixed_rows(self):
        assert [r.label for r in build_legend([])] == [
            "Newly Drawn",
            "Confirmed",
            "Substation Boundary",
        ]


class TestMapView:
    def test_substation_boundary_comes_first(self):
        class Row:
            id = "s1"
            full_id = "way/1"
            geometry = SQUARE
            created_at = None

        features = substation_features(Row(), [rec("Bus bar")])
        assert features[0].is_boundary
        assert features[0].key.wire == "substation_s1"

        view = build_map_view(features)
        assert view["tile_layer"]["max_native_zoom"] == 19
        assert view["tile_layer"]["max_zoom"] == 24
        assert view["viewport"]["mode"] == "fit_bounds"
        assert [f["key"] for f in view["features"]] == ["substation_s1", "row-1"]

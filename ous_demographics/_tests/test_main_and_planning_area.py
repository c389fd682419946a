"""
Tests for the PlanningArea model and the command line entry point.

Run with: python -m pytest ous_demographics/_tests/test_main_and_planning_area.py -v
"""

import json
import logging

import pytest
from shapely.geometry import LineString, Point, mapping


@pytest.fixture
def reset_ous_logger():
    """Remove handlers the CLI attaches to the OUS logger."""
    yield
    ous_logger = logging.getLogger("OUS")
    for handler in list(ous_logger.handlers):
        handler.close()
        ous_logger.removeHandler(handler)


class TestPlanningArea:
    """Test sketch parsing and simplification."""

    def test_missing_id_raises(self):
        from ous_demographics.models import PlanningArea

        with pytest.raises(ValueError, match="properties.id"):
            PlanningArea.from_geojson(
                {
                    "type": "Feature",
                    "properties": {},
                    "geometry": mapping(Point(0, 0).buffer(1)),
                }
            )

    def test_non_polygon_raises(self):
        from ous_demographics.models import PlanningArea

        with pytest.raises(ValueError, match="not polygonal"):
            PlanningArea.from_geojson(
                {
                    "type": "Feature",
                    "properties": {"id": "line"},
                    "geometry": mapping(LineString([(0, 0), (1, 1)])),
                }
            )

    def test_wrong_type_raises(self):
        from ous_demographics.models import PlanningArea

        with pytest.raises(ValueError):
            PlanningArea.from_geojson({"type": "Point", "coordinates": [0, 0]})

    def test_empty_collection_raises(self):
        from ous_demographics.models import PlanningArea

        with pytest.raises(ValueError, match="no member sketches"):
            PlanningArea.from_geojson(
                {"type": "FeatureCollection", "properties": {"id": "c"}, "features": []}
            )

    def test_simplify_reduces_vertices(self):
        from ous_demographics.models import PlanningArea

        # A circle of ~0.01 degrees has many near-collinear vertices
        circle = Point(73.4, 5.5).buffer(0.01, quad_segs=64)
        planning_area = PlanningArea.from_geojson(
            {"type": "Feature", "properties": {"id": "c"}, "geometry": mapping(circle)}
        )

        simplified = planning_area.simplified(0.0005)

        before = len(planning_area.geometries[0].exterior.coords)
        after = len(simplified.geometries[0].exterior.coords)
        assert after < before
        assert simplified.sketch_id == "c"

    def test_vertex_counts_only_logged_at_debug(self, monkeypatch, caplog, sketch_a):
        from ous_demographics.models import planning_area

        def _fail(geom):
            raise AssertionError("vertex count computed without DEBUG logging")

        with monkeypatch.context() as patch:
            patch.setattr(planning_area, "_vertex_count", _fail)
            with caplog.at_level(logging.INFO, logger="OUS.PlanningArea"):
                sketch_a.simplified(0.0005)

        with caplog.at_level(logging.DEBUG, logger="OUS.PlanningArea"):
            sketch_a.simplified(0.0005)
        assert any("vertices" in r.getMessage() for r in caplog.records)

    def test_zero_tolerance_is_identity(self, sketch_a):
        assert sketch_a.simplified(0) is sketch_a

    def test_collection_wkt_round_trip(self, sketch_collection):
        from ous_demographics.models import combine_wkts

        combined = combine_wkts(sketch_collection.to_wkts())
        assert combined.equals(sketch_collection.combined_geometry())


class TestCommandLine:
    """Test the argparse entry point end to end."""

    def test_baseline_command(self, tmp_path, survey_features, reset_ous_logger):
        from ous_demographics.main import main

        shapes = tmp_path / "shapes.geojson"
        shapes.write_text(
            json.dumps({"type": "FeatureCollection", "features": survey_features}),
            encoding="utf-8",
        )
        totals = tmp_path / "totals.json"
        groups = tmp_path / "groups.json"

        exit_code = main(
            [
                "--log-dir", str(tmp_path / "logs"),
                "baseline",
                "--shapes", str(shapes),
                "--totals", str(totals),
                "--groups", str(groups),
            ]
        )

        assert exit_code == 0
        metrics = json.loads(totals.read_text(encoding="utf-8"))["metrics"]
        assert metrics[0]["value"] == 21
        assert len(json.loads(groups.read_text(encoding="utf-8"))) == 5
        log_files = list((tmp_path / "logs").glob("baseline_*/main.log"))
        assert len(log_files) == 1

    def test_overlap_command(
        self, tmp_path, survey_features, sketch_a_geojson, reset_ous_logger
    ):
        from ous_demographics.main import main

        shapes = tmp_path / "shapes.geojson"
        shapes.write_text(
            json.dumps({"type": "FeatureCollection", "features": survey_features}),
            encoding="utf-8",
        )
        sketch = tmp_path / "sketch.geojson"
        sketch.write_text(json.dumps(sketch_a_geojson), encoding="utf-8")
        output = tmp_path / "result.json"

        exit_code = main(
            [
                "--log-dir", str(tmp_path / "logs"),
                "overlap",
                "--shapes", str(shapes),
                "--sketch", str(sketch),
                "--output", str(output),
            ]
        )

        assert exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["stats"]["respondents"] == 1
        assert {m["sketchId"] for m in data["metrics"]} == {"sketch-a"}

    def test_missing_input_returns_error_code(self, tmp_path, reset_ous_logger):
        from ous_demographics.main import main

        exit_code = main(
            [
                "--log-dir", str(tmp_path / "logs"),
                "baseline",
                "--shapes", str(tmp_path / "missing.geojson"),
            ]
        )
        assert exit_code == 2

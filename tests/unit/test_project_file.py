"""Tests for project file serialization."""

import json
from datetime import date

import pytest

from solarplace.layout.abstraction import MeasurementSystem, Rotation, Side
from solarplace.layout.project_file import (
    ProjectFileError,
    layout_from_dict,
    layout_to_dict,
    parse_project,
    project_filename,
    read_project_file,
    sanitize_project_name,
    write_project_file,
)


class TestFilename:

    def test_sanitize(self):
        assert sanitize_project_name("Barn Roof #2") == "barn-roof--2"

    def test_dated_filename(self):
        assert project_filename("Barn Roof", date(2026, 10, 19)) == "barn-roof-2026-10-19.json"


class TestSerialize:
    """Tests for layout_to_dict."""

    def test_document_shape(self, wired_layout):
        data = layout_to_dict(wired_layout)

        assert data["name"] == "Barn Roof"
        assert data["measurementSystem"] == "imperial"
        assert data["nextPanelNumber"] == 3
        assert data["nextCombinerBoxNumber"] == 2
        assert data["panelSpacing"] == 0.5
        assert [p["id"] for p in data["panels"]] == ["pa", "pb"]
        assert data["panels"][0]["polarity"] == {"positive": "left", "negative": "right"}
        assert data["combinerBoxes"][0]["width"] == 12.0

    def test_string_wire_path(self, wired_layout):
        string = layout_to_dict(wired_layout)["strings"][0]

        assert string["panels"] == ["pa", "pb"]
        assert string["combinerBoxId"] == "cb"
        assert string["wirePath"]["positive"][0] == {"x": 0.0, "y": 31.0}
        assert string["wirePath"]["negative"][-1] == {"x": 6.0, "y": 86.0}

    def test_broken_string_has_empty_path(self, wired_layout):
        del wired_layout.panels["pa"]
        string = layout_to_dict(wired_layout)["strings"][0]
        assert string["wirePath"] == {"positive": [], "negative": []}

    def test_json_serializable(self, wired_layout):
        json.dumps(layout_to_dict(wired_layout))


class TestParse:
    """Tests for layout_from_dict."""

    def test_round_trip(self, wired_layout):
        layout = layout_from_dict(layout_to_dict(wired_layout))

        assert layout.panels == wired_layout.panels
        assert layout.combiner_boxes == wired_layout.combiner_boxes
        assert layout.strings == wired_layout.strings
        assert layout.panel_width == 40.0

    def test_counters_raised(self, wired_layout):
        """Counters are at least one past the largest number in the file."""
        data = layout_to_dict(wired_layout)
        data["nextPanelNumber"] = 1
        data["panels"][1]["number"] = 7

        layout = layout_from_dict(data)

        assert layout.next_panel_number == 8
        assert layout.next_string_number == 2

    def test_wire_path_ignored(self, wired_layout):
        data = layout_to_dict(wired_layout)
        data["strings"][0]["wirePath"] = {"positive": [{"x": 999, "y": 999}], "negative": []}

        layout = layout_from_dict(data)

        assert layout.get_string("s1").panel_ids == ("pa", "pb")

    def test_defaults(self):
        layout = layout_from_dict({"panels": [], "combinerBoxes": []})

        assert layout.measurement_system is MeasurementSystem.IMPERIAL
        assert layout.panel_width is None
        assert layout.row_spacing == 0.5
        assert layout.next_panel_number == 1

    def test_string_number_defaults_to_position(self, wired_layout):
        data = layout_to_dict(wired_layout)
        del data["strings"][0]["number"]

        assert layout_from_dict(data).get_string("s1").number == 1

    def test_rotated_panel(self, wired_layout):
        data = layout_to_dict(wired_layout)
        data["panels"][0].update(rotation=90, orientation="landscape",
                                 polarity={"positive": "top", "negative": "bottom"})

        panel = layout_from_dict(data).get_panel("pa")

        assert panel.rotation is Rotation.R90
        assert panel.polarity.positive is Side.TOP
        assert panel.footprint == (62.0, 40.0)


class TestParseErrors:
    """Malformed documents raise ProjectFileError."""

    def test_not_json(self):
        with pytest.raises(ProjectFileError, match="Invalid JSON"):
            parse_project("{not json")

    def test_not_object(self):
        with pytest.raises(ProjectFileError):
            parse_project("[]")

    def test_missing_panels(self):
        with pytest.raises(ProjectFileError, match="panels"):
            layout_from_dict({"combinerBoxes": []})

    @pytest.mark.parametrize("field,value", [
        ("x", "12"),
        ("x", True),
        ("rotation", 45),
        ("orientation", "sideways"),
        ("polarity", {"positive": "left", "negative": "left"}),
    ])
    def test_bad_panel_field(self, wired_layout, field, value):
        data = layout_to_dict(wired_layout)
        data["panels"][0][field] = value

        with pytest.raises(ProjectFileError):
            layout_from_dict(data)

    def test_overflowing_counter(self, wired_layout):
        text = json.dumps(layout_to_dict(wired_layout)).replace(
            '"nextPanelNumber": 3', '"nextPanelNumber": 1e999'
        )

        with pytest.raises(ProjectFileError):
            parse_project(text)

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_coordinate(self, wired_layout, value):
        data = layout_to_dict(wired_layout)
        data["panels"][0]["x"] = value

        with pytest.raises(ProjectFileError, match="finite"):
            layout_from_dict(data)

    def test_non_finite_number(self, wired_layout):
        data = layout_to_dict(wired_layout)
        data["combinerBoxes"][0]["number"] = float("inf")

        with pytest.raises(ProjectFileError):
            layout_from_dict(data)

    def test_duplicate_ids(self, wired_layout):
        data = layout_to_dict(wired_layout)
        data["panels"][1]["id"] = "pa"

        with pytest.raises(ProjectFileError, match="Duplicate"):
            layout_from_dict(data)

    def test_empty_string(self, wired_layout):
        data = layout_to_dict(wired_layout)
        data["strings"][0]["panels"] = []

        with pytest.raises(ProjectFileError):
            layout_from_dict(data)


class TestFiles:

    def test_write_and_read(self, wired_layout, tmp_path):
        path = write_project_file(wired_layout, tmp_path / "roof.json")

        assert read_project_file(path).panels == wired_layout.panels

    def test_write_to_directory(self, wired_layout, tmp_path):
        path = write_project_file(wired_layout, tmp_path)

        assert path.parent == tmp_path
        assert path.name == project_filename("Barn Roof")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProjectFileError):
            read_project_file(tmp_path / "missing.json")

"""
Tests for SolarPlace session management.

Tests the query/command surface, undo/redo, dirty tracking and
load/save of project files.
"""

import json

import pytest

from solarplace.api.session import Session
from solarplace.layout.abstraction import MeasurementSystem, Orientation, Point
from solarplace.layout.project_file import ProjectFileError


class TestSessionBasics:
    """Test basic session functionality."""

    def test_new_session_empty(self, empty_session):
        assert empty_session.list_panels() == []
        assert empty_session.layout.panel_width is None
        assert empty_session.is_dirty is False

    def test_default_spacing(self, empty_session):
        assert empty_session.layout.panel_spacing == 0.5
        assert empty_session.layout.row_spacing == 0.5

    def test_successful_command_sets_dirty(self, empty_session):
        empty_session.try_place("combinerBox", 0, 0)
        assert empty_session.is_dirty is True

    def test_rejected_command_keeps_undo_stack(self, session):
        session.try_place("panel", 0, 0)
        depth = len(session._undo_stack)

        session.try_place("panel", 10, 10)

        assert len(session._undo_stack) == depth


class TestPanelTemplate:
    """Test template, spacing and unit settings."""

    def test_set_template(self, empty_session):
        result = empty_session.set_panel_template("40", "62")

        assert result.success is True
        assert empty_session.layout.panel_width == 40.0
        assert empty_session.layout.panel_length == 62.0

    def test_metric_template(self, empty_session):
        """Metric dimensions are converted to inches."""
        empty_session.set_measurement_system("metric")
        empty_session.set_panel_template("1016", "1574.8")

        assert empty_session.layout.measurement_system is MeasurementSystem.METRIC
        assert empty_session.layout.panel_width == pytest.approx(40.0)
        assert empty_session.layout.panel_length == pytest.approx(62.0)

    @pytest.mark.parametrize("width", ["", "abc", "0", "-5"])
    def test_invalid_template_rejected(self, empty_session, width):
        result = empty_session.set_panel_template(width, "62")

        assert result.success is False
        assert empty_session.layout.panel_width is None

    def test_set_spacing(self, session):
        result = session.set_spacing("1", "0")

        assert result.success is True
        assert session.layout.panel_spacing == 1.0
        assert session.layout.row_spacing == 0.0

    def test_negative_spacing_rejected(self, session):
        result = session.set_spacing("-1", "0.5")

        assert result.success is False
        assert session.layout.panel_spacing == 0.5

    def test_pending_orientation(self, session):
        session.set_orientation("landscape")
        panel_id = session.try_place("panel", 0, 0).entity_id

        assert session.layout.get_panel(panel_id).orientation is Orientation.LANDSCAPE
        assert session.pending_footprint("panel") == (62.0, 40.0)

    def test_pending_flip(self, session):
        assert session.toggle_pending_flip() is True
        panel_id = session.try_place("panel", 0, 0).entity_id

        assert session.layout.get_panel(panel_id).rotation.value == 180


class TestSnap:
    """Test pointer snapping through the session."""

    def test_first_panel_floors_to_cells(self, session, px):
        assert session.snap(px(30), px(47), "panel") == Point(24, 36)

    def test_box_floors_to_six_inches(self, session, px):
        assert session.snap(px(13.5), px(20), "combinerBox") == Point(12, 18)

    def test_magnetic_edge(self, session, px):
        """Next to panel A's right edge, raw x=41 snaps to x=40."""
        session.try_place("panel", 0, 0)

        position = session.snap(px(41), px(10), "panel")

        assert position.x == pytest.approx(40)
        assert position.y == pytest.approx(10)

    def test_no_template_no_snap(self, empty_session, px):
        assert empty_session.snap(px(30), px(47), "panel") is None

    def test_preview_blocked(self, session):
        session.try_place("panel", 0, 0)

        assert session.preview_blocked(Point(20, 20), "panel") is True
        assert session.preview_blocked(Point(40, 0), "panel") is False


class TestWireLengths:
    """Test wire length queries."""

    def test_two_panel_string(self, wired_session):
        """Positive run 61 in, negative run 129.5 in."""
        string = wired_session.list_strings()[0]
        lengths = wired_session.compute_wire_lengths(string.id)

        assert lengths.positive_feet == pytest.approx(61 / 12)
        assert lengths.negative_feet == pytest.approx(129.5 / 12)
        assert lengths.total_feet == pytest.approx(190.5 / 12)
        assert wired_session.total_wire_feet() == pytest.approx(190.5 / 12)

    def test_unrelated_delete_keeps_lengths(self, wired_session):
        string = wired_session.list_strings()[0]
        before = wired_session.compute_wire_lengths(string.id)
        extra = wired_session.try_place("panel", 300, 300).entity_id

        wired_session.delete_panel(extra)

        after = wired_session.compute_wire_lengths(string.id)
        assert after.total_feet == before.total_feet

    def test_deleted_panel_omits_string(self, wired_session):
        string = wired_session.list_strings()[0]

        wired_session.delete_panel(string.first_panel_id)

        assert wired_session.compute_wire_lengths(string.id) is None
        assert wired_session.compute_all_wire_lengths() == []
        assert wired_session.total_wire_feet() == 0


class TestUndoRedo:
    """Test undo/redo functionality."""

    def test_undo_removes_placement(self, session):
        session.try_place("panel", 0, 0)

        assert session.undo() is True
        assert session.list_panels() == []

    def test_undo_nothing_to_undo(self, empty_session):
        assert empty_session.undo() is False

    def test_redo_after_undo(self, session):
        session.try_place("panel", 0, 0)
        session.undo()

        assert session.redo() is True
        assert len(session.list_panels()) == 1

    def test_redo_nothing_to_redo(self, session):
        assert session.redo() is False

    def test_new_command_clears_redo(self, session):
        session.try_place("panel", 0, 0)
        session.undo()
        session.try_place("panel", 100, 0)

        assert session.redo() is False

    def test_undo_keeps_counters(self, session):
        """Numbers handed out before an undo are not reused."""
        session.try_place("panel", 0, 0)
        session.undo()

        panel_id = session.try_place("panel", 0, 0).entity_id

        assert session.layout.get_panel(panel_id).number == 2

    def test_undo_restores_rotation(self, session):
        panel_id = session.try_place("panel", 100, 100).entity_id
        session.try_rotate(panel_id, "right")

        session.undo()

        assert session.layout.get_panel(panel_id).rotation.value == 0

    def test_max_undo_stack(self, session):
        for i in range(Session.MAX_UNDO_STACK + 10):
            session.try_place("combinerBox", (i % 90) * 12, (i // 90) * 12)

        assert len(session._undo_stack) == Session.MAX_UNDO_STACK


class TestPersistence:
    """Test project load/save."""

    def test_save_to_directory(self, wired_session, tmp_path):
        path = wired_session.save(tmp_path, name="Barn Roof")

        assert path.parent == tmp_path
        assert path.name.startswith("barn-roof-")
        assert path.suffix == ".json"
        assert wired_session.is_dirty is False

    def test_save_empty_name_rejected(self, wired_session, tmp_path):
        with pytest.raises(ValueError):
            wired_session.save(tmp_path, name="   ")

    def test_save_then_load(self, wired_session, tmp_path):
        path = wired_session.save(tmp_path / "roof.json", name="Barn Roof")

        loaded = Session().load(path)

        assert loaded.layout.name == "Barn Roof"
        assert loaded.layout.panels == wired_session.layout.panels
        assert loaded.layout.combiner_boxes == wired_session.layout.combiner_boxes
        assert loaded.layout.strings == wired_session.layout.strings
        assert loaded.source_path == path
        string = loaded.list_strings()[0]
        assert loaded.compute_wire_lengths(string.id).total_feet == pytest.approx(190.5 / 12)

    def test_save_defaults_to_source(self, wired_session, tmp_path):
        path = wired_session.save(tmp_path / "roof.json")
        wired_session.try_place("panel", 300, 300)

        assert wired_session.save() == path

    def test_failed_load_leaves_session(self, wired_session, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"name": "x", "panels": [{"id": "p"}], "combinerBoxes": []}))
        before = wired_session.layout

        with pytest.raises(ProjectFileError):
            wired_session.load(bad)

        assert wired_session.layout is before
        assert len(wired_session.list_panels()) == 2

    def test_load_clears_undo(self, wired_session, tmp_path):
        path = wired_session.save(tmp_path / "roof.json")

        wired_session.load(path)

        assert wired_session.undo() is False

    def test_load_clears_pending_placement(self, wired_session, tmp_path):
        path = wired_session.save(tmp_path / "roof.json")
        wired_session.set_orientation("landscape")
        wired_session.toggle_pending_flip()

        wired_session.load(path)

        assert wired_session.pending_orientation is Orientation.PORTRAIT
        assert wired_session.pending_flip is False


class TestProjectName:

    def test_set_name(self, session):
        result = session.set_name("  Barn Roof ")

        assert result.success
        assert session.layout.name == "Barn Roof"
        assert session.is_dirty is True

    def test_rename_is_undoable(self, session):
        session.set_name("Barn Roof")

        assert session.undo() is True
        assert session.layout.name == ""

    def test_empty_name_rejected(self, session):
        undo_depth = len(session._undo_stack)

        result = session.set_name("   ")

        assert not result.success
        assert len(session._undo_stack) == undo_depth


class TestGetStats:
    """Test session statistics."""

    def test_stats(self, wired_session):
        stats = wired_session.get_stats()

        assert stats["panel_count"] == 2
        assert stats["combiner_box_count"] == 1
        assert stats["string_count"] == 1
        assert stats["undo_available"] is True
        assert stats["total_wire_feet"] == pytest.approx(15.88)

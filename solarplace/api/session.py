"""
SolarPlace Session State Management

Owns the Layout aggregate for one editing session and exposes the query and
command surface used by the presentation layer. Handles load/save and an
undo/redo stack of whole-layout snapshots.
"""

from pathlib import Path
from typing import Optional, List, Dict, Any, Sequence, Union
from dataclasses import dataclass
from copy import deepcopy
import logging

from ..layout.abstraction import (
    CombinerBox,
    Layout,
    MeasurementSystem,
    Orientation,
    Panel,
    PanelString,
    PlacementKind,
    Point,
)
from ..layout.project_file import project_filename, read_project_file, write_project_file
from ..layout.units import parse_dimension, parse_spacing
from ..placement.collision import Rect, preview_collides
from ..placement.snapping import SnapEngine
from ..routing.wire_router import (
    WireLengths,
    compute_all_wire_lengths,
    compute_wire_lengths,
    total_wire_feet,
)
from ..settings import LayoutSettings
from .actions import ActionResult, LayoutActions

logger = logging.getLogger(__name__)


@dataclass
class LayoutSnapshot:
    """Complete snapshot of the layout for undo/redo."""
    layout: Layout
    description: str = ""


class Session:
    """
    Manages the lifecycle of a layout editing session.

    Provides:
    - The query/command surface (snap, place, rotate, flip, strings, wires)
    - Pending placement state (orientation, pre-commit flip)
    - Load/save operations
    - Undo/redo stack
    """

    MAX_UNDO_STACK = 50

    def __init__(self, settings: Optional[LayoutSettings] = None):
        self.settings = settings or LayoutSettings()
        self.layout: Layout = self._new_layout()
        self.source_path: Optional[Path] = None
        self.snap_engine = SnapEngine(self.settings)

        # Placement-mode state for the next panel
        self.pending_orientation: Orientation = Orientation.PORTRAIT
        self.pending_flip: bool = False

        self._undo_stack: List[LayoutSnapshot] = []
        self._redo_stack: List[LayoutSnapshot] = []
        self._dirty: bool = False

        self._save_snapshot("Initial")

    def _new_layout(self) -> Layout:
        return Layout(
            panel_spacing=self.settings.default_panel_spacing,
            row_spacing=self.settings.default_row_spacing,
        )

    @property
    def actions(self) -> LayoutActions:
        return LayoutActions(self.layout, self.settings)

    @property
    def is_dirty(self) -> bool:
        """Check if the layout has unsaved changes."""
        return self._dirty

    # --- Queries ---

    def list_panels(self) -> List[Panel]:
        return list(self.layout.panels.values())

    def list_combiner_boxes(self) -> List[CombinerBox]:
        return list(self.layout.combiner_boxes.values())

    def list_strings(self) -> List[PanelString]:
        return list(self.layout.strings.values())

    def pending_footprint(self, kind: Union[PlacementKind, str]) -> Optional[tuple]:
        """Footprint (width, height) of the object about to be placed."""
        if PlacementKind.parse(kind) is PlacementKind.COMBINER_BOX:
            size = self.settings.combiner_box_size
            return size, size

        width, length = self.layout.panel_width, self.layout.panel_length
        if width is None or length is None:
            return None
        if self.pending_orientation is Orientation.LANDSCAPE:
            return length, width
        return width, length

    def snap(self, pointer_x: float, pointer_y: float,
             kind: Union[PlacementKind, str]) -> Optional[Point]:
        """Snap a pointer position (pixels) to a placement coordinate."""
        footprint = self.pending_footprint(kind)
        if footprint is None:
            return None
        return self.snap_engine.snap(
            pointer_x, pointer_y, PlacementKind.parse(kind), self.list_panels(), footprint
        )

    def preview_blocked(self, position: Point, kind: Union[PlacementKind, str]) -> bool:
        """Advisory collision check for the placement preview."""
        footprint = self.pending_footprint(kind)
        if footprint is None:
            return False
        rect = Rect(position.x, position.y, footprint[0], footprint[1])
        return preview_collides(self.layout, rect, self.settings.collision_epsilon)

    def compute_wire_lengths(self, string_id: str) -> Optional[WireLengths]:
        """Wire lengths of a string, or None when it is omitted."""
        return compute_wire_lengths(self.layout, string_id)

    def compute_all_wire_lengths(self) -> List[WireLengths]:
        return compute_all_wire_lengths(self.layout)

    def total_wire_feet(self) -> float:
        return total_wire_feet(self.layout)

    # --- Commands ---

    def _apply(self, result: ActionResult, description: str) -> ActionResult:
        if result.success:
            self._dirty = True
            self._save_snapshot(description)
            logger.info(result.message)
        return result

    def try_place(self, kind: Union[PlacementKind, str], x: float, y: float) -> ActionResult:
        result = self.actions.try_place(
            kind, x, y,
            orientation=self.pending_orientation,
            flipped=self.pending_flip,
        )
        return self._apply(result, f"Place {PlacementKind.parse(kind).value}")

    def try_rotate(self, panel_id: str, direction: str) -> ActionResult:
        return self._apply(self.actions.try_rotate(panel_id, direction), f"Rotate {direction}")

    def try_flip(self, panel_id: str) -> ActionResult:
        return self._apply(self.actions.try_flip(panel_id), "Flip")

    def try_create_string(self, panel_ids: Sequence[str],
                          combiner_box_id: Optional[str]) -> ActionResult:
        return self._apply(self.actions.try_create_string(panel_ids, combiner_box_id), "Create string")

    def delete_panel(self, panel_id: str) -> ActionResult:
        return self._apply(self.actions.delete_panel(panel_id), "Delete panel")

    def delete_combiner_box(self, box_id: str) -> ActionResult:
        return self._apply(self.actions.delete_combiner_box(box_id), "Delete combiner box")

    def delete_string(self, string_id: str) -> ActionResult:
        return self._apply(self.actions.delete_string(string_id), "Delete string")

    # --- Pending placement / model settings ---

    def set_panel_template(self, width, length) -> ActionResult:
        """Set the dimensions of panels to be placed, in the current units."""
        system = self.layout.measurement_system
        try:
            width_in = parse_dimension(width, system, "Width")
            length_in = parse_dimension(length, system, "Length")
        except ValueError as e:
            return ActionResult(False, str(e), [])

        self.layout.panel_width = width_in
        self.layout.panel_length = length_in
        return self._apply(
            ActionResult(True, f"Panel size set to {width_in:.2f} x {length_in:.2f} in", []),
            "Panel size",
        )

    def set_spacing(self, panel_spacing, row_spacing) -> ActionResult:
        """Set the inter-panel and inter-row gaps, in the current units."""
        system = self.layout.measurement_system
        try:
            panel_in = parse_spacing(panel_spacing, system, "Panel spacing")
            row_in = parse_spacing(row_spacing, system, "Row spacing")
        except ValueError as e:
            return ActionResult(False, str(e), [])

        self.layout.panel_spacing = panel_in
        self.layout.row_spacing = row_in
        return self._apply(
            ActionResult(True, f"Spacing set to panel {panel_in:.2f} in, row {row_in:.2f} in", []),
            "Spacing",
        )

    def set_name(self, name: str) -> ActionResult:
        name = name.strip()
        if not name:
            return ActionResult(False, "Project name cannot be empty", [])

        self.layout.name = name
        return self._apply(ActionResult(True, f"Project name: {name}", []), "Rename")

    def set_measurement_system(self, system: Union[MeasurementSystem, str]) -> None:
        self.layout.measurement_system = MeasurementSystem(system)

    def set_orientation(self, orientation: Union[Orientation, str]) -> None:
        self.pending_orientation = Orientation(orientation)

    def toggle_pending_flip(self) -> bool:
        """Flip the panel about to be placed. Returns the new flip state."""
        self.pending_flip = not self.pending_flip
        return self.pending_flip

    def reset(self):
        """Start over with an empty layout."""
        self.layout = self._new_layout()
        self.source_path = None
        self.pending_orientation = Orientation.PORTRAIT
        self.pending_flip = False
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._dirty = False
        self._save_snapshot("Initial")

    # --- Persistence ---

    def load(self, path: Path) -> "Session":
        """
        Load a project file, replacing the current layout.

        The file is parsed completely before anything is replaced; on
        ProjectFileError the session is left exactly as it was.

        Returns:
            Self for chaining
        """
        layout = read_project_file(path)

        self.layout = layout
        self.source_path = Path(path)
        self.pending_orientation = Orientation.PORTRAIT
        self.pending_flip = False
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._dirty = False

        self._save_snapshot("Initial load")
        return self

    def save(self, path: Optional[Path] = None, name: Optional[str] = None) -> Path:
        """
        Save the layout as a project file.

        Args:
            path: Output file or directory. If None, overwrites the loaded
                file, or writes a dated file in the working directory.
            name: Project name to record before saving

        Returns:
            Path where the project was saved
        """
        if name is not None:
            name = name.strip()
            if not name:
                raise ValueError("Project name cannot be empty")
            self.layout.name = name

        if path is None:
            if self.source_path:
                path = self.source_path
            else:
                path = Path.cwd() / project_filename(self.layout.name or "project")

        saved = write_project_file(self.layout, path)
        self.source_path = saved
        self._dirty = False
        return saved

    # --- Undo / redo ---

    def checkpoint(self, description: str = ""):
        """Create a checkpoint for undo."""
        self._save_snapshot(description)

    def undo(self) -> bool:
        """
        Undo last change.

        Returns:
            True if undo was performed, False if nothing to undo
        """
        if len(self._undo_stack) <= 1:  # Keep at least the initial state
            return False

        self._redo_stack.append(self._undo_stack.pop())
        self._restore_snapshot(self._undo_stack[-1])

        self._dirty = True
        return True

    def redo(self) -> bool:
        """
        Redo last undone change.

        Returns:
            True if redo was performed, False if nothing to redo
        """
        if not self._redo_stack:
            return False

        snapshot = self._redo_stack.pop()
        self._undo_stack.append(snapshot)
        self._restore_snapshot(snapshot)

        self._dirty = True
        return True

    def _take_snapshot(self, description: str = "") -> LayoutSnapshot:
        return LayoutSnapshot(layout=deepcopy(self.layout), description=description)

    def _save_snapshot(self, description: str = ""):
        """Save current state to undo stack."""
        self._undo_stack.append(self._take_snapshot(description))

        # Clear redo stack on new action
        self._redo_stack.clear()

        # Limit stack size
        while len(self._undo_stack) > self.MAX_UNDO_STACK:
            self._undo_stack.pop(0)

    def _restore_snapshot(self, snapshot: LayoutSnapshot):
        """Restore layout from snapshot, keeping sequence counters monotonic."""
        current = self.layout
        restored = deepcopy(snapshot.layout)
        restored.next_panel_number = max(restored.next_panel_number, current.next_panel_number)
        restored.next_combiner_box_number = max(restored.next_combiner_box_number,
                                                current.next_combiner_box_number)
        restored.next_string_number = max(restored.next_string_number, current.next_string_number)
        self.layout = restored

    def get_stats(self) -> Dict[str, Any]:
        """Get session statistics."""
        stats = {
            "source": str(self.source_path) if self.source_path else None,
            "dirty": self.is_dirty,
            "undo_available": len(self._undo_stack) > 1,
            "redo_available": len(self._redo_stack) > 0,
            "total_wire_feet": round(self.total_wire_feet(), 2),
        }
        stats.update(self.layout.get_stats())
        return stats

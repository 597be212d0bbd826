"""
SolarPlace Core API: Layout Commands

Atomic, validated mutations of a Layout. Each command reads the current
layout, validates the change (grid bounds, collisions, references) and then
either commits it in one step or rejects it with a reason. Rejections are
ordinary results, not exceptions, and leave the layout untouched.

Usage:
    from solarplace.api.actions import LayoutActions
    actions = LayoutActions(layout)
    result = actions.try_place("panel", 0, 0)
    actions.try_rotate(result.entity_id, "right")
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from ..layout.abstraction import (
    CombinerBox,
    Layout,
    Orientation,
    Panel,
    PanelString,
    PlacementKind,
)
from ..placement.collision import Rect, box_rect, find_collisions, layout_rects, panel_rect, within_bounds
from ..placement.polarity import direction_steps, flip_panel, initial_state, rotate_panel
from ..settings import LayoutSettings

logger = logging.getLogger(__name__)

MIN_STRING_PANELS = 2


@dataclass
class ActionResult:
    """Result of an atomic command."""
    success: bool
    message: str
    modified_ids: List[str] = field(default_factory=list)

    @property
    def entity_id(self) -> Optional[str]:
        """Id of the entity the command created or changed, if any."""
        return self.modified_ids[0] if self.modified_ids else None


def _rejected(message: str) -> ActionResult:
    logger.debug("Rejected: %s", message)
    return ActionResult(False, message, [])


class LayoutActions:
    """Validated commands over one Layout."""

    def __init__(self, layout: Layout, settings: Optional[LayoutSettings] = None):
        self.layout = layout
        self.settings = settings or LayoutSettings()

    # --- Validation helpers ---

    def _blocking(self, rect: Rect, ignore: Sequence[str] = ()) -> List[Rect]:
        return find_collisions(
            rect,
            layout_rects(self.layout),
            ignore=tuple(ignore),
            epsilon=self.settings.collision_epsilon,
        )

    def _in_bounds(self, rect: Rect) -> bool:
        size = self.settings.grid_size
        return within_bounds(rect, size, size)

    def _describe(self, rect: Rect) -> str:
        panel = self.layout.get_panel(rect.owner)
        if panel is not None:
            return f"panel {panel.number}"
        box = self.layout.get_combiner_box(rect.owner)
        if box is not None:
            return f"combiner box {box.number}"
        return "another object"

    def check_placement(self, rect: Rect, ignore: Sequence[str] = ()) -> Optional[str]:
        """Reason a rectangle cannot be committed, or None if it can."""
        if not self._in_bounds(rect):
            return "Placement would extend outside the grid"
        blocking = self._blocking(rect, ignore)
        if blocking:
            return f"Placement would overlap {self._describe(blocking[0])}"
        return None

    # --- Placement commit ---

    def try_place(
        self,
        kind: Union[PlacementKind, str],
        x: float,
        y: float,
        orientation: Orientation = Orientation.PORTRAIT,
        flipped: bool = False,
    ) -> ActionResult:
        """
        Place a panel or combiner box with its top-left corner at (x, y).

        Panels take their dimensions from the layout's pending template.

        Args:
            kind: "panel" or "combinerBox"
            x, y: Top-left position in inches (normally a snap() result)
            orientation: Orientation of a new panel
            flipped: Start a new panel flipped (rotation 180, positive right)
        """
        kind = PlacementKind.parse(kind)
        if kind is PlacementKind.COMBINER_BOX:
            return self._place_box(x, y)
        return self._place_panel(x, y, orientation, flipped)

    def _place_panel(self, x: float, y: float, orientation: Orientation,
                     flipped: bool) -> ActionResult:
        width, length = self.layout.panel_width, self.layout.panel_length
        if width is None or length is None:
            return _rejected("Panel dimensions are not set")

        rotation, polarity = initial_state(flipped)
        panel = Panel(
            id=str(uuid.uuid4()),
            number=self.layout.next_panel_number,
            x=x,
            y=y,
            width=width,
            length=length,
            orientation=orientation,
            rotation=rotation,
            polarity=polarity,
        )

        reason = self.check_placement(panel_rect(panel))
        if reason:
            return _rejected(reason)

        self.layout.panels[panel.id] = panel
        self.layout.next_panel_number += 1
        logger.debug("Placed panel %d at (%.2f, %.2f)", panel.number, x, y)
        return ActionResult(True, f"Placed panel {panel.number} at ({x:.2f}, {y:.2f})", [panel.id])

    def _place_box(self, x: float, y: float) -> ActionResult:
        size = self.settings.combiner_box_size
        box = CombinerBox(
            id=str(uuid.uuid4()),
            number=self.layout.next_combiner_box_number,
            x=x,
            y=y,
            width=size,
            height=size,
        )

        reason = self.check_placement(box_rect(box))
        if reason:
            return _rejected(reason)

        self.layout.combiner_boxes[box.id] = box
        self.layout.next_combiner_box_number += 1
        logger.debug("Placed combiner box %d at (%.2f, %.2f)", box.number, x, y)
        return ActionResult(True, f"Placed combiner box {box.number} at ({x:.2f}, {y:.2f})", [box.id])

    # --- Rotate / flip ---

    def try_rotate(self, panel_id: str, direction: str) -> ActionResult:
        """Rotate a panel 90 degrees left or right about its top-left corner."""
        panel = self.layout.get_panel(panel_id)
        if not panel:
            return _rejected(f"Panel {panel_id} not found")

        try:
            direction_steps(direction)
        except ValueError as e:
            return _rejected(str(e))

        rotated = rotate_panel(panel, direction)
        rect = panel_rect(rotated)
        if not self._in_bounds(rect):
            return _rejected("Rotation would place panel outside the grid")
        blocking = self._blocking(rect, ignore=(panel.id,))
        if blocking:
            return _rejected(f"Rotation would cause overlap with {self._describe(blocking[0])}")

        self.layout.panels[panel.id] = rotated
        return ActionResult(
            True,
            f"Rotated panel {panel.number} {direction} to {rotated.rotation.value}°",
            [panel.id],
        )

    def try_flip(self, panel_id: str) -> ActionResult:
        """Swap a panel's positive and negative terminals."""
        panel = self.layout.get_panel(panel_id)
        if not panel:
            return _rejected(f"Panel {panel_id} not found")

        flipped = flip_panel(panel)
        self.layout.panels[panel.id] = flipped
        return ActionResult(
            True,
            f"Flipped panel {panel.number}: positive {flipped.polarity.positive.value}",
            [panel.id],
        )

    # --- Strings ---

    def try_create_string(self, panel_ids: Sequence[str],
                          combiner_box_id: Optional[str]) -> ActionResult:
        """
        Create a string from selected panels, in selection order.

        The first panel is the positive end, the last the negative end.
        """
        panel_ids = list(panel_ids or [])
        if len(panel_ids) < MIN_STRING_PANELS:
            return _rejected(
                f"Insufficient panels: select at least {MIN_STRING_PANELS} panels for the string"
            )
        if not combiner_box_id:
            return _rejected("No combiner box selected for the string")
        if self.layout.get_combiner_box(combiner_box_id) is None:
            return _rejected(f"Combiner box {combiner_box_id} not found")

        missing = [pid for pid in panel_ids if self.layout.get_panel(pid) is None]
        if missing:
            return _rejected(f"Panel {missing[0]} not found")
        if len(set(panel_ids)) != len(panel_ids):
            return _rejected("A panel can only appear once in a string")

        string = PanelString(
            id=str(uuid.uuid4()),
            number=self.layout.next_string_number,
            panel_ids=tuple(panel_ids),
            combiner_box_id=combiner_box_id,
        )
        self.layout.strings[string.id] = string
        self.layout.next_string_number += 1

        box = self.layout.get_combiner_box(combiner_box_id)
        return ActionResult(
            True,
            f"Created string {string.number} with {len(panel_ids)} panels into combiner box {box.number}",
            [string.id],
        )

    # --- Deletion ---

    def delete_panel(self, panel_id: str) -> ActionResult:
        """Remove a panel. Strings referencing it are left as they are."""
        panel = self.layout.panels.pop(panel_id, None)
        if panel is None:
            return _rejected(f"Panel {panel_id} not found")
        return ActionResult(True, f"Deleted panel {panel.number}", [panel_id])

    def delete_combiner_box(self, box_id: str) -> ActionResult:
        """Remove a combiner box. Strings referencing it are left as they are."""
        box = self.layout.combiner_boxes.pop(box_id, None)
        if box is None:
            return _rejected(f"Combiner box {box_id} not found")
        return ActionResult(True, f"Deleted combiner box {box.number}", [box_id])

    def delete_string(self, string_id: str) -> ActionResult:
        string = self.layout.strings.pop(string_id, None)
        if string is None:
            return _rejected(f"String {string_id} not found")
        return ActionResult(True, f"Deleted string {string.number}", [string_id])

"""
Polarity and Rotation Model

Tracks which side of a panel carries the positive and negative terminals
as the panel is rotated or flipped. Every transform is expressed as a
number of clockwise quarter turns fed through `rotate_side`, so footprint
swaps, polarity remaps and terminal lookups can never disagree.

Transforms here are pure: they return a new Panel and leave the input
untouched. Collision and bounds checks belong to the commit layer.
"""

from dataclasses import replace
from typing import Dict, Literal, Tuple

from ..layout.abstraction import (
    BASE_POLARITY,
    Panel,
    Polarity,
    Rotation,
    Side,
)

RotateDirection = Literal["left", "right"]

# Quarter turns applied by each rotate direction
DIRECTION_STEPS: Dict[str, int] = {
    "left": -1,  # counter-clockwise, -90 degrees
    "right": 1,  # clockwise, +90 degrees
}

FLIP_STEPS = 2


def direction_steps(direction: str) -> int:
    """Quarter turns for a rotate direction."""
    try:
        return DIRECTION_STEPS[direction]
    except KeyError:
        raise ValueError(
            f"Unknown rotate direction {direction!r}, expected 'left' or 'right'"
        ) from None


def polarity_for_rotation(rotation: Rotation) -> Polarity:
    """Canonical polarity of a panel at the given rotation."""
    return BASE_POLARITY.rotated(rotation.steps)


def initial_state(flipped: bool = False) -> Tuple[Rotation, Polarity]:
    """Rotation and polarity of a newly placed panel.

    A flip applied before placement starts the panel half a turn round.
    """
    rotation = Rotation.R180 if flipped else Rotation.R0
    return rotation, polarity_for_rotation(rotation)


def turn(panel: Panel, steps: int) -> Panel:
    """Return `panel` turned by `steps` quarter turns about its top-left."""
    orientation = panel.orientation
    if steps % 2:
        orientation = orientation.toggled()
    return replace(
        panel,
        rotation=panel.rotation.turned(steps),
        orientation=orientation,
        polarity=panel.polarity.rotated(steps),
    )


def rotate_panel(panel: Panel, direction: str) -> Panel:
    """Rotate 90 degrees left (CCW) or right (CW).

    Orientation toggles, so the rendered width and height swap.
    """
    return turn(panel, direction_steps(direction))


def flip_panel(panel: Panel) -> Panel:
    """Swap positive and negative terminals with a half turn.

    Rotation toggles 0 <-> 180 (or 90 <-> 270); footprint is unchanged.
    """
    return turn(panel, FLIP_STEPS)


def rotated_footprint(panel: Panel, direction: str) -> Tuple[float, float]:
    """Footprint the panel would have after rotating in `direction`."""
    return rotate_panel(panel, direction).footprint


def is_consistent(panel: Panel) -> bool:
    """Check the panel's polarity matches its rotation."""
    return panel.polarity == polarity_for_rotation(panel.rotation)


def polarity_symbols(panel: Panel) -> Dict[Side, str]:
    """Terminal marks per side ('+', '-' or '') for the presentation layer."""
    symbols = {side: "" for side in Side}
    symbols[panel.polarity.positive] = "+"
    symbols[panel.polarity.negative] = "-"
    return symbols


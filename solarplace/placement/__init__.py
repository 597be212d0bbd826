"""Placement engine: snapping, collision detection and polarity tracking."""

from .collision import Rect, overlaps, find_collisions
from .snapping import SnapEngine, snap_position
from .polarity import rotate_panel, flip_panel, polarity_symbols

__all__ = [
    "Rect",
    "overlaps",
    "find_collisions",
    "SnapEngine",
    "snap_position",
    "rotate_panel",
    "flip_panel",
    "polarity_symbols",
]

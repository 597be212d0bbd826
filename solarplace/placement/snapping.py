"""
Snapping Engine

Maps a continuous pointer position onto a discrete placement coordinate.

Three regimes:
1. Combiner boxes floor to a 6 inch grid on both axes
2. The first panel floors to the 12 inch grid cells
3. Later panels are pulled magnetically onto the edges of existing panels
   when the raw coordinate is within the snap threshold; an axis with no
   nearby edge rounds to a 2 inch increment instead

Snapping is a pure function of its inputs. It runs on every pointer move
while in placement mode, so it must not touch the layout.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..layout.abstraction import Panel, PlacementKind, Point
from ..settings import LayoutSettings


@dataclass(frozen=True)
class AxisSnap:
    """Result of resolving one axis."""
    value: float
    edge: Optional[float] = None  # edge coordinate snapped to, if magnetic

    @property
    def magnetic(self) -> bool:
        return self.edge is not None


def floor_to(value: float, increment: float) -> float:
    """Floor to the nearest lower multiple of `increment`."""
    return math.floor(value / increment) * increment


def round_to(value: float, increment: float) -> float:
    """Round to the nearest multiple of `increment`, halves rounding up."""
    return math.floor(value / increment + 0.5) * increment


def nearest_edge(raw: float, edges: Iterable[float],
                 threshold: float) -> Optional[float]:
    """Closest edge strictly within `threshold` of `raw`; first seen wins ties."""
    best_edge = None
    best_dist = threshold
    for edge in edges:
        dist = abs(raw - edge)
        if dist < best_dist:
            best_edge = edge
            best_dist = dist
    return best_edge


class SnapEngine:
    """
    Pointer-to-grid snapping.

    The engine holds only configuration; the entity list is passed in on
    each call so the same engine can be shared across layouts.
    """

    def __init__(self, settings: Optional[LayoutSettings] = None):
        self.settings = settings or LayoutSettings()

    def pointer_to_inches(self, pointer_x: float, pointer_y: float) -> Optional[Tuple[float, float]]:
        """Convert a pixel position to raw inches, or None if off the grid."""
        size_px = self.settings.grid_size_px
        if not (0 <= pointer_x < size_px and 0 <= pointer_y < size_px):
            return None
        ppi = self.settings.pixels_per_inch
        return pointer_x / ppi, pointer_y / ppi

    def snap(
        self,
        pointer_x: float,
        pointer_y: float,
        kind: PlacementKind,
        panels: List[Panel],
        footprint: Tuple[float, float],
    ) -> Optional[Point]:
        """
        Snap a pointer position to a placement coordinate.

        Args:
            pointer_x, pointer_y: Pointer position in pixels
            kind: What is being placed
            panels: Panels currently in the layout
            footprint: (width, height) of the object being placed, inches

        Returns:
            Top-left placement coordinate in inches, or None when the
            pointer is off the grid or the footprint would not fit
        """
        raw = self.pointer_to_inches(pointer_x, pointer_y)
        if raw is None:
            return None
        raw_x, raw_y = raw

        if kind is PlacementKind.COMBINER_BOX:
            inc = self.settings.combiner_box_increment
            x, y = floor_to(raw_x, inc), floor_to(raw_y, inc)
        elif not panels:
            inc = self.settings.first_panel_increment
            x, y = floor_to(raw_x, inc), floor_to(raw_y, inc)
        else:
            x_snap, y_snap = self.snap_to_edges(raw_x, raw_y, panels)
            x, y = x_snap.value, y_snap.value

        if not self.fits(x, y, footprint):
            return None
        return Point(x, y)

    def snap_to_edges(self, raw_x: float, raw_y: float,
                      panels: List[Panel]) -> Tuple[AxisSnap, AxisSnap]:
        """Resolve each axis independently against existing panel edges."""
        x_edges = []
        y_edges = []
        for panel in panels:
            (left, right), (top, bottom) = panel.edges()
            x_edges.extend((left, right))
            y_edges.extend((top, bottom))

        return (self._resolve_axis(raw_x, x_edges),
                self._resolve_axis(raw_y, y_edges))

    def _resolve_axis(self, raw: float, edges: List[float]) -> AxisSnap:
        edge = nearest_edge(raw, edges, self.settings.snap_threshold)
        if edge is not None:
            return AxisSnap(value=edge, edge=edge)
        return AxisSnap(value=round_to(raw, self.settings.fallback_increment))

    def fits(self, x: float, y: float, footprint: Tuple[float, float]) -> bool:
        """Check that a footprint at (x, y) stays inside the grid."""
        width, height = footprint
        size = self.settings.grid_size
        return x >= 0 and y >= 0 and x + width <= size and y + height <= size


def snap_position(
    pointer_x: float,
    pointer_y: float,
    kind: PlacementKind,
    panels: List[Panel],
    footprint: Tuple[float, float],
    settings: Optional[LayoutSettings] = None,
) -> Optional[Point]:
    """Convenience wrapper around SnapEngine.snap()."""
    return SnapEngine(settings).snap(pointer_x, pointer_y, kind, panels, footprint)

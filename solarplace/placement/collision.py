"""Axis-aligned collision detection for panels and combiner boxes.

Rectangles that merely touch edge to edge are not collisions: a small
epsilon absorbs floating point error from snapped edge coordinates.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..layout.abstraction import CombinerBox, Layout, Panel

# Default adjacency tolerance (inches)
COLLISION_EPSILON = 0.1


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle (inches), top-left origin."""
    x: float
    y: float
    width: float
    height: float
    owner: Optional[str] = None  # entity id, if the rect belongs to one

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


def overlaps(a: Rect, b: Rect, epsilon: float = COLLISION_EPSILON) -> bool:
    """Check if two rectangles overlap by more than `epsilon` on both axes."""
    return not (a.right <= b.left + epsilon or
                a.left >= b.right - epsilon or
                a.bottom <= b.top + epsilon or
                a.top >= b.bottom - epsilon)


def panel_rect(panel: Panel) -> Rect:
    """Orientation-adjusted rectangle of a panel."""
    width, height = panel.footprint
    return Rect(panel.x, panel.y, width, height, owner=panel.id)


def box_rect(box: CombinerBox) -> Rect:
    return Rect(box.x, box.y, box.width, box.height, owner=box.id)


def within_bounds(rect: Rect, grid_width: float, grid_height: float) -> bool:
    """Check that a rectangle lies fully inside the grid."""
    return (rect.left >= 0 and rect.top >= 0 and
            rect.right <= grid_width and rect.bottom <= grid_height)


def find_collisions(rect: Rect, others: Iterable[Rect],
                    ignore: Tuple[str, ...] = (),
                    epsilon: float = COLLISION_EPSILON) -> List[Rect]:
    """Return every rect in `others` that overlaps `rect`.

    Rects whose owner is listed in `ignore` are skipped (e.g. the panel
    being rotated).
    """
    return [other for other in others
            if other.owner not in ignore and overlaps(rect, other, epsilon)]


def layout_rects(layout: Layout, panels: bool = True,
                 boxes: bool = True) -> List[Rect]:
    """Rectangles of the entities currently in a layout."""
    rects = []
    if panels:
        rects.extend(panel_rect(p) for p in layout.panels.values())
    if boxes:
        rects.extend(box_rect(b) for b in layout.combiner_boxes.values())
    return rects


def preview_collides(layout: Layout, rect: Rect,
                     epsilon: float = COLLISION_EPSILON) -> bool:
    """Advisory check used while the pointer moves; never blocks anything."""
    return bool(find_collisions(rect, layout_rects(layout), epsilon=epsilon))

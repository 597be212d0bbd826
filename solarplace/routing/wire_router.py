"""
Wire Router & Length Calculator

Routes the two home runs of a string to its combiner box and measures them:
- positive run: first panel's positive terminal -> box attachment point
- negative run: last panel's negative terminal -> box attachment point

Routes are single-bend Manhattan paths (vertical leg first, then
horizontal) ending at the bottom-centre of the combiner box. Paths are
derived from current positions every time; nothing here is stored.

A string whose panels or box have since been deleted is skipped rather
than reported as an error.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..layout.abstraction import CombinerBox, Layout, Panel, PanelString, Point, Side
from ..layout.units import inches_to_feet

logger = logging.getLogger(__name__)

DISPLAY_DECIMALS = 2


@dataclass(frozen=True)
class WirePath:
    """An orthogonal wire route as a sequence of points (inches)."""
    points: Tuple[Point, ...]

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    @property
    def length(self) -> float:
        """Sum of segment lengths (inches)."""
        return sum(abs(b.x - a.x) + abs(b.y - a.y)
                   for a, b in zip(self.points, self.points[1:]))

    def to_list(self) -> List[Dict[str, float]]:
        return [p.to_dict() for p in self.points]


@dataclass(frozen=True)
class WireLengths:
    """Home-run lengths for one string, full precision, in feet."""
    string_id: str
    positive_feet: float
    negative_feet: float
    positive_path: WirePath = field(repr=False)
    negative_path: WirePath = field(repr=False)

    @property
    def total_feet(self) -> float:
        return self.positive_feet + self.negative_feet

    def to_display(self) -> Dict[str, float]:
        """Lengths rounded for display."""
        return {
            "positiveFeet": round(self.positive_feet, DISPLAY_DECIMALS),
            "negativeFeet": round(self.negative_feet, DISPLAY_DECIMALS),
            "totalFeet": round(self.total_feet, DISPLAY_DECIMALS),
        }

    def format(self) -> Dict[str, str]:
        return {key: f"{value:.{DISPLAY_DECIMALS}f} ft"
                for key, value in self.to_display().items()}


def terminal_anchor(
    panel: Panel,
    side: Side,
    is_first: bool = False,
    is_last: bool = False,
    panel_spacing: float = 0.0,
    row_spacing: float = 0.0,
) -> Point:
    """
    Wire attachment point for the terminal on `side` of `panel`.

    Left/right terminals sit at the vertical midpoint of that edge, top/bottom
    terminals at the horizontal midpoint. When spacing is given, the gap on
    that axis is added, except beyond the string's own ends: a left/top
    terminal of the first panel and a right/bottom terminal of the last
    panel have no neighbouring gap.

    Args:
        panel: Panel carrying the terminal
        side: Side of the terminal
        is_first: Panel is the first element of its string
        is_last: Panel is the last element of its string
        panel_spacing: Gap between panels in a row (inches)
        row_spacing: Gap between rows (inches)
    """
    width, height = panel.footprint

    if side is Side.LEFT:
        x, y = panel.x, panel.y + height / 2
    elif side is Side.RIGHT:
        x, y = panel.x + width, panel.y + height / 2
    elif side is Side.TOP:
        x, y = panel.x + width / 2, panel.y
    else:
        x, y = panel.x + width / 2, panel.y + height

    leading = side in (Side.LEFT, Side.TOP)
    at_string_end = (leading and is_first) or (not leading and is_last)
    if not at_string_end:
        if side.is_horizontal:
            x += panel_spacing
        else:
            y += row_spacing

    return Point(x, y)


def attachment_point(box: CombinerBox) -> Point:
    """Bottom-centre of a combiner box, where home runs land."""
    return Point(box.x + box.width / 2, box.y + box.height)


def manhattan_path(start: Point, end: Point) -> WirePath:
    """Single-bend route: vertical toward the end row, then horizontal."""
    return WirePath((start, Point(start.x, end.y), end))


class WireRouter:
    """Computes derived wire routes and lengths for a layout's strings."""

    def __init__(self, layout: Layout, apply_spacing: bool = True):
        self.layout = layout
        self.apply_spacing = apply_spacing

    def _spacing(self) -> Tuple[float, float]:
        if not self.apply_spacing:
            return 0.0, 0.0
        return self.layout.panel_spacing, self.layout.row_spacing

    def _resolve(self, string: PanelString) -> Optional[Tuple[List[Panel], CombinerBox]]:
        panels = [self.layout.get_panel(pid) for pid in string.panel_ids]
        box = self.layout.get_combiner_box(string.combiner_box_id)
        if box is None or any(p is None for p in panels):
            return None
        return panels, box

    def route(self, string: PanelString) -> Optional[Tuple[WirePath, WirePath]]:
        """Positive and negative routes for a string, or None if incomplete."""
        resolved = self._resolve(string)
        if resolved is None:
            logger.debug("String %s references deleted entities; skipping", string.number)
            return None
        panels, box = resolved

        panel_spacing, row_spacing = self._spacing()
        first, last = panels[0], panels[-1]
        target = attachment_point(box)

        positive_start = terminal_anchor(
            first, first.polarity.positive,
            is_first=True, is_last=len(panels) == 1,
            panel_spacing=panel_spacing, row_spacing=row_spacing,
        )
        negative_start = terminal_anchor(
            last, last.polarity.negative,
            is_first=len(panels) == 1, is_last=True,
            panel_spacing=panel_spacing, row_spacing=row_spacing,
        )
        return manhattan_path(positive_start, target), manhattan_path(negative_start, target)

    def compute(self, string_id: str) -> Optional[WireLengths]:
        """Wire lengths for a string, or None when it cannot be routed."""
        string = self.layout.get_string(string_id)
        if string is None:
            return None

        routes = self.route(string)
        if routes is None:
            return None
        positive, negative = routes

        return WireLengths(
            string_id=string.id,
            positive_feet=inches_to_feet(positive.length),
            negative_feet=inches_to_feet(negative.length),
            positive_path=positive,
            negative_path=negative,
        )

    def compute_all(self) -> List[WireLengths]:
        """Wire lengths of every routable string, in creation order."""
        results = []
        for string_id in self.layout.strings:
            lengths = self.compute(string_id)
            if lengths is not None:
                results.append(lengths)
        return results

    def total_feet(self) -> float:
        return sum(w.total_feet for w in self.compute_all())


def compute_wire_lengths(layout: Layout, string_id: str,
                         apply_spacing: bool = True) -> Optional[WireLengths]:
    """Wire lengths for one string of a layout."""
    return WireRouter(layout, apply_spacing).compute(string_id)


def compute_all_wire_lengths(layout: Layout, apply_spacing: bool = True) -> List[WireLengths]:
    return WireRouter(layout, apply_spacing).compute_all()


def total_wire_feet(layout: Layout, apply_spacing: bool = True) -> float:
    """Combined home-run length of every routable string (feet)."""
    return WireRouter(layout, apply_spacing).total_feet()

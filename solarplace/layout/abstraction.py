"""
Layout Abstraction Layer

Provides the in-memory model of a solar array layout: panels, combiner
boxes and the strings that wire panels into boxes. The placement, polarity
and routing engines all work against this model; the `Layout` aggregate is
owned by a single `Session` and passed explicitly to every operation.

All coordinates are inches, measured from the grid's top-left corner.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Side(Enum):
    """Sides of a rectangular footprint."""
    LEFT = "left"
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"

    @property
    def is_horizontal(self) -> bool:
        """True for sides that sit on the x-axis extremes (left/right)."""
        return self in (Side.LEFT, Side.RIGHT)


# Clockwise order of sides. Every rotation-dependent lookup goes through
# rotate_side() so there is exactly one mapping.
SIDE_ORDER: Tuple[Side, ...] = (Side.LEFT, Side.TOP, Side.RIGHT, Side.BOTTOM)


def rotate_side(side: Side, steps: int) -> Side:
    """Map a side through `steps` clockwise quarter turns (negative = CCW)."""
    return SIDE_ORDER[(SIDE_ORDER.index(side) + steps) % len(SIDE_ORDER)]


class Rotation(Enum):
    """Panel rotation in 90 degree increments."""
    R0 = 0
    R90 = 90
    R180 = 180
    R270 = 270

    @property
    def steps(self) -> int:
        """Number of clockwise quarter turns from 0 degrees."""
        return self.value // 90

    def turned(self, steps: int) -> "Rotation":
        """Rotation after `steps` further quarter turns."""
        return Rotation(((self.steps + steps) % 4) * 90)


class Orientation(Enum):
    """How a panel's raw width/length map onto the grid."""
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    def toggled(self) -> "Orientation":
        if self is Orientation.PORTRAIT:
            return Orientation.LANDSCAPE
        return Orientation.PORTRAIT


class PlacementKind(Enum):
    """Kinds of objects that can be placed on the grid."""
    PANEL = "panel"
    COMBINER_BOX = "combinerBox"

    @classmethod
    def parse(cls, value) -> "PlacementKind":
        """Accept a member or its name as used by callers ("panel", "combiner_box")."""
        if isinstance(value, cls):
            return value
        if value in ("combiner_box", "box"):
            return cls.COMBINER_BOX
        return cls(value)


class MeasurementSystem(Enum):
    """Unit system used for user-entered dimensions."""
    IMPERIAL = "imperial"
    METRIC = "metric"


@dataclass(frozen=True)
class Point:
    """A point on the grid (inches)."""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Polarity:
    """Which sides of a panel carry the positive and negative terminals."""
    positive: Side
    negative: Side

    def __post_init__(self):
        if self.positive == self.negative:
            raise ValueError(
                f"Polarity sides must differ (both {self.positive.value})"
            )

    def rotated(self, steps: int) -> "Polarity":
        """Polarity after `steps` clockwise quarter turns."""
        return Polarity(
            positive=rotate_side(self.positive, steps),
            negative=rotate_side(self.negative, steps),
        )

    def swapped(self) -> "Polarity":
        return Polarity(positive=self.negative, negative=self.positive)

    def side_of(self, sign: str) -> Side:
        """Side carrying the '+' or '-' terminal."""
        if sign == "+":
            return self.positive
        if sign == "-":
            return self.negative
        raise ValueError(f"Unknown terminal sign: {sign!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"positive": self.positive.value, "negative": self.negative.value}


# Polarity of an unrotated panel: positive terminal on the left.
BASE_POLARITY = Polarity(positive=Side.LEFT, negative=Side.RIGHT)


@dataclass
class Panel:
    """A placed solar panel."""
    id: str
    number: int
    x: float  # top-left, inches
    y: float
    width: float  # raw width as entered (inches)
    length: float  # raw length as entered (inches)
    orientation: Orientation = Orientation.PORTRAIT
    rotation: Rotation = Rotation.R0
    polarity: Polarity = BASE_POLARITY

    @property
    def footprint(self) -> Tuple[float, float]:
        """Rendered (width, height) on the grid, orientation-adjusted."""
        if self.orientation is Orientation.LANDSCAPE:
            return self.length, self.width
        return self.width, self.length

    @property
    def footprint_width(self) -> float:
        return self.footprint[0]

    @property
    def footprint_height(self) -> float:
        return self.footprint[1]

    @property
    def right(self) -> float:
        return self.x + self.footprint_width

    @property
    def bottom(self) -> float:
        return self.y + self.footprint_height

    def edges(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """((left, right), (top, bottom)) edge coordinates."""
        return (self.x, self.right), (self.y, self.bottom)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "number": self.number,
            "x": self.x,
            "y": self.y,
            "orientation": self.orientation.value,
            "rotation": self.rotation.value,
            "width": self.width,
            "length": self.length,
            "polarity": self.polarity.to_dict(),
        }


# Combiner boxes have a fixed 12x12 inch footprint.
COMBINER_BOX_SIZE = 12.0


@dataclass
class CombinerBox:
    """A placed combiner box."""
    id: str
    number: int
    x: float
    y: float
    width: float = COMBINER_BOX_SIZE
    height: float = COMBINER_BOX_SIZE

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "number": self.number,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class PanelString:
    """
    An ordered series chain of panels wired into one combiner box.

    The first panel is the positive end of the string, the last panel the
    negative end. Strings are immutable once created; the wire route is
    derived from panel/box positions on demand.
    """
    id: str
    number: int
    panel_ids: Tuple[str, ...]
    combiner_box_id: str

    @property
    def first_panel_id(self) -> str:
        return self.panel_ids[0]

    @property
    def last_panel_id(self) -> str:
        return self.panel_ids[-1]


@dataclass
class Layout:
    """
    The owned layout aggregate.

    Holds every entity plus the sequence counters, the pending panel
    template and the spacing model. Counters only ever increase so numbers
    are never reused after deletion.
    """

    name: str = ""
    measurement_system: MeasurementSystem = MeasurementSystem.IMPERIAL

    panels: Dict[str, Panel] = field(default_factory=dict)
    combiner_boxes: Dict[str, CombinerBox] = field(default_factory=dict)
    strings: Dict[str, PanelString] = field(default_factory=dict)

    next_panel_number: int = 1
    next_combiner_box_number: int = 1
    next_string_number: int = 1

    # Pending panel template (inches); None until the user enters dimensions
    panel_width: Optional[float] = None
    panel_length: Optional[float] = None

    # Spacing model (inches)
    panel_spacing: float = 0.5
    row_spacing: float = 0.5

    # --- Lookup ---

    def get_panel(self, panel_id: str) -> Optional[Panel]:
        return self.panels.get(panel_id)

    def get_combiner_box(self, box_id: str) -> Optional[CombinerBox]:
        return self.combiner_boxes.get(box_id)

    def get_string(self, string_id: str) -> Optional[PanelString]:
        return self.strings.get(string_id)

    def find_panel_by_number(self, number: int) -> Optional[Panel]:
        for panel in self.panels.values():
            if panel.number == number:
                return panel
        return None

    def find_combiner_box_by_number(self, number: int) -> Optional[CombinerBox]:
        for box in self.combiner_boxes.values():
            if box.number == number:
                return box
        return None

    def find_string_by_number(self, number: int) -> Optional[PanelString]:
        for string in self.strings.values():
            if string.number == number:
                return string
        return None

    def strings_using_panel(self, panel_id: str) -> List[PanelString]:
        return [s for s in self.strings.values() if panel_id in s.panel_ids]

    def strings_using_box(self, box_id: str) -> List[PanelString]:
        return [s for s in self.strings.values() if s.combiner_box_id == box_id]

    # --- Statistics ---

    def get_placement_bounds(self) -> Tuple[float, float, float, float]:
        """Bounding box (min_x, min_y, max_x, max_y) of all placed entities."""
        rects = [(p.x, p.y, p.right, p.bottom) for p in self.panels.values()]
        rects += [(b.x, b.y, b.right, b.bottom) for b in self.combiner_boxes.values()]
        if not rects:
            return (0, 0, 0, 0)

        return (
            min(r[0] for r in rects),
            min(r[1] for r in rects),
            max(r[2] for r in rects),
            max(r[3] for r in rects),
        )

    def get_stats(self) -> Dict:
        """Get layout statistics."""
        return {
            "panel_count": len(self.panels),
            "combiner_box_count": len(self.combiner_boxes),
            "string_count": len(self.strings),
            "measurement_system": self.measurement_system.value,
            "panel_spacing": self.panel_spacing,
            "row_spacing": self.row_spacing,
        }

    def __repr__(self) -> str:
        return (f"Layout(name={self.name!r}, "
                f"panels={len(self.panels)}, "
                f"combiner_boxes={len(self.combiner_boxes)}, "
                f"strings={len(self.strings)})")

"""
SolarPlace Project File Handler

Serializes a Layout to the project JSON document and parses it back.

File Format (JSON):
```json
{
  "name": "Barn Roof",
  "measurementSystem": "imperial",
  "panels": [
    {"id": "...", "number": 1, "x": 0, "y": 0, "orientation": "portrait",
     "rotation": 0, "width": 40, "length": 62,
     "polarity": {"positive": "left", "negative": "right"}}
  ],
  "combinerBoxes": [
    {"id": "...", "number": 1, "x": 0, "y": 74, "width": 12, "height": 12}
  ],
  "strings": [
    {"id": "...", "number": 1, "panels": ["...", "..."], "combinerBoxId": "...",
     "wirePath": {"positive": [{"x": 0, "y": 31}], "negative": []}}
  ],
  "nextPanelNumber": 2,
  "nextCombinerBoxNumber": 2,
  "panelWidth": 40,
  "panelLength": 62,
  "panelSpacing": 0.5,
  "rowSpacing": 0.5
}
```

`wirePath` is written from the derived route for consumers of the file and
ignored on load. Parsing either produces a complete Layout or raises
ProjectFileError; there is no partially loaded state.
"""

import json
import logging
import math
import re
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from .abstraction import (
    CombinerBox,
    Layout,
    MeasurementSystem,
    Orientation,
    Panel,
    PanelString,
    Polarity,
    Rotation,
    Side,
)

logger = logging.getLogger(__name__)


class ProjectFileError(ValueError):
    """Raised when a project document cannot be loaded."""


def sanitize_project_name(name: str) -> str:
    """Lower-case the name and replace each non-alphanumeric char with '-'."""
    return re.sub(r"[^a-z0-9]", "-", name, flags=re.IGNORECASE).lower()


def project_filename(name: str, on: Optional[date] = None) -> str:
    """
    Download filename for a project.

    For example: `"Barn Roof #2"` on 2026-10-19 -> `barn-roof--2-2026-10-19.json`
    """
    on = on or date.today()
    return f"{sanitize_project_name(name)}-{on.isoformat()}.json"


# --- Serialization ---

def _string_to_dict(layout: Layout, string: PanelString) -> Dict[str, Any]:
    from ..routing.wire_router import WireRouter

    routes = WireRouter(layout).route(string)
    if routes is None:
        wire_path = {"positive": [], "negative": []}
    else:
        wire_path = {"positive": routes[0].to_list(), "negative": routes[1].to_list()}

    return {
        "id": string.id,
        "number": string.number,
        "panels": list(string.panel_ids),
        "combinerBoxId": string.combiner_box_id,
        "wirePath": wire_path,
    }


def layout_to_dict(layout: Layout) -> Dict[str, Any]:
    """Convert a layout to the project document shape."""
    return {
        "name": layout.name,
        "measurementSystem": layout.measurement_system.value,
        "panels": [p.to_dict() for p in layout.panels.values()],
        "combinerBoxes": [b.to_dict() for b in layout.combiner_boxes.values()],
        "strings": [_string_to_dict(layout, s) for s in layout.strings.values()],
        "nextPanelNumber": layout.next_panel_number,
        "nextCombinerBoxNumber": layout.next_combiner_box_number,
        "panelWidth": layout.panel_width,
        "panelLength": layout.panel_length,
        "panelSpacing": layout.panel_spacing,
        "rowSpacing": layout.row_spacing,
    }


# --- Parsing ---

def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProjectFileError(f"{what} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ProjectFileError(f"{what} must be finite, got {value!r}")
    return float(value)


def _optional_number(value: Any, what: str) -> Optional[float]:
    return None if value is None else _number(value, what)


def _panel_from_dict(data: Dict[str, Any]) -> Panel:
    polarity = data["polarity"]
    return Panel(
        id=str(data["id"]),
        number=int(data["number"]),
        x=_number(data["x"], "panel x"),
        y=_number(data["y"], "panel y"),
        width=_number(data["width"], "panel width"),
        length=_number(data["length"], "panel length"),
        orientation=Orientation(data.get("orientation", "portrait")),
        rotation=Rotation(int(data.get("rotation", 0))),
        polarity=Polarity(
            positive=Side(polarity["positive"]),
            negative=Side(polarity["negative"]),
        ),
    )


def _box_from_dict(data: Dict[str, Any]) -> CombinerBox:
    box = CombinerBox(
        id=str(data["id"]),
        number=int(data["number"]),
        x=_number(data["x"], "combiner box x"),
        y=_number(data["y"], "combiner box y"),
    )
    if "width" in data:
        box.width = _number(data["width"], "combiner box width")
    if "height" in data:
        box.height = _number(data["height"], "combiner box height")
    return box


def _string_from_dict(data: Dict[str, Any], index: int) -> PanelString:
    panel_ids = data["panels"]
    if not isinstance(panel_ids, list) or not panel_ids:
        raise ProjectFileError(f"String {index + 1} has no panels")
    return PanelString(
        id=str(data["id"]),
        number=int(data.get("number", index + 1)),
        panel_ids=tuple(str(pid) for pid in panel_ids),
        combiner_box_id=str(data["combinerBoxId"]),
    )


def _keyed(items, kind: str) -> Dict[str, Any]:
    keyed = {}
    for item in items:
        if item.id in keyed:
            raise ProjectFileError(f"Duplicate {kind} id: {item.id}")
        keyed[item.id] = item
    return keyed


def layout_from_dict(data: Dict[str, Any]) -> Layout:
    """
    Build a Layout from a project document.

    Raises:
        ProjectFileError: if the document is missing required fields or
            holds values the engine cannot work with
    """
    if not isinstance(data, dict):
        raise ProjectFileError("Project document must be a JSON object")

    try:
        panels = _keyed((_panel_from_dict(p) for p in data["panels"]), "panel")
        boxes = _keyed((_box_from_dict(b) for b in data["combinerBoxes"]), "combiner box")
        strings = _keyed(
            (_string_from_dict(s, i) for i, s in enumerate(data.get("strings", []))),
            "string",
        )

        # Counters never fall behind numbers already handed out
        next_panel = max([int(data.get("nextPanelNumber", 1))] +
                         [p.number + 1 for p in panels.values()])
        next_box = max([int(data.get("nextCombinerBoxNumber", 1))] +
                       [b.number + 1 for b in boxes.values()])
        next_string = max([1] + [s.number + 1 for s in strings.values()])

        layout = Layout(
            name=str(data.get("name", "")),
            measurement_system=MeasurementSystem(data.get("measurementSystem", "imperial")),
            panels=panels,
            combiner_boxes=boxes,
            strings=strings,
            next_panel_number=next_panel,
            next_combiner_box_number=next_box,
            next_string_number=next_string,
            panel_width=_optional_number(data.get("panelWidth"), "panelWidth"),
            panel_length=_optional_number(data.get("panelLength"), "panelLength"),
            panel_spacing=_number(data.get("panelSpacing", 0.5), "panelSpacing"),
            row_spacing=_number(data.get("rowSpacing", 0.5), "rowSpacing"),
        )
    except ProjectFileError:
        raise
    except KeyError as e:
        raise ProjectFileError(f"Missing field: {e.args[0]}") from e
    except (TypeError, ValueError, AttributeError, OverflowError) as e:
        raise ProjectFileError(f"Invalid project data: {e}") from e

    return layout


def parse_project(content: str) -> Layout:
    """Parse project JSON text."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ProjectFileError(f"Invalid JSON: {e}") from e
    return layout_from_dict(data)


def read_project_file(path: Path) -> Layout:
    """
    Read a project file.

    Args:
        path: Path to the JSON project file

    Returns:
        The parsed Layout

    Raises:
        ProjectFileError: if the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProjectFileError(f"Cannot read project file {path}: {e}") from e

    layout = parse_project(content)
    logger.info("Loaded project %r from %s: %s", layout.name, path, layout)
    return layout


def write_project_file(layout: Layout, path: Path) -> Path:
    """
    Write a project file.

    Args:
        layout: Layout to save
        path: Target file, or a directory to place a dated file in

    Returns:
        Path that was written
    """
    path = Path(path)
    if path.is_dir():
        path = path / project_filename(layout.name or "project")

    path.write_text(json.dumps(layout_to_dict(layout), indent=2), encoding="utf-8")
    logger.info("Saved project %r to %s", layout.name, path)
    return path

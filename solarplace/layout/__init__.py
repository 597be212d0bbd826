"""Layout model, unit conversion and project file persistence."""

from .abstraction import (
    Layout,
    Panel,
    CombinerBox,
    PanelString,
    Polarity,
    Point,
    Side,
    Rotation,
    Orientation,
    PlacementKind,
    MeasurementSystem,
    rotate_side,
)
from .project_file import (
    ProjectFileError,
    layout_from_dict,
    layout_to_dict,
    project_filename,
    read_project_file,
    write_project_file,
)

__all__ = [
    # Core model
    "Layout",
    "Panel",
    "CombinerBox",
    "PanelString",
    "Polarity",
    "Point",
    "Side",
    "Rotation",
    "Orientation",
    "PlacementKind",
    "MeasurementSystem",
    "rotate_side",
    # Project file persistence
    "ProjectFileError",
    "layout_from_dict",
    "layout_to_dict",
    "project_filename",
    "read_project_file",
    "write_project_file",
]

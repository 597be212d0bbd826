"""
SolarPlace Settings

Grid geometry, snapping and collision constants. Defaults reproduce the
interactive grid: 100x100 cells of 12 inches, drawn 25 pixels per cell.

Settings can be overridden from a YAML file:

```yaml
grid_cells: 120
snap_threshold: 2.5
default_panel_spacing: 1.0
```
"""

from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

logger = logging.getLogger(__name__)


class SettingsError(ValueError):
    """Raised when a settings file cannot be used."""


# Snap increments are divisors, the box size a footprint
POSITIVE_SETTINGS = (
    "combiner_box_size",
    "combiner_box_increment",
    "first_panel_increment",
    "fallback_increment",
)


@dataclass
class LayoutSettings:
    """Configuration shared by the snapping, placement and routing engines."""

    # Grid geometry
    grid_cells: int = 100
    inches_per_cell: float = 12.0
    pixels_per_cell: float = 25.0

    # Combiner box footprint (inches)
    combiner_box_size: float = 12.0

    # Snapping (inches)
    combiner_box_increment: float = 6.0  # boxes floor to this increment
    first_panel_increment: float = 12.0  # first panel floors to grid cells
    fallback_increment: float = 2.0  # subsequent panels round to this
    snap_threshold: float = 3.0  # magnetic edge pull distance

    # Collision tolerance for edge-to-edge placement (inches)
    collision_epsilon: float = 0.1

    # Spacing model defaults (inches)
    default_panel_spacing: float = 0.5
    default_row_spacing: float = 0.5

    @property
    def grid_size(self) -> float:
        """Width/height of the square grid in inches."""
        return self.grid_cells * self.inches_per_cell

    @property
    def grid_size_px(self) -> float:
        """Width/height of the square grid in pixels."""
        return self.grid_cells * self.pixels_per_cell

    @property
    def pixels_per_inch(self) -> float:
        return self.pixels_per_cell / self.inches_per_cell

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutSettings":
        """Create settings from a mapping, validating keys and values."""
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise SettingsError(f"Unknown settings: {', '.join(unknown)}")

        values = {}
        for key, value in data.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SettingsError(f"Setting {key!r} must be a number, got {value!r}")
            if value < 0:
                raise SettingsError(f"Setting {key!r} cannot be negative")
            values[key] = int(value) if key == "grid_cells" else float(value)

        settings = cls(**values)
        if settings.grid_cells <= 0 or settings.inches_per_cell <= 0 or settings.pixels_per_cell <= 0:
            raise SettingsError("Grid dimensions must be greater than zero")
        for key in POSITIVE_SETTINGS:
            if getattr(settings, key) <= 0:
                raise SettingsError(f"Setting {key!r} must be greater than zero")
        return settings


def load_settings(path: Optional[Path]) -> LayoutSettings:
    """
    Load settings from a YAML file.

    Args:
        path: Path to a YAML file, or None for defaults

    Returns:
        LayoutSettings with file values applied over the defaults
    """
    if path is None:
        return LayoutSettings()

    path = Path(path)
    if not path.exists():
        raise SettingsError(f"Settings file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping")

    settings = LayoutSettings.from_dict(data)
    logger.debug("Loaded settings from %s: %s", path, data)
    return settings

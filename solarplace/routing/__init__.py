"""Wire routing and length calculation for panel strings."""

from .wire_router import (
    WirePath,
    WireLengths,
    WireRouter,
    attachment_point,
    compute_all_wire_lengths,
    compute_wire_lengths,
    manhattan_path,
    terminal_anchor,
    total_wire_feet,
)

__all__ = [
    "WirePath",
    "WireLengths",
    "WireRouter",
    "attachment_point",
    "compute_all_wire_lengths",
    "compute_wire_lengths",
    "manhattan_path",
    "terminal_anchor",
    "total_wire_feet",
]

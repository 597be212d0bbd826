"""
SolarPlace Core API

High-level API for the layout presentation layer.

Modules:
- actions: Atomic validated commands (place, rotate, flip, strings, delete)
- session: Owned layout state with load/save and undo/redo support
- inspection: Invariant checks over a layout
"""

from .actions import LayoutActions, ActionResult
from .session import Session
from .inspection import LayoutInspector, Finding, Severity

__all__ = [
    "LayoutActions",
    "ActionResult",
    "Session",
    "LayoutInspector",
    "Finding",
    "Severity",
]

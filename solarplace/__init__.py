"""
SolarPlace - Solar Array Layout and Stringing Tool

Places solar panels and combiner boxes on a snapping grid, tracks panel
polarity through rotations and flips, groups panels into series strings
and calculates home-run wire lengths.
"""

__version__ = "0.1.0"
__author__ = "SolarPlace Team"

from .layout.abstraction import Layout, Panel, CombinerBox, PanelString
from .api.session import Session
from .settings import LayoutSettings, load_settings

__all__ = [
    "Layout",
    "Panel",
    "CombinerBox",
    "PanelString",
    "Session",
    "LayoutSettings",
    "load_settings",
]

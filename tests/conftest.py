"""
Shared test fixtures for SolarPlace tests.

Provides reusable layout, panel and session fixtures for testing the
command layer, wire routing and project files.
"""

import pytest

from solarplace.api.session import Session
from solarplace.layout.abstraction import (
    CombinerBox,
    Layout,
    Panel,
    PanelString,
)
from solarplace.settings import LayoutSettings

PANEL_WIDTH = 40.0
PANEL_LENGTH = 62.0


@pytest.fixture
def settings() -> LayoutSettings:
    """Default grid settings: 100x100 cells of 12 inches."""
    return LayoutSettings()


@pytest.fixture
def px(settings):
    """Pointer position (pixels) for a raw grid coordinate (inches)."""
    return lambda inches: inches * settings.pixels_per_inch


@pytest.fixture
def panel_a() -> Panel:
    """A portrait 40x62 panel at the grid origin."""
    return Panel(id="pa", number=1, x=0.0, y=0.0, width=PANEL_WIDTH, length=PANEL_LENGTH)


@pytest.fixture
def panel_b() -> Panel:
    """A portrait panel just right of panel_a, one half inch gap."""
    return Panel(id="pb", number=2, x=40.5, y=0.0, width=PANEL_WIDTH, length=PANEL_LENGTH)


@pytest.fixture
def combiner_box() -> CombinerBox:
    """A combiner box below panel_a."""
    return CombinerBox(id="cb", number=1, x=0.0, y=74.0)


@pytest.fixture
def wired_layout(panel_a, panel_b, combiner_box) -> Layout:
    """Two panels strung into one combiner box."""
    layout = Layout(
        name="Barn Roof",
        panel_width=PANEL_WIDTH,
        panel_length=PANEL_LENGTH,
    )
    layout.panels = {panel_a.id: panel_a, panel_b.id: panel_b}
    layout.combiner_boxes = {combiner_box.id: combiner_box}
    layout.strings = {
        "s1": PanelString(id="s1", number=1, panel_ids=("pa", "pb"), combiner_box_id="cb"),
    }
    layout.next_panel_number = 3
    layout.next_combiner_box_number = 2
    layout.next_string_number = 2
    return layout


@pytest.fixture
def empty_session() -> Session:
    """A session with no panel template set."""
    return Session()


@pytest.fixture
def session() -> Session:
    """A session ready to place 40x62 inch panels."""
    s = Session()
    s.set_panel_template("40", "62")
    return s


@pytest.fixture
def wired_session(session) -> Session:
    """Session holding panel 1 at (0,0), panel 2 at (40.5,0), box 1 at (0,74) and string 1."""
    a = session.try_place("panel", 0, 0).entity_id
    b = session.try_place("panel", 40.5, 0).entity_id
    box = session.try_place("combinerBox", 0, 74).entity_id
    session.try_create_string([a, b], box)
    return session

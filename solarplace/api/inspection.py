"""Layout inspection and validation operations.

Checks a Layout against the invariants the command layer maintains. A
layout built through the session always passes; files loaded from disk
may not, and the CLI `validate` command reports what it finds.

All operations take a Layout instance and return structured data that can
be printed or serialized.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..layout.abstraction import Layout
from ..placement.collision import box_rect, overlaps, panel_rect, within_bounds
from ..placement.polarity import is_consistent
from ..settings import LayoutSettings


class Severity(Enum):
    """Severity levels for findings."""
    INFO = "info"           # Informational note
    WARNING = "warning"     # Should be reviewed
    ERROR = "error"         # Breaks a layout invariant


@dataclass
class Finding:
    """A flagged issue in a layout."""
    severity: Severity
    location: str  # e.g. "panel 3", "string 2"
    message: str

    def to_dict(self) -> Dict:
        return {
            "severity": self.severity.value,
            "location": self.location,
            "message": self.message,
        }


class LayoutInspector:
    """Invariant checks over a layout."""

    def __init__(self, layout: Layout, settings: Optional[LayoutSettings] = None):
        """Initialize inspector with a layout.

        Args:
            layout: Layout instance to inspect
            settings: Grid and tolerance settings (defaults if None)
        """
        self.layout = layout
        self.settings = settings or LayoutSettings()

    def check_overlaps(self) -> List[Dict[str, any]]:
        """Check for overlapping panels and combiner boxes.

        Returns:
            List of overlap dictionaries with keys:
            - items: [label1, label2] - pair of overlapping entity labels
            - overlap_x: float - overlap distance in X axis (inches)
            - overlap_y: float - overlap distance in Y axis (inches)
        """
        rects = [(f"panel {p.number}", panel_rect(p)) for p in self.layout.panels.values()]
        rects += [(f"combiner box {b.number}", box_rect(b))
                  for b in self.layout.combiner_boxes.values()]

        found = []
        for i, (label1, r1) in enumerate(rects):
            for label2, r2 in rects[i + 1:]:
                if not overlaps(r1, r2, self.settings.collision_epsilon):
                    continue
                found.append({
                    "items": [label1, label2],
                    "overlap_x": round(min(r1.right, r2.right) - max(r1.left, r2.left), 3),
                    "overlap_y": round(min(r1.bottom, r2.bottom) - max(r1.top, r2.top), 3),
                })
        return found

    def check_bounds(self) -> List[str]:
        """Labels of entities that extend outside the grid."""
        size = self.settings.grid_size
        outside = [f"panel {p.number}" for p in self.layout.panels.values()
                   if not within_bounds(panel_rect(p), size, size)]
        outside += [f"combiner box {b.number}" for b in self.layout.combiner_boxes.values()
                    if not within_bounds(box_rect(b), size, size)]
        return outside

    def check_polarity(self) -> List[str]:
        """Labels of panels whose polarity does not match their rotation."""
        return [f"panel {p.number}" for p in self.layout.panels.values()
                if not is_consistent(p)]

    def check_strings(self) -> List[Finding]:
        """Strings that reference deleted entities or are too short."""
        findings = []
        for string in self.layout.strings.values():
            location = f"string {string.number}"
            missing = [pid for pid in string.panel_ids if pid not in self.layout.panels]
            if missing:
                findings.append(Finding(
                    Severity.WARNING, location,
                    f"{len(missing)} panel(s) no longer exist; wire lengths omitted",
                ))
            if string.combiner_box_id not in self.layout.combiner_boxes:
                findings.append(Finding(
                    Severity.WARNING, location,
                    "Combiner box no longer exists; wire lengths omitted",
                ))
            if len(string.panel_ids) < 2:
                findings.append(Finding(
                    Severity.WARNING, location, "String has fewer than 2 panels",
                ))
        return findings

    def check_numbering(self) -> List[Finding]:
        """Sequence counters must be ahead of every number in use."""
        findings = []
        numbers = [p.number for p in self.layout.panels.values()]
        if numbers and max(numbers) >= self.layout.next_panel_number:
            findings.append(Finding(
                Severity.ERROR, "layout",
                "Next panel number would reuse an existing number",
            ))
        numbers = [b.number for b in self.layout.combiner_boxes.values()]
        if numbers and max(numbers) >= self.layout.next_combiner_box_number:
            findings.append(Finding(
                Severity.ERROR, "layout",
                "Next combiner box number would reuse an existing number",
            ))
        return findings

    def inspect(self) -> List[Finding]:
        """Run every check and collect findings."""
        findings = []
        for item in self.check_overlaps():
            findings.append(Finding(
                Severity.ERROR, item["items"][0],
                f"Overlaps {item['items'][1]} by {item['overlap_x']} x {item['overlap_y']} in",
            ))
        for label in self.check_bounds():
            findings.append(Finding(Severity.ERROR, label, "Extends outside the grid"))
        for label in self.check_polarity():
            findings.append(Finding(
                Severity.ERROR, label, "Polarity does not match rotation",
            ))
        findings.extend(self.check_strings())
        findings.extend(self.check_numbering())
        return findings

    def is_valid(self) -> bool:
        """True when no error-severity findings exist."""
        return not any(f.severity is Severity.ERROR for f in self.inspect())

    def get_summary(self) -> str:
        findings = self.inspect()
        if not findings:
            return "Layout OK: no issues found."
        lines = [f"{len(findings)} issue(s) found:"]
        for f in findings:
            lines.append(f"  [{f.severity.value.upper()}] {f.location}: {f.message}")
        return "\n".join(lines)

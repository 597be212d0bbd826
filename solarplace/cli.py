#!/usr/bin/env python3
"""
SolarPlace CLI

Command-line interface for the solar array layout tool.

Usage:
    solarplace report <project.json>
    solarplace validate <project.json>
    solarplace interactive [project.json]
"""

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import List, Optional

from .layout.project_file import ProjectFileError
from .settings import LayoutSettings, SettingsError, load_settings


def configure_logging(verbose: bool = False):
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
        datefmt="%H:%M:%S",
    )


def load_session(project: Optional[str], settings: LayoutSettings):
    """
    Create a session, loading a project file when given.

    Returns:
        Session, or None if the project could not be loaded
    """
    from .api.session import Session

    session = Session(settings)
    if not project:
        return session

    path = Path(project)
    if not path.exists():
        print(f"Error: Project file not found: {path}")
        return None

    try:
        session.load(path)
    except ProjectFileError as e:
        print(f"Error: Cannot load project {path}: {e}")
        return None

    print(f"Loaded project: {session.layout.name or path.stem}")
    return session


def format_wire_table(session) -> str:
    """Wire-length table, one row per routable string."""
    lines = [
        f"{'String':<8}{'Panels':>8}{'Box':>6}{'+ (ft)':>10}{'- (ft)':>10}{'Total (ft)':>12}",
        "-" * 54,
    ]
    omitted = 0
    grand_total = 0.0
    for string in session.list_strings():
        lengths = session.compute_wire_lengths(string.id)
        if lengths is None:
            omitted += 1
            continue
        box = session.layout.get_combiner_box(string.combiner_box_id)
        shown = lengths.to_display()
        lines.append(
            f"{string.number:<8}{len(string.panel_ids):>8}{box.number:>6}"
            f"{shown['positiveFeet']:>10.2f}{shown['negativeFeet']:>10.2f}{shown['totalFeet']:>12.2f}"
        )
        grand_total += lengths.total_feet

    lines.append("-" * 54)
    lines.append(f"{'Total':<32}{grand_total:>22.2f}")
    if omitted:
        lines.append(f"({omitted} string(s) omitted: referenced panels or boxes were deleted)")
    return "\n".join(lines)


def cmd_report(args, settings: LayoutSettings):
    """Print wire lengths for every string in a project."""
    session = load_session(args.project, settings)
    if session is None:
        return 1

    stats = session.layout.get_stats()
    print(f"  Panels: {stats['panel_count']}")
    print(f"  Combiner boxes: {stats['combiner_box_count']}")
    print(f"  Strings: {stats['string_count']}")
    print()
    print(format_wire_table(session))
    return 0


def cmd_validate(args, settings: LayoutSettings):
    """Check a project against the layout invariants."""
    from .api.inspection import LayoutInspector

    session = load_session(args.project, settings)
    if session is None:
        return 1

    inspector = LayoutInspector(session.layout, settings)
    print(inspector.get_summary())
    return 0 if inspector.is_valid() else 1


INTERACTIVE_HELP = """
Commands:
  help                      Show this help
  quit                      Exit interactive mode
  units imperial|metric     Unit system for entered dimensions
  template <w> <l>          Panel width and length for placement
  orient portrait|landscape Orientation of the next panel
  flipnext                  Toggle polarity flip of the next panel
  spacing <panel> <row>     Inter-panel and inter-row gaps
  snap <px> <py> [box]      Show where a pointer position snaps to
  panel <x> <y>             Place a panel (inches, top-left)
  box <x> <y>               Place a combiner box (inches, top-left)
  rotate <n> left|right     Rotate panel n
  flip <n>                  Flip polarity of panel n
  string <n,n,...> <box>    Create a string from panel numbers
  delete panel|box|string <n>
  list                      List panels, boxes and strings
  wires                     Wire length table
  validate                  Check layout invariants
  undo / redo
  name <project name>       Set the project name
  save [path]               Save project file
"""


def _panel_id(session, token: str) -> Optional[str]:
    panel = session.layout.find_panel_by_number(int(token))
    return panel.id if panel else None


def _box_id(session, token: str) -> Optional[str]:
    box = session.layout.find_combiner_box_by_number(int(token))
    return box.id if box else None


def _list_entities(session) -> str:
    lines = []
    for p in session.list_panels():
        w, h = p.footprint
        lines.append(
            f"Panel {p.number}: ({p.x:g}, {p.y:g}) {w:g}x{h:g} in "
            f"{p.orientation.value} {p.rotation.value}° "
            f"+{p.polarity.positive.value} -{p.polarity.negative.value}"
        )
    for b in session.list_combiner_boxes():
        lines.append(f"Combiner box {b.number}: ({b.x:g}, {b.y:g})")
    for s in session.list_strings():
        numbers = []
        for pid in s.panel_ids:
            panel = session.layout.get_panel(pid)
            numbers.append(str(panel.number) if panel else "?")
        box = session.layout.get_combiner_box(s.combiner_box_id)
        lines.append(f"String {s.number}: panels {','.join(numbers)} -> box {box.number if box else '?'}")
    return "\n".join(lines) if lines else "Layout is empty."


def run_interactive_command(session, user_input: str) -> str:
    """
    Execute one interactive command against a session.

    Returns:
        Text to show the user
    """
    from .api.inspection import LayoutInspector

    try:
        parts = shlex.split(user_input)
    except ValueError as e:
        return f"Could not parse: {e}"
    if not parts:
        return ""

    command, params = parts[0].lower(), parts[1:]

    try:
        if command == 'help':
            return INTERACTIVE_HELP
        if command == 'units' and len(params) == 1:
            session.set_measurement_system(params[0])
            return f"Units: {session.layout.measurement_system.value}"
        if command == 'template' and len(params) == 2:
            return session.set_panel_template(params[0], params[1]).message
        if command == 'orient' and len(params) == 1:
            session.set_orientation(params[0])
            return f"Next panel: {session.pending_orientation.value}"
        if command == 'flipnext':
            flipped = session.toggle_pending_flip()
            return "Next panel: positive on right" if flipped else "Next panel: positive on left"
        if command == 'spacing' and len(params) == 2:
            return session.set_spacing(params[0], params[1]).message
        if command == 'snap' and len(params) in (2, 3):
            kind = "combinerBox" if params[2:] == ["box"] else "panel"
            position = session.snap(float(params[0]), float(params[1]), kind)
            if position is None:
                return "No placement here"
            return f"Snaps to ({position.x:g}, {position.y:g})"
        if command in ('panel', 'box') and len(params) == 2:
            kind = "panel" if command == 'panel' else "combinerBox"
            return session.try_place(kind, float(params[0]), float(params[1])).message
        if command == 'rotate' and len(params) == 2:
            panel_id = _panel_id(session, params[0])
            if panel_id is None:
                return f"No panel {params[0]}"
            return session.try_rotate(panel_id, params[1].lower()).message
        if command == 'flip' and len(params) == 1:
            panel_id = _panel_id(session, params[0])
            if panel_id is None:
                return f"No panel {params[0]}"
            return session.try_flip(panel_id).message
        if command == 'string' and len(params) == 2:
            panel_ids = []
            for token in params[0].split(','):
                panel_id = _panel_id(session, token)
                if panel_id is None:
                    return f"No panel {token}"
                panel_ids.append(panel_id)
            return session.try_create_string(panel_ids, _box_id(session, params[1])).message
        if command == 'delete' and len(params) == 2:
            what, number = params[0].lower(), int(params[1])
            if what == 'panel':
                entity = session.layout.find_panel_by_number(number)
                delete = session.delete_panel
            elif what == 'box':
                entity = session.layout.find_combiner_box_by_number(number)
                delete = session.delete_combiner_box
            elif what == 'string':
                entity = session.layout.find_string_by_number(number)
                delete = session.delete_string
            else:
                return f"Cannot delete {what!r}"
            if entity is None:
                return f"No {what} {number}"
            return delete(entity.id).message
        if command == 'list':
            return _list_entities(session)
        if command == 'wires':
            return format_wire_table(session)
        if command == 'validate':
            return LayoutInspector(session.layout, session.settings).get_summary()
        if command == 'undo':
            return "Undone." if session.undo() else "Nothing to undo."
        if command == 'redo':
            return "Redone." if session.redo() else "Nothing to redo."
        if command == 'name' and params:
            return session.set_name(" ".join(params)).message
        if command == 'save':
            path = Path(params[0]) if params else None
            return f"Saved to: {session.save(path)}"
    except (ValueError, OSError) as e:
        return f"Error: {e}"

    return f"Unknown command: {user_input}\nTry 'help' for a list of commands."


def cmd_interactive(args, settings: LayoutSettings):
    """Run an interactive layout session."""
    session = load_session(args.project, settings)
    if session is None:
        return 1

    print("Enter commands. Type 'help' for commands, 'quit' to exit.")
    print()

    while True:
        try:
            user_input = input("solarplace> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting...")
            break

        if not user_input:
            continue

        if user_input.lower() == 'quit':
            if session.is_dirty:
                print("Unsaved changes discarded.")
            break

        print(run_interactive_command(session, user_input))

    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='solarplace',
        description="SolarPlace - Solar Array Layout and Stringing Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  solarplace report barn-roof-2026-10-19.json
  solarplace validate barn-roof-2026-10-19.json
  solarplace interactive
  solarplace --config grid.yaml interactive barn-roof-2026-10-19.json
        """,
    )

    parser.add_argument('--version', action='version', version='solarplace 0.1.0')
    parser.add_argument('--config', help='YAML settings file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    report_parser = subparsers.add_parser('report', help='Wire length report')
    report_parser.add_argument('project', help='Path to project JSON file')

    validate_parser = subparsers.add_parser('validate', help='Validate layout invariants')
    validate_parser.add_argument('project', help='Path to project JSON file')

    interactive_parser = subparsers.add_parser('interactive', help='Interactive layout session')
    interactive_parser.add_argument('project', nargs='?', help='Optional project JSON file to load')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except SettingsError as e:
        print(f"Error: {e}")
        return 1

    commands = {
        'report': cmd_report,
        'validate': cmd_validate,
        'interactive': cmd_interactive,
    }

    return commands[args.command](args, settings)


if __name__ == '__main__':
    sys.exit(main())

#!/usr/bin/env python3
"""
Worship rota CLI: single-workbook workflow.

The workbook is the source of truth for everything:
  MEMBERS, EVENTS, ASSIGNMENTS, MEMBER_ROLE_IDS, CONFIG  (data-entry sheets)
  ROLES, ISSUES                                          (generated)

Usage:
  # Step 1: Create the workbook / add missing data-entry sheets
  python run_rota.py setup --workbook rota.xlsx

  # (optional) Bring in a JSON export from the old web app
  python run_rota.py import-json --json export.json --workbook rota.xlsx

  # Step 2 (optional): Dry-run. Does every required role have enough people?
  python run_rota.py dry-run --workbook rota.xlsx

  # Step 3: Fill open slots
  python run_rota.py autofill --workbook rota.xlsx --out "rota - filled.xlsx"

  # Step 4: Workload report, publishing payload
  python run_rota.py report --workbook "rota - filled.xlsx" --out workload.csv
  python run_rota.py publish-payload --workbook "rota - filled.xlsx" --event-id <id>
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from worship_rota.errors import PublishError, UnknownIdError
from worship_rota.parse_inputs import load_json_roster, load_workbook_config, load_workbook_roster
from worship_rota.publish import build_publish_payload
from worship_rota.report import roster_totals, workload_frame, write_report
from worship_rota.roster import find_event, run_autofill
from worship_rota.validate import dry_run_coverage, over_target_members, validate_assignments
from worship_rota.workbook_sheets import setup_all_sheets
from worship_rota.write_schedule import dump_json_roster, write_roster


def _resolve(p: str) -> Path:
    return Path(p).expanduser().resolve()


def _print_list(title, msgs, limit=15):
    print(title)
    for m in msgs[:limit]:
        print(f"  {m}")
    if len(msgs) > limit:
        print(f"  ... and {len(msgs) - limit} more")


def cmd_setup(args):
    """Create the workbook or add any missing sheets."""
    wb_path = str(_resolve(args.workbook))
    print(f"Setting up sheets in: {wb_path}")
    setup_all_sheets(wb_path)
    print("Done. Sheets present: MEMBERS, EVENTS, ASSIGNMENTS, MEMBER_ROLE_IDS, CONFIG, ROLES")


def cmd_import_json(args):
    """Load a JSON export (legacy keys migrated) into the workbook."""
    wb_path = _resolve(args.workbook)
    template = wb_path if wb_path.exists() else None
    # CONFIG defaults (target, service times) apply to what the export leaves blank
    config = load_workbook_config(wb_path) if template else None
    roster = load_json_roster(_resolve(args.json), config)
    print(f"Imported {len(roster.members)} member(s), {len(roster.events)} event(s)")
    write_roster(roster, wb_path, template_path=template)
    print(f"Written to: {wb_path}")


def cmd_dry_run(args):
    """Check role coverage without filling anything."""
    roster = load_workbook_roster(_resolve(args.workbook))
    print(f"  Members: {len(roster.members)}")
    print(f"  Events: {len(roster.events)}")
    ok, msgs = dry_run_coverage(roster)
    if ok:
        print("\nCoverage: OK")
    else:
        _print_list("\nCoverage issues:", msgs, limit=len(msgs))


def cmd_autofill(args):
    """Fill open slots and write the result."""
    wb_path = _resolve(args.workbook)
    out_path = _resolve(args.out) if args.out else wb_path
    print(f"Parsing: {wb_path}")
    roster = load_workbook_roster(wb_path)
    print(f"  Members: {len(roster.members)}")
    print(f"  Events: {len(roster.events)}")

    filled = run_autofill(roster)
    totals = roster_totals(filled)
    print(f"\n  Slots filled: {totals['filled']}/{totals['slots']}")

    issues = [f"{ev.date.isoformat()} {ev.name}: {msg}" for ev in filled.events for msg in ev.issues]
    if issues:
        _print_list(f"  Unfilled: {len(issues)}", issues)

    valid, violations = validate_assignments(filled)
    if valid:
        print("  Validation: OK")
    else:
        _print_list(f"  Validation: {len(violations)} issue(s)", violations)
    over = over_target_members(filled)
    if over:
        _print_list("  Over target (manual assignments):", over)

    print(f"\nWriting rota to: {out_path}")
    write_roster(filled, out_path, template_path=wb_path)
    if args.json_out:
        dump_json_roster(filled, _resolve(args.json_out))
        print(f"JSON written to: {args.json_out}")
    print("Done.")


def cmd_validate(args):
    """Validate current assignments against the rota rules."""
    roster = load_workbook_roster(_resolve(args.workbook))
    valid, violations = validate_assignments(roster)
    if valid:
        print("Validation: OK")
        return
    _print_list(f"Validation: {len(violations)} issue(s)", violations, limit=len(violations))
    sys.exit(1)


def cmd_report(args):
    """Per-member workload summary."""
    roster = load_workbook_roster(_resolve(args.workbook))
    if args.out:
        write_report(roster, str(_resolve(args.out)))
        print(f"Report written to: {args.out}")
    else:
        print(workload_frame(roster).to_string(index=False))
    totals = roster_totals(roster)
    print(f"\n{totals['events']} event(s), {totals['filled']}/{totals['slots']} slot(s) filled, "
          f"{totals['average_per_member']} per member on average")


def cmd_publish_payload(args):
    """Print the publishing request body for one fully staffed event."""
    roster = load_workbook_roster(_resolve(args.workbook))
    try:
        event = find_event(roster, args.event_id)
        payload = build_publish_payload(
            event,
            roster.members,
            ministry_id=args.ministry_id or roster.config.publish_ministry_id,
            request_confirmation=roster.config.publish_request_confirmation,
            notes=args.notes,
        )
    except (UnknownIdError, PublishError) as e:
        print(f"Cannot publish: {e}")
        sys.exit(1)
    print(json.dumps(payload.to_request_body(), indent=2, ensure_ascii=False))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Worship rota: volunteer scheduling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default="WARNING",
                        help="DEBUG, INFO, WARNING or ERROR")
    sub = parser.add_subparsers(dest="command", help="Command")

    # setup
    p_setup = sub.add_parser("setup", help="Create workbook / add data-entry sheets")
    p_setup.add_argument("--workbook", required=True, help="Workbook path")

    # import-json
    p_imp = sub.add_parser("import-json", help="Load a JSON export into the workbook")
    p_imp.add_argument("--json", required=True, help="JSON export path")
    p_imp.add_argument("--workbook", required=True, help="Workbook path")

    # dry-run
    p_dry = sub.add_parser("dry-run", help="Check role coverage")
    p_dry.add_argument("--workbook", required=True, help="Workbook path")

    # autofill
    p_fill = sub.add_parser("autofill", help="Fill open slots")
    p_fill.add_argument("--workbook", required=True, help="Workbook path")
    p_fill.add_argument("--out", default=None, help="Output workbook (default: overwrite)")
    p_fill.add_argument("--json-out", default=None, help="Also write a JSON export")

    # validate
    p_val = sub.add_parser("validate", help="Validate current assignments")
    p_val.add_argument("--workbook", required=True, help="Workbook path")

    # report
    p_rep = sub.add_parser("report", help="Per-member workload summary")
    p_rep.add_argument("--workbook", required=True, help="Workbook path")
    p_rep.add_argument("--out", default=None, help="CSV output (default: print)")

    # publish-payload
    p_pub = sub.add_parser("publish-payload", help="Build the publishing request body")
    p_pub.add_argument("--workbook", required=True, help="Workbook path")
    p_pub.add_argument("--event-id", required=True)
    p_pub.add_argument("--ministry-id", default=None, help="Override CONFIG publish_ministry_id")
    p_pub.add_argument("--notes", default="")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    dispatch = {
        "setup": cmd_setup,
        "import-json": cmd_import_json,
        "dry-run": cmd_dry_run,
        "autofill": cmd_autofill,
        "validate": cmd_validate,
        "report": cmd_report,
        "publish-payload": cmd_publish_payload,
    }
    dispatch[args.command](args)


if __name__ == "__main__":
    main()

"""
Write a Roster back to the workbook or to JSON.
Adds an ISSUES sheet listing every unfilled slot and its reason.
"""

import json
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import openpyxl

from .models import Roster
from .workbook_sheets import (
    ensure_config_sheet, ensure_events_sheet, ensure_members_sheet, ensure_roles_sheet,
)


def write_roster(
    roster: Roster,
    output_path: Union[str, Path],
    template_path: Optional[Union[str, Path]] = None,
) -> str:
    """
    Copy the template workbook (if any), then replace MEMBERS, EVENTS and
    ASSIGNMENTS with the roster's data. CONFIG is kept as the user left it.
    """
    output = Path(output_path)
    if template_path is not None:
        template = Path(template_path)
        if not template.exists():
            raise FileNotFoundError(f"Template not found: {template_path}")
        if template.resolve() != output.resolve():
            shutil.copy2(template, output)
        wb = openpyxl.load_workbook(output)
    else:
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

    names = {m.id: m.name for m in roster.members}
    ensure_members_sheet(wb, roster.members)
    ensure_events_sheet(wb, roster.events, member_names=names)
    ensure_config_sheet(wb, roster.config)
    ensure_roles_sheet(wb)
    wb.save(output)

    issues = [(f"{ev.name} ({ev.date.isoformat()} {ev.time})", msg)
              for ev in roster.events for msg in ev.issues]
    add_issues_sheet(str(output), issues)
    return str(output)


def add_issues_sheet(wb_path: str, issues: List[Tuple[str, str]]) -> None:
    """Add an ISSUES sheet listing (event, message) pairs."""
    wb = openpyxl.load_workbook(wb_path)
    if "ISSUES" in wb.sheetnames:
        del wb["ISSUES"]
    ws = wb.create_sheet("ISSUES")
    ws.cell(1, 1, "Event")
    ws.cell(1, 2, "Issue")
    for i, (event, msg) in enumerate(issues, 2):
        ws.cell(i, 1, event)
        ws.cell(i, 2, msg)
    wb.save(wb_path)


def roster_to_dict(roster: Roster) -> Dict[str, Any]:
    return {
        "members": [
            {
                "id": m.id,
                "name": m.name,
                "skills": list(m.skills),
                "availability": m.availability,
                "target_count": m.target_count,
                "assigned_count": m.assigned_count,
                "can_sing_and_play": m.can_sing_and_play,
                "external_user_id": m.external_user_id,
                "external_role_ids": dict(m.external_role_ids),
            }
            for m in roster.members
        ],
        "events": [
            {
                "id": ev.id,
                "name": ev.name,
                "date": ev.date.isoformat(),
                "time": ev.time,
                "slots": [
                    {"id": s.id, "role": s.role, "member_id": s.member_id}
                    for s in ev.slots
                ],
                "status": ev.status,
                "issues": list(ev.issues),
            }
            for ev in roster.events
        ],
    }


def dump_json_roster(roster: Roster, output_path: Union[str, Path]) -> str:
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(roster_to_dict(roster), f, indent=2, ensure_ascii=False)
    return str(output_path)

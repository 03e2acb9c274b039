"""
Data-entry sheets of the roster workbook.
MEMBERS, EVENTS, ASSIGNMENTS, MEMBER_ROLE_IDS, CONFIG and a read-only ROLES
reference sheet all live in the SAME workbook.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

import openpyxl
from openpyxl.utils import get_column_letter

from .models import Member, RotaConfig, ServiceEvent
from .roles import ROLE_ALIASES, ROLE_LABELS, is_vocal_role

MEMBER_HEADERS = ["MemberId", "Name", "Skills", "Availability", "TargetCount",
                  "CanSingAndPlay", "ExternalUserId", "AssignedCount"]
EVENT_HEADERS = ["EventId", "Name", "Date", "Time", "Status", "Issues"]
ASSIGNMENT_HEADERS = ["EventId", "SlotId", "Role", "MemberId", "MemberName"]
MEMBER_ROLE_ID_HEADERS = ["MemberId", "Role", "ExternalRoleId"]


def _fresh_sheet(wb, title: str, headers: Sequence[str]):
    """Create/replace a sheet with just its header row."""
    if title in wb.sheetnames:
        del wb[title]
    ws = wb.create_sheet(title)
    for c, h in enumerate(headers, 1):
        ws.cell(1, c, h)
        ws.column_dimensions[get_column_letter(c)].width = max(12, len(h) + 4)
    return ws


def ensure_members_sheet(wb, members: Optional[List[Member]] = None):
    """Create/replace MEMBERS sheet (and MEMBER_ROLE_IDS for external ids)."""
    ws = _fresh_sheet(wb, "MEMBERS", MEMBER_HEADERS)
    ws_ids = _fresh_sheet(wb, "MEMBER_ROLE_IDS", MEMBER_ROLE_ID_HEADERS)
    id_row = 2
    for i, m in enumerate(members or [], 2):
        ws.cell(i, 1, m.id)
        ws.cell(i, 2, m.name)
        ws.cell(i, 3, ", ".join(m.skills))
        ws.cell(i, 4, m.availability)
        ws.cell(i, 5, m.target_count)
        ws.cell(i, 6, "Y" if m.can_sing_and_play else "N")
        ws.cell(i, 7, m.external_user_id or "")
        ws.cell(i, 8, m.assigned_count)
        for role, ext_id in sorted(m.external_role_ids.items()):
            ws_ids.cell(id_row, 1, m.id)
            ws_ids.cell(id_row, 2, role)
            ws_ids.cell(id_row, 3, ext_id)
            id_row += 1


def ensure_events_sheet(wb, events: Optional[List[ServiceEvent]] = None,
                        member_names: Optional[Dict[str, str]] = None):
    """Create/replace EVENTS and ASSIGNMENTS sheets."""
    ws_ev = _fresh_sheet(wb, "EVENTS", EVENT_HEADERS)
    ws_as = _fresh_sheet(wb, "ASSIGNMENTS", ASSIGNMENT_HEADERS)
    names = member_names or {}
    row = 2
    for i, ev in enumerate(events or [], 2):
        ws_ev.cell(i, 1, ev.id)
        ws_ev.cell(i, 2, ev.name)
        ws_ev.cell(i, 3, ev.date.isoformat())
        ws_ev.cell(i, 4, ev.time)
        ws_ev.cell(i, 5, ev.status)
        ws_ev.cell(i, 6, "\n".join(ev.issues))
        for slot in ev.slots:
            ws_as.cell(row, 1, ev.id)
            ws_as.cell(row, 2, slot.id)
            ws_as.cell(row, 3, slot.role)
            ws_as.cell(row, 4, slot.member_id or "")
            ws_as.cell(row, 5, names.get(slot.member_id, ""))
            row += 1


def ensure_roles_sheet(wb):
    """Create/replace ROLES reference sheet: key, label, category, aliases."""
    ws = _fresh_sheet(wb, "ROLES", ["RoleKey", "Label", "Category", "Aliases"])
    for i, (key, label) in enumerate(ROLE_LABELS.items(), 2):
        aliases = sorted(a for a, k in ROLE_ALIASES.items() if k == key)
        ws.cell(i, 1, key)
        ws.cell(i, 2, label)
        ws.cell(i, 3, "vocal" if is_vocal_role(key) else "instrumental")
        ws.cell(i, 4, ", ".join(aliases))


def ensure_config_sheet(wb, config: Optional[RotaConfig] = None):
    """Create CONFIG sheet with defaults."""
    if "CONFIG" in wb.sheetnames:
        # Don't overwrite if it exists, to preserve user edits
        return
    config = config or RotaConfig()
    ws = _fresh_sheet(wb, "CONFIG", ["Parameter", "Value", "Description"])
    defaults = [
        ("default_target_count", config.default_target_count,
         "Target events per member when a row leaves TargetCount blank"),
        ("sunday_default_time", config.sunday_default_time,
         "Service time for Sunday events imported without a time"),
        ("default_time", config.default_time,
         "Service time for other events imported without a time"),
        ("publish_ministry_id", config.publish_ministry_id,
         "Ministry id in the schedule-publishing service"),
        ("publish_request_confirmation", "Y" if config.publish_request_confirmation else "N",
         "Ask members to confirm published schedules (Y/N)"),
    ]
    for i, (p, v, d) in enumerate(defaults, 2):
        ws.cell(i, 1, p)
        ws.cell(i, 2, v)
        ws.cell(i, 3, d)


def setup_all_sheets(wb_path: str) -> str:
    """
    Create the workbook if needed and add any missing data-entry sheets.
    Existing MEMBERS/EVENTS/ASSIGNMENTS data is left alone.
    """
    path = Path(wb_path)
    if path.exists():
        wb = openpyxl.load_workbook(path)
    else:
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

    if "MEMBERS" not in wb.sheetnames:
        ensure_members_sheet(wb)
    if "EVENTS" not in wb.sheetnames:
        ensure_events_sheet(wb)
    ensure_config_sheet(wb)
    ensure_roles_sheet(wb)

    wb.save(path)
    return str(path)

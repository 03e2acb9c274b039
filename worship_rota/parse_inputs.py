"""
Load a Roster from the roster workbook (MEMBERS + EVENTS + ASSIGNMENTS +
CONFIG sheets) or from a JSON export.

Both loaders canonicalize role keys and fill in what older files lack
(ids, event times, event names), so legacy data never surfaces as an error.
"""

import json
import uuid
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import openpyxl

from .diagnostics import refresh_status
from .eligibility import count_assignments
from .models import (
    Member, RoleSlot, Roster, RotaConfig, ServiceEvent,
    day_label, default_time_for,
)
from .roles import normalize_role_keys


def _yes(value) -> bool:
    if isinstance(value, bool):
        return value
    flag = str(value or "").strip().upper()
    return flag.startswith("Y") or flag in ("TRUE", "1")


def _text(value) -> str:
    return str(value).strip() if value is not None else ""


def _split(value) -> List[str]:
    return [x for x in (p.strip() for p in _text(value).split(",")) if x]


def parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(_text(value)[:10])


def parse_time(value) -> str:
    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")
    return _text(value)


def _recount(roster: Roster) -> Roster:
    """assigned_count is derived; never trust the stored value."""
    totals = count_assignments(roster.events)
    for m in roster.members:
        m.assigned_count = totals.get(m.id, 0)
    return roster


def _finish_event(ev: ServiceEvent, config: RotaConfig) -> ServiceEvent:
    if not ev.time:
        ev.time = default_time_for(ev.date, config)
    if not ev.name:
        ev.name = day_label(ev.date)
    return refresh_status(ev)


# ---------------------------------------------------------------------------
# Workbook
# ---------------------------------------------------------------------------
def _rows(ws):
    """Yield dicts keyed by the header row, skipping blank lines."""
    headers = [_text(ws.cell(1, c).value) for c in range(1, ws.max_column + 1)]
    for row in range(2, ws.max_row + 1):
        values = [ws.cell(row, c).value for c in range(1, len(headers) + 1)]
        if all(v is None or _text(v) == "" for v in values):
            continue
        yield dict(zip(headers, values))


def _read_config(wb) -> RotaConfig:
    """Read CONFIG sheet."""
    config = RotaConfig()
    if "CONFIG" not in wb.sheetnames:
        return config

    rows = {}
    for r in _rows(wb["CONFIG"]):
        if r.get("Parameter"):
            rows[_text(r["Parameter"])] = r.get("Value")

    if rows.get("default_target_count") is not None:
        config.default_target_count = int(rows["default_target_count"])
    if rows.get("sunday_default_time"):
        config.sunday_default_time = parse_time(rows["sunday_default_time"])
    if rows.get("default_time"):
        config.default_time = parse_time(rows["default_time"])
    if rows.get("publish_ministry_id"):
        config.publish_ministry_id = _text(rows["publish_ministry_id"])
    if rows.get("publish_request_confirmation") is not None:
        config.publish_request_confirmation = _yes(rows["publish_request_confirmation"])
    return config


def _read_members(wb, config: RotaConfig) -> List[Member]:
    members = []
    for r in _rows(wb["MEMBERS"]):
        name = _text(r.get("Name"))
        if not name:
            continue
        target = r.get("TargetCount")
        members.append(Member(
            id=_text(r.get("MemberId")) or str(uuid.uuid4()),
            name=name,
            skills=_split(r.get("Skills")),
            availability=_text(r.get("Availability")).lower() or "both",
            target_count=int(target) if target not in (None, "") else config.default_target_count,
            can_sing_and_play=_yes(r.get("CanSingAndPlay")),
            external_user_id=_text(r.get("ExternalUserId")) or None,
        ))

    if "MEMBER_ROLE_IDS" in wb.sheetnames:
        by_id = {m.id: m for m in members}
        for r in _rows(wb["MEMBER_ROLE_IDS"]):
            m = by_id.get(_text(r.get("MemberId")))
            if m is None:
                continue
            for role in normalize_role_keys([_text(r.get("Role"))]):
                m.external_role_ids[role] = _text(r.get("ExternalRoleId"))
    return members


def _read_events(wb, config: RotaConfig) -> List[ServiceEvent]:
    if "EVENTS" not in wb.sheetnames:
        return []
    events: Dict[str, ServiceEvent] = {}
    for r in _rows(wb["EVENTS"]):
        if r.get("Date") in (None, ""):
            continue
        ev_id = _text(r.get("EventId")) or str(uuid.uuid4())
        events[ev_id] = ServiceEvent(
            id=ev_id,
            name=_text(r.get("Name")),
            date=parse_date(r["Date"]),
            time=parse_time(r.get("Time")),
        )

    if "ASSIGNMENTS" in wb.sheetnames:
        for r in _rows(wb["ASSIGNMENTS"]):
            ev = events.get(_text(r.get("EventId")))
            roles = normalize_role_keys([_text(r.get("Role"))])
            if ev is None or not roles:
                continue
            ev.slots.append(RoleSlot(
                id=_text(r.get("SlotId")) or str(uuid.uuid4()),
                role=roles[0],
                member_id=_text(r.get("MemberId")) or None,
            ))

    out = [_finish_event(ev, config) for ev in events.values()]
    return sorted(out, key=lambda e: e.sort_key)


def load_workbook_config(wb_path: Union[str, Path]) -> RotaConfig:
    """CONFIG sheet of an existing workbook (defaults when the sheet is absent)."""
    path = Path(wb_path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {wb_path}")
    return _read_config(openpyxl.load_workbook(path, data_only=True))


def load_workbook_roster(wb_path: Union[str, Path]) -> Roster:
    """Parse the roster workbook into a Roster."""
    path = Path(wb_path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {wb_path}")
    wb = openpyxl.load_workbook(path, data_only=True)
    if "MEMBERS" not in wb.sheetnames:
        raise ValueError(f"{path.name}: no MEMBERS sheet (run 'setup' first)")

    config = _read_config(wb)
    return _recount(Roster(
        members=_read_members(wb, config),
        events=_read_events(wb, config),
        config=config,
    ))


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------
def _pick(d: Mapping[str, Any], *keys, default=None):
    """First present key; older exports used camelCase names."""
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return default


def _member_from_json(d: Mapping[str, Any], config: RotaConfig) -> Member:
    return Member(
        id=_text(_pick(d, "id")) or str(uuid.uuid4()),
        name=_text(_pick(d, "name")),
        skills=list(_pick(d, "skills", "instruments", default=[])),
        availability=_text(_pick(d, "availability")).lower() or "both",
        target_count=int(_pick(d, "target_count", "targetCount",
                               default=config.default_target_count)),
        assigned_count=int(_pick(d, "assigned_count", "assignedCount", default=0)),
        can_sing_and_play=bool(_pick(d, "can_sing_and_play", "canSingAndPlay", default=False)),
        external_user_id=_pick(d, "external_user_id", "louveUserId"),
        external_role_ids=dict(_pick(d, "external_role_ids", "louveFunctionsByInstrument", default={})),
    )


def _event_from_json(d: Mapping[str, Any], config: RotaConfig) -> ServiceEvent:
    raw_slots = _pick(d, "slots", "assignments", default=None)
    if raw_slots is None:
        required = _pick(d, "required_roles", "requiredInstruments", default=[])
        raw_slots = [{"role": r} for r in required]

    slots = []
    for s in raw_slots:
        roles = normalize_role_keys([_text(_pick(s, "role", "instrument"))])
        if not roles:
            continue
        slots.append(RoleSlot(
            id=_text(_pick(s, "id")) or str(uuid.uuid4()),
            role=roles[0],
            member_id=_pick(s, "member_id", "memberId") or None,
        ))

    ev = ServiceEvent(
        id=_text(_pick(d, "id")) or str(uuid.uuid4()),
        name=_text(_pick(d, "name")),
        date=parse_date(_pick(d, "date")),
        time=parse_time(_pick(d, "time")),
        slots=slots,
    )
    return _finish_event(ev, config)


def roster_from_dict(payload: Mapping[str, Any], config: Optional[RotaConfig] = None) -> Roster:
    config = config or RotaConfig()
    members = [_member_from_json(m, config) for m in payload.get("members") or []]
    raw_events = _pick(payload, "events", "schedules", default=[])
    events = sorted((_event_from_json(e, config) for e in raw_events), key=lambda e: e.sort_key)
    return _recount(Roster(members=members, events=events, config=config))


def load_json_roster(path: Union[str, Path], config: Optional[RotaConfig] = None) -> Roster:
    with open(path, "r", encoding="utf-8") as f:
        return roster_from_dict(json.load(f), config)

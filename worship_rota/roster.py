"""
Editing operations on a Roster session: members, events and their slots.
Manual edits keep each event's status in step with its slots.
"""

import dataclasses
import uuid
from datetime import date
from typing import Iterable, List, Optional

from .autofill import autofill
from .diagnostics import refresh_status
from .errors import UnknownIdError
from .models import Member, RoleSlot, Roster, ServiceEvent
from .roles import normalize_role_key, normalize_role_keys


def new_id() -> str:
    return str(uuid.uuid4())


def _sort_events(roster: Roster) -> None:
    roster.events.sort(key=lambda e: e.sort_key)


def _find_member(roster: Roster, member_id: str) -> Member:
    for m in roster.members:
        if m.id == member_id:
            return m
    raise UnknownIdError("member", member_id)


def find_event(roster: Roster, event_id: str) -> ServiceEvent:
    for ev in roster.events:
        if ev.id == event_id:
            return ev
    raise UnknownIdError("event", event_id)


def _find_slot(event: ServiceEvent, slot_id: str) -> RoleSlot:
    for slot in event.slots:
        if slot.id == slot_id:
            return slot
    raise UnknownIdError("slot", slot_id)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------
def add_member(
    roster: Roster,
    name: str,
    skills: Iterable[str],
    availability: str = "both",
    target_count: Optional[int] = None,
    can_sing_and_play: bool = False,
    external_user_id: Optional[str] = None,
) -> Member:
    if target_count is None:
        target_count = roster.config.default_target_count
    member = Member(
        id=new_id(),
        name=name.strip(),
        skills=list(skills),
        availability=availability,
        target_count=target_count,
        can_sing_and_play=can_sing_and_play,
        external_user_id=external_user_id,
    )
    roster.members.append(member)
    return member


def update_member(roster: Roster, member_id: str, **changes) -> Member:
    """Edit a member in place. assigned_count is derived and cannot be set."""
    member = _find_member(roster, member_id)
    if "assigned_count" in changes or "id" in changes:
        raise ValueError("id and assigned_count cannot be edited")
    # replace() re-runs normalization and validation before anything changes
    edited = dataclasses.replace(member, **changes)
    member.__dict__.update(edited.__dict__)
    return member


def remove_member(roster: Roster, member_id: str) -> None:
    """Remove a member; their slots become unassigned."""
    member = _find_member(roster, member_id)
    roster.members.remove(member)
    for ev in roster.events:
        touched = False
        for slot in ev.slots:
            if slot.member_id == member_id:
                slot.member_id = None
                touched = True
        if touched:
            refresh_status(ev)


def assigned_count(roster: Roster, member_id: str) -> int:
    return sum(1 for ev in roster.events for s in ev.slots if s.member_id == member_id)


def all_role_keys(roster: Roster) -> List[str]:
    """Every role key known to the roster (skills and required roles), sorted."""
    keys = {k for m in roster.members for k in m.skills}
    keys.update(s.role for ev in roster.events for s in ev.slots)
    return sorted(keys)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
def add_event(
    roster: Roster,
    day: date,
    time: str,
    name: str,
    roles: Iterable[str],
) -> ServiceEvent:
    """New event with one open slot per distinct requested role."""
    slots = [RoleSlot(id=new_id(), role=r) for r in normalize_role_keys(roles)]
    event = ServiceEvent(
        id=new_id(), name=name.strip(), date=day, time=time.strip(), slots=slots)
    refresh_status(event)
    roster.events.append(event)
    _sort_events(roster)
    return event


def remove_event(roster: Roster, event_id: str) -> None:
    roster.events.remove(find_event(roster, event_id))


def update_event_meta(
    roster: Roster,
    event_id: str,
    name: Optional[str] = None,
    day: Optional[date] = None,
    time: Optional[str] = None,
) -> ServiceEvent:
    event = find_event(roster, event_id)
    if name is not None:
        event.name = name.strip()
    if day is not None:
        event.date = day
    if time is not None:
        event.time = time.strip()
    _sort_events(roster)
    return event


def set_slot_member(
    roster: Roster,
    event_id: str,
    slot_id: str,
    member_id: Optional[str],
) -> ServiceEvent:
    """Manually (un)assign a slot. No eligibility checks apply to manual edits."""
    event = find_event(roster, event_id)
    slot = _find_slot(event, slot_id)
    if member_id is not None:
        _find_member(roster, member_id)
    slot.member_id = member_id
    return refresh_status(event)


def add_slot(roster: Roster, event_id: str, role: str) -> RoleSlot:
    event = find_event(roster, event_id)
    key = normalize_role_key(role)
    if not key:
        raise ValueError("role must not be blank")
    slot = RoleSlot(id=new_id(), role=key)
    event.slots.append(slot)
    refresh_status(event)
    return slot


def remove_slot(roster: Roster, event_id: str, slot_id: str) -> ServiceEvent:
    event = find_event(roster, event_id)
    event.slots.remove(_find_slot(event, slot_id))
    return refresh_status(event)


def run_autofill(roster: Roster, **kwargs) -> Roster:
    """Autofill the whole roster; returns a new Roster, the input is unchanged."""
    events, members = autofill(roster.members, roster.events, **kwargs)
    return Roster(members=members, events=events, config=roster.config)

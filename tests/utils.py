"""Builders shared by the rota tests."""
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Optional

from worship_rota.models import Member, RoleSlot, ServiceEvent

SUN_JAN_4 = date(2026, 1, 4)
WED_JAN_7 = date(2026, 1, 7)
THU_JAN_8 = date(2026, 1, 8)
SUN_JAN_11 = date(2026, 1, 11)
SUN_JAN_18 = date(2026, 1, 18)


def member(
    name: str,
    skills: Iterable[str],
    availability: str = "both",
    target: int = 6,
    can_sing_and_play: bool = False,
    member_id: Optional[str] = None,
    external_user_id: Optional[str] = None,
) -> Member:
    return Member(
        id=member_id or f"m-{name.lower()}",
        name=name,
        skills=list(skills),
        availability=availability,
        target_count=target,
        can_sing_and_play=can_sing_and_play,
        external_user_id=external_user_id,
    )


def event(
    day: date,
    roles: Iterable[str],
    assigned: Optional[Dict[str, str]] = None,
    time: str = "09:00",
    name: Optional[str] = None,
    event_id: Optional[str] = None,
) -> ServiceEvent:
    """Event with one slot per role; `assigned` maps role -> member id."""
    assigned = assigned or {}
    ev_id = event_id or f"e-{day.isoformat()}-{time}"
    slots = [
        RoleSlot(id=f"{ev_id}-{i}", role=role, member_id=assigned.get(role))
        for i, role in enumerate(roles)
    ]
    return ServiceEvent(id=ev_id, name=name or f"Service {day.isoformat()}",
                        date=day, time=time, slots=slots)


def holders(ev: ServiceEvent) -> Dict[str, Optional[str]]:
    """role -> member id for an event (first slot per role)."""
    out: Dict[str, Optional[str]] = {}
    for slot in ev.slots:
        out.setdefault(slot.role, slot.member_id)
    return out

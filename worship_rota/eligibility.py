"""
Who may take a role slot during an autofill run.

AutofillState is the per-run scratch state (running counts + weekly lead
tracker); it is built fresh for every autofill call and thrown away after.
"""

import unicodedata
from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Sequence

from .models import (
    Member, RoleSlot, ServiceEvent, has_skill, is_available_on,
)
from .roles import ACOUSTIC_GUITAR, LEAD_VOCALIST, is_vocal_role
from .weekly import WeeklyLeadTracker

LEAD_AND_GUITAR = {LEAD_VOCALIST, ACOUSTIC_GUITAR}


def is_lead_guitar_pair(member: Member, held: Sequence[str], role: str) -> bool:
    """Lead vocalist + acoustic guitar held by someone who has both skills."""
    if not (has_skill(member, LEAD_VOCALIST) and has_skill(member, ACOUSTIC_GUITAR)):
        return False
    if role not in LEAD_AND_GUITAR:
        return False
    partner = ACOUSTIC_GUITAR if role == LEAD_VOCALIST else LEAD_VOCALIST
    return partner in held


def can_take_role(member: Member, held: Sequence[str], role: str) -> bool:
    """
    Dual-role rule: may `member`, already holding `held` in this event,
    also take `role`?

    At most one vocal plus one instrumental role per event, and only for
    members flagged can_sing_and_play. Lead vocalist + acoustic guitar is
    always allowed for someone with both skills.
    """
    if is_lead_guitar_pair(member, held, role):
        return True
    if not held:
        return True
    if not member.can_sing_and_play:
        return False

    has_vocal = any(is_vocal_role(r) for r in held)
    has_instrument = any(not is_vocal_role(r) for r in held)
    if has_vocal and has_instrument:
        return False
    if is_vocal_role(role):
        return not has_vocal
    return not has_instrument


class AutofillState:
    """Running assignment counts and the weekly lead tracker for one run."""

    def __init__(self, counts: Dict[str, int], tracker: WeeklyLeadTracker):
        self.counts = counts
        self.tracker = tracker

    @classmethod
    def from_roster(cls, members: Iterable[Member],
                    events: Iterable[ServiceEvent]) -> "AutofillState":
        events = list(events)
        counts: Dict[str, int] = {m.id: 0 for m in members}
        counts.update(count_assignments(events))
        return cls(counts, WeeklyLeadTracker.from_events(events))

    def count_for(self, member_id: str) -> int:
        return self.counts.get(member_id, 0)

    def commit(self, event: ServiceEvent, slot: RoleSlot, member_id: str) -> None:
        slot.member_id = member_id
        self.counts[member_id] = self.count_for(member_id) + 1
        if slot.role == LEAD_VOCALIST:
            self.tracker.record(event.date, member_id)

    def release(self, member_id: str) -> None:
        self.counts[member_id] = max(0, self.count_for(member_id) - 1)


def name_sort_key(name: str) -> str:
    """Case- and accent-insensitive key, so accented names sort with their plain spelling."""
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def count_assignments(events: Iterable[ServiceEvent]) -> Counter:
    """member id -> number of slots referencing it."""
    counts: Counter = Counter()
    for ev in events:
        for slot in ev.slots:
            if slot.member_id:
                counts[slot.member_id] += 1
    return counts


def eligible_members(
    members: Iterable[Member],
    role: str,
    event_date: date,
    slots: Sequence[RoleSlot],
    state: AutofillState,
) -> List[Member]:
    """
    Members who may fill `role` on `event_date`, given the event's
    in-progress `slots`. Least-used first, then alphabetical by name (ignoring case and accents).
    """
    candidates = []
    for m in members:
        if not has_skill(m, role):
            continue
        if not is_available_on(m, event_date):
            continue
        if state.count_for(m.id) >= m.target_count:
            continue
        held = [s.role for s in slots if s.member_id == m.id]
        if not can_take_role(m, held, role):
            continue
        if role == LEAD_VOCALIST and state.tracker.is_leading(event_date, m.id):
            continue
        candidates.append(m)

    candidates.sort(key=lambda m: (state.count_for(m.id), name_sort_key(m.name), m.name, m.id))
    return candidates

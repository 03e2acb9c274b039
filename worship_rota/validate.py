"""
Post-autofill validation and pre-run feasibility checks.
"""

from collections import Counter, defaultdict
from typing import Dict, List, Set, Tuple

from .models import Roster, has_skill, is_available_on, iso_week_key
from .roles import ACOUSTIC_GUITAR, LEAD_VOCALIST, is_vocal_role, role_label


def validate_assignments(roster: Roster) -> Tuple[bool, List[str]]:
    """
    Check a roster's assignments against the rota rules.
    Returns (is_valid, list_of_violation_messages).

    Manual assignments may legitimately break the skill/availability rules,
    so those are reported too; it is up to the caller to decide what to do.
    """
    violations = []
    members = roster.member_by_id()
    leads_by_week: Dict[str, Counter] = defaultdict(Counter)

    for ev in roster.events:
        where = f"{ev.name} ({ev.date.isoformat()} {ev.time})"
        held: Dict[str, List[str]] = defaultdict(list)
        for slot in ev.slots:
            if not slot.member_id:
                continue
            m = members.get(slot.member_id)
            if m is None:
                violations.append(f"{where}: {role_label(slot.role)} assigned to unknown member {slot.member_id}")
                continue
            held[m.id].append(slot.role)
            if not has_skill(m, slot.role):
                violations.append(f"{where}: {m.name} does not play {role_label(slot.role)}")
            if not is_available_on(m, ev.date):
                violations.append(f"{where}: {m.name} is only available on {m.availability}")
            if slot.role == LEAD_VOCALIST:
                leads_by_week[iso_week_key(ev.date)][m.id] += 1

        for member_id, roles in held.items():
            m = members[member_id]
            pair = {LEAD_VOCALIST, ACOUSTIC_GUITAR} <= set(roles)
            if pair and has_skill(m, LEAD_VOCALIST) and has_skill(m, ACOUSTIC_GUITAR):
                continue
            vocal = sum(1 for r in roles if is_vocal_role(r))
            instrumental = len(roles) - vocal
            if len(roles) > 2 or vocal > 1 or instrumental > 1:
                violations.append(
                    f"{where}: {m.name} holds {len(roles)} roles "
                    f"({', '.join(role_label(r) for r in roles)})")
            elif len(roles) == 2 and not m.can_sing_and_play:
                violations.append(f"{where}: {m.name} sings and plays but is not allowed to")

    for week, counts in sorted(leads_by_week.items()):
        for member_id, n in sorted(counts.items()):
            if n > 1:
                violations.append(f"{week}: {members[member_id].name} leads vocals {n} times")

    return len(violations) == 0, violations


def over_target_members(roster: Roster) -> List[str]:
    """Members whose assigned count exceeds their target (manual over-assignment)."""
    msgs = []
    for m in sorted(roster.members, key=lambda m: m.name):
        if m.assigned_count > m.target_count:
            msgs.append(f"{m.name}: assigned {m.assigned_count} (target {m.target_count})")
    return msgs


def dry_run_coverage(roster: Roster) -> Tuple[bool, List[str]]:
    """Before autofill: do we have anyone at all, and enough capacity, per role?"""
    msgs = []
    demand: Counter = Counter()
    for ev in roster.events:
        for slot in ev.slots:
            if not slot.is_filled:
                demand[slot.role] += 1

    for role, needed in sorted(demand.items()):
        skilled = [m for m in roster.members if has_skill(m, role)]
        if not skilled:
            msgs.append(f"{role_label(role)}: {needed} open slot(s), nobody plays it")
            continue
        capacity = sum(max(0, m.target_count - m.assigned_count) for m in skilled)
        if capacity < needed:
            msgs.append(
                f"{role_label(role)}: {needed} open slot(s), remaining capacity {capacity}")

    seen: Set[str] = set()
    for m in roster.members:
        if m.id in seen:
            msgs.append(f"Duplicate member id {m.id}")
        seen.add(m.id)

    return len(msgs) == 0, msgs

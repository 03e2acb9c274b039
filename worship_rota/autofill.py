"""
Greedy autofill engine.
Fills every open role slot it can, event by event in date/time order,
and explains the ones it cannot.

Deterministic: no randomness, ties broken by running count then name.
"""

import copy
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .diagnostics import LabelFormatter, compute_status, explain_unfilled
from .eligibility import AutofillState, count_assignments, eligible_members
from .models import Member, ServiceEvent, has_skill
from .roles import ACOUSTIC_GUITAR, LEAD_VOCALIST

logger = logging.getLogger(__name__)


def _fill_open_slots(
    event: ServiceEvent,
    members: Sequence[Member],
    state: AutofillState,
) -> int:
    """One scan over the event's open slots; returns how many got filled."""
    filled = 0
    for slot in event.slots:
        if slot.is_filled:
            continue
        candidates = eligible_members(members, slot.role, event.date, event.slots, state)
        if not candidates:
            continue
        state.commit(event, slot, candidates[0].id)
        filled += 1
    return filled


def _link_lead_to_guitar(
    event: ServiceEvent,
    by_id: Dict[str, Member],
    state: AutofillState,
) -> None:
    """If the lead vocalist plays acoustic guitar, they take the guitar slot too."""
    lead_slot = next(
        (s for s in event.slots if s.role == LEAD_VOCALIST and s.is_filled), None)
    if lead_slot is None:
        return
    lead = by_id.get(lead_slot.member_id)
    if lead is None or not has_skill(lead, ACOUSTIC_GUITAR):
        return
    guitar_slot = next((s for s in event.slots if s.role == ACOUSTIC_GUITAR), None)
    if guitar_slot is None or guitar_slot.member_id == lead.id:
        return

    previous = guitar_slot.member_id
    if previous:
        state.release(previous)
        previous_name = by_id[previous].name if previous in by_id else previous
        logger.info(
            f"{event.name} ({event.date.isoformat()}): acoustic guitar moved from "
            f"{previous_name} to lead vocalist {lead.name}")
    state.commit(event, guitar_slot, lead.id)


def autofill(
    members: Sequence[Member],
    events: Sequence[ServiceEvent],
    label: Optional[LabelFormatter] = None,
    templates: Optional[Dict[str, str]] = None,
) -> Tuple[List[ServiceEvent], List[Member]]:
    """
    Fill unassigned role slots across all events.

    Inputs are left untouched; returns (events, members) as fresh copies with
    slots filled, each event's status/issues set, and every member's
    assigned_count recomputed from the resulting assignments.

    `label` maps a role key to display text in the issue messages and
    `templates` overrides the message wording per diagnostic kind; neither
    affects which member is chosen.
    """
    members = copy.deepcopy(list(members))
    events = sorted(copy.deepcopy(list(events)), key=lambda e: e.sort_key)
    by_id = {m.id: m for m in members}
    state = AutofillState.from_roster(members, events)

    open_before = sum(1 for ev in events for s in ev.slots if not s.is_filled)
    for ev in events:
        _fill_open_slots(ev, members, state)
        _link_lead_to_guitar(ev, by_id, state)
        _fill_open_slots(ev, members, state)

        ev.status, _ = compute_status(ev.slots)
        ev.issues = [d.message for d in
                     explain_unfilled(ev, members, state.counts, label, templates)]

    totals = count_assignments(events)
    for m in members:
        m.assigned_count = totals.get(m.id, 0)

    open_after = sum(1 for ev in events for s in ev.slots if not s.is_filled)
    logger.info(
        f"Autofill processed {len(events)} event(s): "
        f"{open_before - open_after} slot(s) filled, {open_after} left open")
    return events, members

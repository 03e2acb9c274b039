"""
Event status and explanations for role slots autofill could not fill.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .models import (
    Member, RoleSlot, ServiceEvent, STATUS_COMPLETE, STATUS_EMPTY, STATUS_PARTIAL,
    day_label, has_skill, is_available_on,
)
from .roles import role_label

LabelFormatter = Callable[[str], str]

# Checked in this order; the first that applies explains the slot.
NO_MEMBER_PLAYS = "no_member_plays"
NO_ONE_AVAILABLE = "no_one_available"
ALL_AT_TARGET = "all_at_target"
CONFLICT = "conflict"

DEFAULT_TEMPLATES = {
    NO_MEMBER_PLAYS: 'No member plays "{role}".',
    NO_ONE_AVAILABLE: 'No eligible member for "{role}" is available on {day}.',
    ALL_AT_TARGET: 'All eligible members for "{role}" reached their target count.',
    CONFLICT: 'Conflict prevented assignment for "{role}".',
}


@dataclass
class Diagnostic:
    kind: str
    slot_id: str
    role: str
    message: str


def compute_status(slots: Sequence[RoleSlot]) -> Tuple[str, List[str]]:
    """Status plus a generic unfilled-count issue line (used outside autofill)."""
    unfilled = sum(1 for s in slots if not s.is_filled)
    if not slots:
        status = STATUS_EMPTY
    elif unfilled == 0:
        status = STATUS_COMPLETE
    else:
        status = STATUS_PARTIAL
    issues = [f"{unfilled} position(s) unfilled."] if unfilled else []
    return status, issues


def refresh_status(event: ServiceEvent) -> ServiceEvent:
    event.status, event.issues = compute_status(event.slots)
    return event


def classify_unfilled(
    role: str,
    event: ServiceEvent,
    members: Iterable[Member],
    counts: Mapping[str, int],
) -> str:
    skilled = [m for m in members if has_skill(m, role)]
    if not skilled:
        return NO_MEMBER_PLAYS
    available = [m for m in skilled if is_available_on(m, event.date)]
    if not available:
        return NO_ONE_AVAILABLE
    if all(counts.get(m.id, 0) >= m.target_count for m in available):
        return ALL_AT_TARGET
    return CONFLICT


def explain_unfilled(
    event: ServiceEvent,
    members: Sequence[Member],
    counts: Mapping[str, int],
    label: Optional[LabelFormatter] = None,
    templates: Optional[Dict[str, str]] = None,
) -> List[Diagnostic]:
    """One Diagnostic per unfilled slot of `event`, in slot order."""
    label = label or role_label
    msgs = dict(DEFAULT_TEMPLATES)
    if templates:
        msgs.update(templates)

    out = []
    for slot in event.slots:
        if slot.is_filled:
            continue
        kind = classify_unfilled(slot.role, event, members, counts)
        text = msgs[kind].format(role=label(slot.role), day=day_label(event.date))
        out.append(Diagnostic(kind=kind, slot_id=slot.id, role=slot.role, message=text))
    return out

"""Per-member workload summary."""

from collections import defaultdict
from typing import Dict

import pandas as pd

from .models import Roster
from .roles import LEAD_VOCALIST

COLUMNS = ["Member", "Target", "Assigned", "EventsServed", "Remaining", "LeadVocals", "Roles"]


def workload_frame(roster: Roster) -> pd.DataFrame:
    """One row per member: slots held, distinct events served, room left under target."""
    slots = defaultdict(int)
    events = defaultdict(set)
    leads = defaultdict(int)
    roles = defaultdict(set)
    for ev in roster.events:
        for s in ev.slots:
            if not s.member_id:
                continue
            slots[s.member_id] += 1
            events[s.member_id].add(ev.id)
            roles[s.member_id].add(s.role)
            if s.role == LEAD_VOCALIST:
                leads[s.member_id] += 1

    rows = []
    for m in roster.members:
        rows.append({
            "Member": m.name,
            "Target": m.target_count,
            "Assigned": slots[m.id],
            "EventsServed": len(events[m.id]),
            "Remaining": max(0, m.target_count - slots[m.id]),
            "LeadVocals": leads[m.id],
            "Roles": ", ".join(sorted(roles[m.id])),
        })
    df = pd.DataFrame(rows, columns=COLUMNS)
    return df.sort_values(["Assigned", "Member"], ascending=[False, True]).reset_index(drop=True)


def roster_totals(roster: Roster) -> Dict[str, float]:
    total = sum(len(ev.slots) for ev in roster.events)
    filled = sum(1 for ev in roster.events for s in ev.slots if s.is_filled)
    avg = round(filled / len(roster.members), 1) if roster.members else 0.0
    return {
        "events": len(roster.events),
        "slots": total,
        "filled": filled,
        "open": total - filled,
        "average_per_member": avg,
    }


def write_report(roster: Roster, out_path: str) -> str:
    workload_frame(roster).to_csv(out_path, index=False)
    return out_path

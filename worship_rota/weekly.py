"""
Weekly uniqueness for the lead vocalist: nobody leads twice in one ISO week.
"""

from datetime import date
from typing import Dict, Iterable, Set

from .models import ServiceEvent, iso_week_key
from .roles import LEAD_VOCALIST


class WeeklyLeadTracker:
    """ISO week key -> ids of members already leading in that week."""

    def __init__(self):
        self._by_week: Dict[str, Set[str]] = {}

    @classmethod
    def from_events(cls, events: Iterable[ServiceEvent]) -> "WeeklyLeadTracker":
        tracker = cls()
        for ev in events:
            for slot in ev.slots:
                if slot.member_id and slot.role == LEAD_VOCALIST:
                    tracker.record(ev.date, slot.member_id)
        return tracker

    def record(self, day: date, member_id: str) -> None:
        self._by_week.setdefault(iso_week_key(day), set()).add(member_id)

    def is_leading(self, day: date, member_id: str) -> bool:
        return member_id in self._by_week.get(iso_week_key(day), ())

    def leads_in_week(self, day: date) -> Set[str]:
        return set(self._by_week.get(iso_week_key(day), ()))

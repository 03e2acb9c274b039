"""
Data models for the worship rota.
Members serve in role slots of service events; the Roster owns both.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from .roles import normalize_role_key, normalize_role_keys

AVAILABILITY_CHOICES = ("weekdays", "weekends", "both")

STATUS_EMPTY = "empty"
STATUS_PARTIAL = "partial"
STATUS_COMPLETE = "complete"


@dataclass
class Member:
    """A volunteer musician, vocalist or technician."""
    id: str
    name: str
    skills: List[str] = field(default_factory=list)  # canonical role keys
    availability: str = "both"                       # weekdays | weekends | both
    target_count: int = 6
    assigned_count: int = 0                          # recomputed by autofill
    can_sing_and_play: bool = False
    external_user_id: Optional[str] = None
    external_role_ids: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.skills = normalize_role_keys(self.skills)
        self.external_role_ids = {
            normalize_role_key(k): v for k, v in self.external_role_ids.items()
        }
        if self.availability not in AVAILABILITY_CHOICES:
            raise ValueError(
                f"Member {self.name!r}: availability must be one of "
                f"{', '.join(AVAILABILITY_CHOICES)} (got {self.availability!r})")
        if self.target_count < 0:
            raise ValueError(f"Member {self.name!r}: target count must be >= 0")


@dataclass
class RoleSlot:
    """One required role in an event, optionally filled by a member id."""
    id: str
    role: str
    member_id: Optional[str] = None

    def __post_init__(self):
        self.role = normalize_role_key(self.role)

    @property
    def is_filled(self) -> bool:
        return bool(self.member_id)


@dataclass
class ServiceEvent:
    """A service on a given date/time with its ordered role slots."""
    id: str
    name: str
    date: date
    time: str                       # "HH:MM"
    slots: List[RoleSlot] = field(default_factory=list)
    status: str = STATUS_EMPTY
    issues: List[str] = field(default_factory=list)

    @property
    def sort_key(self):
        return (self.date.isoformat(), self.time)

    @property
    def required_roles(self) -> List[str]:
        return [s.role for s in self.slots]

    def roles_held_by(self, member_id: str) -> List[str]:
        return [s.role for s in self.slots if s.member_id == member_id]


@dataclass
class RotaConfig:
    """Roster-wide defaults, overridable from the CONFIG sheet."""
    default_target_count: int = 6
    sunday_default_time: str = "09:00"
    default_time: str = "19:30"
    publish_ministry_id: str = ""
    publish_request_confirmation: bool = True


@dataclass
class Roster:
    """Everything a scheduling session owns."""
    members: List[Member] = field(default_factory=list)
    events: List[ServiceEvent] = field(default_factory=list)
    config: RotaConfig = field(default_factory=RotaConfig)

    def member_by_id(self) -> Dict[str, Member]:
        return {m.id: m for m in self.members}


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------
def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def is_available_on(member: Member, day: date) -> bool:
    if member.availability == "weekends":
        return is_weekend(day)
    if member.availability == "weekdays":
        return not is_weekend(day)
    return True


def has_skill(member: Member, role: str) -> bool:
    return normalize_role_key(role) in member.skills


def iso_week_key(day: date) -> str:
    """ISO-8601 week id, e.g. '2026-W02' (Monday-based, week 1 holds the first Thursday)."""
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def day_label(day: date) -> str:
    """Short label such as 'Sun, Jan 4'."""
    return f"{day.strftime('%a, %b')} {day.day}"


def default_time_for(day: date, config: Optional[RotaConfig] = None) -> str:
    config = config or RotaConfig()
    if day.weekday() == 6:
        return config.sunday_default_time
    return config.default_time

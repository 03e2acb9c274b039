"""Unit tests for role keys and the domain predicates."""
from datetime import date

import pytest

from worship_rota.models import (
    RoleSlot, day_label, default_time_for, has_skill, is_available_on,
    is_weekend, iso_week_key,
)
from worship_rota.roles import (
    ACOUSTIC_GUITAR, LEAD_VOCALIST, SOUND_DESK, is_vocal_role, normalize_role_key,
    normalize_role_keys, role_label,
)
from tests.utils import SUN_JAN_4, THU_JAN_8, SUN_JAN_11, WED_JAN_7, member


class TestRoleKeys:
    """Canonicalization of role keys."""

    def test_trim_and_case_fold(self):
        assert normalize_role_key("  Drums ") == "drums"
        assert normalize_role_key("Lead  Vocalist") == LEAD_VOCALIST
        assert normalize_role_key("acoustic_guitar") == ACOUSTIC_GUITAR

    def test_legacy_aliases_collapse(self):
        assert normalize_role_key("Mesa") == SOUND_DESK
        assert normalize_role_key("mesa de som") == SOUND_DESK
        assert normalize_role_key("Vocalista") == LEAD_VOCALIST
        assert normalize_role_key("Violão") == ACOUSTIC_GUITAR

    def test_unknown_keys_pass_through(self):
        assert normalize_role_key("Trumpet") == "trumpet"
        assert not is_vocal_role("trumpet")

    def test_normalize_list_drops_blanks_and_duplicates(self):
        assert normalize_role_keys(["Drums", " drums", "", "mesa", "Sound Desk"]) == [
            "drums", SOUND_DESK]

    def test_vocal_classification(self):
        assert is_vocal_role("lead-vocalist")
        assert is_vocal_role("Backing")
        assert not is_vocal_role("acoustic-guitar")
        assert not is_vocal_role("drums")

    def test_labels(self):
        assert role_label("mesa") == "Sound Desk"
        assert role_label("trumpet") == "trumpet"


class TestMember:
    """Member construction."""

    def test_skills_are_canonical(self):
        m = member("Ana", ["Vocalista", "Mesa", "vocalist"])
        assert m.skills == [LEAD_VOCALIST, SOUND_DESK]
        assert has_skill(m, "Lead Vocalist")

    def test_invalid_availability(self):
        with pytest.raises(ValueError):
            member("Ana", ["drums"], availability="mornings")

    def test_negative_target(self):
        with pytest.raises(ValueError):
            member("Ana", ["drums"], target=-1)

    def test_slot_role_canonical(self):
        assert RoleSlot(id="s", role="Bateria").role == "drums"


class TestDates:
    """Availability and ISO weeks."""

    def test_weekend(self):
        assert is_weekend(SUN_JAN_4)
        assert is_weekend(date(2026, 1, 3))
        assert not is_weekend(THU_JAN_8)

    def test_availability(self):
        both = member("A", [], availability="both")
        weekends = member("B", [], availability="weekends")
        weekdays = member("C", [], availability="weekdays")
        assert is_available_on(both, SUN_JAN_4) and is_available_on(both, WED_JAN_7)
        assert is_available_on(weekends, SUN_JAN_4)
        assert not is_available_on(weekends, WED_JAN_7)
        assert is_available_on(weekdays, WED_JAN_7)
        assert not is_available_on(weekdays, SUN_JAN_4)

    def test_iso_week_is_monday_based(self):
        # 2026-01-01 is a Thursday, so week 1 runs Mon Dec 29 .. Sun Jan 4
        assert iso_week_key(date(2025, 12, 29)) == "2026-W01"
        assert iso_week_key(SUN_JAN_4) == "2026-W01"
        assert iso_week_key(THU_JAN_8) == "2026-W02"
        assert iso_week_key(SUN_JAN_11) == "2026-W02"

    def test_day_label_and_default_time(self):
        assert day_label(SUN_JAN_4) == "Sun, Jan 4"
        assert default_time_for(SUN_JAN_4) == "09:00"
        assert default_time_for(THU_JAN_8) == "19:30"

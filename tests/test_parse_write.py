"""Workbook and JSON persistence."""
import json

import openpyxl
import pytest

from worship_rota.autofill import autofill
from worship_rota.models import Roster, RotaConfig, STATUS_COMPLETE, STATUS_PARTIAL
from worship_rota.parse_inputs import load_json_roster, load_workbook_roster, roster_from_dict
from worship_rota.roles import ACOUSTIC_GUITAR, DRUMS, LEAD_VOCALIST, SOUND_DESK
from worship_rota.workbook_sheets import MEMBER_HEADERS, setup_all_sheets
from worship_rota.write_schedule import dump_json_roster, roster_to_dict, write_roster
from tests.utils import SUN_JAN_4, THU_JAN_8, event, member


def _sample_roster():
    ana = member("Ana", [LEAD_VOCALIST, ACOUSTIC_GUITAR], external_user_id="u-ana")
    ana.external_role_ids = {ACOUSTIC_GUITAR: "custom-ag"}
    dan = member("Dan", [DRUMS], availability="weekends", target=3)
    events = [
        event(SUN_JAN_4, [LEAD_VOCALIST, ACOUSTIC_GUITAR, DRUMS], name="Sunday Service"),
        event(THU_JAN_8, [DRUMS], time="19:30", name="Rehearsal"),
    ]
    out_events, out_members = autofill([ana, dan], events)
    return Roster(members=out_members, events=out_events,
                  config=RotaConfig(default_target_count=4, publish_ministry_id="min-1"))


class TestSetup:
    """setup_all_sheets()"""

    def test_creates_workbook_with_sheets(self, tmp_path):
        path = tmp_path / "rota.xlsx"
        setup_all_sheets(str(path))
        wb = openpyxl.load_workbook(path)
        for name in ("MEMBERS", "EVENTS", "ASSIGNMENTS", "MEMBER_ROLE_IDS", "CONFIG", "ROLES"):
            assert name in wb.sheetnames
        headers = [c.value for c in wb["MEMBERS"][1]]
        assert headers == MEMBER_HEADERS

    def test_empty_workbook_loads(self, tmp_path):
        path = tmp_path / "rota.xlsx"
        setup_all_sheets(str(path))
        r = load_workbook_roster(path)
        assert r.members == [] and r.events == []
        assert r.config == RotaConfig()

    def test_keeps_existing_member_rows(self, tmp_path):
        path = tmp_path / "rota.xlsx"
        setup_all_sheets(str(path))
        wb = openpyxl.load_workbook(path)
        wb["MEMBERS"].append(["m-1", "Ana", "drums", "both", 2, "N", "", 0])
        wb.save(path)
        setup_all_sheets(str(path))
        assert [m.name for m in load_workbook_roster(path).members] == ["Ana"]


class TestWorkbookLoad:
    """load_workbook_roster()"""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_workbook_roster(tmp_path / "nope.xlsx")

    def test_missing_members_sheet(self, tmp_path):
        path = tmp_path / "bare.xlsx"
        wb = openpyxl.Workbook()
        wb.save(path)
        with pytest.raises(ValueError):
            load_workbook_roster(path)

    def test_hand_entered_rows(self, tmp_path):
        path = tmp_path / "rota.xlsx"
        setup_all_sheets(str(path))
        wb = openpyxl.load_workbook(path)
        wb["MEMBERS"].append(["", "Ana", "Vocalista, violão", "Weekends", None, "yes", "", 99])
        wb["EVENTS"].append(["e-1", "", "2026-01-04", "", "", ""])
        wb["ASSIGNMENTS"].append(["e-1", "s-1", "Mesa", "", ""])
        cfg = wb["CONFIG"]
        for row in range(2, cfg.max_row + 1):
            if cfg.cell(row, 1).value == "default_target_count":
                cfg.cell(row, 2, 2)
        wb.save(path)

        r = load_workbook_roster(path)
        ana = r.members[0]
        assert ana.id
        assert ana.skills == [LEAD_VOCALIST, ACOUSTIC_GUITAR]
        assert ana.availability == "weekends"
        assert ana.target_count == 2
        assert ana.can_sing_and_play
        assert ana.assigned_count == 0
        ev = r.events[0]
        assert ev.name == "Sun, Jan 4"
        assert ev.time == "09:00"
        assert ev.required_roles == [SOUND_DESK]
        assert ev.status == STATUS_PARTIAL


class TestWorkbookRoundTrip:
    """write_roster() then load_workbook_roster()"""

    def test_round_trip(self, tmp_path):
        original = _sample_roster()
        path = tmp_path / "out.xlsx"
        write_roster(original, path)
        loaded = load_workbook_roster(path)

        assert [(m.id, m.name, m.skills, m.availability, m.target_count,
                 m.can_sing_and_play, m.external_user_id, m.assigned_count)
                for m in loaded.members] == \
               [(m.id, m.name, m.skills, m.availability, m.target_count,
                 m.can_sing_and_play, m.external_user_id, m.assigned_count)
                for m in original.members]
        assert loaded.members[0].external_role_ids == {ACOUSTIC_GUITAR: "custom-ag"}
        assert [(e.id, e.name, e.date, e.time) for e in loaded.events] == \
               [(e.id, e.name, e.date, e.time) for e in original.events]
        assert [[(s.id, s.role, s.member_id) for s in e.slots] for e in loaded.events] == \
               [[(s.id, s.role, s.member_id) for s in e.slots] for e in original.events]
        assert loaded.config.publish_ministry_id == "min-1"
        assert loaded.config.default_target_count == 4

    def test_issues_sheet(self, tmp_path):
        path = tmp_path / "out.xlsx"
        write_roster(_sample_roster(), path)
        ws = openpyxl.load_workbook(path)["ISSUES"]
        rows = list(ws.iter_rows(min_row=2, values_only=True))
        assert rows == [
            ("Rehearsal (2026-01-08 19:30)",
             'No eligible member for "Drums" is available on Thu, Jan 8.'),
        ]

    def test_template_config_is_preserved(self, tmp_path):
        template = tmp_path / "template.xlsx"
        setup_all_sheets(str(template))
        wb = openpyxl.load_workbook(template)
        cfg = wb["CONFIG"]
        for row in range(2, cfg.max_row + 1):
            if cfg.cell(row, 1).value == "publish_ministry_id":
                cfg.cell(row, 2, "from-template")
        wb.save(template)

        out = tmp_path / "out.xlsx"
        write_roster(_sample_roster(), out, template_path=template)
        assert load_workbook_roster(out).config.publish_ministry_id == "from-template"

    def test_missing_template(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            write_roster(_sample_roster(), tmp_path / "out.xlsx",
                         template_path=tmp_path / "missing.xlsx")


class TestJson:
    """JSON import / export"""

    def test_legacy_export(self):
        payload = {
            "members": [{
                "id": "m1", "name": "Ana", "instruments": ["Vocalista", "Violão"],
                "targetCount": 4, "assignedCount": 7, "canSingAndPlay": True,
                "louveUserId": "u-ana", "louveFunctionsByInstrument": {"Violão": "fn-1"},
            }],
            "schedules": [
                {"id": "e2", "date": "2026-01-08", "requiredInstruments": ["mesa"]},
                {"id": "e1", "date": "2026-01-04",
                 "assignments": [{"id": "s1", "instrument": "Vocalista", "memberId": "m1"}]},
            ],
        }
        r = roster_from_dict(payload)
        ana = r.members[0]
        assert ana.skills == [LEAD_VOCALIST, ACOUSTIC_GUITAR]
        assert ana.target_count == 4
        assert ana.assigned_count == 1
        assert ana.can_sing_and_play
        assert ana.external_user_id == "u-ana"
        assert ana.external_role_ids == {ACOUSTIC_GUITAR: "fn-1"}

        assert [e.id for e in r.events] == ["e1", "e2"]
        sunday, thursday = r.events
        assert (sunday.name, sunday.time) == ("Sun, Jan 4", "09:00")
        assert (thursday.name, thursday.time) == ("Thu, Jan 8", "19:30")
        assert sunday.status == STATUS_COMPLETE
        assert thursday.required_roles == [SOUND_DESK]
        assert thursday.slots[0].id
        assert thursday.issues == ["1 position(s) unfilled."]

    def test_config_defaults_apply(self):
        payload = {"members": [{"name": "Ana", "skills": ["drums"]}],
                   "events": [{"date": "2026-01-04"}]}
        r = roster_from_dict(payload, RotaConfig(default_target_count=2,
                                                 sunday_default_time="10:30"))
        assert r.members[0].target_count == 2
        assert r.events[0].time == "10:30"

    def test_file_round_trip(self, tmp_path):
        original = _sample_roster()
        path = tmp_path / "rota.json"
        dump_json_roster(original, path)
        with open(path, encoding="utf-8") as f:
            assert json.load(f) == roster_to_dict(original)

        loaded = load_json_roster(path)
        assert [(m.id, m.skills, m.assigned_count) for m in loaded.members] == \
               [(m.id, m.skills, m.assigned_count) for m in original.members]
        assert [[(s.id, s.role, s.member_id) for s in e.slots] for e in loaded.events] == \
               [[(s.id, s.role, s.member_id) for s in e.slots] for e in original.events]

    def test_availability_is_case_folded(self):
        payload = {"members": [{"id": "m1", "name": "Ana", "skills": ["drums"],
                                "availability": "Weekends"},
                               {"id": "m2", "name": "Bob", "skills": ["bass"],
                                "availability": ""}]}
        r = roster_from_dict(payload)
        assert [m.availability for m in r.members] == ["weekends", "both"]

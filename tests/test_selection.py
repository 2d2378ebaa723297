"""
Tests for the per-session attendee selection.
"""

from datetime import datetime, timezone

import pytest

from backend.services.selection import AttendeeSelection, manual_attendee, selection_key

JANE = {"email": "jane.doe@example.com", "display_name": "Jane D."}


@pytest.mark.unit
class TestToggle:

    def test_select_then_deselect(self):
        sel = AttendeeSelection()

        assert sel.toggle("evt1", JANE) is True
        assert list(sel.selected) == [selection_key("evt1", JANE["email"])]

        assert sel.toggle("evt1", JANE) is False
        assert len(sel) == 0

    def test_same_person_in_two_events_is_two_selections(self):
        sel = AttendeeSelection()
        sel.toggle("evt1", JANE)
        sel.toggle("evt2", JANE)
        assert len(sel) == 2

    def test_cached_details_are_not_refetched(self):
        sel = AttendeeSelection()
        sel.remember(JANE["email"], {"first_name": "Jane", "last_name": "Doe"})
        assert sel.toggle("evt1", JANE) is False
        assert len(sel) == 1


@pytest.mark.unit
class TestManualEntry:

    def test_manual_attendee_email(self):
        assert manual_attendee("Mary Ann  Smith") == {
            "email": "mary.ann.smith@manual.entry",
            "display_name": "Mary Ann  Smith",
        }

    def test_add_manual_uses_millisecond_event_id(self):
        sel = AttendeeSelection()
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

        event_id, attendee = sel.add_manual("  Ada Lovelace ", now=now)

        assert event_id == f"manual-{int(now.timestamp() * 1000)}"
        assert attendee["display_name"] == "Ada Lovelace"
        assert sel.research_attendees() == [
            {"name": "Ada Lovelace", "email": "ada.lovelace@manual.entry"},
        ]

    def test_same_name_twice_stays_selected(self):
        sel = AttendeeSelection()
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

        sel.add_manual("Jane Doe", now=now)
        sel.add_manual("Jane Doe", now=now)

        assert len(sel) == 1
        assert sel.research_attendees() == [{"name": "Jane Doe", "email": "jane.doe@manual.entry"}]

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            AttendeeSelection().add_manual("   ")


@pytest.mark.unit
class TestResearchNames:

    def test_enhanced_full_name_wins(self):
        sel = AttendeeSelection()
        sel.toggle("evt1", JANE)
        sel.remember(JANE["email"], {"first_name": "Jane", "last_name": "Doe"})
        assert sel.research_attendees()[0]["name"] == "Jane Doe"

    def test_display_name_when_last_name_missing(self):
        sel = AttendeeSelection()
        sel.toggle("evt1", JANE)
        sel.remember(JANE["email"], {"first_name": "Jane", "last_name": ""})
        assert sel.research_attendees()[0]["name"] == "Jane D."

    def test_local_part_as_last_resort(self):
        sel = AttendeeSelection()
        sel.toggle("evt1", {"email": "ceo@globex.example"})
        assert sel.research_attendees()[0]["name"] == "ceo"

    def test_order_follows_selection(self):
        sel = AttendeeSelection()
        sel.toggle("evt1", {"email": "b@example.com", "display_name": "B"})
        sel.toggle("evt1", {"email": "a@example.com", "display_name": "A"})
        assert [a["name"] for a in sel.research_attendees()] == ["B", "A"]


@pytest.mark.unit
def test_clear_drops_selection_and_job():
    sel = AttendeeSelection()
    sel.toggle("evt1", JANE)
    sel.job_id = "job-1"

    sel.clear()

    assert len(sel) == 0
    assert sel.job_id is None

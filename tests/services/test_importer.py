"""Tests for CSV and iCal meeting import."""

from datetime import date

import pytest

from services.meetings.importer import import_meetings, parse_csv, parse_ical
from services.meetings.store import ScheduledMeetingStore
from utils.errors import SupabaseError, ValidationError

CSV = """name,date,time,location,agenda
Examination Committee,2030-01-15,14:00,Board Room,Results;Appeals
Short,row
,,,Hall B,
"""

ICAL = """BEGIN:VCALENDAR\r
BEGIN:VEVENT\r
SUMMARY:Governing Body\r
DTSTART;TZID=Asia/Karachi:20300210T093000\r
LOCATION:Main Hall\r
END:VEVENT\r
BEGIN:VEVENT\r
SUMMARY:All-day retreat\r
DTSTART;VALUE=DATE:20300301\r
END:VEVENT\r
BEGIN:VEVENT\r
DTSTART:20300401T100000Z\r
END:VEVENT\r
END:VCALENDAR\r
"""


def test_parse_csv_skips_header_and_short_rows() -> None:
    meetings = parse_csv(CSV, "wb-1", today=date(2030, 1, 1))
    assert len(meetings) == 2
    first = meetings[0]
    assert first["workbody_name"] == "Examination Committee"
    assert first["date"] == "2030-01-15"
    assert first["agenda_items"] == ["Results", "Appeals"]


def test_parse_csv_applies_defaults() -> None:
    second = parse_csv(CSV, "wb-1", today=date(2030, 1, 1))[1]
    assert second["workbody_name"] == "Imported Meeting"
    assert second["date"] == "2030-01-01"
    assert second["time"] == "10:00"
    assert second["location"] == "Hall B"
    assert second["agenda_items"] == []


def test_parse_ical_reads_events_with_parameters() -> None:
    meetings = parse_ical(ICAL, "wb-1")
    assert [(m["workbody_name"], m["date"], m["time"], m["location"]) for m in meetings] == [
        ("Governing Body", "2030-02-10", "09:30", "Main Hall"),
        ("All-day retreat", "2030-03-01", "10:00", ""),
    ]


def test_import_meetings_fills_agenda_and_location_and_reports_skips(fake_db) -> None:
    store = ScheduledMeetingStore(fake_db)
    content = CSV + "Examination Committee,2030-01-15,14:00,Board Room,Results\n"
    result = import_meetings(content, "csv", "wb-1", store)
    assert result["imported"] == 2
    assert [s["row"] for s in result["skipped"]] == [3]
    second = result["meetings"][1]
    assert second["agendaItems"] == ["Imported Meeting"]

    ical = import_meetings(ICAL, "ical", "wb-1", store)
    assert ical["imported"] == 2
    assert ical["meetings"][1]["location"] == "TBD"


def test_import_meetings_rejects_unknown_format(fake_db) -> None:
    with pytest.raises(ValidationError):
        import_meetings("", "xlsx", "wb-1", ScheduledMeetingStore(fake_db))


def test_import_meetings_skips_rows_the_database_rejects(fake_db) -> None:
    store = ScheduledMeetingStore(fake_db)
    add_meeting = store.add_meeting

    def flaky_add(meeting, changed_by=None):
        if meeting["time"] == "11:00":
            raise SupabaseError("Failed to insert scheduled_meetings: connection reset")
        return add_meeting(meeting, changed_by=changed_by)

    store.add_meeting = flaky_add
    content = (
        "name,date,time,location,agenda\n"
        "Examination Committee,2030-01-15,11:00,Board Room,Results\n"
        "Examination Committee,2030-01-16,14:00,Board Room,Appeals\n"
    )
    result = import_meetings(content, "csv", "wb-1", store)
    assert result["imported"] == 1
    assert result["skipped"] == [{"row": 1, "errors": ["Failed to insert scheduled_meetings: connection reset"]}]
    assert [r["date"] for r in fake_db.rows("scheduled_meetings")] == ["2030-01-16"]


def test_import_meetings_with_database_down_reports_every_row(fake_db) -> None:
    fake_db.failing_tables.add("scheduled_meetings")
    result = import_meetings(CSV, "csv", "wb-1", ScheduledMeetingStore(fake_db))
    assert result["imported"] == 0
    assert [s["row"] for s in result["skipped"]] == [1, 2]

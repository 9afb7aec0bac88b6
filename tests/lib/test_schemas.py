"""Tests for row-to-view mapping."""

from lib.schemas import ActionItem, MinutesSummary, ScheduledMeeting, Workbody, workbody_code


def test_workbody_code_uses_first_three_initials() -> None:
    assert workbody_code("engineering accreditation board meeting") == "EAB"
    assert workbody_code("Governing Body") == "GB"
    assert workbody_code("") == ""


def test_workbody_from_row_zeroes_null_counters_and_maps_members() -> None:
    row = {
        "id": "wb-1",
        "name": "Examination Committee",
        "type": "committee",
        "total_meetings": None,
        "actions_agreed": 4,
    }
    members = [{"id": "m1", "workbody_id": "wb-1", "name": "A. Khan", "role": "Chair", "has_cv": True}]
    view = Workbody.from_row(row, members).to_view()
    assert view["code"] == "EC"
    assert view["totalMeetings"] == 0
    assert view["actionsAgreed"] == 4
    assert view["members"][0]["hasCV"] is True
    assert view["members"][0]["workbodyId"] == "wb-1"


def test_scheduled_meeting_maps_file_columns_and_trims_seconds() -> None:
    meeting = ScheduledMeeting.from_row(
        {
            "id": "m1",
            "workbody_id": "wb-1",
            "date": "2025-04-01",
            "time": "09:30:00",
            "location": "Hall",
            "agenda_items": None,
            "notification_file_name": "notice.pdf",
        }
    )
    assert meeting.time == "09:30"
    assert meeting.agenda_items == []
    assert meeting.to_view()["notificationFile"] == "notice.pdf"
    assert meeting.to_row()["notification_file_name"] == "notice.pdf"


def test_action_item_coerce_accepts_strings_and_alternate_keys() -> None:
    assert ActionItem.coerce("Circulate draft").task == "Circulate draft"
    item = ActionItem.coerce({"task": "Review", "assignee": "Registrar", "due_date": "2025-05-01"})
    assert (item.owner, item.due_date, item.status) == ("Registrar", "2025-05-01", "pending")
    assert ActionItem.coerce(42) is None


def test_minutes_summary_normalizes_bad_json_columns() -> None:
    summary = MinutesSummary.from_row(
        {
            "meeting_minutes_id": "min-1",
            "decisions": "not a list",
            "action_items": [{"task": "A", "dueDate": "2025-01-01"}, 7],
            "sentiment_score": float("nan"),
            "topics": None,
            "performance_analysis": "oops",
        }
    )
    assert summary.decisions == []
    assert len(summary.action_items) == 1
    assert summary.sentiment_score == 0
    assert summary.topics == []
    assert summary.performance_analysis is None

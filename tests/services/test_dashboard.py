"""Tests for the chairman dashboard aggregation."""

from datetime import date

from lib.schemas import ScheduledMeeting, Workbody
from services.dashboard.chairman import (
    chairman_dashboard,
    completion_rate,
    dashboard_stats,
    filter_workbodies,
    organize_workbodies,
)

TODAY = date(2030, 5, 15)

WORKBODIES = [
    Workbody(id="gb", name="Governing Body", type="committee", meetings_this_year=4, actions_agreed=10, actions_completed=7),
    Workbody(id="wg", name="WG-PECIR Repository", type="working-group", meetings_this_year=2, actions_agreed=3, actions_completed=1),
    Workbody(id="tf", name="Task Force on Media", type="task-force", end_date="2030-05-25"),
]

MEETINGS = [
    ScheduledMeeting(id="old", workbody_id="gb", date="2030-05-01", time="10:00", location="A"),
    ScheduledMeeting(id="today", workbody_id="tf", date="2030-05-15", time="09:00", location="B"),
    ScheduledMeeting(id="next", workbody_id="wg", date="2030-06-01", time="11:00", location="C"),
]


def test_completion_rate_rounds_half_up() -> None:
    assert completion_rate(0, 0) == 0
    assert completion_rate(1, 8) == 13
    assert completion_rate(1, 3) == 33
    assert completion_rate(2, 3) == 67


def test_dashboard_stats() -> None:
    stats = dashboard_stats(WORKBODIES, MEETINGS, TODAY)
    assert stats["totalWorkbodies"] == 3
    assert (stats["committees"], stats["workingGroups"], stats["taskForces"]) == (1, 1, 1)
    assert stats["meetingsThisYear"] == 6
    assert stats["completionRate"] == 62
    assert stats["upcomingMeetingsCount"] == 2
    assert stats["overdueActions"] == 5


def test_filter_by_type_group_or_category() -> None:
    organized = organize_workbodies(WORKBODIES)
    assert [wb.id for wb in filter_workbodies(WORKBODIES, organized, "taskForces")] == ["tf"]
    assert [wb.id for wb in filter_workbodies(WORKBODIES, organized, "executive")] == ["gb"]
    assert [wb.id for wb in filter_workbodies(WORKBODIES, organized, "operations")] == ["wg"]
    assert len(filter_workbodies(WORKBODIES, organized, "everything")) == 3


def test_chairman_dashboard_view() -> None:
    view = chairman_dashboard(WORKBODIES, MEETINGS, today=TODAY, category="corporateAffairs")
    assert [m["id"] for m in view["upcomingMeetings"]] == ["today", "next"]
    assert view["upcomingMeetings"][0]["type"] == "task-force"
    assert [wb["id"] for wb in view["filtered"]] == ["tf"]
    assert view["expiringTaskForces"][0]["daysRemaining"] == 10

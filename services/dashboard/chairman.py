"""Chairman dashboard aggregation."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from lib.config import EXPIRY_WINDOW_DAYS, UPCOMING_MEETINGS_LIMIT
from lib.schemas import ScheduledMeeting, Workbody
from services.workbodies.repository import categorize_workbody, expiring_task_forces
from utils.dates import parse_date

CATEGORIES = ("executive", "regulations", "operations", "corporateAffairs")
TYPE_GROUPS = {
    "committees": "committee",
    "workingGroups": "working-group",
    "taskForces": "task-force",
}


def completion_rate(completed: int, agreed: int) -> int:
    """Whole-number percentage, 0 when nothing has been agreed."""
    if agreed <= 0:
        return 0
    # halves round up
    return int(completed / agreed * 100 + 0.5)


def organize_workbodies(workbodies: List[Workbody]) -> Dict[str, Any]:
    organized: Dict[str, Any] = {
        group: [wb for wb in workbodies if wb.type == wb_type] for group, wb_type in TYPE_GROUPS.items()
    }
    categorized: Dict[str, List[Workbody]] = {category: [] for category in CATEGORIES}
    for wb in workbodies:
        categorized[categorize_workbody(wb)].append(wb)
    organized["categorized"] = categorized
    return organized


def filter_workbodies(
    workbodies: List[Workbody], organized: Dict[str, Any], category: Optional[str]
) -> List[Workbody]:
    """Select a type group or a category; anything else returns every workbody."""
    if category in TYPE_GROUPS:
        return organized[category]
    if category in CATEGORIES:
        return organized["categorized"][category]
    return workbodies


def _upcoming(meetings: List[ScheduledMeeting], today: date) -> List[ScheduledMeeting]:
    upcoming = []
    for meeting in meetings:
        day = parse_date(meeting.date)
        if day is not None and day >= today:
            upcoming.append(meeting)
    return upcoming


def dashboard_stats(
    workbodies: List[Workbody], meetings: List[ScheduledMeeting], today: Optional[date] = None
) -> Dict[str, int]:
    today = today or date.today()
    agreed = sum(wb.actions_agreed for wb in workbodies)
    completed = sum(wb.actions_completed for wb in workbodies)
    return {
        "totalWorkbodies": len(workbodies),
        "committees": sum(1 for wb in workbodies if wb.type == "committee"),
        "workingGroups": sum(1 for wb in workbodies if wb.type == "working-group"),
        "taskForces": sum(1 for wb in workbodies if wb.type == "task-force"),
        "meetingsThisYear": sum(wb.meetings_this_year for wb in workbodies),
        "completionRate": completion_rate(completed, agreed),
        "upcomingMeetingsCount": len(_upcoming(meetings, today)),
        "actionsCompleted": completed,
        "actionsAgreed": agreed,
        "overdueActions": max(0, agreed - completed),
    }


def chairman_dashboard(
    workbodies: List[Workbody],
    meetings: List[ScheduledMeeting],
    today: Optional[date] = None,
    category: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Everything the chairman view shows, computed from already fetched lists.

    ``meetings`` is expected in date order, as the meeting store returns it.
    """
    today = today or date.today()
    organized = organize_workbodies(workbodies)
    types = {wb.id: wb.type for wb in workbodies}
    upcoming = [
        {
            "id": m.id,
            "date": m.date,
            "time": m.time,
            "workbodyName": m.workbody_name,
            "type": types.get(m.workbody_id, "committee"),
        }
        for m in _upcoming(meetings, today)[:UPCOMING_MEETINGS_LIMIT]
    ]
    return {
        "stats": dashboard_stats(workbodies, meetings, today),
        "organized": {
            **{group: [wb.to_view() for wb in organized[group]] for group in TYPE_GROUPS},
            "categorized": {
                cat: [wb.to_view() for wb in items] for cat, items in organized["categorized"].items()
            },
        },
        "filtered": [wb.to_view() for wb in filter_workbodies(workbodies, organized, category)],
        "upcomingMeetings": upcoming,
        "expiringTaskForces": expiring_task_forces(workbodies, today, EXPIRY_WINDOW_DAYS),
    }

"""Tabular report rows and CSV rendering."""
from typing import Any, Dict, List, Sequence

from lib.schemas import Workbody
from services.dashboard.chairman import completion_rate

REPORT_TYPES = ("all", "meetings", "actions", "composition")


def _rate(wb: Workbody) -> str:
    if not wb.actions_agreed:
        return "0%"
    return f"{completion_rate(wb.actions_completed, wb.actions_agreed)}%"


def _all_row(wb: Workbody) -> Dict[str, Any]:
    return {
        "Name": wb.name,
        "Type": wb.type,
        "Created Date": (wb.created_date or "")[:10],
        "End Date": wb.end_date[:10] if wb.end_date else "N/A",
        "Total Meetings": wb.total_meetings,
        "Meetings This Year": wb.meetings_this_year,
        "Actions Agreed": wb.actions_agreed,
        "Actions Completed": wb.actions_completed,
        "Completion Rate": _rate(wb),
    }


def _meetings_row(wb: Workbody) -> Dict[str, Any]:
    return {
        "Workbody": wb.name,
        "Type": wb.type,
        "Total Meetings": wb.total_meetings,
        "Meetings This Year": wb.meetings_this_year,
    }


def _actions_row(wb: Workbody) -> Dict[str, Any]:
    return {
        "Workbody": wb.name,
        "Type": wb.type,
        "Actions Agreed": wb.actions_agreed,
        "Actions Completed": wb.actions_completed,
        "Completion Rate": _rate(wb),
    }


def _composition_rows(wb: Workbody) -> List[Dict[str, Any]]:
    return [
        {
            "Workbody": wb.name,
            "Type": wb.type,
            "Member Name": member.name,
            "Role": member.role,
            "Email": member.email or "N/A",
            "Phone": member.phone or "N/A",
            "Has CV": "Yes" if member.has_cv else "No",
        }
        for member in wb.members
    ]


def generate_report_data(report_type: str, workbodies: List[Workbody]) -> List[Dict[str, Any]]:
    """
    Build report rows for one report type.

    Column names are the labels shown in exported files. An unknown
    ``report_type`` yields no rows.
    """
    if report_type == "all":
        return [_all_row(wb) for wb in workbodies]
    if report_type == "meetings":
        return [_meetings_row(wb) for wb in workbodies]
    if report_type == "actions":
        return [_actions_row(wb) for wb in workbodies]
    if report_type == "composition":
        return [row for wb in workbodies for row in _composition_rows(wb)]
    return []


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str) and ("," in value or '"' in value):
        return '"' + value.replace('"', '""') + '"'
    return str(value)


def generate_csv(rows: List[Dict[str, Any]], headers: Sequence[str]) -> str:
    """Header line plus one line per row; only values holding a comma or quote are quoted."""
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(_csv_value(row.get(header)) for header in headers))
    return "\n".join(lines)

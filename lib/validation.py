"""Validation helpers shared across services and entrypoints."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from lib.schemas import WORKBODY_TYPES, MeetingValidationResult, ScheduledMeeting
from utils.dates import is_valid_date, is_valid_time, normalize_time, parse_date

_LABELS = {
    "workbody_id": "Workbody",
    "workbody_type": "Workbody type",
    "name": "Name",
    "type": "Type",
    "date": "Date",
    "time": "Time",
    "location": "Location",
    "role": "Role",
    "file_url": "File",
    "proposed_end_date": "Proposed end date",
    "justification": "Justification",
}

MAX_PROPOSAL_WORDS = 300


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return False


def require_fields(data: Mapping[str, Any], fields: Iterable[str]) -> List[str]:
    """
    Collect a message for every required field that is missing or blank.

    Args:
        data: Submitted values keyed by snake_case field name.
        fields: Field names that must be present.

    Returns:
        ``"<Label> is required"`` messages in field order; empty when valid.
    """
    return [
        f"{_LABELS.get(field, field.replace('_', ' ').capitalize())} is required"
        for field in fields
        if _blank(data.get(field))
    ]


def validate_workbody(data: Mapping[str, Any]) -> List[str]:
    """Return validation errors for a workbody create/update payload."""
    errors = require_fields(data, ["name", "type"])
    wb_type = data.get("type")
    if wb_type and wb_type not in WORKBODY_TYPES:
        errors.append(f"Type must be one of: {', '.join(WORKBODY_TYPES)}")
    if wb_type == "task-force" and _blank(data.get("end_date")):
        errors.append("End date is required for task forces")
    created = parse_date(data.get("created_date"))
    ended = parse_date(data.get("end_date"))
    if created and ended and ended < created:
        errors.append("End date cannot be before the creation date")
    return errors


def _field(meeting: Any, name: str) -> Any:
    if isinstance(meeting, ScheduledMeeting):
        return getattr(meeting, name)
    return meeting.get(name)


def find_duplicate_meeting(
    meeting: Any, existing: Iterable[ScheduledMeeting]
) -> Optional[ScheduledMeeting]:
    """Linear scan for a meeting of the same workbody on the same date and time."""
    workbody_id = _field(meeting, "workbody_id")
    meeting_date = _field(meeting, "date")
    meeting_time = normalize_time(_field(meeting, "time"))
    own_id = _field(meeting, "id")
    for other in existing:
        if own_id and other.id == own_id:
            continue
        if (
            other.workbody_id == workbody_id
            and other.date == meeting_date
            and normalize_time(other.time) == meeting_time
        ):
            return other
    return None


def validate_meeting_data(
    meeting: Dict[str, Any],
    existing: Iterable[ScheduledMeeting],
    today: Optional[date] = None,
) -> MeetingValidationResult:
    """
    Validate a scheduled meeting before insert or update.

    Errors block the write; warnings are returned to the caller only.
    ``meeting`` uses snake_case keys (``workbody_id``, ``date``, ``time``,
    ``location``, ``agenda_items`` and, for updates, ``id``).
    """
    existing = list(existing)
    today = today or date.today()
    errors = require_fields(meeting, ["workbody_id", "date", "time", "location"])
    warnings: List[str] = []

    agenda = [a for a in meeting.get("agenda_items") or [] if str(a).strip()]
    if not agenda:
        errors.append("At least one agenda item is required")

    meeting_date = meeting.get("date")
    if meeting_date and not is_valid_date(meeting_date):
        errors.append("Date must be in YYYY-MM-DD format")
    meeting_time = meeting.get("time")
    if meeting_time and not is_valid_time(meeting_time):
        errors.append("Time must be in HH:MM format")

    if meeting.get("workbody_id") and meeting_date and meeting_time:
        if find_duplicate_meeting(meeting, existing):
            errors.append("A meeting for this workbody at the same date and time already exists")
        else:
            same_day = [
                m
                for m in existing
                if m.workbody_id == meeting["workbody_id"]
                and m.date == meeting_date
                and m.id != meeting.get("id")
            ]
            if same_day:
                warnings.append(
                    f"This workbody already has {len(same_day)} meeting(s) scheduled on {meeting_date}"
                )

    parsed = parse_date(meeting_date) if is_valid_date(meeting_date) else None
    if parsed and parsed < today:
        warnings.append("Meeting date is in the past")

    return MeetingValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def _word_count(text: str) -> int:
    return len((text or "").split())


def validate_taskforce_proposal(proposal: Mapping[str, Any]) -> List[str]:
    """Return validation errors for a task force proposal (snake_case keys)."""
    errors: List[str] = []
    if len((proposal.get("name") or "").strip()) < 3:
        errors.append("Name must be at least 3 characters")
    if len((proposal.get("proposed_by") or "").strip()) < 2:
        errors.append("Proposed by must be at least 2 characters")
    if _word_count(proposal.get("purpose") or "") > MAX_PROPOSAL_WORDS:
        errors.append(f"Purpose must be {MAX_PROPOSAL_WORDS} words or fewer")
    if _word_count(proposal.get("alignment") or "") > MAX_PROPOSAL_WORDS:
        errors.append(f"Alignment must be {MAX_PROPOSAL_WORDS} words or fewer")
    try:
        months = int(proposal.get("duration_months") or 0)
    except (TypeError, ValueError):
        months = 0
    if months < 1:
        errors.append("Duration must be at least 1 month")
    return errors

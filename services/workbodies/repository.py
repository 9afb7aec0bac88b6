"""Workbody persistence, categorisation and task force lifecycle."""
from __future__ import annotations

import calendar
import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from supabase import Client

from lib.audit import record_audit
from lib.config import EXPIRY_WINDOW_DAYS
from lib.schemas import ExtensionRequest, TaskforceProposal, Workbody
from lib.supabase_client import execute, get_supabase_client
from lib.validation import require_fields, validate_taskforce_proposal, validate_workbody
from utils.dates import parse_date, utc_now_iso
from utils.errors import NotFoundError, SupabaseError, ValidationError

logger = logging.getLogger(__name__)

WORKBODY_FIELDS = (
    "name",
    "type",
    "description",
    "created_date",
    "end_date",
    "terms_of_reference",
    "category",
    "subcategory",
    "parent_id",
)

_CATEGORY_KEYWORDS = {
    "executive": ("governing body", "management committee"),
    "regulations": (
        "examination committee", "ec ",
        "engineering services committee", "esc ",
        "engineering accreditation board", "eab ",
        "engineering practices", "epdc ",
        "cpd policy", "tf-cpd",
        "appeals", "bylaws", "a&bc",
        "quality enhancement", "qec ",
    ),
    "operations": (
        "pec information repository", "wg-pecir",
        "pec administration", "wg-pecadm",
        "central procurement", "cpc ",
        "special initiatives",
    ),
}

EXTENSION_TABLE = "taskforce_extension_requests"
_EXTENSION_TRANSITIONS = {
    "recommended": {"pending"},
    "approved": {"recommended"},
    "rejected": {"pending", "recommended"},
}


def categorize_workbody(workbody: Workbody) -> str:
    """Bucket a workbody into executive / regulations / operations / corporateAffairs by name."""
    name = workbody.name.lower()
    for category, keywords in _CATEGORY_KEYWORDS.items():
        if any(keyword in name for keyword in keywords):
            return category
    return "corporateAffairs"


def list_workbodies(client: Optional[Client] = None) -> List[Workbody]:
    """Fetch workbodies with their members, ordered by name."""
    client = client or get_supabase_client()
    rows = execute(
        client.table("workbodies").select("*").order("name"), "workbodies", "select"
    )
    member_rows = execute(
        client.table("workbody_members").select("*"), "workbody_members", "select"
    )
    members_by_workbody: Dict[str, List[Dict[str, Any]]] = {}
    for member in member_rows:
        members_by_workbody.setdefault(member.get("workbody_id"), []).append(member)
    workbodies = [Workbody.from_row(row, members_by_workbody.get(row["id"], [])) for row in rows]
    return sorted(workbodies, key=lambda wb: wb.name)


def get_workbody_row(workbody_id: str, client: Optional[Client] = None) -> Dict[str, Any]:
    client = client or get_supabase_client()
    rows = execute(
        client.table("workbodies").select("*").eq("id", workbody_id), "workbodies", "select"
    )
    if not rows:
        raise NotFoundError(f"Workbody {workbody_id} not found")
    return rows[0]


def get_workbody(workbody_id: str, client: Optional[Client] = None) -> Workbody:
    client = client or get_supabase_client()
    row = get_workbody_row(workbody_id, client)
    members = execute(
        client.table("workbody_members").select("*").eq("workbody_id", workbody_id),
        "workbody_members",
        "select",
    )
    return Workbody.from_row(row, members)


def _workbody_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: data.get(key) for key in WORKBODY_FIELDS if key in data}


def create_workbody(
    data: Dict[str, Any], changed_by: Optional[str] = None, client: Optional[Client] = None
) -> Workbody:
    """Insert a workbody; counters always start at zero."""
    client = client or get_supabase_client()
    errors = validate_workbody(data)
    if errors:
        raise ValidationError(errors)
    row = _workbody_payload(data)
    row.setdefault("created_date", date.today().isoformat())
    row.update(
        {
            "description": data.get("description") or "",
            "terms_of_reference": data.get("terms_of_reference") or "",
            "total_meetings": 0,
            "meetings_this_year": 0,
            "actions_agreed": 0,
            "actions_completed": 0,
        }
    )
    created = execute(client.table("workbodies").insert(row), "workbodies", "insert")
    if not created:
        raise SupabaseError("Failed to insert workbodies: no row returned")
    saved = created[0]
    record_audit("workbodies", "INSERT", saved.get("id"), after=saved, changed_by=changed_by, client=client)
    logger.info("Created workbody %s (%s)", saved.get("name"), saved.get("id"))
    return Workbody.from_row(saved)


def update_workbody(
    workbody_id: str,
    data: Dict[str, Any],
    changed_by: Optional[str] = None,
    client: Optional[Client] = None,
) -> Workbody:
    client = client or get_supabase_client()
    before = get_workbody_row(workbody_id, client)
    merged = {**before, **_workbody_payload(data)}
    errors = validate_workbody(merged)
    if errors:
        raise ValidationError(errors)
    updates = _workbody_payload(data)
    updated = execute(
        client.table("workbodies").update(updates).eq("id", workbody_id), "workbodies", "update"
    )
    after = updated[0] if updated else merged
    record_audit("workbodies", "UPDATE", workbody_id, before, after, changed_by, client)
    return Workbody.from_row(after)


def delete_workbody(
    workbody_id: str, changed_by: Optional[str] = None, client: Optional[Client] = None
) -> None:
    client = client or get_supabase_client()
    before = get_workbody_row(workbody_id, client)
    execute(client.table("workbodies").delete().eq("id", workbody_id), "workbodies", "delete")
    record_audit("workbodies", "DELETE", workbody_id, before=before, changed_by=changed_by, client=client)
    logger.info("Deleted workbody %s", workbody_id)


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def create_taskforce(
    proposal: TaskforceProposal, changed_by: Optional[str] = None, client: Optional[Client] = None
) -> Workbody:
    """Create a task force workbody from a proposal, then insert its proposed members."""
    client = client or get_supabase_client()
    errors = validate_taskforce_proposal(proposal.model_dump())
    if errors:
        raise ValidationError(errors)
    created_date = parse_date(proposal.created_date) or date.today()
    workbody = create_workbody(
        {
            "name": proposal.name.strip(),
            "type": "task-force",
            "description": proposal.purpose,
            "created_date": created_date.isoformat(),
            "end_date": add_months(created_date, proposal.duration_months).isoformat(),
            "terms_of_reference": proposal.alignment,
        },
        changed_by=changed_by,
        client=client,
    )
    member_rows = [
        {"workbody_id": workbody.id, "name": m.name, "role": m.role, "email": m.email}
        for m in proposal.members
        if m.name.strip()
    ]
    if member_rows:
        execute(client.table("workbody_members").insert(member_rows), "workbody_members", "insert")
    return get_workbody(workbody.id, client)


def expiring_task_forces(
    workbodies: List[Workbody],
    today: Optional[date] = None,
    window_days: int = EXPIRY_WINDOW_DAYS,
) -> List[Dict[str, Any]]:
    """
    Task forces whose end date falls within ``window_days`` of today.

    Returns view dicts with ``daysRemaining`` (rounded up), soonest first.
    """
    today = today or date.today()
    horizon = today + timedelta(days=window_days)
    start_of_day = datetime.combine(today, datetime.min.time())
    expiring = []
    for wb in workbodies:
        if wb.type != "task-force":
            continue
        end = parse_date(wb.end_date)
        if end is None or not today <= end <= horizon:
            continue
        remaining = (datetime.combine(end, datetime.min.time()) - start_of_day).total_seconds() / 86400
        expiring.append(
            {
                "id": wb.id,
                "name": wb.name,
                "endDate": end.isoformat(),
                "daysRemaining": math.ceil(remaining),
            }
        )
    return sorted(expiring, key=lambda item: item["daysRemaining"])


def list_extension_requests(
    status: Optional[str] = None, client: Optional[Client] = None
) -> List[ExtensionRequest]:
    client = client or get_supabase_client()
    query = client.table(EXTENSION_TABLE).select("*").order("created_at", desc=True)
    if status:
        query = query.eq("status", status)
    return [ExtensionRequest.from_row(row) for row in execute(query, EXTENSION_TABLE, "select")]


def create_extension_request(
    data: Dict[str, Any], requested_by: Optional[str] = None, client: Optional[Client] = None
) -> ExtensionRequest:
    """Open a pending extension request for a task force."""
    client = client or get_supabase_client()
    errors = require_fields(data, ["workbody_id", "proposed_end_date", "justification"])
    if errors:
        raise ValidationError(errors)
    workbody = get_workbody(data["workbody_id"], client)
    if workbody.type != "task-force":
        raise ValidationError("Only task forces can be extended")
    proposed = parse_date(data["proposed_end_date"])
    if proposed is None:
        raise ValidationError("Proposed end date must be in YYYY-MM-DD format")
    current = parse_date(workbody.end_date)
    if current and proposed <= current:
        raise ValidationError("Proposed end date must be after the current end date")
    row = {
        "workbody_id": workbody.id,
        "workbody_name": workbody.name,
        "current_end_date": current.isoformat() if current else None,
        "proposed_end_date": proposed.isoformat(),
        "justification": data["justification"].strip(),
        "status": "pending",
        "requested_by": requested_by,
    }
    saved = execute(client.table(EXTENSION_TABLE).insert(row), EXTENSION_TABLE, "insert")
    saved_row = saved[0] if saved else row
    record_audit(EXTENSION_TABLE, "INSERT", saved_row.get("id"), after=saved_row, changed_by=requested_by, client=client)
    return ExtensionRequest.from_row(saved_row)


def _load_request(request_id: str, status: str, client: Client) -> Dict[str, Any]:
    """Fetch a request and check it may move to ``status``."""
    rows = execute(
        client.table(EXTENSION_TABLE).select("*").eq("id", request_id), EXTENSION_TABLE, "select"
    )
    if not rows:
        raise NotFoundError(f"Extension request {request_id} not found")
    current = rows[0].get("status") or "pending"
    if current not in _EXTENSION_TRANSITIONS[status]:
        raise ValidationError(f"Cannot move an extension request from {current} to {status}")
    return rows[0]


def _write_status(
    before: Dict[str, Any], status: str, actor: Optional[str], client: Client
) -> ExtensionRequest:
    request_id = before["id"]
    updates: Dict[str, Any] = {"status": status, "updated_at": utc_now_iso()}
    updates["recommended_by" if status == "recommended" else "decided_by"] = actor
    updated = execute(
        client.table(EXTENSION_TABLE).update(updates).eq("id", request_id), EXTENSION_TABLE, "update"
    )
    after = updated[0] if updated else {**before, **updates}
    record_audit(EXTENSION_TABLE, "UPDATE", request_id, before, after, actor, client)
    return ExtensionRequest.from_row(after)


def _transition(
    request_id: str, status: str, actor: Optional[str], client: Client
) -> ExtensionRequest:
    return _write_status(_load_request(request_id, status, client), status, actor, client)


def recommend_extension(
    request_id: str, actor: Optional[str] = None, client: Optional[Client] = None
) -> ExtensionRequest:
    return _transition(request_id, "recommended", actor, client or get_supabase_client())


def reject_extension(
    request_id: str, actor: Optional[str] = None, client: Optional[Client] = None
) -> ExtensionRequest:
    return _transition(request_id, "rejected", actor, client or get_supabase_client())


def approve_extension(
    request_id: str, actor: Optional[str] = None, client: Optional[Client] = None
) -> ExtensionRequest:
    """
    Approve a recommended request and move the task force end date.

    The end date moves first; if that write fails the request stays
    ``recommended`` and can be approved again.
    """
    client = client or get_supabase_client()
    before = _load_request(request_id, "approved", client)
    update_workbody(
        before["workbody_id"], {"end_date": before["proposed_end_date"]}, changed_by=actor, client=client
    )
    return _write_status(before, "approved", actor, client)

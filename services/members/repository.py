"""Workbody members, composition assignments and composition history."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from lib.audit import record_audit
from lib.schemas import (
    CompositionChange,
    CompositionMember,
    MemberSearchResult,
    WorkbodyMember,
)
from lib.supabase_client import execute, get_supabase_client
from lib.validation import require_fields
from utils.dates import utc_now_iso
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MEMBER_FIELDS = ("name", "role", "email", "phone", "has_cv")
COMPOSITION_STATUSES = ("active", "inactive")
MIN_SEARCH_LENGTH = 2


def add_history_entry(
    workbody_id: str,
    change_type: str,
    change_details: Dict[str, Any],
    changed_by: Optional[str] = None,
    notes: Optional[str] = None,
    source_document: Optional[str] = None,
    client: Optional[Client] = None,
) -> CompositionChange:
    client = client or get_supabase_client()
    row = {
        "workbody_id": workbody_id,
        "change_type": change_type,
        "change_details": change_details,
        "changed_by": changed_by or "system",
        "changed_at": utc_now_iso(),
        "notes": notes,
        "source_document": source_document,
    }
    saved = execute(
        client.table("workbody_composition_history").insert(row),
        "workbody_composition_history",
        "insert",
    )
    return CompositionChange.from_row(saved[0] if saved else row)


def list_history(workbody_id: str, client: Optional[Client] = None) -> List[CompositionChange]:
    """Composition changes for a workbody, newest first."""
    client = client or get_supabase_client()
    rows = execute(
        client.table("workbody_composition_history")
        .select("*")
        .eq("workbody_id", workbody_id)
        .order("changed_at", desc=True),
        "workbody_composition_history",
        "select",
    )
    return [CompositionChange.from_row(row) for row in rows]


def _get_member_row(member_id: str, client: Client) -> Dict[str, Any]:
    rows = execute(
        client.table("workbody_members").select("*").eq("id", member_id), "workbody_members", "select"
    )
    if not rows:
        raise NotFoundError(f"Member {member_id} not found")
    return rows[0]


def list_members(workbody_id: str, client: Optional[Client] = None) -> List[WorkbodyMember]:
    client = client or get_supabase_client()
    rows = execute(
        client.table("workbody_members").select("*").eq("workbody_id", workbody_id).order("name"),
        "workbody_members",
        "select",
    )
    return [WorkbodyMember.from_row(row) for row in rows]


def add_member(
    workbody_id: str,
    data: Dict[str, Any],
    changed_by: Optional[str] = None,
    client: Optional[Client] = None,
) -> WorkbodyMember:
    client = client or get_supabase_client()
    errors = require_fields(data, ["name", "role"])
    if errors:
        raise ValidationError(errors)
    row = {key: data[key] for key in MEMBER_FIELDS if key in data}
    row["workbody_id"] = workbody_id
    if data.get("source_document_id"):
        row["source_document_id"] = data["source_document_id"]
    saved = execute(client.table("workbody_members").insert(row), "workbody_members", "insert")
    member = saved[0] if saved else row
    add_history_entry(
        workbody_id,
        "member_added",
        {"member_id": member.get("id"), "name": member.get("name"), "role": member.get("role")},
        changed_by=changed_by,
        source_document=data.get("source_document_id"),
        client=client,
    )
    record_audit("workbody_members", "INSERT", member.get("id"), after=member, changed_by=changed_by, client=client)
    return WorkbodyMember.from_row(member)


def update_member(
    member_id: str,
    data: Dict[str, Any],
    changed_by: Optional[str] = None,
    client: Optional[Client] = None,
) -> WorkbodyMember:
    client = client or get_supabase_client()
    before = _get_member_row(member_id, client)
    updates = {key: data[key] for key in MEMBER_FIELDS if key in data}
    errors = require_fields({**before, **updates}, ["name", "role"])
    if errors:
        raise ValidationError(errors)
    saved = execute(
        client.table("workbody_members").update(updates).eq("id", member_id),
        "workbody_members",
        "update",
    )
    after = saved[0] if saved else {**before, **updates}
    add_history_entry(
        before.get("workbody_id"),
        "member_updated",
        {"member_id": member_id, "before": {k: before.get(k) for k in updates}, "after": updates},
        changed_by=changed_by,
        client=client,
    )
    record_audit("workbody_members", "UPDATE", member_id, before, after, changed_by, client)
    return WorkbodyMember.from_row(after)


def delete_member(
    member_id: str, changed_by: Optional[str] = None, client: Optional[Client] = None
) -> None:
    client = client or get_supabase_client()
    before = _get_member_row(member_id, client)
    execute(client.table("workbody_members").delete().eq("id", member_id), "workbody_members", "delete")
    add_history_entry(
        before.get("workbody_id"),
        "member_removed",
        {"member_id": member_id, "name": before.get("name"), "role": before.get("role")},
        changed_by=changed_by,
        client=client,
    )
    record_audit("workbody_members", "DELETE", member_id, before=before, changed_by=changed_by, client=client)


def search_members(query: str, client: Optional[Client] = None) -> List[MemberSearchResult]:
    """Case-insensitive search on member name, role or email across all workbodies."""
    query = (query or "").strip()
    if len(query) < MIN_SEARCH_LENGTH:
        return []
    client = client or get_supabase_client()
    # postgrest or-filter syntax; commas and parentheses would split the expression
    term = query.replace(",", " ").replace("(", " ").replace(")", " ")
    rows = execute(
        client.table("workbody_members")
        .select("id, name, role, email, phone, workbody_id")
        .or_(f"name.ilike.%{term}%,role.ilike.%{term}%,email.ilike.%{term}%"),
        "workbody_members",
        "search",
    )
    workbody_ids = sorted({row["workbody_id"] for row in rows if row.get("workbody_id")})
    if not workbody_ids:
        return []
    workbodies = {
        wb["id"]: wb
        for wb in execute(
            client.table("workbodies").select("id, name, type").in_("id", workbody_ids),
            "workbodies",
            "select",
        )
    }
    results = []
    for row in rows:
        workbody = workbodies.get(row.get("workbody_id"))
        if workbody is None:
            continue
        results.append(
            MemberSearchResult(
                id=row["id"],
                name=row.get("name") or "",
                role=row.get("role") or "",
                email=row.get("email"),
                phone=row.get("phone"),
                workbody_id=row.get("workbody_id"),
                workbody_name=workbody.get("name") or "",
                workbody_type=workbody.get("type") or "",
            )
        )
    return results


def list_composition(workbody_id: str, client: Optional[Client] = None) -> List[CompositionMember]:
    """Active composition assignments, oldest assignment first."""
    client = client or get_supabase_client()
    rows = execute(
        client.table("workbody_composition")
        .select("*")
        .eq("workbody_id", workbody_id)
        .eq("status", "active")
        .order("assigned_at"),
        "workbody_composition",
        "select",
    )
    return [CompositionMember.from_row(row) for row in rows]


def add_composition_member(
    workbody_id: str,
    user_id: str,
    role: str,
    assigned_by: Optional[str] = None,
    client: Optional[Client] = None,
) -> CompositionMember:
    client = client or get_supabase_client()
    errors = require_fields({"user_id": user_id, "role": role}, ["user_id", "role"])
    if errors:
        raise ValidationError(errors)
    row = {
        "workbody_id": workbody_id,
        "user_id": user_id,
        "role": role,
        "status": "active",
        "assigned_by": assigned_by,
    }
    saved = execute(client.table("workbody_composition").insert(row), "workbody_composition", "insert")
    saved_row = saved[0] if saved else {**row, "id": ""}
    add_history_entry(
        workbody_id,
        "composition_added",
        {"user_id": user_id, "role": role},
        changed_by=assigned_by,
        client=client,
    )
    return CompositionMember.from_row(saved_row)


def update_composition_member(
    composition_id: str,
    role: Optional[str] = None,
    status: Optional[str] = None,
    changed_by: Optional[str] = None,
    client: Optional[Client] = None,
) -> None:
    """Change role and/or status; only the provided values are written."""
    client = client or get_supabase_client()
    updates: Dict[str, Any] = {}
    if role:
        updates["role"] = role
    if status:
        if status not in COMPOSITION_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(COMPOSITION_STATUSES)}")
        updates["status"] = status
    if not updates:
        raise ValidationError("Nothing to update")
    rows = execute(
        client.table("workbody_composition").update(updates).eq("id", composition_id),
        "workbody_composition",
        "update",
    )
    workbody_id = rows[0].get("workbody_id") if rows else None
    if workbody_id:
        add_history_entry(
            workbody_id,
            "composition_updated",
            {"composition_id": composition_id, **updates},
            changed_by=changed_by,
            client=client,
        )


def remove_composition_member(
    composition_id: str, changed_by: Optional[str] = None, client: Optional[Client] = None
) -> None:
    """Removal marks the assignment inactive so the history stays intact."""
    update_composition_member(composition_id, status="inactive", changed_by=changed_by, client=client)

"""Meeting minutes: listing, upload with workbody counters, deletion and content retrieval."""
from __future__ import annotations

import logging
import re
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

import requests
from supabase import Client

from lib.audit import record_audit
from lib.config import SUPABASE_STORAGE_BUCKET
from lib.documents import fetch_document, pdf_text
from lib.roles import check_minutes_upload
from lib.schemas import MeetingMinutes
from lib.supabase_client import execute, get_supabase_client
from lib.validation import require_fields
from utils.dates import is_valid_date, parse_date, utc_now_iso
from utils.errors import ExtractionError, NotFoundError, SupabaseError, ValidationError

logger = logging.getLogger(__name__)

TABLE = "meeting_minutes"
MINUTES_FOLDER = "meeting-minutes"


def _workbody_names(client: Client, workbody_ids: List[str]) -> Dict[str, str]:
    if not workbody_ids:
        return {}
    rows = execute(
        client.table("workbodies").select("id, name").in_("id", sorted(set(workbody_ids))),
        "workbodies",
        "select",
    )
    return {row["id"]: row.get("name") or "" for row in rows}


def list_minutes(workbody_id: Optional[str] = None, client: Optional[Client] = None) -> List[MeetingMinutes]:
    """Minutes newest first, optionally for one workbody; unknown workbodies show as "Unknown"."""
    client = client or get_supabase_client()
    query = client.table(TABLE).select("*").order("date", desc=True)
    if workbody_id:
        query = query.eq("workbody_id", workbody_id)
    rows = execute(query, TABLE, "select")
    names = _workbody_names(client, [r["workbody_id"] for r in rows if r.get("workbody_id")])
    return [MeetingMinutes.from_row(r, names.get(r.get("workbody_id"), "Unknown")) for r in rows]


def get_minutes_row(minutes_id: str, client: Client) -> Dict[str, Any]:
    rows = execute(client.table(TABLE).select("*").eq("id", minutes_id), TABLE, "select")
    if not rows:
        raise NotFoundError("Meeting minutes not found")
    return rows[0]


def get_minutes(minutes_id: str, client: Optional[Client] = None) -> MeetingMinutes:
    client = client or get_supabase_client()
    row = get_minutes_row(minutes_id, client)
    names = _workbody_names(client, [row["workbody_id"]] if row.get("workbody_id") else [])
    return MeetingMinutes.from_row(row, names.get(row.get("workbody_id"), "Unknown"))


def _store_file(client: Client, filename: str, content: bytes, content_type: Optional[str]) -> str:
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", filename or "minutes")
    path = f"{MINUTES_FOLDER}/{uuid.uuid4().hex}_{safe}"
    bucket = client.storage.from_(SUPABASE_STORAGE_BUCKET)
    try:
        bucket.upload(path, content, {"content-type": content_type or "application/octet-stream"})
        return bucket.get_public_url(path)
    except Exception as exc:
        logger.error("Storage upload failed for %s: %s", path, exc)
        raise SupabaseError(f"Failed to upload minutes file: {exc}") from exc


def _adjust_counters(client: Client, workbody_id: str, meetings: int, this_year: int, actions: int) -> None:
    rows = execute(
        client.table("workbodies")
        .select("total_meetings, meetings_this_year, actions_agreed")
        .eq("id", workbody_id),
        "workbodies",
        "select",
    )
    if not rows:
        logger.warning("Workbody %s not found; counters not updated", workbody_id)
        return
    current = rows[0]
    updates = {
        "total_meetings": max(0, (current.get("total_meetings") or 0) + meetings),
        "meetings_this_year": max(0, (current.get("meetings_this_year") or 0) + this_year),
        "actions_agreed": max(0, (current.get("actions_agreed") or 0) + actions),
    }
    execute(client.table("workbodies").update(updates).eq("id", workbody_id), "workbodies", "update")


def upload_minutes(
    data: Dict[str, Any],
    filename: str,
    content: bytes,
    content_type: Optional[str] = None,
    role: Optional[str] = None,
    user_id: Optional[str] = None,
    user_workbody_id: Optional[str] = None,
    client: Optional[Client] = None,
) -> MeetingMinutes:
    """
    Store a minutes file and its ``meeting_minutes`` row, then bump workbody counters.

    Args:
        data: ``workbody_id``, ``date``, ``location``, ``agenda_items``,
            ``actions_agreed`` and optionally ``agenda_document_url``.
        filename: Original file name.
        content: File bytes.
        role: Caller role; see ``lib.roles.check_minutes_upload``.
        user_workbody_id: Caller's own workbody (secretaries only).
    """
    client = client or get_supabase_client()
    errors = require_fields(data, ["workbody_id", "date", "location"])
    if not content:
        errors.append("File is required")
    if errors:
        raise ValidationError(errors)
    check_minutes_upload(role, user_workbody_id, data["workbody_id"])
    if not is_valid_date(data["date"]):
        raise ValidationError("Date must be in YYYY-MM-DD format")
    meeting_day = parse_date(data["date"])

    file_url = _store_file(client, filename, content, content_type)
    actions = [a.strip() for a in data.get("actions_agreed") or [] if str(a).strip()]
    row = {
        "workbody_id": data["workbody_id"],
        "date": meeting_day.isoformat(),
        "location": data["location"].strip(),
        "agenda_items": [a.strip() for a in data.get("agenda_items") or [] if str(a).strip()],
        "actions_agreed": actions,
        "file_url": file_url,
        "agenda_document_url": data.get("agenda_document_url"),
        "ocr_status": "pending",
        "uploaded_by": user_id,
        "uploaded_at": utc_now_iso(),
    }
    saved = execute(client.table(TABLE).insert(row), TABLE, "insert")
    saved_row = saved[0] if saved else row
    this_year = 1 if meeting_day.year == date.today().year else 0
    _adjust_counters(client, data["workbody_id"], 1, this_year, len(actions))
    record_audit(TABLE, "INSERT", saved_row.get("id"), after=saved_row, changed_by=user_id, client=client)
    logger.info("Uploaded minutes %s for workbody %s", saved_row.get("id"), data["workbody_id"])
    names = _workbody_names(client, [data["workbody_id"]])
    return MeetingMinutes.from_row(
        {"id": "", **saved_row}, names.get(data["workbody_id"], "Unknown")
    )


def delete_minutes(minutes_id: str, changed_by: Optional[str] = None, client: Optional[Client] = None) -> None:
    """Delete a minutes row and roll back the counters it added, never below zero."""
    client = client or get_supabase_client()
    row = get_minutes_row(minutes_id, client)
    execute(client.table(TABLE).delete().eq("id", minutes_id), TABLE, "delete")
    if row.get("workbody_id"):
        meeting_day = parse_date(row.get("date"))
        this_year = 1 if meeting_day and meeting_day.year == date.today().year else 0
        _adjust_counters(
            client, row["workbody_id"], -1, -this_year, -len(row.get("actions_agreed") or [])
        )
    record_audit(TABLE, "DELETE", minutes_id, before=row, changed_by=changed_by, client=client)


def get_minutes_content(minutes_id: str, client: Optional[Client] = None) -> Dict[str, Any]:
    """Minutes metadata plus the stored file's text (PDF text is extracted)."""
    client = client or get_supabase_client()
    row = get_minutes_row(minutes_id, client)
    try:
        data, content_type = fetch_document(row["file_url"])
    except requests.RequestException as exc:
        logger.error("File fetch error for minutes %s: %s", minutes_id, exc)
        raise ExtractionError("Failed to retrieve file content") from exc
    if "application/pdf" in content_type or row["file_url"].lower().split("?")[0].endswith(".pdf"):
        try:
            content = pdf_text(data)
        except Exception as exc:
            raise ExtractionError("Failed to retrieve file content") from exc
    else:
        content = data.decode("utf-8", errors="replace")
    return {
        "meetingId": minutes_id,
        "fileUrl": row["file_url"],
        "content": content,
        "contentType": content_type,
        "agendaItems": row.get("agenda_items") or [],
        "actionsAgreed": row.get("actions_agreed") or [],
        "date": row.get("date"),
        "location": row.get("location"),
    }

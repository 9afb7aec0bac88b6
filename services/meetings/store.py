"""Scheduled meeting store: fetch, validated mutations and refetch-after-write."""
from __future__ import annotations

import logging
import re
import threading
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from supabase import Client

from lib.audit import record_audit
from lib.config import SUPABASE_STORAGE_BUCKET
from lib.schemas import MeetingValidationResult, ScheduledMeeting
from lib.supabase_client import execute, get_supabase_client
from lib.validation import find_duplicate_meeting, validate_meeting_data
from utils.errors import DuplicateMeetingError, NotFoundError, SupabaseError, ValidationError

logger = logging.getLogger(__name__)

TABLE = "scheduled_meetings"

# Fields written only when a truthy value is supplied.
_VALUE_FIELDS = ("workbody_id", "workbody_name", "date", "time", "location", "agenda_items")
# File fields may be cleared by passing None explicitly.
_FILE_FIELDS = {
    "notification_file": "notification_file_name",
    "notification_file_path": "notification_file_path",
    "agenda_file": "agenda_file_name",
    "agenda_file_path": "agenda_file_path",
}

ATTACHMENT_FOLDERS = {
    "notification": "meeting-notifications",
    "agenda": "meeting-agendas",
}


def build_update_payload(updates: Dict[str, Any]) -> Dict[str, Any]:
    """Map provided snake_case view fields to ``scheduled_meetings`` columns."""
    payload: Dict[str, Any] = {}
    for field in _VALUE_FIELDS:
        if updates.get(field):
            payload[field] = updates[field]
    for field, column in _FILE_FIELDS.items():
        if field in updates:
            payload[column] = updates[field]
    return payload


def _safe_name(filename: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", filename or "file")


class ScheduledMeetingStore:
    """
    Holds the last fetched meeting list.

    Every mutation is followed by a full refetch; the list is replaced
    wholesale, so the latest completed fetch wins.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client
        self._lock = threading.Lock()
        self.meetings: List[ScheduledMeeting] = []

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def fetch(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> List[ScheduledMeeting]:
        query = self.client.table(TABLE).select("*")
        if start_date:
            query = query.gte("date", start_date)
        if end_date:
            query = query.lte("date", end_date)
        rows = execute(query.order("date").order("time"), TABLE, "select")
        return [ScheduledMeeting.from_row(row) for row in rows]

    def refetch(self) -> List[ScheduledMeeting]:
        """Replace the held list with every meeting. On failure the previous list is kept."""
        meetings = self.fetch()
        with self._lock:
            self.meetings = meetings
        logger.debug("Fetched %d scheduled meetings", len(meetings))
        return meetings

    def get(self, meeting_id: str) -> ScheduledMeeting:
        rows = execute(self.client.table(TABLE).select("*").eq("id", meeting_id), TABLE, "select")
        if not rows:
            raise NotFoundError(f"Meeting {meeting_id} not found")
        return ScheduledMeeting.from_row(rows[0])

    def _all_meetings(self) -> List[ScheduledMeeting]:
        # duplicate checks must see meetings outside the current date window
        return self.fetch()

    def validate(self, meeting: Dict[str, Any], today: Optional[date] = None) -> MeetingValidationResult:
        return validate_meeting_data(meeting, self._all_meetings(), today=today)

    def add_meeting(self, meeting: Dict[str, Any], changed_by: Optional[str] = None) -> Dict[str, Any]:
        """
        Insert a meeting after validation.

        Returns:
            ``{"meeting": <view>, "warnings": [...]}``

        Raises:
            DuplicateMeetingError: Same workbody, date and time already scheduled.
            ValidationError: Any other blocking validation error.
        """
        existing = self._all_meetings()
        duplicate = find_duplicate_meeting(meeting, existing)
        if duplicate:
            raise DuplicateMeetingError(duplicate.id)
        result = validate_meeting_data(meeting, existing)
        if not result.is_valid:
            raise ValidationError(result.errors, result.warnings)

        record = ScheduledMeeting(
            workbody_id=meeting["workbody_id"],
            workbody_name=meeting.get("workbody_name") or "",
            date=meeting["date"],
            time=meeting["time"],
            location=meeting["location"].strip(),
            agenda_items=[str(a).strip() for a in meeting.get("agenda_items") or [] if str(a).strip()],
            notification_file=meeting.get("notification_file"),
            notification_file_path=meeting.get("notification_file_path"),
            agenda_file=meeting.get("agenda_file"),
            agenda_file_path=meeting.get("agenda_file_path"),
        )
        saved = execute(self.client.table(TABLE).insert(record.to_row()), TABLE, "insert")
        created = ScheduledMeeting.from_row(saved[0]) if saved else record
        record_audit(TABLE, "INSERT", created.id, after=created.to_row(), changed_by=changed_by, client=self.client)
        self.refetch()
        return {"meeting": created.to_view(), "warnings": result.warnings}

    def update_meeting(
        self, meeting_id: str, updates: Dict[str, Any], changed_by: Optional[str] = None
    ) -> Dict[str, Any]:
        before = self.get(meeting_id)
        payload = build_update_payload(updates)
        merged = before.model_dump()
        merged.update({k: updates[k] for k in _VALUE_FIELDS if updates.get(k)})
        merged.update({k: updates[k] for k in _FILE_FIELDS if k in updates})
        merged["id"] = meeting_id
        existing = self._all_meetings()
        duplicate = find_duplicate_meeting(merged, existing)
        if duplicate:
            raise DuplicateMeetingError(duplicate.id)
        result = validate_meeting_data(merged, existing)
        if not result.is_valid:
            raise ValidationError(result.errors, result.warnings)
        if payload:
            execute(self.client.table(TABLE).update(payload).eq("id", meeting_id), TABLE, "update")
            record_audit(TABLE, "UPDATE", meeting_id, before.to_row(), payload, changed_by, self.client)
        self.refetch()
        return {"meeting": self.get(meeting_id).to_view(), "warnings": result.warnings}

    def delete_meeting(self, meeting_id: str, changed_by: Optional[str] = None) -> None:
        before = self.get(meeting_id)
        execute(self.client.table(TABLE).delete().eq("id", meeting_id), TABLE, "delete")
        record_audit(TABLE, "DELETE", meeting_id, before=before.to_row(), changed_by=changed_by, client=self.client)
        self.refetch()

    def upload_attachment(self, kind: str, filename: str, content: bytes, content_type: Optional[str] = None) -> Dict[str, str]:
        """
        Store a notification or agenda file and return its name and public URL.

        The URL is what gets saved in ``*_file_path``.
        """
        folder = ATTACHMENT_FOLDERS.get(kind)
        if folder is None:
            raise ValidationError(f"Unknown attachment type: {kind}")
        path = f"{folder}/{uuid.uuid4().hex}_{_safe_name(filename)}"
        bucket = self.client.storage.from_(SUPABASE_STORAGE_BUCKET)
        try:
            bucket.upload(path, content, {"content-type": content_type or "application/octet-stream"})
            public_url = bucket.get_public_url(path)
        except Exception as exc:
            logger.error("Storage upload failed for %s: %s", path, exc)
            raise SupabaseError(f"Failed to upload {kind} file: {exc}") from exc
        return {"name": filename, "path": public_url}

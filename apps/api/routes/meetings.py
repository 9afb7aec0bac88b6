"""Scheduled meeting endpoints."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from supabase import Client

from apps.api.dependencies import Caller, get_caller, get_client, get_store
from lib.schemas import ApiModel
from services.meetings.importer import import_meetings
from services.meetings.notifications import check_weekly_meetings, create_secretary_alert
from services.meetings.store import ScheduledMeetingStore

router = APIRouter(prefix="/meetings")


class MeetingRequest(ApiModel):
    workbody_id: Optional[str] = None
    workbody_name: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    agenda_items: Optional[List[str]] = None
    notification_file: Optional[str] = None
    notification_file_path: Optional[str] = None
    agenda_file: Optional[str] = None
    agenda_file_path: Optional[str] = None


class ImportRequest(ApiModel):
    content: str
    format: str = "csv"
    workbody_id: str


@router.get("")
def list_meetings(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    store: ScheduledMeetingStore = Depends(get_store),
) -> List[dict]:
    # a date window is per request and never replaces the held list
    if start_date or end_date:
        return [m.to_view() for m in store.fetch(start_date, end_date)]
    return [m.to_view() for m in store.refetch()]


@router.post("", status_code=status.HTTP_201_CREATED)
def add_meeting(
    body: MeetingRequest,
    caller: Caller = Depends(get_caller),
    store: ScheduledMeetingStore = Depends(get_store),
) -> dict:
    return store.add_meeting(body.model_dump(exclude_unset=True), changed_by=caller.user_id)


@router.post("/validate")
def validate_meeting(body: MeetingRequest, store: ScheduledMeetingStore = Depends(get_store)) -> dict:
    return store.validate(body.model_dump(exclude_unset=True)).to_view()


@router.post("/import")
def import_file(
    body: ImportRequest,
    caller: Caller = Depends(get_caller),
    store: ScheduledMeetingStore = Depends(get_store),
) -> dict:
    return import_meetings(body.content, body.format, body.workbody_id, store, changed_by=caller.user_id)


@router.get("/notifications")
def weekly_notifications(store: ScheduledMeetingStore = Depends(get_store)) -> dict:
    weekly = check_weekly_meetings(store.refetch())
    return {
        "thisWeek": [m.to_view() for m in weekly["this_week"]],
        "needingMinutes": [m.to_view() for m in weekly["needing_minutes"]],
    }


@router.post("/{meeting_id}/secretary-alert")
def secretary_alert(
    meeting_id: str,
    store: ScheduledMeetingStore = Depends(get_store),
    client: Client = Depends(get_client),
) -> dict:
    return {"created": create_secretary_alert(store.get(meeting_id), client)}


@router.post("/attachments/{kind}")
async def upload_attachment(
    kind: str,
    file: UploadFile = File(...),
    store: ScheduledMeetingStore = Depends(get_store),
) -> dict:
    content = await file.read()
    return store.upload_attachment(kind, file.filename or "file", content, file.content_type)


@router.get("/{meeting_id}")
def get_meeting(meeting_id: str, store: ScheduledMeetingStore = Depends(get_store)) -> dict:
    return store.get(meeting_id).to_view()


@router.patch("/{meeting_id}")
def update_meeting(
    meeting_id: str,
    body: MeetingRequest,
    caller: Caller = Depends(get_caller),
    store: ScheduledMeetingStore = Depends(get_store),
) -> dict:
    return store.update_meeting(meeting_id, body.model_dump(exclude_unset=True), changed_by=caller.user_id)


@router.delete("/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meeting(
    meeting_id: str,
    caller: Caller = Depends(get_caller),
    store: ScheduledMeetingStore = Depends(get_store),
) -> None:
    store.delete_meeting(meeting_id, changed_by=caller.user_id)

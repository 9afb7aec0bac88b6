"""Meeting minutes endpoints."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from supabase import Client

from apps.api.dependencies import Caller, get_caller, get_client
from services.minutes import repository as minutes

router = APIRouter(prefix="/minutes")


@router.get("")
def list_minutes(
    workbody_id: Optional[str] = Query(default=None, alias="workbodyId"),
    client: Client = Depends(get_client),
) -> List[dict]:
    return [m.to_view() for m in minutes.list_minutes(workbody_id, client)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_minutes(
    file: UploadFile = File(...),
    workbody_id: str = Form(default="", alias="workbodyId"),
    date: str = Form(default=""),
    location: str = Form(default=""),
    agenda_items: List[str] = Form(default=[], alias="agendaItems"),
    actions_agreed: List[str] = Form(default=[], alias="actionsAgreed"),
    agenda_document_url: Optional[str] = Form(default=None, alias="agendaDocumentUrl"),
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    """Multipart upload; list fields repeat once per item."""
    content = await file.read()
    data = {
        "workbody_id": workbody_id,
        "date": date,
        "location": location,
        "agenda_items": agenda_items,
        "actions_agreed": actions_agreed,
        "agenda_document_url": agenda_document_url,
    }
    saved = minutes.upload_minutes(
        data,
        file.filename or "minutes",
        content,
        content_type=file.content_type,
        role=caller.role,
        user_id=caller.user_id,
        user_workbody_id=caller.workbody_id,
        client=client,
    )
    return saved.to_view()


@router.get("/{minutes_id}")
def get_minutes(minutes_id: str, client: Client = Depends(get_client)) -> dict:
    return minutes.get_minutes(minutes_id, client).to_view()


@router.get("/{minutes_id}/content")
def get_minutes_content(minutes_id: str, client: Client = Depends(get_client)) -> dict:
    return minutes.get_minutes_content(minutes_id, client)


@router.delete("/{minutes_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_minutes(
    minutes_id: str, caller: Caller = Depends(get_caller), client: Client = Depends(get_client)
) -> None:
    minutes.delete_minutes(minutes_id, changed_by=caller.user_id, client=client)

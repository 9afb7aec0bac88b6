"""Request-scoped dependencies shared by the API routers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request
from supabase import Client

from lib.supabase_client import get_supabase_client
from services.meetings.store import ScheduledMeetingStore


@dataclass
class Caller:
    """Identity forwarded by the front end; authentication happens upstream."""

    role: Optional[str] = None
    user_id: Optional[str] = None
    workbody_id: Optional[str] = None


def get_caller(
    x_user_role: Optional[str] = Header(default=None),
    x_user_id: Optional[str] = Header(default=None),
    x_user_workbody: Optional[str] = Header(default=None),
) -> Caller:
    return Caller(role=x_user_role, user_id=x_user_id, workbody_id=x_user_workbody)


def get_client() -> Client:
    return get_supabase_client()


def get_store(request: Request, client: Client = Depends(get_client)) -> ScheduledMeetingStore:
    """The app-wide store kept fresh by realtime, or a per-request one when none is running."""
    store = getattr(request.app.state, "meeting_store", None)
    if store is None:
        store = ScheduledMeetingStore(client)
    return store

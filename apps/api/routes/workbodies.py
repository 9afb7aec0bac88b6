"""Workbodies, members, composition and task-force extension endpoints."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from supabase import Client

from apps.api.dependencies import Caller, get_caller, get_client
from lib.roles import (
    EXTENSION_APPROVE_ROLES,
    EXTENSION_CREATE_ROLES,
    EXTENSION_RECOMMEND_ROLES,
    require_role,
)
from lib.schemas import ApiModel, TaskforceProposal
from services.members import repository as members
from services.members.extraction import extract_members_from_document
from services.workbodies import repository as workbodies

router = APIRouter()


class WorkbodyRequest(ApiModel):
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    created_date: Optional[str] = None
    end_date: Optional[str] = None
    terms_of_reference: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    parent_id: Optional[str] = None


class MemberRequest(ApiModel):
    name: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    has_cv: Optional[bool] = None


class CompositionRequest(ApiModel):
    user_id: str
    role: str


class CompositionUpdate(ApiModel):
    role: Optional[str] = None
    status: Optional[str] = None


class ExtensionCreate(ApiModel):
    workbody_id: Optional[str] = None
    proposed_end_date: Optional[str] = None
    justification: Optional[str] = None


@router.get("/workbodies")
def list_workbodies(client: Client = Depends(get_client)) -> List[dict]:
    return [wb.to_view() for wb in workbodies.list_workbodies(client)]


@router.post("/workbodies", status_code=status.HTTP_201_CREATED)
def create_workbody(
    body: WorkbodyRequest,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    data = body.model_dump(exclude_unset=True)
    return workbodies.create_workbody(data, changed_by=caller.user_id, client=client).to_view()


@router.post("/workbodies/taskforce", status_code=status.HTTP_201_CREATED)
def create_taskforce(
    proposal: TaskforceProposal,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    return workbodies.create_taskforce(proposal, changed_by=caller.user_id, client=client).to_view()


@router.get("/workbodies/expiring")
def expiring(client: Client = Depends(get_client)) -> List[dict]:
    return workbodies.expiring_task_forces(workbodies.list_workbodies(client))


@router.get("/workbodies/{workbody_id}")
def get_workbody(workbody_id: str, client: Client = Depends(get_client)) -> dict:
    return workbodies.get_workbody(workbody_id, client).to_view()


@router.patch("/workbodies/{workbody_id}")
def update_workbody(
    workbody_id: str,
    body: WorkbodyRequest,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    data = body.model_dump(exclude_unset=True)
    return workbodies.update_workbody(workbody_id, data, changed_by=caller.user_id, client=client).to_view()


@router.delete("/workbodies/{workbody_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workbody(
    workbody_id: str, caller: Caller = Depends(get_caller), client: Client = Depends(get_client)
) -> None:
    workbodies.delete_workbody(workbody_id, changed_by=caller.user_id, client=client)


# Members

@router.get("/workbodies/{workbody_id}/members")
def list_members(workbody_id: str, client: Client = Depends(get_client)) -> List[dict]:
    return [m.to_view() for m in members.list_members(workbody_id, client)]


@router.post("/workbodies/{workbody_id}/members", status_code=status.HTTP_201_CREATED)
def add_member(
    workbody_id: str,
    body: MemberRequest,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    data = body.model_dump(exclude_unset=True)
    return members.add_member(workbody_id, data, changed_by=caller.user_id, client=client).to_view()


@router.patch("/members/{member_id}")
def update_member(
    member_id: str,
    body: MemberRequest,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    data = body.model_dump(exclude_unset=True)
    return members.update_member(member_id, data, changed_by=caller.user_id, client=client).to_view()


@router.delete("/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: str, caller: Caller = Depends(get_caller), client: Client = Depends(get_client)
) -> None:
    members.delete_member(member_id, changed_by=caller.user_id, client=client)


@router.get("/members/search")
def search_members(q: str = Query(default=""), client: Client = Depends(get_client)) -> List[dict]:
    return [m.to_view() for m in members.search_members(q, client)]


@router.post("/workbodies/{workbody_id}/documents/{document_id}/extract-members")
def extract_members(
    workbody_id: str,
    document_id: str,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    extracted = extract_members_from_document(
        document_id, workbody_id, changed_by=caller.user_id, client=client
    )
    return {"members": [m.to_view() for m in extracted], "count": len(extracted)}


# Composition and history

@router.get("/workbodies/{workbody_id}/composition")
def list_composition(workbody_id: str, client: Client = Depends(get_client)) -> List[dict]:
    return [c.to_view() for c in members.list_composition(workbody_id, client)]


@router.post("/workbodies/{workbody_id}/composition", status_code=status.HTTP_201_CREATED)
def add_composition_member(
    workbody_id: str,
    body: CompositionRequest,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    return members.add_composition_member(
        workbody_id, body.user_id, body.role, assigned_by=caller.user_id, client=client
    ).to_view()


@router.patch("/composition/{composition_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_composition_member(
    composition_id: str,
    body: CompositionUpdate,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> None:
    members.update_composition_member(
        composition_id, role=body.role, status=body.status, changed_by=caller.user_id, client=client
    )


@router.delete("/composition/{composition_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_composition_member(
    composition_id: str, caller: Caller = Depends(get_caller), client: Client = Depends(get_client)
) -> None:
    members.remove_composition_member(composition_id, changed_by=caller.user_id, client=client)


@router.get("/workbodies/{workbody_id}/history")
def composition_history(workbody_id: str, client: Client = Depends(get_client)) -> List[dict]:
    return [h.to_view() for h in members.list_history(workbody_id, client)]


# Task-force extensions

@router.get("/extensions")
def list_extensions(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    client: Client = Depends(get_client),
) -> List[dict]:
    return [r.to_view() for r in workbodies.list_extension_requests(status_filter, client)]


@router.post("/extensions", status_code=status.HTTP_201_CREATED)
def create_extension(
    body: ExtensionCreate,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
) -> dict:
    require_role(caller.role, EXTENSION_CREATE_ROLES, "request task force extensions")
    data = body.model_dump(exclude_unset=True)
    return workbodies.create_extension_request(data, requested_by=caller.user_id, client=client).to_view()


@router.post("/extensions/{request_id}/recommend")
def recommend_extension(
    request_id: str, caller: Caller = Depends(get_caller), client: Client = Depends(get_client)
) -> dict:
    require_role(caller.role, EXTENSION_RECOMMEND_ROLES, "recommend task force extensions")
    return workbodies.recommend_extension(request_id, caller.user_id, client).to_view()


@router.post("/extensions/{request_id}/approve")
def approve_extension(
    request_id: str, caller: Caller = Depends(get_caller), client: Client = Depends(get_client)
) -> dict:
    require_role(caller.role, EXTENSION_APPROVE_ROLES, "approve task force extensions")
    return workbodies.approve_extension(request_id, caller.user_id, client).to_view()


@router.post("/extensions/{request_id}/reject")
def reject_extension(
    request_id: str, caller: Caller = Depends(get_caller), client: Client = Depends(get_client)
) -> dict:
    require_role(
        caller.role,
        tuple(set(EXTENSION_RECOMMEND_ROLES) | set(EXTENSION_APPROVE_ROLES)),
        "reject task force extensions",
    )
    return workbodies.reject_extension(request_id, caller.user_id, client).to_view()

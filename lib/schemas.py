"""Pydantic records for PEC Pulse tables and the camelCase views built from them.

Rows come back from Supabase in snake_case. Every model here is populated
from a row with ``from_row`` and serialised for API callers with
``to_view`` (camelCase keys). Models that are written back provide
``to_row``.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from utils.dates import normalize_time

WorkbodyType = Literal["committee", "working-group", "task-force"]
WORKBODY_TYPES = ("committee", "working-group", "task-force")

MetricName = Literal[
    "attendance_rate",
    "action_item_completion",
    "doc_submission_timeliness",
    "deliverable_quality_score",
    "average_decision_turnaround",
    "meetings_held",
    "member_turnover",
    "recommendations_issued",
    "cross_workbody_collaborations",
]

ExtensionStatus = Literal["pending", "recommended", "approved", "rejected"]


class ApiModel(BaseModel):
    """Base model: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_view(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, list) else []


def workbody_code(name: str) -> str:
    """Initials of the first three words of a workbody name, upper-cased."""
    words = [w for w in re.split(r"\s+", name or "") if w]
    return "".join(w[0] for w in words[:3]).upper()


class WorkbodyMember(ApiModel):
    id: Optional[str] = None
    workbody_id: Optional[str] = None
    name: str
    role: str
    email: Optional[str] = None
    phone: Optional[str] = None
    has_cv: bool = Field(default=False, alias="hasCV")
    source_document_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "WorkbodyMember":
        return cls(
            id=row.get("id"),
            workbody_id=row.get("workbody_id"),
            name=row.get("name") or "",
            role=row.get("role") or "",
            email=row.get("email"),
            phone=row.get("phone"),
            has_cv=bool(row.get("has_cv")),
            source_document_id=row.get("source_document_id"),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "workbody_id": self.workbody_id,
            "name": self.name,
            "role": self.role,
            "email": self.email,
            "phone": self.phone,
            "has_cv": self.has_cv,
            "source_document_id": self.source_document_id,
        }


class Workbody(ApiModel):
    id: str
    code: str = ""
    name: str
    type: WorkbodyType
    description: Optional[str] = None
    created_date: Optional[str] = None
    end_date: Optional[str] = None
    terms_of_reference: Optional[str] = None
    total_meetings: int = 0
    meetings_this_year: int = 0
    actions_agreed: int = 0
    actions_completed: int = 0
    category: Optional[str] = None
    subcategory: Optional[str] = None
    parent_id: Optional[str] = None
    members: List[WorkbodyMember] = Field(default_factory=list)

    @classmethod
    def from_row(
        cls, row: Dict[str, Any], members: Optional[List[Dict[str, Any]]] = None
    ) -> "Workbody":
        return cls(
            id=row["id"],
            code=workbody_code(row.get("name") or ""),
            name=row.get("name") or "",
            type=row.get("type") or "committee",
            description=row.get("description"),
            created_date=row.get("created_date"),
            end_date=row.get("end_date"),
            terms_of_reference=row.get("terms_of_reference"),
            total_meetings=_as_int(row.get("total_meetings")),
            meetings_this_year=_as_int(row.get("meetings_this_year")),
            actions_agreed=_as_int(row.get("actions_agreed")),
            actions_completed=_as_int(row.get("actions_completed")),
            category=row.get("category"),
            subcategory=row.get("subcategory"),
            parent_id=row.get("parent_id"),
            members=[WorkbodyMember.from_row(m) for m in members or []],
        )


class ScheduledMeeting(ApiModel):
    id: Optional[str] = None
    workbody_id: str
    workbody_name: str = ""
    date: str
    time: str
    location: str
    agenda_items: List[str] = Field(default_factory=list)
    notification_file: Optional[str] = None
    notification_file_path: Optional[str] = None
    agenda_file: Optional[str] = None
    agenda_file_path: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ScheduledMeeting":
        return cls(
            id=row.get("id"),
            workbody_id=row.get("workbody_id") or "",
            workbody_name=row.get("workbody_name") or "",
            date=row.get("date") or "",
            time=normalize_time(row.get("time")),
            location=row.get("location") or "",
            agenda_items=_as_list(row.get("agenda_items")),
            notification_file=row.get("notification_file_name"),
            notification_file_path=row.get("notification_file_path"),
            agenda_file=row.get("agenda_file_name"),
            agenda_file_path=row.get("agenda_file_path"),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "workbody_id": self.workbody_id,
            "workbody_name": self.workbody_name,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "agenda_items": self.agenda_items,
            "notification_file_name": self.notification_file,
            "notification_file_path": self.notification_file_path,
            "agenda_file_name": self.agenda_file,
            "agenda_file_path": self.agenda_file_path,
        }


class MeetingMinutes(ApiModel):
    id: str
    workbody_id: Optional[str] = None
    workbody_name: str = ""
    date: str
    location: str = ""
    agenda_items: List[str] = Field(default_factory=list)
    actions_agreed: List[str] = Field(default_factory=list)
    file_url: str = ""
    agenda_document_url: Optional[str] = None
    ocr_text: Optional[str] = None
    ocr_status: Optional[str] = None
    uploaded_at: Optional[str] = None
    uploaded_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any], workbody_name: str = "") -> "MeetingMinutes":
        return cls(
            id=row["id"],
            workbody_id=row.get("workbody_id"),
            workbody_name=workbody_name,
            date=row.get("date") or "",
            location=row.get("location") or "",
            agenda_items=_as_list(row.get("agenda_items")),
            actions_agreed=_as_list(row.get("actions_agreed")),
            file_url=row.get("file_url") or "",
            agenda_document_url=row.get("agenda_document_url"),
            ocr_text=row.get("ocr_text"),
            ocr_status=row.get("ocr_status"),
            uploaded_at=row.get("uploaded_at"),
            uploaded_by=row.get("uploaded_by"),
        )


class ActionItem(ApiModel):
    task: str = ""
    owner: str = ""
    due_date: str = ""
    status: str = "pending"

    @classmethod
    def coerce(cls, item: Any) -> Optional["ActionItem"]:
        if isinstance(item, ActionItem):
            return item
        if isinstance(item, str):
            return cls(task=item)
        if not isinstance(item, dict):
            return None
        return cls(
            task=str(item.get("task") or ""),
            owner=str(item.get("owner") or item.get("assignee") or ""),
            due_date=str(item.get("dueDate") or item.get("due_date") or ""),
            status=str(item.get("status") or "pending"),
        )


class MinutesSummary(ApiModel):
    id: Optional[str] = None
    meeting_minutes_id: str
    summary_text: str = ""
    decisions: List[str] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)
    sentiment_score: float = 0
    topics: List[str] = Field(default_factory=list)
    performance_analysis: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MinutesSummary":
        items = [ActionItem.coerce(i) for i in _as_list(row.get("action_items"))]
        sentiment = row.get("sentiment_score")
        try:
            sentiment = float(sentiment) if sentiment is not None else 0
        except (TypeError, ValueError):
            sentiment = 0
        if isinstance(sentiment, float) and math.isnan(sentiment):
            sentiment = 0
        analysis = row.get("performance_analysis")
        return cls(
            id=row.get("id"),
            meeting_minutes_id=row.get("meeting_minutes_id") or "",
            summary_text=row.get("summary_text") or "",
            decisions=[str(d) for d in _as_list(row.get("decisions"))],
            action_items=[i for i in items if i is not None],
            sentiment_score=sentiment,
            topics=[str(t) for t in _as_list(row.get("topics"))],
            performance_analysis=analysis if isinstance(analysis, dict) else None,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class PerformanceTarget(ApiModel):
    id: Optional[str] = None
    metric_name: MetricName
    target_value: float
    warning_threshold: float
    danger_threshold: float

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PerformanceTarget":
        return cls(
            id=row.get("id"),
            metric_name=row["metric_name"],
            target_value=row.get("target_value") or 0,
            warning_threshold=row.get("warning_threshold") or 0,
            danger_threshold=row.get("danger_threshold") or 0,
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "metric_name": self.metric_name,
            "target_value": self.target_value,
            "warning_threshold": self.warning_threshold,
            "danger_threshold": self.danger_threshold,
        }


class MetricStatus(ApiModel):
    value: float
    status: Literal["good", "warning", "danger"]
    trend: Literal["up", "down", "stable"] = "stable"


class CompositionMember(ApiModel):
    id: str
    workbody_id: Optional[str] = None
    user_id: Optional[str] = None
    role: str
    status: str = "active"
    assigned_at: Optional[str] = None
    assigned_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CompositionMember":
        return cls(
            id=row["id"],
            workbody_id=row.get("workbody_id"),
            user_id=row.get("user_id"),
            role=row.get("role") or "",
            status=row.get("status") or "active",
            assigned_at=row.get("assigned_at"),
            assigned_by=row.get("assigned_by"),
        )


class CompositionChange(ApiModel):
    id: Optional[str] = None
    workbody_id: Optional[str] = None
    change_type: str
    change_details: Dict[str, Any] = Field(default_factory=dict)
    changed_by: str = ""
    changed_at: Optional[str] = None
    notes: Optional[str] = None
    source_document: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CompositionChange":
        details = row.get("change_details")
        return cls(
            id=row.get("id"),
            workbody_id=row.get("workbody_id"),
            change_type=row.get("change_type") or "",
            change_details=details if isinstance(details, dict) else {},
            changed_by=row.get("changed_by") or "",
            changed_at=row.get("changed_at"),
            notes=row.get("notes"),
            source_document=row.get("source_document"),
        )


class MemberSearchResult(ApiModel):
    id: str
    name: str
    role: str
    email: Optional[str] = None
    phone: Optional[str] = None
    workbody_id: Optional[str] = None
    workbody_name: str = ""
    workbody_type: str = ""


class ReportHistoryItem(ApiModel):
    id: Optional[str] = None
    name: str
    type: str
    format: str
    workbody_type: str = "all"
    workbody_name: Optional[str] = None
    generated_by: str = ""
    created_at: Optional[str] = None
    download_url: Optional[str] = None
    file_size: Optional[int] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ReportHistoryItem":
        params = row.get("parameters")
        return cls(
            id=row.get("id"),
            name=row.get("name") or "",
            type=row.get("type") or "",
            format=row.get("format") or "",
            workbody_type=row.get("workbody_type") or "all",
            workbody_name=row.get("workbody_name"),
            generated_by=row.get("generated_by") or "",
            created_at=row.get("created_at"),
            download_url=row.get("download_url"),
            file_size=row.get("file_size"),
            parameters=params if isinstance(params, dict) else {},
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "format": self.format,
            "workbody_type": self.workbody_type,
            "workbody_name": self.workbody_name,
            "generated_by": self.generated_by,
            "download_url": self.download_url,
            "file_size": self.file_size,
            "parameters": self.parameters,
        }


class ProposedMember(ApiModel):
    name: str
    role: str
    email: Optional[str] = None


class TaskforceProposal(ApiModel):
    name: str
    proposed_by: str
    purpose: str = ""
    alignment: str = ""
    duration_months: int = 0
    created_date: Optional[str] = None
    members: List[ProposedMember] = Field(default_factory=list)


class ExtensionRequest(ApiModel):
    id: Optional[str] = None
    workbody_id: str
    workbody_name: str = ""
    current_end_date: Optional[str] = None
    proposed_end_date: str
    justification: str
    status: ExtensionStatus = "pending"
    requested_by: Optional[str] = None
    recommended_by: Optional[str] = None
    decided_by: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ExtensionRequest":
        return cls(
            id=row.get("id"),
            workbody_id=row.get("workbody_id") or "",
            workbody_name=row.get("workbody_name") or "",
            current_end_date=row.get("current_end_date"),
            proposed_end_date=row.get("proposed_end_date") or "",
            justification=row.get("justification") or "",
            status=row.get("status") or "pending",
            requested_by=row.get("requested_by"),
            recommended_by=row.get("recommended_by"),
            decided_by=row.get("decided_by"),
            created_at=row.get("created_at"),
        )


class MeetingValidationResult(ApiModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

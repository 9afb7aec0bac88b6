"""Workbody performance metrics labelled against configurable targets."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import Field
from supabase import Client

from lib.schemas import MetricStatus, PerformanceTarget, Workbody
from lib.supabase_client import execute, get_supabase_client
from utils.dates import utc_now_iso
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

METRICS = (
    "attendance_rate",
    "action_item_completion",
    "doc_submission_timeliness",
    "deliverable_quality_score",
    "average_decision_turnaround",
    "meetings_held",
    "member_turnover",
    "recommendations_issued",
    "cross_workbody_collaborations",
)
LOWER_IS_BETTER = {"average_decision_turnaround"}
TARGETS_TABLE = "performance_targets"
HISTORY_TABLE = "workbody_performance_history"


class WorkbodyPerformance(Workbody):
    performance_metrics: Dict[str, MetricStatus] = Field(default_factory=dict)


def metric_status(value: float, metric: str, targets: Iterable[PerformanceTarget]) -> MetricStatus:
    """
    Label one metric value.

    No target means ``good``. Turnaround is lower-is-better (at or above a
    threshold trips it); every other metric trips when below a threshold.
    """
    target = next((t for t in targets if t.metric_name == metric), None)
    status = "good"
    if target is not None:
        if metric in LOWER_IS_BETTER:
            if value >= target.danger_threshold:
                status = "danger"
            elif value >= target.warning_threshold:
                status = "warning"
        else:
            if value < target.danger_threshold:
                status = "danger"
            elif value < target.warning_threshold:
                status = "warning"
    return MetricStatus(value=value, status=status, trend="stable")


def build_performance(
    rows: List[Dict[str, Any]],
    members_by_workbody: Dict[str, List[Dict[str, Any]]],
    targets: List[PerformanceTarget],
) -> List[WorkbodyPerformance]:
    performance = []
    for row in rows:
        base = Workbody.from_row(row, members_by_workbody.get(row["id"], []))
        metrics = {m: metric_status(float(row.get(m) or 0), m, targets) for m in METRICS}
        performance.append(WorkbodyPerformance(**base.model_dump(), performance_metrics=metrics))
    return performance


def list_targets(client: Optional[Client] = None) -> List[PerformanceTarget]:
    client = client or get_supabase_client()
    rows = execute(client.table(TARGETS_TABLE).select("*").order("metric_name"), TARGETS_TABLE, "select")
    return [PerformanceTarget.from_row(row) for row in rows]


def workbodies_with_performance(client: Optional[Client] = None) -> List[WorkbodyPerformance]:
    """Newest workbodies first, each with all nine metrics labelled."""
    client = client or get_supabase_client()
    targets = list_targets(client)
    rows = execute(
        client.table("workbodies").select("*").order("created_at", desc=True), "workbodies", "select"
    )
    members: Dict[str, List[Dict[str, Any]]] = {}
    for member in execute(client.table("workbody_members").select("*"), "workbody_members", "select"):
        members.setdefault(member.get("workbody_id"), []).append(member)
    return build_performance(rows, members, targets)


def top_performers(
    performance: List[WorkbodyPerformance], metric: str, limit: int = 5
) -> List[WorkbodyPerformance]:
    if metric not in METRICS:
        raise ValidationError(f"Unknown metric: {metric}")
    return sorted(
        performance,
        key=lambda wb: wb.performance_metrics[metric].value,
        reverse=metric not in LOWER_IS_BETTER,
    )[:limit]


def alerts(performance: List[WorkbodyPerformance]) -> List[Dict[str, Any]]:
    """Every metric in ``danger``, across all workbodies."""
    found = []
    for wb in performance:
        for metric, status in wb.performance_metrics.items():
            if status.status == "danger":
                found.append(
                    {
                        "workbodyId": wb.id,
                        "workbodyName": wb.name,
                        "metric": metric,
                        "status": status.to_view(),
                    }
                )
    return found


def _check_thresholds(data: Dict[str, Any]) -> None:
    missing = [k for k in ("target_value", "warning_threshold", "danger_threshold") if data.get(k) is None]
    if missing:
        raise ValidationError([f"{k.replace('_', ' ').capitalize()} is required" for k in missing])


def create_target(data: Dict[str, Any], client: Optional[Client] = None) -> PerformanceTarget:
    client = client or get_supabase_client()
    if data.get("metric_name") not in METRICS:
        raise ValidationError(f"Unknown metric: {data.get('metric_name')}")
    _check_thresholds(data)
    target = PerformanceTarget(**{k: data[k] for k in ("metric_name", "target_value", "warning_threshold", "danger_threshold")})
    now = utc_now_iso()
    saved = execute(
        client.table(TARGETS_TABLE).insert({**target.to_row(), "created_at": now, "updated_at": now}),
        TARGETS_TABLE,
        "insert",
    )
    return PerformanceTarget.from_row(saved[0]) if saved else target


def update_target(target_id: str, data: Dict[str, Any], client: Optional[Client] = None) -> PerformanceTarget:
    client = client or get_supabase_client()
    _check_thresholds(data)
    updates = {
        "target_value": data["target_value"],
        "warning_threshold": data["warning_threshold"],
        "danger_threshold": data["danger_threshold"],
        "updated_at": utc_now_iso(),
    }
    saved = execute(
        client.table(TARGETS_TABLE).update(updates).eq("id", target_id), TARGETS_TABLE, "update"
    )
    if not saved:
        raise NotFoundError(f"Performance target {target_id} not found")
    return PerformanceTarget.from_row(saved[0])


def upsert_targets(targets: List[Dict[str, Any]], client: Optional[Client] = None) -> List[PerformanceTarget]:
    """Bulk save; rows keep their ids when given and are matched on ``metric_name`` otherwise."""
    client = client or get_supabase_client()
    rows = []
    for data in targets:
        if data.get("metric_name") not in METRICS:
            raise ValidationError(f"Unknown metric: {data.get('metric_name')}")
        _check_thresholds(data)
        row = PerformanceTarget(**data).to_row()
        if data.get("id"):
            row["id"] = data["id"]
        row["updated_at"] = utc_now_iso()
        rows.append(row)
    if not rows:
        return []
    saved = execute(
        client.table(TARGETS_TABLE).upsert(rows, on_conflict="metric_name"), TARGETS_TABLE, "upsert"
    )
    return [PerformanceTarget.from_row(row) for row in saved]


def performance_history(workbody_id: str, client: Optional[Client] = None) -> List[Dict[str, Any]]:
    """Stored metric snapshots for one workbody, oldest period first."""
    client = client or get_supabase_client()
    rows = execute(
        client.table(HISTORY_TABLE).select("*").eq("workbody_id", workbody_id).order("period_start"),
        HISTORY_TABLE,
        "select",
    )
    return [
        {
            "periodStart": row.get("period_start"),
            "periodEnd": row.get("period_end"),
            "periodType": row.get("period_type"),
            "metrics": {m: row.get(m) for m in METRICS},
        }
        for row in rows
    ]

"""Dashboard, insight and performance endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from apps.api.dependencies import Caller, get_caller, get_client, get_store
from lib.roles import CHAIRMAN_DASHBOARD_ROLES, require_role
from services.dashboard.chairman import chairman_dashboard, dashboard_stats
from services.meetings.store import ScheduledMeetingStore
from services.performance import metrics
from services.summaries import insights
from services.workbodies.repository import list_workbodies

router = APIRouter()


@router.get("/dashboard")
def dashboard(
    client: Client = Depends(get_client), store: ScheduledMeetingStore = Depends(get_store)
) -> dict:
    return dashboard_stats(list_workbodies(client), store.fetch())


@router.get("/dashboard/chairman")
def chairman(
    category: Optional[str] = None,
    caller: Caller = Depends(get_caller),
    client: Client = Depends(get_client),
    store: ScheduledMeetingStore = Depends(get_store),
) -> dict:
    require_role(caller.role, CHAIRMAN_DASHBOARD_ROLES, "view the chairman dashboard")
    return chairman_dashboard(list_workbodies(client), store.fetch(), category=category)


@router.get("/insights/overdue-actions")
def overdue_actions(client: Client = Depends(get_client)) -> List[dict]:
    return insights.overdue_actions(insights.fetch_summaries(client))


@router.get("/insights/upcoming-deadlines")
def upcoming_deadlines(days: int = 30, client: Client = Depends(get_client)) -> List[dict]:
    return insights.upcoming_deadlines(insights.fetch_summaries(client), days=days)


@router.get("/insights/topic-trends")
def topic_trends(limit: int = 10, client: Client = Depends(get_client)) -> List[dict]:
    return insights.topic_trends(insights.fetch_summaries(client), limit=limit)


@router.get("/insights/summaries")
def summaries(client: Client = Depends(get_client)) -> List[dict]:
    return [s.to_view() for s in insights.fetch_summaries(client)]


# Performance

@router.get("/performance")
def performance(client: Client = Depends(get_client)) -> List[dict]:
    return [wb.to_view() for wb in metrics.workbodies_with_performance(client)]


@router.get("/performance/top")
def top_performers(
    metric: str = "action_item_completion", limit: int = 5, client: Client = Depends(get_client)
) -> List[dict]:
    performance = metrics.workbodies_with_performance(client)
    return [wb.to_view() for wb in metrics.top_performers(performance, metric, limit)]


@router.get("/performance/alerts")
def performance_alerts(client: Client = Depends(get_client)) -> List[dict]:
    return metrics.alerts(metrics.workbodies_with_performance(client))


@router.get("/performance/targets")
def list_targets(client: Client = Depends(get_client)) -> List[dict]:
    return [t.to_view() for t in metrics.list_targets(client)]


@router.post("/performance/targets", status_code=201)
def create_target(body: Dict[str, Any], client: Client = Depends(get_client)) -> dict:
    return metrics.create_target(_snake(body), client).to_view()


@router.put("/performance/targets")
def upsert_targets(body: List[Dict[str, Any]], client: Client = Depends(get_client)) -> List[dict]:
    return [t.to_view() for t in metrics.upsert_targets([_snake(item) for item in body], client)]


@router.patch("/performance/targets/{target_id}")
def update_target(target_id: str, body: Dict[str, Any], client: Client = Depends(get_client)) -> dict:
    return metrics.update_target(target_id, _snake(body), client).to_view()


@router.get("/performance/{workbody_id}/history")
def performance_history(workbody_id: str, client: Client = Depends(get_client)) -> List[dict]:
    return metrics.performance_history(workbody_id, client)


_TARGET_KEYS = {
    "metricName": "metric_name",
    "targetValue": "target_value",
    "warningThreshold": "warning_threshold",
    "dangerThreshold": "danger_threshold",
}


def _snake(body: Dict[str, Any]) -> Dict[str, Any]:
    """Targets arrive in either key style."""
    return {_TARGET_KEYS.get(key, key): value for key, value in body.items()}

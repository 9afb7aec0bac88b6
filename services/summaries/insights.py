"""Action item and topic insights across stored minutes summaries."""
from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from supabase import Client

from lib.schemas import MinutesSummary
from lib.supabase_client import execute, get_supabase_client
from utils.dates import parse_date


def fetch_summaries(client: Optional[Client] = None) -> List[MinutesSummary]:
    """All summaries, newest first, with list/sentiment columns normalised."""
    client = client or get_supabase_client()
    rows = execute(
        client.table("meeting_minutes_summaries").select("*").order("created_at", desc=True),
        "meeting_minutes_summaries",
        "select",
    )
    return [MinutesSummary.from_row(row) for row in rows]


def _open_actions(summaries: List[MinutesSummary]):
    for summary in summaries:
        for action in summary.action_items:
            if action.status == "completed":
                continue
            due = parse_date(action.due_date)
            if due is None:
                continue
            yield summary, action, due


def _action_view(summary: MinutesSummary, action) -> Dict[str, Any]:
    return {**action.to_view(), "meetingId": summary.meeting_minutes_id}


def overdue_actions(summaries: List[MinutesSummary], today: Optional[date] = None) -> List[Dict[str, Any]]:
    today = today or date.today()
    return [_action_view(s, a) for s, a, due in _open_actions(summaries) if due < today]


def upcoming_deadlines(
    summaries: List[MinutesSummary], today: Optional[date] = None, days: int = 30
) -> List[Dict[str, Any]]:
    today = today or date.today()
    horizon = today + timedelta(days=days)
    return [_action_view(s, a) for s, a, due in _open_actions(summaries) if today <= due <= horizon]


def topic_trends(summaries: List[MinutesSummary], limit: int = 10) -> List[Dict[str, Any]]:
    counts = Counter(topic for summary in summaries for topic in summary.topics)
    return [{"topic": topic, "count": count} for topic, count in counts.most_common(limit)]

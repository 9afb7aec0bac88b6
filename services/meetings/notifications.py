"""Weekly meeting reminders and secretary alerts."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from supabase import Client

from lib.schemas import ScheduledMeeting
from lib.supabase_client import execute, get_supabase_client
from utils.dates import parse_date, utc_now_iso
from utils.errors import SupabaseError

logger = logging.getLogger(__name__)


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Sunday 00:00 to Saturday 23:59:59.999999 around ``now``."""
    start = (now - timedelta(days=(now.weekday() + 1) % 7)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return start, start + timedelta(days=7) - timedelta(microseconds=1)


def check_weekly_meetings(
    meetings: List[ScheduledMeeting], now: Optional[datetime] = None
) -> Dict[str, List[ScheduledMeeting]]:
    """
    Meetings in the current week, and the subset held 1-7 days ago.

    Returns:
        ``{"this_week": [...], "needing_minutes": [...]}``
    """
    now = now or datetime.now()
    start, end = week_bounds(now)
    this_week = []
    needing_minutes = []
    for meeting in meetings:
        meeting_day = parse_date(meeting.date)
        if meeting_day is None:
            continue
        held = datetime.combine(meeting_day, datetime.min.time())
        if not start <= held <= end:
            continue
        this_week.append(meeting)
        days_passed = (now - held) // timedelta(days=1)
        if 1 <= days_passed <= 7:
            needing_minutes.append(meeting)
    if needing_minutes:
        logger.info("%d meetings need minutes", len(needing_minutes))
    return {"this_week": this_week, "needing_minutes": needing_minutes}


def create_secretary_alert(meeting: ScheduledMeeting, client: Optional[Client] = None) -> bool:
    """Insert a minutes reminder; failures are logged and reported as False."""
    client = client or get_supabase_client()
    row = {
        "type": "minutes_reminder",
        "title": f"Minutes needed for {meeting.workbody_name}",
        "message": (
            f"Please upload minutes for the {meeting.workbody_name} meeting held on {meeting.date}"
        ),
        "meeting_id": meeting.id,
        "workbody_id": meeting.workbody_id,
        "created_at": utc_now_iso(),
    }
    try:
        execute(client.table("notifications").insert(row), "notifications", "insert")
    except SupabaseError as exc:
        logger.error("Error creating secretary alert for meeting %s: %s", meeting.id, exc)
        return False
    return True

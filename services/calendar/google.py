"""Entry point for the ``fetch-google-calendar`` function."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from lib.config import require_setting
from utils.decorators import TRANSIENT_STATUSES, retry
from utils.errors import ToolExecutionError, ValidationError

logger = logging.getLogger(__name__)

EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/{calendar_id}/events"
MAX_RESULTS = 50
DEFAULT_WINDOW_DAYS = 365
REQUEST_TIMEOUT = 30


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def map_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten one API event; events without ``start.dateTime`` are all-day."""
    start = event.get("start") or {}
    end = event.get("end") or {}
    return {
        "id": event.get("id"),
        "title": event.get("summary") or "No Title",
        "description": event.get("description") or "",
        "start": start.get("dateTime") or start.get("date"),
        "end": end.get("dateTime") or end.get("date"),
        "location": event.get("location") or "",
        "attendees": event.get("attendees") or [],
        "isAllDay": not start.get("dateTime"),
    }


def _error_detail(response: requests.Response) -> str:
    try:
        return response.json().get("error", {}).get("message") or response.text
    except ValueError:
        return response.text


@retry(
    max_attempts=3,
    delay=1.0,
    exceptions=(requests.ConnectionError, requests.Timeout),
    retry_statuses=TRANSIENT_STATUSES,
)
def _get_events(url: str, params: Dict[str, Any]) -> requests.Response:
    return requests.get(url, params=params, timeout=REQUEST_TIMEOUT)


def fetch_calendar_events(
    calendar_id: Optional[str],
    time_min: Optional[str] = None,
    time_max: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Read up to 50 single events of a public Google calendar.

    Args:
        calendar_id: Google calendar id (usually an email address).
        time_min: RFC 3339 lower bound; defaults to now.
        time_max: RFC 3339 upper bound; defaults to a year from now.

    Returns:
        ``{"events", "totalCount", "nextPageToken"}``.

    Raises:
        ValidationError: No calendar id.
        ConfigError: ``GOOGLE_CALENDAR_API_KEY`` is not set.
        ToolExecutionError: The Calendar API answered with an error.
    """
    if not calendar_id:
        raise ValidationError("Calendar ID is required")
    api_key = require_setting("GOOGLE_CALENDAR_API_KEY")
    now = now or datetime.now(timezone.utc)
    params = {
        "key": api_key,
        "timeMin": time_min or _iso(now),
        "timeMax": time_max or _iso(now + timedelta(days=DEFAULT_WINDOW_DAYS)),
        "singleEvents": "true",
        "orderBy": "startTime",
        "maxResults": str(MAX_RESULTS),
    }
    url = EVENTS_URL.format(calendar_id=quote(calendar_id, safe=""))
    logger.info("Fetching calendar events for %s between %s and %s", calendar_id, params["timeMin"], params["timeMax"])

    response = _get_events(url, params)
    if not response.ok:
        detail = _error_detail(response)
        logger.error("Google Calendar API error %s: %s", response.status_code, detail)
        raise ToolExecutionError(f"Google Calendar API error: {response.status_code} - {detail}")

    data = response.json()
    events: List[Dict[str, Any]] = [map_event(item) for item in data.get("items") or []]
    logger.info("Fetched %d calendar events", len(events))
    return {"events": events, "totalCount": len(events), "nextPageToken": data.get("nextPageToken")}

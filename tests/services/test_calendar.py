"""Tests for the Google Calendar event reader."""

from datetime import datetime, timezone

import pytest

from lib import config
from services.calendar import google
from utils.errors import ConfigError, ToolExecutionError, ValidationError

NOW = datetime(2030, 5, 15, 8, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(config, "GOOGLE_CALENDAR_API_KEY", "test-key")


def test_map_event_defaults_and_all_day() -> None:
    event = google.map_event({"id": "e1", "start": {"date": "2030-05-20"}, "end": {"date": "2030-05-21"}})
    assert event["title"] == "No Title"
    assert event["isAllDay"] is True
    assert (event["start"], event["location"], event["attendees"]) == ("2030-05-20", "", [])

    timed = google.map_event({"summary": "EC meeting", "start": {"dateTime": "2030-05-20T10:00:00Z"}})
    assert (timed["title"], timed["isAllDay"]) == ("EC meeting", False)


def test_fetch_requires_calendar_id(api_key) -> None:
    with pytest.raises(ValidationError, match="Calendar ID is required"):
        google.fetch_calendar_events("")


def test_fetch_requires_api_key(monkeypatch) -> None:
    monkeypatch.setattr(config, "GOOGLE_CALENDAR_API_KEY", None)
    monkeypatch.delenv("GOOGLE_CALENDAR_API_KEY", raising=False)
    with pytest.raises(ConfigError):
        google.fetch_calendar_events("board@pec.org.pk")


def test_fetch_builds_query_and_maps_items(api_key, monkeypatch) -> None:
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen.update(url=url, params=params)
        return FakeResponse(200, {"items": [{"id": "e1", "summary": "GB"}], "nextPageToken": "tok"})

    monkeypatch.setattr(google.requests, "get", fake_get)
    result = google.fetch_calendar_events("board@pec.org.pk", now=NOW)
    assert seen["url"].endswith("/calendars/board%40pec.org.pk/events")
    assert seen["params"]["timeMin"] == "2030-05-15T08:00:00Z"
    assert seen["params"]["timeMax"].startswith("2031-05-15")
    assert seen["params"]["key"] == "test-key"
    assert result["totalCount"] == 1
    assert result["nextPageToken"] == "tok"
    assert result["events"][0]["title"] == "GB"


def test_fetch_surfaces_api_errors(api_key, monkeypatch) -> None:
    monkeypatch.setattr(
        google.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse(403, {"error": {"message": "API key not valid"}}),
    )
    with pytest.raises(ToolExecutionError, match="Google Calendar API error: 403 - API key not valid"):
        google.fetch_calendar_events("board@pec.org.pk", now=NOW)

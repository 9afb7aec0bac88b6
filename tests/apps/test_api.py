"""API tests against the in-memory Supabase stand-in."""

import json

import pytest
from fastapi.testclient import TestClient

from apps.api.dependencies import get_client
from apps.api.main import app
from lib.roles import home_path
from services.meetings.store import ScheduledMeetingStore
from services.summarizer import chain

CHAIRMAN = {"X-User-Role": "chairman", "X-User-Id": "u-chair"}
MEMBER = {"X-User-Role": "member", "X-User-Id": "u-member"}


@pytest.fixture
def api(fake_db):
    fake_db.tables["workbodies"] = [
        {"id": "wb-1", "name": "Examination Committee", "type": "committee", "actions_agreed": 4, "actions_completed": 1},
    ]
    fake_db.tables["scheduled_meetings"] = [
        {
            "id": "m-1",
            "workbody_id": "wb-1",
            "workbody_name": "Examination Committee",
            "date": "2030-05-02",
            "time": "10:00:00",
            "location": "Board Room",
            "agenda_items": ["Results"],
        }
    ]
    app.dependency_overrides[get_client] = lambda: fake_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(api) -> None:
    assert api.get("/health").json() == {"status": "ok"}


def test_navigation_follows_role_header(api) -> None:
    body = api.get("/navigation", headers=CHAIRMAN).json()
    assert body["role"] == "chairman"
    assert body["home"] == home_path("chairman")
    assert any(item["path"] == "/chairman-dashboard" for item in body["items"])


def test_create_workbody_and_validation_error(api, fake_db) -> None:
    created = api.post("/workbodies", json={"name": "Appeals Committee", "type": "committee"}, headers=CHAIRMAN)
    assert created.status_code == 201
    assert created.json()["totalMeetings"] == 0

    invalid = api.post("/workbodies", json={"name": "TF", "type": "task-force"})
    assert invalid.status_code == 400
    assert "End date is required for task forces" in invalid.json()["errors"]


def test_missing_workbody_is_404(api) -> None:
    response = api.get("/workbodies/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Workbody nope not found"}


def test_duplicate_meeting_is_409_with_existing_id(api) -> None:
    response = api.post(
        "/meetings",
        json={
            "workbodyId": "wb-1",
            "date": "2030-05-02",
            "time": "10:00",
            "location": "Hall",
            "agendaItems": ["Budget"],
        },
    )
    assert response.status_code == 409
    assert response.json()["existingId"] == "m-1"


def test_add_meeting_returns_warnings(api) -> None:
    response = api.post(
        "/meetings",
        json={
            "workbodyId": "wb-1",
            "date": "2030-05-02",
            "time": "14:00",
            "location": "Hall",
            "agendaItems": ["Budget"],
        },
    )
    assert response.status_code == 201
    assert response.json()["warnings"] == ["This workbody already has 1 meeting(s) scheduled on 2030-05-02"]


def test_chairman_dashboard_is_role_gated(api) -> None:
    assert api.get("/dashboard/chairman", headers=MEMBER).status_code == 403
    body = api.get("/dashboard/chairman", headers=CHAIRMAN).json()
    assert body["stats"]["completionRate"] == 25


def test_report_csv_download(api) -> None:
    response = api.get("/reports/data", params={"type": "actions", "format": "csv"}, headers=CHAIRMAN)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text.split("\n")[1] == "Examination Committee,committee,4,1,25%"
    assert api.get("/reports/data", params={"type": "budget"}, headers=CHAIRMAN).status_code == 400
    assert api.get("/reports/data", headers=MEMBER).status_code == 403


def test_get_minutes_content_requires_meeting_id(api) -> None:
    response = api.post("/functions/get-minutes-content", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "Meeting ID is required"


def test_summarize_endpoint(api, fake_db, llm_factory, monkeypatch) -> None:
    fake_db.tables["meeting_minutes"] = [{"id": "mm-1", "date": "2030-05-02", "ocr_text": "Approved the results."}]
    reply = json.dumps({"summaryText": "Approved.", "decisions": [], "actionItems": [], "sentiment": 0.2, "topics": []})
    monkeypatch.setattr(chain, "call_llm", llm_factory(reply))
    response = api.post("/functions/summarize-minutes", json={"minutesId": "mm-1"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["summary"]["summaryText"] == "Approved."


def test_summarize_bad_model_output_is_502(api, fake_db, llm_factory, monkeypatch) -> None:
    fake_db.tables["meeting_minutes"] = [{"id": "mm-1", "ocr_text": "Approved the results."}]
    monkeypatch.setattr(chain, "call_llm", llm_factory("not json"))
    response = api.post("/functions/summarize-minutes", json={"minutesId": "mm-1"})
    assert response.status_code == 502
    assert response.json()["error"] == "Invalid AI response format"


def test_minutes_upload_multipart(api, fake_db) -> None:
    form = {"workbodyId": "wb-1", "date": "2030-05-02", "location": "Hall", "actionsAgreed": ["Publish", "Notify"]}
    files = {"file": ("minutes.pdf", b"%PDF-1.4", "application/pdf")}

    denied = api.post(
        "/minutes",
        data=form,
        files=files,
        headers={"X-User-Role": "secretary", "X-User-Workbody": "wb-9"},
    )
    assert denied.status_code == 403

    created = api.post("/minutes", data=form, files=files, headers={"X-User-Role": "admin", "X-User-Id": "u-1"})
    assert created.status_code == 201
    assert created.json()["actionsAgreed"] == ["Publish", "Notify"]
    assert fake_db.rows("workbodies")[0]["actions_agreed"] == 6


def test_date_window_does_not_narrow_the_shared_store(api, fake_db) -> None:
    fake_db.tables["scheduled_meetings"].append(
        {
            "id": "m-2",
            "workbody_id": "wb-1",
            "workbody_name": "Examination Committee",
            "date": "2030-08-14",
            "time": "09:00:00",
            "location": "Hall",
            "agenda_items": ["Appeals"],
        }
    )
    app.state.meeting_store = ScheduledMeetingStore(fake_db)
    try:
        windowed = api.get("/meetings", params={"startDate": "2030-05-01", "endDate": "2030-05-31"})
        assert [m["id"] for m in windowed.json()] == ["m-1"]
        assert [m["id"] for m in api.get("/meetings").json()] == ["m-1", "m-2"]
        assert len(app.state.meeting_store.meetings) == 2
    finally:
        app.state.meeting_store = None

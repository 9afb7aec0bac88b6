"""Tests for minutes upload, deletion and content retrieval."""

from datetime import date

import pytest
import requests

from services.minutes import repository
from services.minutes.repository import (
    delete_minutes,
    get_minutes_content,
    list_minutes,
    upload_minutes,
)
from utils.errors import ExtractionError, NotFoundError, PermissionDeniedError, ValidationError

THIS_YEAR = date.today().year


@pytest.fixture
def db(fake_db):
    fake_db.tables["workbodies"] = [
        {
            "id": "wb-1",
            "name": "Examination Committee",
            "type": "committee",
            "total_meetings": 2,
            "meetings_this_year": 1,
            "actions_agreed": 3,
        }
    ]
    return fake_db


def _data(**overrides):
    data = {
        "workbody_id": "wb-1",
        "date": f"{THIS_YEAR}-03-04",
        "location": " Board Room ",
        "agenda_items": ["Results", ""],
        "actions_agreed": ["Publish results", "Notify boards", " "],
    }
    data.update(overrides)
    return data


def test_upload_stores_file_row_and_bumps_counters(db) -> None:
    minutes = upload_minutes(_data(), "May minutes.pdf", b"%PDF-1.4", "application/pdf", role="admin", user_id="u-1", client=db)
    assert minutes.workbody_name == "Examination Committee"
    assert minutes.location == "Board Room"
    assert minutes.actions_agreed == ["Publish results", "Notify boards"]
    assert minutes.ocr_status == "pending"
    assert minutes.file_url.startswith("https://storage.test/")
    workbody = db.rows("workbodies")[0]
    assert (workbody["total_meetings"], workbody["meetings_this_year"], workbody["actions_agreed"]) == (3, 2, 5)


def test_upload_for_an_earlier_year_skips_this_year_counter(db) -> None:
    upload_minutes(_data(date=f"{THIS_YEAR - 1}-12-01"), "old.pdf", b"x", role="admin", client=db)
    assert db.rows("workbodies")[0]["meetings_this_year"] == 1


def test_upload_requires_file_and_fields(db) -> None:
    with pytest.raises(ValidationError) as excinfo:
        upload_minutes(_data(location=""), "x.pdf", b"", role="admin", client=db)
    assert excinfo.value.errors == ["Location is required", "File is required"]


def test_secretary_cannot_upload_for_another_workbody(db) -> None:
    with pytest.raises(PermissionDeniedError):
        upload_minutes(_data(), "x.pdf", b"x", role="secretary", user_workbody_id="wb-9", client=db)
    with pytest.raises(PermissionDeniedError):
        upload_minutes(_data(), "x.pdf", b"x", role="member", client=db)
    assert db.files == {}


def test_secretary_without_a_workbody_cannot_upload(db) -> None:
    with pytest.raises(PermissionDeniedError):
        upload_minutes(_data(), "x.pdf", b"x", role="secretary", user_workbody_id=None, client=db)
    assert db.rows("meeting_minutes") == []
    assert db.rows("workbodies")[0]["total_meetings"] == 2


def test_secretary_uploads_for_own_workbody(db) -> None:
    minutes = upload_minutes(_data(), "x.pdf", b"x", role="secretary", user_workbody_id="wb-1", client=db)
    assert minutes.workbody_id == "wb-1"


def test_upload_rejects_date_with_trailing_text(db) -> None:
    with pytest.raises(ValidationError) as excinfo:
        upload_minutes(_data(date="2030-01-02garbage"), "x.pdf", b"x", role="admin", client=db)
    assert excinfo.value.errors == ["Date must be in YYYY-MM-DD format"]
    assert db.files == {}


def test_list_minutes_marks_unknown_workbody(db) -> None:
    db.tables["meeting_minutes"] = [
        {"id": "a", "workbody_id": "wb-1", "date": "2030-01-01"},
        {"id": "b", "workbody_id": "gone", "date": "2030-02-01"},
    ]
    minutes = list_minutes(client=db)
    assert [(m.id, m.workbody_name) for m in minutes] == [("b", "Unknown"), ("a", "Examination Committee")]


def test_delete_rolls_counters_back_without_going_negative(db) -> None:
    db.tables["meeting_minutes"] = [
        {
            "id": "mm-1",
            "workbody_id": "wb-1",
            "date": f"{THIS_YEAR}-01-10",
            "actions_agreed": ["a", "b", "c", "d"],
        }
    ]
    delete_minutes("mm-1", client=db)
    workbody = db.rows("workbodies")[0]
    assert (workbody["total_meetings"], workbody["meetings_this_year"], workbody["actions_agreed"]) == (1, 0, 0)
    assert db.rows("meeting_minutes") == []
    with pytest.raises(NotFoundError):
        delete_minutes("mm-1", client=db)


def test_get_minutes_content_extracts_pdf_text(db, monkeypatch) -> None:
    db.tables["meeting_minutes"] = [
        {"id": "mm-1", "file_url": "https://files.test/m.pdf", "agenda_items": ["Budget"], "date": "2030-01-01"}
    ]
    monkeypatch.setattr(repository, "fetch_document", lambda url: (b"%PDF", "application/pdf"))
    monkeypatch.setattr(repository, "pdf_text", lambda data: "Minutes of the meeting")
    content = get_minutes_content("mm-1", client=db)
    assert content["content"] == "Minutes of the meeting"
    assert content["agendaItems"] == ["Budget"]
    assert content["actionsAgreed"] == []


def test_get_minutes_content_fetch_failure(db, monkeypatch) -> None:
    db.tables["meeting_minutes"] = [{"id": "mm-1", "file_url": "https://files.test/m.txt"}]

    def unreachable(url):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(repository, "fetch_document", unreachable)
    with pytest.raises(ExtractionError, match="Failed to retrieve file content"):
        get_minutes_content("mm-1", client=db)

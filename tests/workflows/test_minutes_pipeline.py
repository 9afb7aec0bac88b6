"""Tests for the minutes processing graph."""

import json

from langgraph.graph import END  # type: ignore

from lib.state import initial_state
from services.ocr import run as ocr
from workflows.minutes_pipeline.graph import route_after_extract, route_after_fetch, run_minutes_pipeline

READABLE = "The Examination Committee met, reviewed the results and approved their publication."
SUMMARY_REPLY = json.dumps(
    {"summaryText": "Results approved.", "decisions": ["Publish"], "actionItems": [], "sentiment": 0.5, "topics": ["exams"]}
)
ANALYSIS_REPLY = json.dumps({"progressHighlights": ["Done"], "milestones": [], "risks": []})


def test_route_after_fetch_returns_extract_text() -> None:
    state = initial_state()
    state["pending"] = [{"id": "mm-1"}]
    assert route_after_fetch(state) == "extract_text"


def test_route_after_fetch_ends_when_nothing_pending() -> None:
    assert route_after_fetch(initial_state()) == END


def test_route_after_extract() -> None:
    state = initial_state()
    assert route_after_extract(state) == END
    state["extracted"] = ["mm-1"]
    assert route_after_extract(state) == "summarize"


def _minutes(minutes_id, uploaded_at, status="pending"):
    return {
        "id": minutes_id,
        "file_url": f"https://files.test/{minutes_id}.pdf",
        "ocr_status": status,
        "uploaded_at": uploaded_at,
        "date": "2030-05-02",
    }


def _fake_ocr(monkeypatch):
    monkeypatch.setattr(ocr, "download_file", lambda url: url.encode())
    monkeypatch.setattr(ocr, "pdf_text", lambda data: READABLE if b"mm-1" in data else "blurry")


def test_pipeline_processes_pending_minutes(fake_db, llm_factory, monkeypatch) -> None:
    fake_db.tables["meeting_minutes"] = [
        _minutes("mm-2", "2030-05-03T09:00:00"),
        _minutes("mm-1", "2030-05-02T09:00:00"),
        _minutes("mm-0", "2030-05-01T09:00:00", status="completed"),
    ]
    _fake_ocr(monkeypatch)
    llm = llm_factory(SUMMARY_REPLY, ANALYSIS_REPLY)

    result = run_minutes_pipeline(client=fake_db, llm=llm)

    assert result["pending"] == ["mm-1", "mm-2"]
    assert result["extracted"] == ["mm-1"]
    assert result["summarized"] == ["mm-1"]
    assert result["analyzed"] == ["mm-1"]
    assert len(result["errors"]) == 1
    assert result["errors"][0].startswith("mm-2: OCR extraction completed but text content was not readable")
    summary = fake_db.rows("meeting_minutes_summaries")[0]
    assert summary["performance_analysis"]["progressHighlights"] == ["Done"]


def test_pipeline_respects_ids_and_limit(fake_db, llm_factory, monkeypatch) -> None:
    fake_db.tables["meeting_minutes"] = [
        _minutes("mm-1", "2030-05-02T09:00:00", status="completed"),
        _minutes("mm-2", "2030-05-03T09:00:00"),
    ]
    _fake_ocr(monkeypatch)
    result = run_minutes_pipeline(minutes_ids=["mm-1"], client=fake_db, llm=llm_factory(SUMMARY_REPLY, ANALYSIS_REPLY))
    assert result["pending"] == ["mm-1"]

    limited = run_minutes_pipeline(limit=1, client=fake_db, llm=llm_factory(SUMMARY_REPLY))
    assert limited["pending"] == ["mm-2"]


def test_pipeline_stops_when_fetch_fails(fake_db, llm_factory) -> None:
    fake_db.failing_tables.add("meeting_minutes")
    llm = llm_factory(SUMMARY_REPLY)
    result = run_minutes_pipeline(client=fake_db, llm=llm)
    assert result["pending"] == []
    assert result["errors"][0].startswith("fetch: Failed to select meeting_minutes")
    assert llm.calls == []

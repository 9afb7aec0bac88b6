"""Tests for action item and topic insights."""

from datetime import date

from lib.schemas import MinutesSummary
from services.summaries.insights import fetch_summaries, overdue_actions, topic_trends, upcoming_deadlines

TODAY = date(2030, 5, 15)


def _summary(minutes_id, actions, topics=()):
    return MinutesSummary.from_row(
        {"meeting_minutes_id": minutes_id, "action_items": actions, "topics": list(topics)}
    )


SUMMARIES = [
    _summary(
        "mm-1",
        [
            {"task": "Late report", "dueDate": "2030-05-01"},
            {"task": "Done already", "dueDate": "2030-05-01", "status": "completed"},
            {"task": "Next week", "dueDate": "2030-05-20"},
            {"task": "No date"},
        ],
        ["budget", "examinations"],
    ),
    _summary("mm-2", [{"task": "Far away", "dueDate": "2030-09-01"}, "Plain text action"], ["budget"]),
]


def test_overdue_actions_skip_completed_and_undated() -> None:
    overdue = overdue_actions(SUMMARIES, today=TODAY)
    assert [(a["task"], a["meetingId"]) for a in overdue] == [("Late report", "mm-1")]


def test_upcoming_deadlines_within_window() -> None:
    assert [a["task"] for a in upcoming_deadlines(SUMMARIES, today=TODAY, days=30)] == ["Next week"]
    assert len(upcoming_deadlines(SUMMARIES, today=TODAY, days=120)) == 2


def test_topic_trends_counts_and_limits() -> None:
    assert topic_trends(SUMMARIES) == [
        {"topic": "budget", "count": 2},
        {"topic": "examinations", "count": 1},
    ]
    assert topic_trends(SUMMARIES, limit=1) == [{"topic": "budget", "count": 2}]


def test_fetch_summaries_normalises_bad_columns(fake_db) -> None:
    fake_db.tables["meeting_minutes_summaries"] = [
        {"meeting_minutes_id": "a", "created_at": "2030-01-01", "sentiment_score": "n/a", "topics": None},
        {"meeting_minutes_id": "b", "created_at": "2030-02-01", "sentiment_score": 0.4, "decisions": "x"},
    ]
    summaries = fetch_summaries(fake_db)
    assert [s.meeting_minutes_id for s in summaries] == ["b", "a"]
    assert summaries[1].sentiment_score == 0
    assert summaries[0].decisions == []

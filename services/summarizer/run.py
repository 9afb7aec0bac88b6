"""Entry point for the summarizer service (``summarize-minutes`` / ``analyze-performance``)."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from supabase import Client

from lib.schemas import ActionItem, MinutesSummary
from lib.supabase_client import execute, get_supabase_client
from services.minutes.repository import get_minutes_row
from services.summarizer.chain import (
    LLMCallable,
    analyze_minutes_performance,
    summarize_minutes_text,
)
from utils.dates import utc_now_iso
from utils.errors import NotFoundError, ValidationError
from utils.logging import log_event

logger = logging.getLogger(__name__)

SUMMARIES_TABLE = "meeting_minutes_summaries"


def summarize(
    minutes_id: Optional[str],
    llm: Optional[LLMCallable] = None,
    client: Optional[Client] = None,
) -> MinutesSummary:
    """
    Summarize stored minutes text and upsert the result.

    Args:
        minutes_id: ``meeting_minutes`` row id.
        llm: Optional replacement for ``lib.llm_client.call_llm``.

    Returns:
        The saved summary.

    Raises:
        ValidationError: No id given, or the minutes have no extracted text.
        NotFoundError: The minutes row does not exist.
        LLMError: The model call failed or returned unparseable output.
    """
    if not minutes_id:
        raise ValidationError("Minutes ID is required")
    client = client or get_supabase_client()
    minutes = get_minutes_row(minutes_id, client)
    if not (minutes.get("ocr_text") or "").strip():
        raise ValidationError("No OCR text available for summarization")

    log_event(minutes_id, "summarize", "started", {"text_length": len(minutes["ocr_text"])})
    result = summarize_minutes_text(minutes, llm=llm)
    action_items = [ActionItem.coerce(item) for item in result.actionItems]
    row = {
        "meeting_minutes_id": minutes_id,
        "summary_text": result.summaryText,
        "decisions": result.decisions,
        "action_items": [item.to_view() for item in action_items if item is not None],
        "sentiment_score": result.sentiment if result.sentiment is not None else 0,
        "topics": result.topics,
        "updated_at": utc_now_iso(),
    }
    saved = execute(
        client.table(SUMMARIES_TABLE).upsert(row, on_conflict="meeting_minutes_id"),
        SUMMARIES_TABLE,
        "upsert",
    )
    log_event(minutes_id, "summarize", "stored", {"decisions": len(row["decisions"]), "action_items": len(row["action_items"])})
    return MinutesSummary.from_row(saved[0] if saved else row)


def analyze_performance(
    minutes_id: Optional[str],
    llm: Optional[LLMCallable] = None,
    client: Optional[Client] = None,
) -> Dict[str, Any]:
    """Store progress highlights, milestones and risks on the existing summary."""
    if not minutes_id:
        raise ValidationError("Meeting ID is required")
    client = client or get_supabase_client()
    minutes = get_minutes_row(minutes_id, client)
    existing = execute(
        client.table(SUMMARIES_TABLE).select("id").eq("meeting_minutes_id", minutes_id),
        SUMMARIES_TABLE,
        "select",
    )
    if not existing:
        raise NotFoundError("No existing summary found for this meeting")

    analysis = analyze_minutes_performance(minutes, llm=llm).model_dump()
    execute(
        client.table(SUMMARIES_TABLE)
        .update({"performance_analysis": analysis, "updated_at": utc_now_iso()})
        .eq("meeting_minutes_id", minutes_id),
        SUMMARIES_TABLE,
        "update",
    )
    log_event(minutes_id, "analyze_performance", "stored", {k: len(v) for k, v in analysis.items()})
    return analysis

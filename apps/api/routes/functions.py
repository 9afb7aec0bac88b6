"""Function-style endpoints: text extraction, summarization, calendar, batch processing."""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel
from supabase import Client

from apps.api.dependencies import get_client
from services.calendar.google import fetch_calendar_events
from services.minutes.repository import get_minutes_content
from services.ocr.run import run as run_ocr
from services.summarizer.run import analyze_performance, summarize
from utils.errors import ValidationError
from workflows.minutes_pipeline.graph import run_minutes_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions")


class OcrRequest(BaseModel):
    fileUrl: Optional[str] = None
    minutesId: Optional[str] = None


class SummarizeRequest(BaseModel):
    minutesId: Optional[str] = None


class MeetingRequest(BaseModel):
    meetingId: Optional[str] = None


class CalendarRequest(BaseModel):
    calendarId: Optional[str] = None
    timeMin: Optional[str] = None
    timeMax: Optional[str] = None


class ProcessMinutesRequest(BaseModel):
    minutesIds: Optional[List[str]] = None
    limit: Optional[int] = None


@router.post("/extract-text-ocr")
def extract_text_ocr(request: OcrRequest, client: Client = Depends(get_client)) -> dict:
    return run_ocr(request.fileUrl, request.minutesId, client=client)


@router.post("/summarize-minutes")
def summarize_minutes(request: SummarizeRequest, client: Client = Depends(get_client)) -> dict:
    summary = summarize(request.minutesId, client=client)
    return {"success": True, "summary": summary.to_view()}


@router.post("/analyze-performance")
def analyze(request: MeetingRequest, client: Client = Depends(get_client)) -> dict:
    analysis = analyze_performance(request.meetingId, client=client)
    return {"success": True, "analysis": analysis}


@router.post("/get-minutes-content")
def minutes_content(request: MeetingRequest, client: Client = Depends(get_client)) -> dict:
    if not request.meetingId:
        raise ValidationError("Meeting ID is required")
    return get_minutes_content(request.meetingId, client)


@router.post("/fetch-google-calendar")
def fetch_google_calendar(request: CalendarRequest) -> dict:
    return fetch_calendar_events(request.calendarId, request.timeMin, request.timeMax)


def process_minutes_task(job_id: str, minutes_ids: Optional[List[str]], limit: Optional[int]) -> None:
    """Background batch run; the caller is no longer waiting, so failures are only logged."""
    try:
        result = run_minutes_pipeline(minutes_ids=minutes_ids, limit=limit)
        logger.info(f"Minutes pipeline {job_id} finished: {result}")
    except Exception as e:
        logger.error(f"Minutes pipeline {job_id} failed: {e}", exc_info=True)


@router.post("/process-minutes", status_code=202)
def process_minutes(request: ProcessMinutesRequest, background_tasks: BackgroundTasks) -> dict:
    job_id = str(uuid.uuid4())
    background_tasks.add_task(process_minutes_task, job_id, request.minutesIds, request.limit)
    return {"status": "accepted", "job_id": job_id}

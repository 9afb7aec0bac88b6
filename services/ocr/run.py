"""Entry point for the minutes text extraction service (``extract-text-ocr``)."""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import requests
from supabase import Client

from lib.documents import download_file, file_extension, image_lines, pdf_text
from lib.supabase_client import execute, get_supabase_client
from lib.validation import require_fields
from utils.dates import utc_now_iso
from utils.errors import ExtractionError, ValidationError
from utils.logging import log_event

logger = logging.getLogger(__name__)

MIN_READABLE_CHARS = 50
MIN_FRAGMENT_CHARS = 10
PREVIEW_CHARS = 500

NOT_READABLE = (
    "OCR extraction completed but text content was not readable. "
    "Please ensure the PDF contains text-based content."
)
EXTRACTION_FAILED = "OCR extraction failed. The document may be image-based or corrupted."

_PRINTABLE_RUN_RE = re.compile(r"[A-Za-z0-9\s\.,;:!?\-\(\)]+")
_WHITESPACE_RE = re.compile(r"\s+")


def scan_printable_text(data: bytes) -> str:
    """Join printable runs longer than ten characters and collapse whitespace."""
    decoded = data.decode("utf-8", errors="ignore")
    fragments = [m for m in _PRINTABLE_RUN_RE.findall(decoded) if len(m) > MIN_FRAGMENT_CHARS]
    return _WHITESPACE_RE.sub(" ", " ".join(fragments)).strip()


def extract_text(data: bytes, extension: str) -> str:
    """
    Best available text for a minutes file.

    Images go through Tesseract; everything else is parsed as PDF first and
    falls back to a raw printable-byte scan when the parser finds nothing.
    """
    if extension in ("jpg", "jpeg", "png"):
        text = " ".join(image_lines(data))
    else:
        try:
            text = pdf_text(data)
        except Exception as exc:
            logger.warning("PDF parse failed, scanning raw bytes instead: %s", exc)
            text = ""
        if not text:
            text = scan_printable_text(data)
    return _WHITESPACE_RE.sub(" ", text).strip()


def preview(text: str) -> str:
    return text[:PREVIEW_CHARS] + ("..." if len(text) > PREVIEW_CHARS else "")


def run(
    file_url: Optional[str],
    minutes_id: Optional[str],
    client: Optional[Client] = None,
) -> Dict[str, Any]:
    """
    Extract text from a minutes file and store it on the ``meeting_minutes`` row.

    Returns:
        ``{"success": True, "extractedText": <first 500 chars>, "textLength": n}``

    Raises:
        ValidationError: ``file_url`` or ``minutes_id`` is missing.
        ExtractionError: The file could not be fetched.
    """
    errors = require_fields({"file_url": file_url, "minutes_id": minutes_id}, ["file_url", "minutes_id"])
    if errors:
        raise ValidationError("File URL and minutes ID are required")
    client = client or get_supabase_client()
    log_event(minutes_id, "ocr", "started", {"file_url": file_url})

    try:
        data = download_file(file_url)
    except requests.RequestException as exc:
        raise ExtractionError(f"Failed to fetch file: {exc}") from exc

    status = "completed"
    try:
        text = extract_text(data, file_extension(file_url))
        if len(text) < MIN_READABLE_CHARS:
            text, status = NOT_READABLE, "failed"
    except Exception as exc:
        logger.error("OCR processing error for %s: %s", minutes_id, exc)
        text, status = EXTRACTION_FAILED, "failed"

    execute(
        client.table("meeting_minutes")
        .update({"ocr_text": text, "ocr_status": status, "updated_at": utc_now_iso()})
        .eq("id", minutes_id),
        "meeting_minutes",
        "update",
    )
    log_event(minutes_id, "ocr", "stored", {"status": status, "text_length": len(text)})
    return {"success": True, "extractedText": preview(text), "textLength": len(text)}

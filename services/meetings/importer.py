"""Manual meeting import from CSV and iCal text."""
from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional

from services.meetings.store import ScheduledMeetingStore
from utils.errors import SupabaseError, ValidationError
from utils.logging import log_error, log_event

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Imported Meeting"
DEFAULT_TIME = "10:00"
DEFAULT_LOCATION = "TBD"

_SUMMARY_RE = re.compile(r"^SUMMARY:(.*)$", re.MULTILINE)
_DTSTART_RE = re.compile(r"^DTSTART(?:;[^:\r\n]*)?:(.*)$", re.MULTILINE)
_LOCATION_RE = re.compile(r"^LOCATION:(.*)$", re.MULTILINE)


def parse_csv(content: str, workbody_id: str, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Parse ``name,date,time,location,agenda`` rows; the first line is a header.

    Rows with fewer than four values are skipped. Agenda items are separated
    by ``;``.
    """
    today = today or date.today()
    meetings = []
    lines = content.splitlines()
    for line in lines[1:]:
        values = line.split(",")
        if len(values) < 4:
            continue
        agenda = values[4].split(";") if len(values) > 4 and values[4] else []
        meetings.append(
            {
                "workbody_id": workbody_id,
                "workbody_name": values[0].strip() or DEFAULT_NAME,
                "date": values[1].strip() or today.isoformat(),
                "time": values[2].strip() or DEFAULT_TIME,
                "location": values[3].strip(),
                "agenda_items": [item.strip() for item in agenda if item.strip()],
            }
        )
    return meetings


def _ical_datetime(value: str) -> tuple[str, str]:
    """``YYYYMMDDTHHMMSS[Z]`` to (``YYYY-MM-DD``, ``HH:MM``); date-only values get the default time."""
    value = value.strip()
    day = value[:8]
    clock = value[9:15]
    meeting_date = f"{day[:4]}-{day[4:6]}-{day[6:8]}"
    meeting_time = f"{clock[:2]}:{clock[2:4]}" if len(clock) >= 4 else DEFAULT_TIME
    return meeting_date, meeting_time


def parse_ical(content: str, workbody_id: str) -> List[Dict[str, Any]]:
    """Read SUMMARY / DTSTART / LOCATION out of each ``VEVENT`` block."""
    meetings = []
    for block in content.split("BEGIN:VEVENT")[1:]:
        block = block.split("END:VEVENT", 1)[0]
        summary = _SUMMARY_RE.search(block)
        dtstart = _DTSTART_RE.search(block)
        if not summary or not dtstart or not summary.group(1).strip():
            continue
        meeting_date, meeting_time = _ical_datetime(dtstart.group(1))
        location = _LOCATION_RE.search(block)
        meetings.append(
            {
                "workbody_id": workbody_id,
                "workbody_name": summary.group(1).strip(),
                "date": meeting_date,
                "time": meeting_time,
                "location": location.group(1).strip() if location else "",
                "agenda_items": [],
            }
        )
    return meetings


def import_meetings(
    content: str,
    fmt: str,
    workbody_id: str,
    store: ScheduledMeetingStore,
    changed_by: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Parse and add meetings one by one.

    A row that fails validation (duplicates included) or cannot be written
    is skipped and reported; the rest of the file is still imported.
    """
    if fmt == "csv":
        parsed = parse_csv(content, workbody_id)
    elif fmt == "ical":
        parsed = parse_ical(content, workbody_id)
    else:
        raise ValidationError(f"Unsupported import format: {fmt}")

    imported: List[Dict[str, Any]] = []
    skipped: List[Dict[str, Any]] = []
    for idx, meeting in enumerate(parsed, 1):
        # imported rows carry no agenda of their own in iCal and often in CSV
        if not meeting["agenda_items"]:
            meeting["agenda_items"] = [meeting["workbody_name"]]
        if not meeting["location"]:
            meeting["location"] = DEFAULT_LOCATION
        try:
            result = store.add_meeting(meeting, changed_by=changed_by)
            imported.append(result["meeting"])
        except ValidationError as exc:
            log_error("meeting_import", f"row_{idx}", exc, {"date": meeting["date"], "time": meeting["time"]})
            skipped.append({"row": idx, "errors": exc.errors})
        except SupabaseError as exc:
            log_error("meeting_import", f"row_{idx}", exc, {"date": meeting["date"], "time": meeting["time"]})
            skipped.append({"row": idx, "errors": [str(exc)]})
    log_event("meeting_import", fmt, "import_completed", {"imported": len(imported), "skipped": len(skipped)})
    return {"imported": len(imported), "skipped": skipped, "meetings": imported}

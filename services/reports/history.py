"""Generated report log stored in ``report_history``."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from lib.schemas import ReportHistoryItem
from lib.supabase_client import execute, get_supabase_client
from lib.validation import require_fields
from utils.dates import utc_now_iso
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

TABLE = "report_history"
# PostgREST refuses an unfiltered delete
NIL_UUID = "00000000-0000-0000-0000-000000000000"


def list_history(client: Optional[Client] = None) -> List[ReportHistoryItem]:
    client = client or get_supabase_client()
    rows = execute(client.table(TABLE).select("*").order("created_at", desc=True), TABLE, "select")
    return [ReportHistoryItem.from_row(row) for row in rows]


def add_report(data: Dict[str, Any], client: Optional[Client] = None) -> ReportHistoryItem:
    """Record a generated report; ``name``, ``type`` and ``format`` are required."""
    client = client or get_supabase_client()
    errors = require_fields(data, ("name", "type", "format"))
    if errors:
        raise ValidationError(errors)
    item = ReportHistoryItem.model_validate(data)
    row = {**item.to_row(), "created_at": item.created_at or utc_now_iso()}
    saved = execute(client.table(TABLE).insert(row), TABLE, "insert")
    logger.info("Report %s (%s) added to history", item.name, item.format)
    return ReportHistoryItem.from_row(saved[0] if saved else row)


def remove_report(report_id: str, client: Optional[Client] = None) -> None:
    client = client or get_supabase_client()
    deleted = execute(client.table(TABLE).delete().eq("id", report_id), TABLE, "delete")
    if not deleted:
        raise NotFoundError(f"Report {report_id} not found")


def clear_history(client: Optional[Client] = None) -> int:
    """Delete every history row and return how many went."""
    client = client or get_supabase_client()
    deleted = execute(client.table(TABLE).delete().neq("id", NIL_UUID), TABLE, "delete")
    logger.info("Cleared %d report history rows", len(deleted))
    return len(deleted)

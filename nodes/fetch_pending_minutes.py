import logging
from typing import Any, Dict, Optional

from supabase import Client

from lib.state import MinutesPipelineState
from lib.supabase_client import execute, get_supabase_client
from utils.errors import SupabaseError

logger = logging.getLogger(__name__)

TABLE = "meeting_minutes"


def fetch_pending_minutes_node(state: MinutesPipelineState, client: Optional[Client] = None) -> Dict[str, Any]:
    """
    Select the minutes to process: the requested ids, or every row still
    waiting for text extraction, oldest upload first.
    """
    logger.info("📥 STEP 1: Fetching pending meeting minutes")
    client = client or get_supabase_client()
    query = client.table(TABLE).select("*")
    if state.get("minutes_ids"):
        query = query.in_("id", state["minutes_ids"])
    else:
        query = query.eq("ocr_status", "pending")
    query = query.order("uploaded_at")
    if state.get("limit"):
        query = query.limit(state["limit"])

    try:
        rows = execute(query, TABLE, "select")
    except SupabaseError as e:
        logger.error(f"❌ Failed to fetch pending minutes: {e}")
        return {"pending": [], "errors": [f"fetch: {e}"]}

    logger.info(f"✓ {len(rows)} minutes document(s) to process")
    return {"pending": rows}

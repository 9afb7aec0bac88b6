"""Audit trail writer for the ``audit_logs`` table."""
import logging
from typing import Any, Dict, Optional

from supabase import Client

from lib.supabase_client import execute, get_supabase_client
from utils.errors import SupabaseError

logger = logging.getLogger(__name__)


def record_audit(
    table_name: str,
    operation: str,
    record_id: Optional[str],
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
    changed_by: Optional[str] = None,
    client: Optional[Client] = None,
) -> bool:
    """
    Store one audit row for a create / update / delete.

    Args:
        table_name: Table the change was made on
        operation: INSERT, UPDATE or DELETE
        record_id: Primary key of the changed row
        before: Row state before the change
        after: Row state after the change
        changed_by: User id from the caller headers

    Returns:
        True when the row was stored. A failure is logged and never raised.
    """
    client = client or get_supabase_client()
    row = {
        "table_name": table_name,
        "operation": operation,
        "record_id": str(record_id or ""),
        "before_data": before,
        "after_data": after,
        "changed_by": changed_by,
    }
    try:
        execute(client.table("audit_logs").insert(row), "audit_logs", "insert")
    except SupabaseError as exc:
        logger.warning("Audit log not saved for %s %s %s: %s", operation, table_name, record_id, exc)
        return False
    return True

"""Supabase client construction and a guarded query executor."""
import logging
from functools import lru_cache
from typing import Any

from supabase import AsyncClient, Client, acreate_client, create_client

from lib.config import require_setting
from utils.errors import SupabaseError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Client for Supabase connection, built on first use."""
    return create_client(
        require_setting("SUPABASE_URL"), require_setting("SUPABASE_SERVICE_KEY")
    )


async def get_async_supabase_client() -> AsyncClient:
    """Async client; realtime channels are only available on this one."""
    return await acreate_client(
        require_setting("SUPABASE_URL"), require_setting("SUPABASE_SERVICE_KEY")
    )


def execute(query: Any, table: str, action: str) -> list[dict[str, Any]]:
    """
    Run a built postgrest query and return its rows.

    Args:
        query: A query builder (``client.table(...).select(...)...``).
        table: Table name, for logging.
        action: Operation label, for logging.

    Returns:
        Response rows (``[]`` when the response carries no data).

    Raises:
        SupabaseError: If the request fails.
    """
    try:
        response = query.execute()
    except Exception as exc:
        logger.error("Supabase %s.%s failed: %s", table, action, exc)
        raise SupabaseError(f"Failed to {action} {table}: {exc}") from exc
    data = getattr(response, "data", None)
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)

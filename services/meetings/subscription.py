"""Realtime subscription that refetches scheduled meetings on any row change."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from supabase import AsyncClient

from lib.supabase_client import get_async_supabase_client
from services.meetings.store import TABLE, ScheduledMeetingStore
from utils.errors import SupabaseError

logger = logging.getLogger(__name__)

CHANNEL_NAME = "scheduled_meetings_changes"


class MeetingSubscription:
    """Listens on ``scheduled_meetings`` and triggers ``store.refetch`` for every event."""

    def __init__(self, store: ScheduledMeetingStore, client: Optional[AsyncClient] = None):
        self.store = store
        self._client = client
        self._channel = None
        self._pending: set = set()

    @property
    def active(self) -> bool:
        return self._channel is not None

    def _refetch(self) -> None:
        try:
            self.store.refetch()
        except SupabaseError as exc:
            logger.error("Refetch after realtime change failed: %s", exc)

    def handle_change(self, payload: Any) -> None:
        """Realtime callback. The payload is not merged; a full refetch runs instead."""
        logger.debug("Realtime change on %s: %s", TABLE, payload)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._refetch()
            return
        future = loop.run_in_executor(None, self._refetch)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    async def start(self) -> None:
        if self._channel is not None:
            return
        if self._client is None:
            self._client = await get_async_supabase_client()
        channel = self._client.channel(CHANNEL_NAME)
        channel.on_postgres_changes(
            "*", schema="public", table=TABLE, callback=self.handle_change
        )
        await channel.subscribe()
        self._channel = channel
        logger.info("Subscribed to realtime changes on %s", TABLE)

    async def stop(self) -> None:
        if self._channel is None:
            return
        await self._client.remove_channel(self._channel)
        self._channel = None
        logger.info("Realtime subscription on %s removed", TABLE)

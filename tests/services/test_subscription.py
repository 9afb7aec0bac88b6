"""Tests for the realtime meeting subscription."""

import asyncio

from services.meetings.store import ScheduledMeetingStore
from services.meetings.subscription import CHANNEL_NAME, MeetingSubscription


class FakeChannel:
    def __init__(self, name):
        self.name = name
        self.handlers = []
        self.subscribed = False

    def on_postgres_changes(self, event, schema=None, table=None, callback=None):
        self.handlers.append((event, schema, table, callback))
        return self

    async def subscribe(self):
        self.subscribed = True
        return self


class FakeRealtime:
    def __init__(self):
        self.channels = []
        self.removed = []

    def channel(self, name):
        channel = FakeChannel(name)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel):
        self.removed.append(channel)


def _store(fake_db):
    fake_db.tables["scheduled_meetings"] = [
        {"id": "m-1", "workbody_id": "wb-1", "date": "2030-05-02", "time": "10:00", "location": "Hall"}
    ]
    return ScheduledMeetingStore(fake_db)


def test_change_without_event_loop_refetches_inline(fake_db) -> None:
    store = _store(fake_db)
    MeetingSubscription(store, client=FakeRealtime()).handle_change({"eventType": "INSERT"})
    assert [m.id for m in store.meetings] == ["m-1"]


def test_failed_refetch_keeps_previous_list(fake_db) -> None:
    store = _store(fake_db)
    store.refetch()
    fake_db.failing_tables.add("scheduled_meetings")
    MeetingSubscription(store, client=FakeRealtime()).handle_change({})
    assert [m.id for m in store.meetings] == ["m-1"]


def test_start_subscribes_once_and_stop_removes_channel(fake_db) -> None:
    realtime = FakeRealtime()
    subscription = MeetingSubscription(_store(fake_db), client=realtime)

    async def scenario():
        await subscription.start()
        await subscription.start()
        assert subscription.active
        await subscription.stop()

    asyncio.run(scenario())
    assert len(realtime.channels) == 1
    channel = realtime.channels[0]
    assert channel.name == CHANNEL_NAME
    assert channel.subscribed
    event, schema, table, callback = channel.handlers[0]
    assert (event, schema, table) == ("*", "public", "scheduled_meetings")
    assert callback == subscription.handle_change
    assert realtime.removed == [channel]
    assert not subscription.active

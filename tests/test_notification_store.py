import threading
import time
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from toolhub.modules.notifications.schemas import NotificationResponse
from toolhub.modules.notifications.store import NotificationStore

BASE = datetime(2026, 3, 1, tzinfo=timezone.utc)


def make(notification_id: str, user_id: str = "me", is_read: bool = False, minutes: int = 0) -> NotificationResponse:
    return NotificationResponse(
        id=notification_id,
        user_id=user_id,
        title=f"N {notification_id}",
        message="msg",
        is_read=is_read,
        created_at=BASE + timedelta(minutes=minutes),
    )


class RecordingService:
    """Records mark_as_read calls and the maximum number that were in flight at once."""

    def __init__(self, rows: List[NotificationResponse] = None, fail_on: str = None):
        self.rows = rows or []
        self.fail_on = fail_on
        self.calls: List[str] = []
        self.fetch_args = None
        self._lock = threading.Lock()
        self._in_flight = 0
        self.max_in_flight = 0

    def fetch_notifications(self, user_id, limit=50, unread_only=False):
        self.fetch_args = (user_id, limit)
        return list(self.rows)

    def mark_as_read(self, user_id, notification_id):
        with self._lock:
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            time.sleep(0.01)
            if notification_id == self.fail_on:
                raise RuntimeError("write failed")
            self.calls.append(notification_id)
            return True
        finally:
            with self._lock:
                self._in_flight -= 1


def test_unread_count_matches_unread_rows():
    store = NotificationStore("me", RecordingService())
    store.load([make("a"), make("b", is_read=True), make("c")])
    assert store.unread_count == 2


@pytest.mark.asyncio
async def test_mark_as_read_decrements_by_one():
    service = RecordingService()
    store = NotificationStore("me", service)
    store.load([make("a"), make("b")])

    changed = await store.mark_as_read("a")

    assert changed is True
    assert store.unread_count == 1
    assert service.calls == ["a"]
    assert next(n for n in store.notifications if n.id == "a").is_read is True


@pytest.mark.asyncio
async def test_mark_as_read_is_idempotent():
    service = RecordingService()
    store = NotificationStore("me", service)
    store.load([make("a", is_read=True), make("b")])

    changed = await store.mark_as_read("a")

    assert changed is False
    assert store.unread_count == 1
    assert service.calls == []


@pytest.mark.asyncio
async def test_mark_as_read_unknown_id_writes_nothing():
    service = RecordingService()
    store = NotificationStore("me", service)
    store.load([make("a")])
    assert await store.mark_as_read("zzz") is False
    assert service.calls == []


@pytest.mark.asyncio
async def test_failed_write_reverts_optimistic_update():
    service = RecordingService(fail_on="a")
    store = NotificationStore("me", service)
    store.load([make("a"), make("b")])

    with pytest.raises(RuntimeError):
        await store.mark_as_read("a")

    assert store.unread_count == 2
    assert next(n for n in store.notifications if n.id == "a").is_read is False


@pytest.mark.asyncio
async def test_mark_all_is_sequential_over_displayed_subset():
    rows = [make(str(i), minutes=i, is_read=(i % 3 == 0)) for i in range(8)]
    service = RecordingService()
    store = NotificationStore("me", service, display_limit=5)
    store.load(rows)
    displayed_ids = [n.id for n in store.displayed]
    unread_displayed = [n.id for n in store.displayed if not n.is_read]

    marked = await store.mark_all_as_read()

    assert marked == len(unread_displayed)
    assert service.calls == unread_displayed
    assert service.max_in_flight == 1
    assert all(n.is_read for n in store.displayed)
    assert [n.id for n in store.displayed] == displayed_ids
    # Entries outside the displayed subset are untouched
    hidden_unread = [n for n in store.notifications[5:] if not n.is_read]
    assert len(hidden_unread) == sum(1 for n in rows[:3] if not n.is_read)


def test_load_keeps_newest_first_and_drops_foreign_rows():
    store = NotificationStore("me", RecordingService(), display_limit=5)
    store.load([make("old", minutes=1), make("theirs", user_id="someone-else", minutes=9), make("new", minutes=5)])

    assert [n.id for n in store.notifications] == ["new", "old"]


def test_displayed_is_top_five():
    store = NotificationStore("me", RecordingService(), display_limit=5)
    store.load([make(str(i), minutes=i) for i in range(7)])
    assert [n.id for n in store.displayed] == ["6", "5", "4", "3", "2"]


@pytest.mark.asyncio
async def test_refresh_fetches_for_own_user_with_limit():
    service = RecordingService(rows=[make("a"), make("b", user_id="other")])
    store = NotificationStore("me", service, fetch_limit=20)

    await store.refresh()

    assert service.fetch_args == ("me", 20)
    assert [n.id for n in store.notifications] == ["a"]

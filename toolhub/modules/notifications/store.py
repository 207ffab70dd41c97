"""In-memory cache of one user's notifications with optimistic read-state updates."""

import logging
from typing import List, Optional
from starlette.concurrency import run_in_threadpool
from toolhub.modules.notifications.schemas import NotificationResponse
from toolhub.modules.notifications.service import NotificationService

logger = logging.getLogger(__name__)


class NotificationStore:
    def __init__(
        self,
        user_id: str,
        service: NotificationService,
        display_limit: int = 5,
        fetch_limit: int = 50
    ):
        self.user_id = user_id
        self.service = service
        self.display_limit = display_limit
        self.fetch_limit = fetch_limit
        self._items: List[NotificationResponse] = []

    @property
    def notifications(self) -> List[NotificationResponse]:
        return list(self._items)

    @property
    def displayed(self) -> List[NotificationResponse]:
        """The most recent notifications surfaced in the bell menu."""
        return self._items[:self.display_limit]

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.is_read)

    def load(self, rows: List[NotificationResponse]) -> None:
        """Replace the cache. Rows addressed to anyone else are dropped."""
        foreign = [n for n in rows if n.user_id != self.user_id]
        if foreign:
            logger.warning(f"Dropped {len(foreign)} notification(s) not addressed to user {self.user_id}")
        own = [n for n in rows if n.user_id == self.user_id]
        self._items = sorted(own, key=lambda n: n.created_at, reverse=True)

    async def refresh(self) -> None:
        rows = await run_in_threadpool(
            self.service.fetch_notifications, self.user_id, self.fetch_limit
        )
        self.load(rows)

    def _index_of(self, notification_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == notification_id:
                return index
        return None

    async def mark_as_read(self, notification_id: str) -> bool:
        """Mark one notification read. Returns False (and writes nothing) if it is unknown or already read."""
        index = self._index_of(notification_id)
        if index is None or self._items[index].is_read:
            return False

        previous = self._items[index]
        self._items[index] = previous.model_copy(update={"is_read": True})
        try:
            await run_in_threadpool(self.service.mark_as_read, self.user_id, notification_id)
        except Exception:
            current = self._index_of(notification_id)
            if current is not None:
                self._items[current] = previous
            raise
        return True

    async def mark_all_as_read(self) -> int:
        """Mark the displayed subset read, one awaited write at a time. Returns the number of writes."""
        marked = 0
        for notification in self.displayed:
            if notification.is_read:
                continue
            if await self.mark_as_read(notification.id):
                marked += 1
        return marked

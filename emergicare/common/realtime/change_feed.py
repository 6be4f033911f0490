# emergicare/common/realtime/change_feed.py
"""
In-process fan-out of table change notices.

A notice only says "table X had an insert/update/delete". It never carries
row data: subscribers are expected to re-query authoritative state when one
arrives. Delivery is at-least-once from the subscriber's point of view and
unordered relative to the subscriber's own writes.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Iterable, Optional, Set

from emergicare.common.config import settings
from emergicare.common.logging import get_logger

logger = get_logger(__name__)

TABLES = frozenset({"profiles", "doctors", "consultations"})
EVENTS = frozenset({"insert", "update", "delete"})


@dataclass(frozen=True)
class ChangeNotice:
    table: str
    event: str

    def to_dict(self) -> dict:
        return {"table": self.table, "event": self.event}


class Subscription:
    """A single subscriber's view of the feed."""

    def __init__(self, tables: Iterable[str], maxsize: int):
        self.tables = frozenset(tables)
        self._queue: "asyncio.Queue[ChangeNotice]" = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def wants(self, notice: ChangeNotice) -> bool:
        return notice.table in self.tables

    def offer(self, notice: ChangeNotice) -> None:
        try:
            self._queue.put_nowait(notice)
        except asyncio.QueueFull:
            # Queued notices already tell the subscriber to re-fetch
            self.dropped += 1

    async def get(self, timeout: Optional[float] = None) -> ChangeNotice:
        if timeout is None:
            return await self._queue.get()
        return await asyncio.wait_for(self._queue.get(), timeout)

    def pending(self) -> int:
        return self._queue.qsize()

    def __aiter__(self) -> AsyncIterator[ChangeNotice]:
        return self

    async def __anext__(self) -> ChangeNotice:
        return await self.get()


class ChangeFeed:
    def __init__(self, queue_size: int = settings.REALTIME_QUEUE_SIZE):
        self.queue_size = queue_size
        self._subscribers: Set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, table: str, event: str) -> None:
        """Fan a notice out to every subscriber of ``table``. Never blocks."""
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        if event not in EVENTS:
            raise ValueError(f"Unknown change event: {event}")

        notice = ChangeNotice(table=table, event=event)
        for subscription in list(self._subscribers):
            if subscription.wants(notice):
                subscription.offer(notice)
        logger.debug("change_published", table=table, change=event,
                     subscribers=len(self._subscribers))

    @asynccontextmanager
    async def subscribe(self, tables: Iterable[str]) -> AsyncIterator[Subscription]:
        tables = set(tables)
        unknown = tables - TABLES
        if unknown or not tables:
            raise ValueError(f"Cannot subscribe to tables: {sorted(unknown) or 'none'}")

        subscription = Subscription(tables, self.queue_size)
        self._subscribers.add(subscription)
        logger.info("change_feed_subscribed", tables=sorted(tables))
        try:
            yield subscription
        finally:
            self._subscribers.discard(subscription)
            logger.info("change_feed_unsubscribed", tables=sorted(tables),
                        dropped=subscription.dropped)


change_feed = ChangeFeed()

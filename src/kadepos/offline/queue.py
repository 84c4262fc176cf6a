"""Local order queue for offline operation.

Keeps orders taken while the backend is unreachable, in the order they
were placed, until the synchronizer confirms them remotely.

Design constraints:
- Ordered, append-only except for removal by key
- queued_at is the primary key and is unique for the queue's lifetime
- Every mutation is written through to durable storage before returning
- A storage failure never loses the order for the running session
"""
import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable

from kadepos.core.constants import PERSISTENCE_WRITE_ATTEMPTS
from kadepos.core.errors import InvalidOrder, PersistenceError
from kadepos.core.events import emit_event
from kadepos.core.subscriptions import Subscribers, Subscription
from kadepos.offline.models import QueuedOrder
from kadepos.offline.storage import QueueStorage

logger = logging.getLogger("kadepos.offline.queue")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_key(moment: datetime) -> str:
    return moment.isoformat(timespec="microseconds").replace("+00:00", "Z")


def _parse_key(key: str) -> datetime | None:
    try:
        moment = datetime.fromisoformat(key.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


class OfflineQueue:
    """Durable FIFO of orders awaiting remote persistence."""

    def __init__(self, storage: QueueStorage, clock: Callable[[], datetime] | None = None):
        self._storage = storage
        self._clock = clock or _utc_now
        self._orders: list[QueuedOrder] = []
        self._last_key: datetime | None = None
        self._listeners = Subscribers("queue")
        self._rejected: list[dict] = []
        self.last_persistence_error: PersistenceError | None = None
        self.set_aside_path: str | None = None
        self._load()

    def _load(self):
        """Read the persisted queue once at startup.

        An unreadable store is moved aside before anything can overwrite
        it. Records that fail validation are kept as stored and written
        back with every later write.
        """
        try:
            records = self._storage.read()
        except PersistenceError as e:
            self.last_persistence_error = e
            self._set_aside(e)
            return

        for record in records:
            try:
                order = QueuedOrder.from_dict(record)
            except InvalidOrder as e:
                logger.error("Keeping unreadable queued order for manual recovery: %s", e)
                self._rejected.append(record)
                continue
            self._orders.append(order)
            moment = _parse_key(order.queued_at)
            if moment and (self._last_key is None or moment > self._last_key):
                self._last_key = moment

    def _set_aside(self, error: PersistenceError):
        try:
            self.set_aside_path = self._storage.set_aside()
        except PersistenceError as e:
            logger.error("Offline queue unreadable and could not be moved aside: %s (%s)", error, e)
            return
        if self.set_aside_path is None:
            logger.error("Offline queue unreadable, starting empty: %s", error)
            return
        logger.error("Offline queue unreadable, moved to %s, starting empty: %s",
                     self.set_aside_path, error)
        emit_event("queue_set_aside", {
            "path": self.set_aside_path,
            "error": str(error),
        })

    def _next_key(self) -> str:
        """Issue a queued_at strictly after every key issued or loaded."""
        moment = self._clock()
        if self._last_key is not None and moment <= self._last_key:
            moment = self._last_key + timedelta(microseconds=1)
        self._last_key = moment
        return _format_key(moment)

    def _persist(self):
        """Write the whole queue through to storage.

        Retried once; a second failure is recorded and reported but the
        in-memory queue stays authoritative for this session.
        """
        records = self._rejected + [order.to_dict() for order in self._orders]
        error = None
        for attempt in range(1, PERSISTENCE_WRITE_ATTEMPTS + 1):
            try:
                self._storage.write(records)
            except PersistenceError as e:
                error = e
                logger.debug("Queue write attempt %d failed: %s", attempt, e)
                continue
            self.last_persistence_error = None
            return

        self.last_persistence_error = error
        logger.warning("Offline queue not persisted, %d orders held in memory only: %s",
                       len(self._orders), error)
        emit_event("persistence_failed", {
            "pending_count": len(self._orders),
            "error": str(error),
        })

    def _changed(self):
        self._persist()
        self._listeners.notify(self)

    def enqueue(self, order: QueuedOrder) -> QueuedOrder:
        """Append an order with a freshly assigned queued_at.

        Args:
            order: Order built with QueuedOrder.from_items

        Returns:
            The stored order carrying its queued_at key
        """
        queued = replace(order, queued_at=self._next_key())
        self._orders.append(queued)

        emit_event("offline_enqueue", {
            "queued_at": queued.queued_at,
            "total_amount": queued.total_amount,
            "item_count": len(queued.items),
            "queue_size": len(self._orders),
        })

        self._changed()
        return queued

    def dequeue(self, queued_at: str) -> bool:
        """Remove the order whose queued_at matches.

        Returns:
            True if an order was removed; False (and no write) if absent
        """
        for index, order in enumerate(self._orders):
            if order.queued_at == queued_at:
                del self._orders[index]
                break
        else:
            return False

        emit_event("offline_dequeue", {
            "queued_at": queued_at,
            "queue_size": len(self._orders),
        })

        self._changed()
        return True

    def peek(self, n: int = 10) -> list[QueuedOrder]:
        """Oldest n orders without removing them."""
        return self._orders[:max(n, 0)]

    def clear(self):
        """Drop every queued order (operator action)."""
        if not self._orders:
            return
        dropped = len(self._orders)
        self._orders = []
        emit_event("offline_cleared", {"dropped_count": dropped})
        self._changed()

    @property
    def pending_count(self) -> int:
        return len(self._orders)

    @property
    def rejected_count(self) -> int:
        """Stored records that could not be loaded and are kept untouched."""
        return len(self._rejected)

    def __len__(self) -> int:
        return len(self._orders)

    def subscribe(self, callback: Callable[["OfflineQueue"], None]) -> Subscription:
        """Call callback with this queue after every mutation."""
        return self._listeners.add(callback)

    # Defined last: the name shadows the builtin for annotations below it
    def list(self) -> list[QueuedOrder]:
        """All queued orders, oldest first."""
        return list(self._orders)

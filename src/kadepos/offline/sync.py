"""Replay queued orders against the Remote Order API.

Drain pass:
1. Skip if a pass is already running, the queue is empty, or offline
2. Move IDLE -> DRAINING (before the first await)
3. For each queued order, oldest first:
   a. create the remote order with its original created_at
   b. create its line items against the new order id
   c. dequeue it once both writes succeeded
   The first failure ends the pass; that order and everything after it
   stay queued for the next trigger.
4. Move back to IDLE and report how many orders synced
"""
import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable

from kadepos.core.constants import (
    DEFAULT_MIN_RETRY_SECONDS,
    NOTICE_SYNCED,
    ORDER_STATUS_PENDING,
)
from kadepos.core.errors import RemoteWriteError
from kadepos.core.events import emit_event
from kadepos.notify import Notifier, RecordingNotifier
from kadepos.offline.connectivity import ConnectivityMonitor
from kadepos.offline.models import QueuedOrder
from kadepos.offline.queue import OfflineQueue
from kadepos.remote.orders import OrderAPI, OrderItemRow

logger = logging.getLogger("kadepos.offline.sync")


class SyncState(enum.Enum):
    IDLE = "idle"
    DRAINING = "draining"


class SyncTrigger(enum.Enum):
    """Events that may start a drain pass."""
    CONNECTIVITY_RESTORED = "connectivity_restored"
    QUEUE_NON_EMPTY_WHILE_ONLINE = "queue_non_empty_while_online"
    MANUAL = "manual"


class SkipReason:
    """Why a trigger did not start a drain pass."""
    DRAINING = "draining"
    QUEUE_EMPTY = "queue_empty"
    OFFLINE = "offline"
    RETRY_BACKOFF = "retry_backoff"


# Triggers allowed to start a pass inside the retry interval
BACKOFF_EXEMPT = frozenset({SyncTrigger.CONNECTIVITY_RESTORED, SyncTrigger.MANUAL})


@dataclass
class SyncResult:
    """Outcome of one trigger."""

    trigger: SyncTrigger
    synced_count: int = 0
    attempted: int = 0
    skipped: str | None = None
    failed_queued_at: str | None = None
    error: RemoteWriteError | None = None
    orphaned_order_id: int | str | None = None

    @property
    def ran(self) -> bool:
        return self.skipped is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        return {
            "trigger": self.trigger.value,
            "synced_count": self.synced_count,
            "attempted": self.attempted,
            "skipped": self.skipped,
            "failed_queued_at": self.failed_queued_at,
            "error": str(self.error) if self.error else None,
            "orphaned_order_id": self.orphaned_order_id,
        }


class QueueSynchronizer:
    """At most one drain pass in flight; strict FIFO replay."""

    def __init__(
        self,
        queue: OfflineQueue,
        api: OrderAPI,
        monitor: ConnectivityMonitor,
        notifier: Notifier | None = None,
        min_retry_interval: float = DEFAULT_MIN_RETRY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.queue = queue
        self.api = api
        self.monitor = monitor
        self.notifier = notifier or RecordingNotifier()
        self.min_retry_interval = min_retry_interval
        self._clock = clock
        self.state = SyncState.IDLE
        self._last_failure_at: float | None = None

    @property
    def draining(self) -> bool:
        return self.state is SyncState.DRAINING

    def _skip_reason(self, trigger: SyncTrigger) -> str | None:
        if self.state is SyncState.DRAINING:
            return SkipReason.DRAINING
        if not self.monitor.is_online:
            return SkipReason.OFFLINE
        if self.queue.pending_count == 0:
            return SkipReason.QUEUE_EMPTY
        if (
            trigger not in BACKOFF_EXEMPT
            and self._last_failure_at is not None
            and self._clock() - self._last_failure_at < self.min_retry_interval
        ):
            return SkipReason.RETRY_BACKOFF
        return None

    async def trigger(self, trigger: SyncTrigger = SyncTrigger.MANUAL) -> SyncResult:
        """Run one drain pass if allowed.

        Never raises for remote failures; inspect the returned SyncResult.
        """
        reason = self._skip_reason(trigger)
        if reason is not None:
            logger.debug("Drain skipped (%s) for %s", reason, trigger.value)
            return SyncResult(trigger=trigger, skipped=reason)

        # No await between the check above and this transition
        self.state = SyncState.DRAINING
        result = SyncResult(trigger=trigger)
        try:
            await self._drain(result)
        finally:
            self.state = SyncState.IDLE

        if result.failed:
            self._last_failure_at = self._clock()
        else:
            self._last_failure_at = None

        emit_event("sync_completed", {
            "trigger": trigger.value,
            "synced_count": result.synced_count,
            "pending_count": self.queue.pending_count,
            "failed": result.failed,
        })

        if result.synced_count > 0:
            self.notifier.success(NOTICE_SYNCED.format(count=result.synced_count))

        return result

    async def _drain(self, result: SyncResult):
        orders = self.queue.list()
        emit_event("sync_started", {
            "trigger": result.trigger.value,
            "pending_count": len(orders),
        })

        for order in orders:
            result.attempted += 1
            try:
                await self._replay(order, result)
            except RemoteWriteError as e:
                self._record_failure(order, e, result)
                return
            except Exception as e:
                stage = "items" if result.orphaned_order_id is not None else "order"
                error = RemoteWriteError(f"unexpected error: {e!r}", stage=stage)
                error.__cause__ = e
                self._record_failure(order, error, result)
                return

            self.queue.dequeue(order.queued_at)
            result.synced_count += 1

    async def _replay(self, order: QueuedOrder, result: SyncResult):
        """Create the remote order and its items; raise on either failure."""
        order_id = await self.api.create_order(
            total_amount=order.total_amount,
            status=ORDER_STATUS_PENDING,
            created_at=order.created_at,
        )

        rows = [
            OrderItemRow(
                order_id=order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in order.items
        ]
        try:
            await self.api.create_order_items(rows)
        except Exception:
            # The remote order now exists with no items
            result.orphaned_order_id = order_id
            raise

        emit_event("sync_order_synced", {
            "queued_at": order.queued_at,
            "order_id": order_id,
            "item_count": len(rows),
        })

    def _record_failure(self, order: QueuedOrder, error: RemoteWriteError, result: SyncResult):
        result.error = error
        result.failed_queued_at = order.queued_at
        remaining = self.queue.pending_count

        if result.orphaned_order_id is not None:
            logger.error("Remote order %s created without items for queued order %s: %s",
                         result.orphaned_order_id, order.queued_at, error)
        else:
            logger.warning("Sync failed for queued order %s, %d orders left queued: %s",
                           order.queued_at, remaining, error)

        emit_event("sync_failed", {
            "queued_at": order.queued_at,
            "stage": error.stage,
            "status_code": error.status_code,
            "orphaned_order_id": result.orphaned_order_id,
            "pending_count": remaining,
            "error": str(error),
        })

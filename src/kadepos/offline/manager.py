"""Wire connectivity, the offline queue and the synchronizer together.

SyncManager decides when a drain pass runs:
- the monitor reports the network is back      -> CONNECTIVITY_RESTORED
- the queue changes while online and non-empty -> QUEUE_NON_EMPTY_WHILE_ONLINE
- an operator asks for it                      -> MANUAL

Listener registration is scoped: leaving ``async with SyncManager(...)``
releases both subscriptions and waits for drain passes still in flight.

Usage:
    async with SyncManager(queue, monitor, synchronizer) as manager:
        monitor.handle_online()
        await manager.wait_idle()
        print(manager.indicator().label)
"""
import asyncio
import logging
from dataclasses import dataclass

from kadepos.core.constants import INDICATOR_OFFLINE, INDICATOR_SYNCING
from kadepos.core.subscriptions import Subscription
from kadepos.offline.connectivity import ConnectivityMonitor
from kadepos.offline.queue import OfflineQueue
from kadepos.offline.sync import QueueSynchronizer, SyncResult, SyncTrigger

logger = logging.getLogger("kadepos.offline.manager")


@dataclass(frozen=True)
class SyncIndicator:
    """Transient status shown to staff."""

    mode: str  # "offline", "syncing" or "idle"
    pending_count: int
    draining: bool = False

    @property
    def label(self) -> str:
        if self.mode == "offline":
            if self.pending_count:
                return f"{INDICATOR_OFFLINE} ({self.pending_count} pending)"
            return INDICATOR_OFFLINE
        if self.mode == "syncing":
            return INDICATOR_SYNCING.format(count=self.pending_count)
        return ""

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "pending_count": self.pending_count,
            "draining": self.draining,
            "label": self.label,
        }

    @classmethod
    def of(cls, queue: OfflineQueue, monitor: ConnectivityMonitor, draining: bool = False) -> "SyncIndicator":
        pending = queue.pending_count
        if not monitor.is_online:
            return cls("offline", pending, draining)
        if pending:
            return cls("syncing", pending, draining)
        return cls("idle", 0, draining)


class SyncManager:
    """Schedules drain passes in response to connectivity and queue changes."""

    def __init__(
        self,
        queue: OfflineQueue,
        monitor: ConnectivityMonitor,
        synchronizer: QueueSynchronizer,
    ):
        self.queue = queue
        self.monitor = monitor
        self.synchronizer = synchronizer
        self.results: list[SyncResult] = []
        self._subscriptions: list[Subscription] = []
        self._tasks: set[asyncio.Task] = set()

    @property
    def started(self) -> bool:
        return bool(self._subscriptions)

    def start(self):
        """Register listeners; must be called from inside a running loop."""
        if self.started:
            return
        self._subscriptions = [
            self.monitor.subscribe(self._on_connectivity),
            self.queue.subscribe(self._on_queue_changed),
        ]
        if self.monitor.is_online and self.queue.pending_count:
            self._schedule(SyncTrigger.QUEUE_NON_EMPTY_WHILE_ONLINE)

    async def close(self):
        """Release listeners and wait for in-flight passes."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
        await self.wait_idle()

    async def __aenter__(self) -> "SyncManager":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _on_connectivity(self, online: bool):
        if online:
            self._schedule(SyncTrigger.CONNECTIVITY_RESTORED)

    def _on_queue_changed(self, queue: OfflineQueue):
        if self.synchronizer.draining:
            return
        if self.monitor.is_online and queue.pending_count:
            self._schedule(SyncTrigger.QUEUE_NON_EMPTY_WHILE_ONLINE)

    def _schedule(self, trigger: SyncTrigger) -> asyncio.Task | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; %s drain not scheduled", trigger.value)
            return None

        task = loop.create_task(self._run(trigger))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, trigger: SyncTrigger) -> SyncResult:
        result = await self.synchronizer.trigger(trigger)
        self.results.append(result)

        # Orders enqueued while the pass was running
        if result.ran and not result.failed and self.queue.pending_count and self.monitor.is_online:
            self._schedule(SyncTrigger.QUEUE_NON_EMPTY_WHILE_ONLINE)
        return result

    async def sync_now(self) -> SyncResult:
        """Run a manual drain pass and return its result."""
        return await self._run(SyncTrigger.MANUAL)

    async def wait_idle(self):
        """Wait until no scheduled drain pass remains."""
        while self._tasks:
            outcomes = await asyncio.gather(*list(self._tasks), return_exceptions=True)
            for outcome in outcomes:
                if isinstance(outcome, Exception):
                    logger.error("Drain task failed: %r", outcome)

    def indicator(self) -> SyncIndicator:
        return SyncIndicator.of(self.queue, self.monitor, self.synchronizer.draining)

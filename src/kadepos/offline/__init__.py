"""Offline mode: keep taking orders when the backend is unreachable.

Orders are queued locally while offline and replayed, oldest first, when
connectivity returns.

Usage:
    from kadepos.offline.queue import OfflineQueue
    from kadepos.offline.storage import JsonFileStorage
    from kadepos.offline.sync import QueueSynchronizer, SyncTrigger

    queue = OfflineQueue(JsonFileStorage(path))
    queue.enqueue(QueuedOrder.from_items(lines))

    # when back online
    await QueueSynchronizer(queue, api, monitor).trigger(SyncTrigger.MANUAL)
"""
from kadepos.offline.connectivity import (
    ConnectivityMonitor,
    ConnectivityWatcher,
    probe_connectivity,
)
from kadepos.offline.models import MenuItem, OrderLine, QueuedOrder
from kadepos.offline.queue import OfflineQueue
from kadepos.offline.storage import JsonFileStorage, MemoryStorage, QueueStorage

__all__ = [
    # Connectivity
    "ConnectivityMonitor",
    "ConnectivityWatcher",
    "probe_connectivity",
    # Records
    "MenuItem",
    "OrderLine",
    "QueuedOrder",
    # Queue store
    "OfflineQueue",
    "JsonFileStorage",
    "MemoryStorage",
    "QueueStorage",
]

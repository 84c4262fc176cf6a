"""
KadePOS - offline order queue for a fast-casual restaurant point of sale.

Orders taken while the backend is unreachable are kept in a durable local
queue and replayed, oldest first, once connectivity returns.

    from kadepos import OfflineQueue, QueueSynchronizer, ConnectivityMonitor
"""

__version__ = "0.4.0"
__author__ = "Kade Kitchen"

from kadepos.core.errors import (
    InvalidOrder,
    KadeError,
    PersistenceError,
    RemoteWriteError,
)
from kadepos.core.events import emit_event
from kadepos.offline.connectivity import ConnectivityMonitor
from kadepos.offline.manager import SyncManager
from kadepos.offline.models import OrderLine, QueuedOrder
from kadepos.offline.queue import OfflineQueue
from kadepos.offline.sync import QueueSynchronizer, SyncResult, SyncTrigger

__all__ = [
    "ConnectivityMonitor",
    "InvalidOrder",
    "KadeError",
    "OfflineQueue",
    "OrderLine",
    "PersistenceError",
    "QueueSynchronizer",
    "QueuedOrder",
    "RemoteWriteError",
    "SyncManager",
    "SyncResult",
    "SyncTrigger",
    "emit_event",
    "__version__",
]

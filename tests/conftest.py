"""Test configuration and fixtures for the offline order queue.

FakeOrderAPI: scriptable stand-in for the hosted backend
Fixtures: storage, queue, monitors and notifier for unit and scenario tests
"""
import asyncio
import os
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

import pytest

from kadepos.core.errors import RemoteWriteError
from kadepos.notify import RecordingNotifier
from kadepos.offline.connectivity import ConnectivityMonitor
from kadepos.offline.models import MenuItem, OrderLine, QueuedOrder
from kadepos.offline.queue import OfflineQueue
from kadepos.offline.storage import MemoryStorage


class FakeOrderAPI:
    """Records every remote call; fails on chosen call numbers (1-based).

    Set gate to an asyncio.Event to hold create_order until it is set.
    """

    def __init__(self, fail_order_calls=(), fail_item_calls=(), menu=None):
        self.fail_order_calls = set(fail_order_calls)
        self.fail_item_calls = set(fail_item_calls)
        self.order_calls: list[dict] = []
        self.item_calls: list[list] = []
        self.menu = list(menu or [])
        self.gate: asyncio.Event | None = None
        self._next_id = 100

    async def create_order(self, total_amount, status, created_at=None):
        self.order_calls.append({
            "total_amount": total_amount,
            "status": status,
            "created_at": created_at,
        })
        if self.gate is not None:
            await self.gate.wait()
        if len(self.order_calls) in self.fail_order_calls:
            raise RemoteWriteError("orders insert failed", stage="order", status_code=503)
        self._next_id += 1
        return self._next_id

    async def create_order_items(self, rows):
        self.item_calls.append(list(rows))
        if len(self.item_calls) in self.fail_item_calls:
            raise RemoteWriteError("order_items insert failed", stage="items", status_code=400)

    async def list_menu_items(self):
        return list(self.menu)

    @property
    def created_totals(self) -> list:
        return [call["total_amount"] for call in self.order_calls]


def make_order(price=100, quantity=2, name="Rice", product_id=1, created_at=None) -> QueuedOrder:
    """Order with a single line."""
    return QueuedOrder.from_items(
        [OrderLine(product_id=product_id, name=name, unit_price=price, quantity=quantity)],
        created_at=created_at,
    )


def frozen_clock(moment=datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)):
    """Clock that never advances."""
    return lambda: moment


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def queue(storage) -> OfflineQueue:
    return OfflineQueue(storage)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def offline_monitor(notifier) -> ConnectivityMonitor:
    return ConnectivityMonitor(False, notifier)


@pytest.fixture
def online_monitor(notifier) -> ConnectivityMonitor:
    return ConnectivityMonitor(True, notifier)


@pytest.fixture
def api() -> FakeOrderAPI:
    return FakeOrderAPI()


@pytest.fixture
def rice() -> MenuItem:
    return MenuItem(id=1, name="Rice", price=100, category="Base")


@pytest.fixture
def chicken() -> MenuItem:
    return MenuItem(id=2, name="Chicken", price=350, category="Protein")

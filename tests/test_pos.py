"""Tests for the cart and checkout flow."""
import asyncio

import pytest
from conftest import FakeOrderAPI

from kadepos.core.constants import NOTICE_NOT_PERSISTED, NOTICE_ORDER_PLACED, NOTICE_SAVED_OFFLINE
from kadepos.core.errors import InvalidOrder, RemoteWriteError
from kadepos.offline.models import OrderLine
from kadepos.pos.cart import Cart
from kadepos.pos.checkout import checkout, offline_reference


class TestCart:
    """Cart arithmetic."""

    def test_add_same_item_bumps_quantity(self, rice):
        """Adding the same item twice bumps the quantity."""
        cart = Cart()
        cart.add(rice)
        cart.add(rice)

        (line,) = cart.lines()
        assert line.quantity == 2
        assert cart.total == 200

    def test_update_quantity_to_zero_removes(self, rice, chicken):
        """Quantity zero removes the line."""
        cart = Cart()
        cart.add(rice)
        cart.add(chicken)

        cart.update_quantity(rice.id, 0)

        assert [line.name for line in cart.lines()] == ["Chicken"]

    def test_update_quantity(self, rice):
        """Quantity can be changed."""
        cart = Cart()
        cart.add(rice)
        cart.update_quantity(rice.id, 5)
        assert cart.total == 500

    def test_remove_and_clear(self, rice, chicken):
        """Lines can be removed and the cart cleared."""
        cart = Cart()
        cart.add(rice)
        cart.add(chicken)
        cart.remove(rice.id)
        assert len(cart) == 1
        cart.clear()
        assert not cart

    def test_add_line_merges(self):
        """Lines for the same product merge."""
        cart = Cart()
        cart.add_line(OrderLine(1, "Rice", 100, 1))
        cart.add_line(OrderLine(1, "Rice", 100, 2))
        assert cart.lines() == [OrderLine(1, "Rice", 100, 3)]


class TestCheckout:
    """Online and offline checkout paths."""

    def test_empty_cart_rejected(self, api, queue, online_monitor):
        """Empty cart cannot be checked out."""
        with pytest.raises(InvalidOrder, match="Cart is empty"):
            asyncio.run(checkout(Cart(), api, queue, online_monitor))

    def test_offline_checkout_queues_order(self, rice, api, queue, offline_monitor, notifier):
        """Offline checkout queues the order and clears the cart."""
        cart = Cart()
        cart.add(rice, quantity=2)

        result = asyncio.run(checkout(cart, api, queue, offline_monitor, notifier))

        assert result.offline
        assert result.reference.startswith("OFF-")
        assert result.total_amount == 200
        assert [o.queued_at for o in queue.list()] == [result.queued_at]
        assert api.order_calls == []
        assert not cart
        assert notifier.messages("success") == [NOTICE_SAVED_OFFLINE]

    def test_offline_checkout_reports_unsaved_order(self, rice, api, storage, queue, offline_monitor, notifier):
        """A queued order that could not be written is flagged, not announced as saved."""
        storage.fail_writes = 2
        cart = Cart()
        cart.add(rice)

        result = asyncio.run(checkout(cart, api, queue, offline_monitor, notifier))

        assert result.offline
        assert not result.persisted
        assert queue.pending_count == 1
        assert notifier.messages("success") == []
        assert notifier.messages("error") == [NOTICE_NOT_PERSISTED]

    def test_online_checkout_creates_remote_order(self, rice, chicken, api, queue, online_monitor, notifier):
        """Online checkout creates order and items."""
        cart = Cart()
        cart.add(rice)
        cart.add(chicken)

        result = asyncio.run(checkout(cart, api, queue, online_monitor, notifier))

        assert not result.offline
        assert result.order_id == 101
        assert api.order_calls == [{"total_amount": 450, "status": "pending", "created_at": None}]
        assert [row.product_id for row in api.item_calls[0]] == [1, 2]
        assert queue.pending_count == 0
        assert notifier.messages("success") == [NOTICE_ORDER_PLACED]

    def test_online_failure_keeps_cart(self, rice, queue, online_monitor):
        """Failed online checkout keeps the cart."""
        cart = Cart()
        cart.add(rice)
        api = FakeOrderAPI(fail_order_calls={1})

        with pytest.raises(RemoteWriteError):
            asyncio.run(checkout(cart, api, queue, online_monitor))

        assert len(cart) == 1
        assert queue.pending_count == 0

    def test_offline_reference_uses_last_digits(self):
        """Offline reference uses the last four digits of the key."""
        assert offline_reference("2026-10-19T12:00:00.001234Z") == "OFF-1234"

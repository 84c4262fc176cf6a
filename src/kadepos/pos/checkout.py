"""Checkout: send an order to the backend, or queue it when offline."""
import logging
from dataclasses import dataclass

from kadepos.core.constants import (
    NOTICE_NOT_PERSISTED,
    NOTICE_ORDER_PLACED,
    NOTICE_SAVED_OFFLINE,
    ORDER_STATUS_PENDING,
)
from kadepos.core.errors import InvalidOrder, RemoteWriteError
from kadepos.core.events import emit_event
from kadepos.notify import Notifier, RecordingNotifier
from kadepos.offline.connectivity import ConnectivityMonitor
from kadepos.offline.models import OrderLine, QueuedOrder
from kadepos.offline.queue import OfflineQueue
from kadepos.pos.cart import Cart
from kadepos.remote.orders import OrderAPI, OrderItemRow

logger = logging.getLogger("kadepos.pos.checkout")


@dataclass(frozen=True)
class CheckoutResult:
    """What checkout produced.

    reference is the remote order id when online, or a temporary
    "OFF-xxxx" reference printed on the receipt when queued.
    persisted is False when a queued order is held in memory only.
    """

    offline: bool
    reference: str
    total_amount: float
    lines: tuple[OrderLine, ...]
    queued_at: str | None = None
    order_id: int | str | None = None
    persisted: bool = True


def offline_reference(queued_at: str) -> str:
    """Temporary receipt reference built from the last four digits of queued_at."""
    digits = "".join(ch for ch in queued_at if ch.isdigit())
    return f"OFF-{digits[-4:]}"


async def checkout(
    cart: Cart,
    api: OrderAPI,
    queue: OfflineQueue,
    monitor: ConnectivityMonitor,
    notifier: Notifier | None = None,
) -> CheckoutResult:
    """Place the cart as an order.

    Offline the order goes to the queue and the cart is cleared. Online the
    order and its items are created directly; a RemoteWriteError propagates
    and the cart is kept so staff can retry.

    Raises:
        InvalidOrder: If the cart is empty
        RemoteWriteError: If an online write fails
    """
    notifier = notifier or RecordingNotifier()
    if not cart:
        raise InvalidOrder("Cart is empty")

    lines = tuple(cart.lines())

    if not monitor.is_online:
        queued = queue.enqueue(QueuedOrder.from_items(lines))
        persisted = queue.last_persistence_error is None
        if persisted:
            notifier.success(NOTICE_SAVED_OFFLINE)
        else:
            logger.error("Order %s queued in memory only: %s", queued.queued_at, queue.last_persistence_error)
            notifier.error(NOTICE_NOT_PERSISTED)
        cart.clear()
        return CheckoutResult(
            offline=True,
            reference=offline_reference(queued.queued_at),
            total_amount=queued.total_amount,
            lines=lines,
            queued_at=queued.queued_at,
            persisted=persisted,
        )

    total = sum(line.line_total for line in lines)
    try:
        order_id = await api.create_order(total_amount=total, status=ORDER_STATUS_PENDING)
        await api.create_order_items([
            OrderItemRow(order_id=order_id, product_id=line.product_id,
                         quantity=line.quantity, unit_price=line.unit_price)
            for line in lines
        ])
    except RemoteWriteError as e:
        logger.warning("Checkout failed at %s stage: %s", e.stage, e)
        raise

    emit_event("checkout_completed", {
        "order_id": order_id,
        "total_amount": total,
        "item_count": len(lines),
    })
    notifier.success(NOTICE_ORDER_PLACED)
    cart.clear()

    return CheckoutResult(
        offline=False,
        reference=str(order_id),
        total_amount=total,
        lines=lines,
        order_id=order_id,
    )

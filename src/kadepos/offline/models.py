"""Order records captured at the point of sale.

A QueuedOrder is built from cart lines when checkout happens offline.
Its total is fixed at that moment and never recomputed from live prices.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone

from kadepos.core.errors import InvalidOrder
from kadepos.core.schemas import ORDER_LINE_SCHEMA, QUEUED_ORDER_SCHEMA, validate_record


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class OrderLine:
    """One product line of an order."""

    product_id: int | str
    name: str
    unit_price: float
    quantity: int

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidOrder(f"quantity for {self.name!r} must be an integer")
        if self.quantity < 1:
            raise InvalidOrder(f"quantity for {self.name!r} must be at least 1")
        if isinstance(self.unit_price, bool) or not isinstance(self.unit_price, (int, float)):
            raise InvalidOrder(f"unit_price for {self.name!r} must be a number")
        if self.unit_price < 0:
            raise InvalidOrder(f"unit_price for {self.name!r} must not be negative")

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OrderLine":
        validate_record(data, ORDER_LINE_SCHEMA, kind="order line")
        return cls(
            product_id=data["product_id"],
            name=data["name"],
            unit_price=data["unit_price"],
            quantity=data["quantity"],
        )


@dataclass(frozen=True)
class QueuedOrder:
    """An order waiting in the offline queue.

    queued_at is the queue's primary key and is assigned by OfflineQueue.
    created_at is business time and is sent unchanged when the order syncs.
    """

    items: tuple[OrderLine, ...]
    total_amount: float
    created_at: str
    queued_at: str = ""

    @classmethod
    def from_items(cls, items, created_at: str | None = None) -> "QueuedOrder":
        """Build an order from lines, fixing its total now.

        Args:
            items: Iterable of OrderLine
            created_at: Business timestamp; defaults to now

        Raises:
            InvalidOrder: If there are no lines
        """
        lines = tuple(items)
        if not lines:
            raise InvalidOrder("order must contain at least one item")
        total = sum(line.line_total for line in lines)
        return cls(items=lines, total_amount=total, created_at=created_at or utc_now_iso())

    def to_dict(self) -> dict:
        return {
            "items": [line.to_dict() for line in self.items],
            "total_amount": self.total_amount,
            "created_at": self.created_at,
            "queued_at": self.queued_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QueuedOrder":
        """Restore a persisted order exactly as stored."""
        validate_record(data, QUEUED_ORDER_SCHEMA, kind="queued order")
        return cls(
            items=tuple(OrderLine.from_dict(item) for item in data["items"]),
            total_amount=data["total_amount"],
            created_at=data["created_at"],
            queued_at=data["queued_at"],
        )


@dataclass(frozen=True)
class MenuItem:
    """A sellable product from the hosted catalog."""

    id: int | str
    name: str
    price: float
    category: str = ""
    is_available: bool = True
    extra: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_row(cls, row: dict) -> "MenuItem":
        known = {"id", "name", "price", "category", "is_available"}
        return cls(
            id=row["id"],
            name=row["name"],
            price=row["price"],
            category=row.get("category") or "",
            is_available=row.get("is_available", True),
            extra={k: v for k, v in row.items() if k not in known},
        )

"""In-memory cart for the order entry screen."""
from kadepos.offline.models import MenuItem, OrderLine


class Cart:
    """Product lines keyed by product id, in the order first added."""

    def __init__(self):
        self._lines: dict[int | str, OrderLine] = {}

    def add(self, item: MenuItem, quantity: int = 1) -> OrderLine:
        """Add item, bumping the quantity if it is already in the cart."""
        existing = self._lines.get(item.id)
        if existing:
            line = OrderLine(existing.product_id, existing.name, existing.unit_price,
                             existing.quantity + quantity)
        else:
            line = OrderLine(item.id, item.name, item.price, quantity)
        self._lines[item.id] = line
        return line

    def add_line(self, line: OrderLine) -> None:
        existing = self._lines.get(line.product_id)
        if existing:
            line = OrderLine(line.product_id, line.name, existing.unit_price,
                             existing.quantity + line.quantity)
        self._lines[line.product_id] = line

    def remove(self, product_id: int | str) -> None:
        self._lines.pop(product_id, None)

    def update_quantity(self, product_id: int | str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        existing = self._lines.get(product_id)
        if existing is None:
            return
        if quantity <= 0:
            del self._lines[product_id]
            return
        self._lines[product_id] = OrderLine(existing.product_id, existing.name,
                                            existing.unit_price, quantity)

    def lines(self) -> list[OrderLine]:
        return list(self._lines.values())

    @property
    def total(self) -> float:
        return sum(line.line_total for line in self._lines.values())

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

"""Order entry CLI commands."""
import asyncio
import sys

import click

from kadepos.core.errors import InvalidOrder, RemoteWriteError
from kadepos.notify import ConsoleNotifier
from kadepos.offline.connectivity import ConnectivityMonitor
from kadepos.offline.models import OrderLine
from kadepos.pos.cart import Cart
from kadepos.pos.checkout import checkout

from . import runtime
from .output import format_amount, print_error, print_json, table


def parse_item(spec: str) -> OrderLine:
    """Parse PRODUCT_ID:NAME:PRICE:QTY into an order line."""
    parts = spec.split(":")
    if len(parts) < 4:
        raise click.BadParameter(f"'{spec}' is not PRODUCT_ID:NAME:PRICE:QTY")

    product_id, name = parts[0], ":".join(parts[1:-2])
    try:
        price = float(parts[-2])
        quantity = int(parts[-1])
    except ValueError:
        raise click.BadParameter(f"bad price or quantity in '{spec}'")
    if price.is_integer():
        price = int(price)

    try:
        return OrderLine(int(product_id) if product_id.isdigit() else product_id,
                         name, price, quantity)
    except InvalidOrder as e:
        raise click.BadParameter(str(e))


@click.group()
def order():
    """Order entry commands."""
    pass


@order.command()
@click.option('--item', 'items', multiple=True, required=True, metavar='ID:NAME:PRICE:QTY',
              help='Order line; repeat for more lines')
@click.option('--offline', 'force_offline', is_flag=True, help='Queue the order without contacting the backend')
def place(items: tuple[str, ...], force_offline: bool):
    """Check out one order."""
    cart = Cart()
    for spec in items:
        cart.add_line(parse_item(spec))

    settings = runtime.load_settings()
    notifier = ConsoleNotifier()
    online = not force_offline and runtime.is_backend_reachable(settings)
    monitor = ConnectivityMonitor(online, notifier)
    queue = runtime.build_queue(settings)

    try:
        result = asyncio.run(checkout(cart, runtime.build_api(settings), queue, monitor, notifier))
    except RemoteWriteError as e:
        print_error(f"Failed to place order. Please try again. ({e})")
        sys.exit(1)

    table(
        ["Qty", "Item", "Each", "Total"],
        [[str(line.quantity), line.name, format_amount(line.unit_price), format_amount(line.line_total)]
         for line in result.lines],
    )
    print_json({
        "reference": result.reference,
        "offline": result.offline,
        "total_amount": result.total_amount,
        "queued_at": result.queued_at,
        "persisted": result.persisted,
        "pending_count": queue.pending_count,
    })
    if not result.persisted:
        print_error(f"Order {result.reference} was not saved to disk and is lost when this command exits. "
                    f"({queue.last_persistence_error})")
        sys.exit(1)

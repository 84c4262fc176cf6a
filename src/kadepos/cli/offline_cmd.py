"""Offline queue CLI commands."""
import asyncio
import sys

import click

from kadepos.core.constants import DEFAULT_WATCH_INTERVAL_SECONDS
from kadepos.notify import ConsoleNotifier
from kadepos.offline.connectivity import ConnectivityMonitor, ConnectivityWatcher
from kadepos.offline.manager import SyncIndicator, SyncManager
from kadepos.offline.sync import QueueSynchronizer, SyncTrigger

from . import runtime
from .output import format_amount, print_error, print_json, print_success, table


@click.group()
def offline():
    """Offline queue commands."""
    pass


@offline.command()
def status():
    """Show offline queue status."""
    settings = runtime.load_settings()
    queue = runtime.build_queue(settings)
    monitor = runtime.build_monitor(settings, ConsoleNotifier())

    error = queue.last_persistence_error
    print_json({
        "pending_count": queue.pending_count,
        "connected": monitor.is_online,
        "indicator": SyncIndicator.of(queue, monitor).to_dict(),
        "storage_path": str(settings.storage_path),
        "persistence_error": str(error) if error else None,
        "rejected_records": queue.rejected_count,
        "set_aside_path": queue.set_aside_path,
    })


@offline.command('queue')
@click.option('--limit', '-n', default=10, help='Number of orders to show')
def show_queue(limit: int):
    """List pending orders, oldest first."""
    settings = runtime.load_settings()
    queue = runtime.build_queue(settings)
    orders = queue.peek(limit)

    if not orders:
        click.echo("Queue is empty")
        return

    click.echo(f"Showing {len(orders)} of {queue.pending_count} pending orders:\n")
    table(
        ["Queued at", "Created at", "Items", "Total"],
        [
            [o.queued_at, o.created_at, str(sum(line.quantity for line in o.items)),
             format_amount(o.total_amount)]
            for o in orders
        ],
    )


@offline.command('sync')
@click.option('--force', is_flag=True, help='Force sync attempt even if not connected')
def do_sync(force: bool):
    """Replay queued orders to the backend."""
    settings = runtime.load_settings()
    queue = runtime.build_queue(settings)

    if queue.pending_count == 0:
        click.echo("Queue is empty")
        return

    if not runtime.is_backend_reachable(settings) and not force:
        print_error("Not connected. Use --force to attempt anyway.")
        sys.exit(1)

    notifier = ConsoleNotifier()
    monitor = ConnectivityMonitor(True, notifier)
    synchronizer = QueueSynchronizer(
        queue,
        runtime.build_api(settings),
        monitor,
        notifier,
        min_retry_interval=settings.min_retry_seconds,
    )
    result = asyncio.run(synchronizer.trigger(SyncTrigger.MANUAL))

    print_json({**result.to_dict(), "pending_count": queue.pending_count})
    if result.failed:
        print_error(f"Sync stopped at {result.failed_queued_at}: {result.error}")
        sys.exit(1)


@offline.command()
def clear():
    """Drop every queued order (use after manual recovery)."""
    settings = runtime.load_settings()
    queue = runtime.build_queue(settings)
    size = queue.pending_count
    if size == 0:
        click.echo("Queue already empty")
        return

    if click.confirm(f"Clear {size} pending orders?"):
        queue.clear()
        print_success("Queue cleared")


@offline.command()
def connected():
    """Check if the backend is reachable."""
    settings = runtime.load_settings()
    is_connected = runtime.is_backend_reachable(settings)
    host, port = settings.probe_address()
    print_json({
        "connected": is_connected,
        "status": "online" if is_connected else "offline",
        "probe": f"{host}:{port}",
    })


async def _watch(settings, interval: float):
    notifier = ConsoleNotifier()
    queue = runtime.build_queue(settings)
    monitor = runtime.build_monitor(settings, notifier)
    synchronizer = QueueSynchronizer(
        queue,
        runtime.build_api(settings),
        monitor,
        notifier,
        min_retry_interval=settings.min_retry_seconds,
    )

    watcher = ConnectivityWatcher(monitor, lambda: runtime.is_backend_reachable(settings), interval)
    async with SyncManager(queue, monitor, synchronizer) as manager, watcher:
        click.echo(manager.indicator().label or "Online, queue empty")
        while True:
            await asyncio.sleep(interval)
            label = manager.indicator().label
            if label:
                click.echo(label)


@offline.command()
@click.option('--interval', default=DEFAULT_WATCH_INTERVAL_SECONDS, show_default=True,
              help='Seconds between connectivity probes')
def watch(interval: float):
    """Stay running and sync whenever the backend comes back."""
    settings = runtime.load_settings()
    try:
        asyncio.run(_watch(settings, interval))
    except KeyboardInterrupt:
        click.echo("Stopped")

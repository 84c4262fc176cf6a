"""Connectivity tracking for the point of sale.

ConnectivityMonitor owns the single is_online flag. It is driven purely by
online/offline signals; whatever produces those signals (an OS hook, a
host application, or ConnectivityWatcher below) calls handle_online() and
handle_offline().
"""
import asyncio
import logging
import socket
from typing import Callable

from kadepos.core.constants import (
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    DEFAULT_WATCH_INTERVAL_SECONDS,
    NOTICE_BACK_ONLINE,
    NOTICE_WENT_OFFLINE,
)
from kadepos.core.events import emit_event
from kadepos.core.subscriptions import Subscribers, Subscription
from kadepos.notify import Notifier, RecordingNotifier

logger = logging.getLogger("kadepos.offline.connectivity")


def probe_connectivity(
    host: str,
    port: int,
    timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
) -> bool:
    """Check if the backend accepts TCP connections.

    Args:
        host: Backend host
        port: Backend port
        timeout: Connection timeout in seconds

    Returns:
        True if the backend is reachable
    """
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class ConnectivityMonitor:
    """Translate online/offline signals into shared state and notices."""

    def __init__(self, initial_online: bool, notifier: Notifier | None = None):
        self._online = bool(initial_online)
        self.notifier = notifier or RecordingNotifier()
        self._listeners = Subscribers("connectivity")

    @property
    def is_online(self) -> bool:
        return self._online

    def handle_online(self):
        """Platform reported the network is back."""
        if self._online:
            return
        self._online = True
        emit_event("connectivity_changed", {"online": True})
        self.notifier.success(NOTICE_BACK_ONLINE)
        self._listeners.notify(True)

    def handle_offline(self):
        """Platform reported the network is gone."""
        if not self._online:
            return
        self._online = False
        emit_event("connectivity_changed", {"online": False})
        self.notifier.warning(NOTICE_WENT_OFFLINE)
        self._listeners.notify(False)

    def subscribe(self, callback: Callable[[bool], None]) -> Subscription:
        """Call callback(online) on every transition."""
        return self._listeners.add(callback)


class ConnectivityWatcher:
    """Signal source for hosts with no native network notifications.

    Runs probe() every interval seconds on a worker thread and forwards
    changes to the monitor.
    """

    def __init__(
        self,
        monitor: ConnectivityMonitor,
        probe: Callable[[], bool],
        interval: float = DEFAULT_WATCH_INTERVAL_SECONDS,
    ):
        self.monitor = monitor
        self.probe = probe
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check_once(self) -> bool:
        online = await asyncio.to_thread(self.probe)
        if online:
            self.monitor.handle_online()
        else:
            self.monitor.handle_offline()
        return online

    async def _run(self):
        while True:
            await self.check_once()
            await asyncio.sleep(self.interval)

    def start(self):
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def __aenter__(self) -> "ConnectivityWatcher":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

"""Build the queue, monitor and backend client from settings for CLI commands."""
from kadepos.config.settings import Settings
from kadepos.notify import Notifier
from kadepos.offline.connectivity import ConnectivityMonitor, probe_connectivity
from kadepos.offline.queue import OfflineQueue
from kadepos.offline.storage import JsonFileStorage
from kadepos.remote.orders import RestOrderAPI


def load_settings() -> Settings:
    return Settings.from_env()


def build_queue(settings: Settings) -> OfflineQueue:
    return OfflineQueue(JsonFileStorage(settings.storage_path))


def build_api(settings: Settings) -> RestOrderAPI:
    return RestOrderAPI.from_settings(settings)


def is_backend_reachable(settings: Settings) -> bool:
    host, port = settings.probe_address()
    return probe_connectivity(host, port, settings.probe_timeout_seconds)


def build_monitor(settings: Settings, notifier: Notifier) -> ConnectivityMonitor:
    """Monitor whose initial state comes from one probe of the backend."""
    return ConnectivityMonitor(is_backend_reachable(settings), notifier)

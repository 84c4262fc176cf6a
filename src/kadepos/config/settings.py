"""KadePOS runtime settings.

All settings can be overridden via environment variables with the
KADEPOS_ prefix.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from kadepos.core.constants import (
    DEFAULT_MIN_RETRY_SECONDS,
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_MS,
    STORAGE_RECORD_NAME,
)


@dataclass
class Settings:
    """KadePOS configuration."""

    # Hosted backend
    backend_url: str = "http://localhost:54321"
    api_key: str = ""
    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS

    # Local durable storage
    storage_dir: Path = field(default_factory=lambda: Path.home() / ".kadepos")

    # Connectivity probe; empty host/zero port fall back to the backend URL
    probe_host: str = ""
    probe_port: int = 0
    probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS

    # Sync pacing after a failed drain pass
    min_retry_seconds: float = DEFAULT_MIN_RETRY_SECONDS

    @property
    def storage_path(self) -> Path:
        """Path of the durable queue record."""
        return self.storage_dir / f"{STORAGE_RECORD_NAME}.json"

    def probe_address(self) -> tuple[str, int]:
        """Host and port used to decide whether the backend is reachable."""
        parsed = urlparse(self.backend_url)
        host = self.probe_host or parsed.hostname or "localhost"
        port = self.probe_port or parsed.port or (443 if parsed.scheme == "https" else 80)
        return host, port

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration from environment variables."""
        config = cls()

        if "KADEPOS_BACKEND_URL" in os.environ:
            config.backend_url = os.environ["KADEPOS_BACKEND_URL"].rstrip("/")
        if "KADEPOS_API_KEY" in os.environ:
            config.api_key = os.environ["KADEPOS_API_KEY"]
        if "KADEPOS_REQUEST_TIMEOUT_MS" in os.environ:
            config.request_timeout_ms = int(os.environ["KADEPOS_REQUEST_TIMEOUT_MS"])

        if "KADEPOS_STORAGE_DIR" in os.environ:
            config.storage_dir = Path(os.environ["KADEPOS_STORAGE_DIR"]).expanduser()

        if "KADEPOS_PROBE_HOST" in os.environ:
            config.probe_host = os.environ["KADEPOS_PROBE_HOST"]
        if "KADEPOS_PROBE_PORT" in os.environ:
            config.probe_port = int(os.environ["KADEPOS_PROBE_PORT"])
        if "KADEPOS_PROBE_TIMEOUT_SECONDS" in os.environ:
            config.probe_timeout_seconds = float(os.environ["KADEPOS_PROBE_TIMEOUT_SECONDS"])

        if "KADEPOS_MIN_RETRY_SECONDS" in os.environ:
            config.min_retry_seconds = float(os.environ["KADEPOS_MIN_RETRY_SECONDS"])

        return config


DEFAULT_SETTINGS = Settings()

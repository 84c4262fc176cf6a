"""Runtime configuration for KadePOS."""
from .settings import DEFAULT_SETTINGS, Settings

__all__ = ["DEFAULT_SETTINGS", "Settings"]

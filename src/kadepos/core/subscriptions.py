"""Callback registration with scoped release.

Listeners are registered with Subscribers.add() and released through the
returned Subscription, either explicitly or by leaving a ``with`` block.
"""
import logging
from typing import Callable

logger = logging.getLogger("kadepos.subscriptions")


class Subscription:
    """Handle for one registered callback."""

    def __init__(self, owner: "Subscribers", callback: Callable):
        self._owner = owner
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        """Release the callback. Safe to call more than once."""
        if self.active:
            self._owner.discard(self._callback)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class Subscribers:
    """Ordered set of callbacks notified with the same arguments."""

    def __init__(self, name: str):
        self.name = name
        self._callbacks: list[Callable] = []

    def add(self, callback: Callable) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(self, callback)

    def discard(self, callback: Callable) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def notify(self, *args) -> None:
        """Call every callback; one failing listener does not stop the rest."""
        for callback in list(self._callbacks):
            try:
                callback(*args)
            except Exception:
                logger.exception("%s listener %r failed", self.name, callback)

    def __len__(self) -> int:
        return len(self._callbacks)

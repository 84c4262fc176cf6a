"""Exception types raised across KadePOS."""


class KadeError(Exception):
    """Base class for all KadePOS errors."""


class RemoteWriteError(KadeError):
    """A request to the hosted backend failed.

    stage names the request that failed: "order", "items" or "menu".
    status_code is the HTTP status when the backend answered at all.
    """

    def __init__(self, message: str, stage: str = "order", status_code: int | None = None):
        super().__init__(message)
        self.stage = stage
        self.status_code = status_code


class PersistenceError(KadeError):
    """The offline queue could not be read from or written to durable storage."""


class InvalidOrder(KadeError, ValueError):
    """An order or order line violates the data model."""

"""Core subpackage: events, errors, constants and record schemas."""
from .constants import (
    DEFAULT_MIN_RETRY_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_MS,
    ORDER_STATUS_PENDING,
    STORAGE_RECORD_KEY,
    STORAGE_RECORD_NAME,
)
from .errors import InvalidOrder, KadeError, PersistenceError, RemoteWriteError
from .events import emit_event, payload_hash
from .schemas import ORDER_LINE_SCHEMA, QUEUED_ORDER_SCHEMA, validate_record

__all__ = [
    # Events
    "emit_event",
    "payload_hash",
    # Errors
    "InvalidOrder",
    "KadeError",
    "PersistenceError",
    "RemoteWriteError",
    # Schemas
    "ORDER_LINE_SCHEMA",
    "QUEUED_ORDER_SCHEMA",
    "validate_record",
    # Constants
    "DEFAULT_MIN_RETRY_SECONDS",
    "DEFAULT_REQUEST_TIMEOUT_MS",
    "ORDER_STATUS_PENDING",
    "STORAGE_RECORD_KEY",
    "STORAGE_RECORD_NAME",
]

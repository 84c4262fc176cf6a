"""Structured event primitives used by every KadePOS module.

Functions:
    payload_hash: SHA-256 hash of a JSON-serialized payload
    emit_event: Emit an event with required fields to the event log
"""
import hashlib
import json
import logging
from datetime import datetime, timezone

logger = logging.getLogger("kadepos.events")


def payload_hash(data: bytes | str | dict) -> str:
    """Compute the hex SHA-256 of data.

    Dicts are serialized with sorted keys and compact separators so equal
    payloads always hash equally.
    """
    if isinstance(data, dict):
        data = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def emit_event(event_type: str, data: dict) -> dict:
    """Emit an event with standard required fields.

    Writes one sorted JSON line to the ``kadepos.events`` logger at INFO.

    Args:
        event_type: Type of event (offline_enqueue, sync_completed, ...)
        data: Event payload data

    Returns:
        Complete event dict with event_type, ts, payload_hash
    """
    event = {
        "event_type": event_type,
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "payload_hash": payload_hash(data),
        **data,
    }

    logger.info(json.dumps(event, sort_keys=True, default=str))

    return event

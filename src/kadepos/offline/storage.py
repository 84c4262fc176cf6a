"""Durable storage for the offline queue.

The queue is persisted as a single named JSON record:

    {"offline_queue": [<queued order>, ...]}

Only the queue is persisted; connectivity and sync state live in memory.
"""
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from kadepos.core.constants import STORAGE_RECORD_KEY
from kadepos.core.errors import PersistenceError


class QueueStorage(Protocol):
    """Read/write port for the persisted queue."""

    def read(self) -> list[dict]:
        ...

    def write(self, records: list[dict]) -> None:
        ...

    def set_aside(self) -> str | None:
        ...


class JsonFileStorage:
    """Queue record stored as a JSON file on local disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self) -> list[dict]:
        """Load the queued records, oldest first.

        Returns:
            Records as stored; empty if the file does not exist yet

        Raises:
            PersistenceError: If the file cannot be read or decoded
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path) as f:
                state = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(state, dict) or not isinstance(state.get(STORAGE_RECORD_KEY, []), list):
            raise PersistenceError(f"Unexpected layout in {self.path}")
        return state.get(STORAGE_RECORD_KEY, [])

    def write(self, records: list[dict]) -> None:
        """Replace the stored queue with records.

        Writes a sibling temp file then moves it into place, so a crash
        leaves either the old or the new queue on disk.

        Raises:
            PersistenceError: On any filesystem or encoding failure
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump({STORAGE_RECORD_KEY: records}, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e

    def set_aside(self) -> str | None:
        """Move the stored file out of the way so no write replaces it.

        Returns:
            Path of the moved file, or None if there was nothing to move

        Raises:
            PersistenceError: If the file cannot be renamed
        """
        if not self.path.exists():
            return None
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            os.replace(self.path, target)
        except OSError as e:
            raise PersistenceError(f"Cannot move {self.path} aside: {e}") from e
        return str(target)


class MemoryStorage:
    """In-process queue storage for tests and dry runs.

    Set fail_writes to make the next N writes raise PersistenceError.
    """

    def __init__(self, records: list[dict] | None = None):
        self.records = [dict(r) for r in records or []]
        self.fail_writes = 0
        self.write_count = 0
        self.set_aside_records: list[list[dict]] = []

    def read(self) -> list[dict]:
        return json.loads(json.dumps(self.records))

    def write(self, records: list[dict]) -> None:
        self.write_count += 1
        if self.fail_writes:
            self.fail_writes -= 1
            raise PersistenceError("simulated write failure")
        try:
            self.records = json.loads(json.dumps(records))
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot encode queue: {e}") from e

    def set_aside(self) -> str | None:
        if not self.records:
            return None
        self.set_aside_records.append(self.records)
        self.records = []
        return "memory"

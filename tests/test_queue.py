"""Tests for the offline queue store."""
import logging
from datetime import datetime, timezone

from conftest import frozen_clock, make_order

from kadepos.core.errors import PersistenceError
from kadepos.offline.models import OrderLine, QueuedOrder
from kadepos.offline.queue import OfflineQueue
from kadepos.offline.storage import JsonFileStorage, MemoryStorage


class TestEnqueue:
    """Appending orders."""

    def test_list_returns_insertion_order(self, queue):
        """Orders come back in insertion order."""
        orders = [queue.enqueue(make_order(price=p)) for p in (100, 200, 300, 400)]

        assert queue.list() == orders
        assert [o.total_amount for o in queue.list()] == [200, 400, 600, 800]

    def test_queued_at_assigned(self, queue):
        """Enqueue assigns a queued_at key."""
        queued = queue.enqueue(make_order())

        assert queued.queued_at
        assert queued.queued_at.endswith("Z")

    def test_queued_at_unique_under_frozen_clock(self, storage):
        """Orders enqueued in the same clock tick still get distinct keys."""
        queue = OfflineQueue(storage, clock=frozen_clock())

        keys = [queue.enqueue(make_order()).queued_at for _ in range(5)]

        assert len(set(keys)) == 5
        assert keys == sorted(keys)

    def test_total_fixed_at_enqueue(self, queue):
        """Total is fixed when the order is queued."""
        queued = queue.enqueue(make_order(price=100, quantity=2))
        assert queued.total_amount == 200
        assert queue.list()[0].total_amount == 200

    def test_every_mutation_written_through(self, storage, queue):
        """Each mutation writes storage once."""
        queue.enqueue(make_order())
        assert len(storage.records) == 1

        second = queue.enqueue(make_order(price=50))
        assert [r["queued_at"] for r in storage.records][-1] == second.queued_at

    def test_list_is_a_copy(self, queue):
        """list() returns a copy."""
        queue.enqueue(make_order())
        snapshot = queue.list()
        snapshot.clear()
        assert len(queue) == 1


class TestDequeue:
    """Removing orders by key."""

    def test_dequeue_removes_matching(self, queue):
        """Dequeue removes only the matching order."""
        a = queue.enqueue(make_order(price=1))
        b = queue.enqueue(make_order(price=2))
        c = queue.enqueue(make_order(price=3))

        assert queue.dequeue(b.queued_at) is True
        assert queue.list() == [a, c]

    def test_dequeue_unknown_key_is_noop(self, storage, queue):
        """Unknown key changes nothing and writes nothing."""
        queue.enqueue(make_order())
        before = queue.list()
        writes = storage.write_count

        assert queue.dequeue("1999-01-01T00:00:00.000000Z") is False
        assert queue.list() == before
        assert storage.write_count == writes

    def test_dequeue_twice_is_idempotent(self, queue):
        """Second dequeue of the same key is a no-op."""
        a = queue.enqueue(make_order())
        assert queue.dequeue(a.queued_at) is True
        assert queue.dequeue(a.queued_at) is False
        assert queue.list() == []


class TestDurability:
    """Queue survives restarts."""

    def test_restart_preserves_order(self, tmp_path):
        """Reopening the store restores the same queue."""
        path = tmp_path / "kade-offline-storage.json"
        first = OfflineQueue(JsonFileStorage(path))
        orders = [first.enqueue(make_order(price=p)) for p in (10, 20, 30)]

        reopened = OfflineQueue(JsonFileStorage(path))

        assert reopened.list() == orders

    def test_new_keys_follow_loaded_keys(self, tmp_path):
        """A clock that went backwards across a restart cannot reuse a key."""
        path = tmp_path / "kade-offline-storage.json"
        first = OfflineQueue(JsonFileStorage(path))
        existing = first.enqueue(make_order())

        reopened = OfflineQueue(JsonFileStorage(path), clock=frozen_clock(datetime(2000, 1, 1, tzinfo=timezone.utc)))
        added = reopened.enqueue(make_order())

        assert added.queued_at > existing.queued_at

    def test_malformed_record_kept_on_disk(self):
        """A record that fails validation is not loaded but survives later writes."""
        good = {
            "items": [{"product_id": 1, "name": "Rice", "unit_price": 100, "quantity": 1}],
            "total_amount": 100,
            "created_at": "2026-10-19T08:00:00Z",
            "queued_at": "2026-10-19T08:00:00.000001Z",
        }
        broken = {"items": "broken"}
        storage = MemoryStorage([broken, good])

        queue = OfflineQueue(storage)
        assert [o.queued_at for o in queue.list()] == [good["queued_at"]]
        assert queue.rejected_count == 1

        queue.enqueue(make_order())
        queue.dequeue(good["queued_at"])

        assert storage.records[0] == broken
        assert len(storage.records) == 2

    def test_unreadable_storage_moved_aside(self, tmp_path):
        """Garbage on disk is renamed before the first write can replace it."""
        path = tmp_path / "kade-offline-storage.json"
        path.write_text("garbage")

        queue = OfflineQueue(JsonFileStorage(path))

        assert queue.list() == []
        assert queue.last_persistence_error is not None
        assert not path.exists()
        (moved,) = tmp_path.glob("kade-offline-storage.json.corrupt-*")
        assert str(moved) == queue.set_aside_path
        assert moved.read_text() == "garbage"

    def test_truncated_file_survives_next_enqueue(self, tmp_path, caplog):
        """Orders in a damaged file are still on disk after new orders are queued."""
        path = tmp_path / "kade-offline-storage.json"
        existing = OfflineQueue(JsonFileStorage(path)).enqueue(make_order())
        path.write_bytes(path.read_bytes()[:-3])

        with caplog.at_level(logging.ERROR, logger="kadepos.offline.queue"):
            reopened = OfflineQueue(JsonFileStorage(path))
        added = reopened.enqueue(make_order())

        (moved,) = tmp_path.glob("kade-offline-storage.json.corrupt-*")
        assert existing.queued_at in moved.read_text()
        assert [o.queued_at for o in OfflineQueue(JsonFileStorage(path)).list()] == [added.queued_at]
        assert "moved to" in caplog.text

    def test_nothing_to_move_aside_when_read_fails_without_file(self):
        """Storage that cannot be read and holds nothing leaves set_aside_path empty."""
        class UnreadableStorage(MemoryStorage):
            def read(self):
                raise PersistenceError("unreadable")

        queue = OfflineQueue(UnreadableStorage())

        assert queue.set_aside_path is None
        assert queue.last_persistence_error is not None


class TestPersistenceFailure:
    """Storage write failures never lose the order in memory."""

    def test_single_failure_retried(self, storage, queue):
        """One failed write is retried."""
        storage.fail_writes = 1

        queued = queue.enqueue(make_order())

        assert storage.records[0]["queued_at"] == queued.queued_at
        assert queue.last_persistence_error is None

    def test_persistent_failure_keeps_order_in_memory(self, storage, queue, caplog):
        """Two failed writes keep the order in memory and record the error."""
        storage.fail_writes = 2

        with caplog.at_level(logging.WARNING, logger="kadepos.offline.queue"):
            queued = queue.enqueue(make_order())

        assert queue.list() == [queued]
        assert storage.records == []
        assert queue.last_persistence_error is not None
        assert "not persisted" in caplog.text

    def test_next_successful_write_clears_error(self, storage, queue):
        """A later successful write clears the error."""
        storage.fail_writes = 2
        queue.enqueue(make_order())
        assert queue.last_persistence_error is not None

        queue.enqueue(make_order())

        assert queue.last_persistence_error is None
        assert len(storage.records) == 2

    def test_unencodable_order_recorded_not_raised(self, storage, queue):
        """An encoding failure is a persistence failure, not an exception from enqueue."""
        order = QueuedOrder.from_items([OrderLine(product_id=object(), name="Rice", unit_price=100, quantity=1)])

        queued = queue.enqueue(order)

        assert queue.list() == [queued]
        assert queue.last_persistence_error is not None
        assert storage.records == []


class TestSubscriptions:
    """Queue change listeners."""

    def test_listener_called_on_each_mutation(self, queue):
        """Listeners fire on every mutation."""
        seen = []
        queue.subscribe(lambda q: seen.append(q.pending_count))

        a = queue.enqueue(make_order())
        queue.enqueue(make_order())
        queue.dequeue(a.queued_at)
        queue.dequeue("missing")

        assert seen == [1, 2, 1]

    def test_unsubscribe_on_scope_exit(self, queue):
        """Scoped subscriptions are released on exit."""
        seen = []
        with queue.subscribe(lambda q: seen.append(q.pending_count)):
            queue.enqueue(make_order())
        queue.enqueue(make_order())

        assert seen == [1]

    def test_failing_listener_does_not_block_mutation(self, queue):
        """A broken listener does not undo the mutation."""
        def broken(_):
            raise RuntimeError("listener bug")

        queue.subscribe(broken)
        queue.enqueue(make_order())

        assert queue.pending_count == 1

    def test_clear_drops_everything(self, storage, queue):
        """Clear empties the queue and storage."""
        queue.enqueue(make_order())
        queue.enqueue(make_order())

        queue.clear()

        assert queue.list() == []
        assert storage.records == []

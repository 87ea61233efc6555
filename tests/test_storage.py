"""
Tests for storage backends and transaction support
"""

import pytest
from datetime import datetime, timezone

from transfer_ledger.errors import UpstreamFailure
from transfer_ledger.storage import InMemoryStorage, SQLiteStorage, parse_timestamp


test_data = {
    "id": "test_001",
    "client_id": "client-1",
    "amount": "100.50",
    "status": "pending"
}


@pytest.fixture(params=["memory", "sqlite"])
def storage(request):
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLiteStorage(":memory:")
    yield backend
    backend.close()


class TestStorageBackends:
    """Behaviour shared by every backend"""

    def test_save_and_load(self, storage):
        storage.save("transfers", "test_001", test_data)
        assert storage.load("transfers", "test_001") == test_data

    def test_load_missing(self, storage):
        assert storage.load("transfers", "missing") is None

    def test_save_replaces(self, storage):
        storage.save("transfers", "test_001", test_data)
        storage.save("transfers", "test_001", {**test_data, "status": "completed"})

        assert storage.load("transfers", "test_001")["status"] == "completed"
        assert storage.count("transfers") == 1

    def test_loaded_records_are_copies(self, storage):
        storage.save("transfers", "test_001", test_data)
        loaded = storage.load("transfers", "test_001")
        loaded["status"] = "failed"

        assert storage.load("transfers", "test_001")["status"] == "pending"

    def test_find(self, storage):
        storage.save("transfers", "a", {"id": "a", "client_id": "c1", "status": "pending"})
        storage.save("transfers", "b", {"id": "b", "client_id": "c1", "status": "completed"})
        storage.save("transfers", "c", {"id": "c", "client_id": "c2", "status": "completed"})

        assert {r["id"] for r in storage.find("transfers", {"client_id": "c1"})} == {"a", "b"}
        assert [r["id"] for r in storage.find("transfers", {"client_id": "c1", "status": "completed"})] == ["b"]
        assert storage.find("transfers", {"parent_transfer_id": "a"}) == []

    def test_delete(self, storage):
        storage.save("transfers", "test_001", test_data)

        assert storage.delete("transfers", "test_001") is True
        assert storage.delete("transfers", "test_001") is False
        assert not storage.exists("transfers", "test_001")

    def test_load_all_and_clear(self, storage):
        storage.save("clients", "1", {"id": "1"})
        storage.save("clients", "2", {"id": "2"})

        assert len(storage.load_all("clients")) == 2
        storage.clear_table("clients")
        assert storage.load_all("clients") == []
        assert storage.count("clients") == 0

    def test_tables_are_independent(self, storage):
        storage.save("clients", "1", {"id": "1"})
        assert storage.load("companies", "1") is None


class TestSQLiteStorage:
    """SQLite-specific behaviour"""

    def test_atomic_rollback(self):
        storage = SQLiteStorage(":memory:")
        storage.save("transfers", "kept", {"id": "kept"})

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("transfers", "dropped", {"id": "dropped"})
                raise RuntimeError("boom")

        assert storage.load("transfers", "dropped") is None
        assert storage.load("transfers", "kept") == {"id": "kept"}

    def test_atomic_commit(self):
        storage = SQLiteStorage(":memory:")
        with storage.atomic():
            storage.save("transfers", "a", {"id": "a"})
            storage.save("transfers", "b", {"id": "b"})

        assert storage.count("transfers") == 2

    def test_persistence_across_connections(self, tmp_path):
        db_path = tmp_path / "ledger.db"
        storage = SQLiteStorage(db_path)
        storage.save("transfers", "test_001", test_data)
        storage.close()

        reopened = SQLiteStorage(db_path)
        assert reopened.load("transfers", "test_001") == test_data
        reopened.close()

    def test_backend_failure_is_upstream_failure(self):
        storage = SQLiteStorage(":memory:")
        storage.save("transfers", "test_001", test_data)
        storage.close()

        with pytest.raises(UpstreamFailure) as exc_info:
            storage.load("transfers", "test_001")
        assert exc_info.value.__cause__ is not None

    def test_unknown_table_after_close(self):
        storage = SQLiteStorage(":memory:")
        storage.close()

        with pytest.raises(UpstreamFailure):
            storage.save("never_created", "x", {"id": "x"})


class TestParseTimestamp:
    def test_naive_is_utc(self):
        assert parse_timestamp("2024-03-15T10:00:00") == datetime(2024, 3, 15, 10, tzinfo=timezone.utc)

    def test_aware_is_kept(self):
        parsed = parse_timestamp("2024-03-15T10:00:00+02:00")
        assert parsed == datetime(2024, 3, 15, 8, tzinfo=timezone.utc)

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-03-15T10:00:00Z") == datetime(2024, 3, 15, 10, tzinfo=timezone.utc)

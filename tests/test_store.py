import copy
import json
import threading
import time

import pytest

from hut.datastore import JsonStore
from hut.models import empty_document, repair_document


def append_marker(value, gate=None):
    def mutator(data):
        if gate is not None:
            assert gate.wait(timeout=5)
        data["notifications"].append({"id": f"marker-{value}", "body": str(value)})
        return value

    return mutator


class TestWriteQueue:
    def test_mutators_run_in_submission_order(self, store):
        gate = threading.Event()
        futures = [store.submit(append_marker(0, gate))]
        futures += [store.submit(append_marker(value)) for value in range(1, 6)]
        gate.set()

        assert [future.result(timeout=5) for future in futures] == list(range(6))
        bodies = [row["body"] for row in store.snapshot()["notifications"]]
        assert bodies == [str(value) for value in range(6)]

    def test_only_one_mutator_runs_at_a_time(self, store):
        active = []
        overlaps = []
        lock = threading.Lock()

        def mutator(data):
            with lock:
                active.append(1)
                if len(active) > 1:
                    overlaps.append(len(active))
            time.sleep(0.01)
            with lock:
                active.pop()

        threads = [threading.Thread(target=store.write, args=(mutator,)) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)
        assert overlaps == []

    def test_write_returns_mutator_value(self, store):
        assert store.write(lambda data: len(data["hotels"])) == 2

    def test_failed_mutator_does_not_stall_queue(self, store, data_file):
        def explode(data):
            data["notifications"].append({"id": "partial", "body": "half done"})
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            store.write(explode)
        assert store.write(append_marker("after")) == "after"

        on_disk = json.loads(data_file.read_text(encoding="utf-8"))
        assert [row["id"] for row in on_disk["notifications"]] == ["partial", "marker-after"]

    def test_failed_persist_discards_unsaved_change(self, store, data_file, monkeypatch):
        def broken_disk(data):
            raise OSError("disk full")

        monkeypatch.setattr(store, "_persist", broken_disk)
        with pytest.raises(OSError, match="disk full"):
            store.write(append_marker("lost"))
        assert store.snapshot()["notifications"] == []

        monkeypatch.undo()
        store.write(append_marker("kept"))
        on_disk = json.loads(data_file.read_text(encoding="utf-8"))
        assert [row["id"] for row in on_disk["notifications"]] == ["marker-kept"]
        assert store.snapshot() == on_disk

    def test_persist_failure_keeps_mutator_error_as_context(self, store, monkeypatch):
        def broken_disk(data):
            raise OSError("disk full")

        def explode(data):
            raise RuntimeError("boom")

        monkeypatch.setattr(store, "_persist", broken_disk)
        with pytest.raises(OSError) as exc:
            store.write(explode)
        assert isinstance(exc.value.__context__, RuntimeError)

    def test_every_write_is_persisted(self, store, data_file):
        store.write(append_marker(1))
        on_disk = json.loads(data_file.read_text(encoding="utf-8"))
        assert on_disk["notifications"][0]["body"] == "1"
        assert on_disk["notifications"][0]["status"] == "queued"

    def test_reload_from_disk(self, store, data_file):
        store.write(append_marker(7))
        store.close()
        fresh = JsonStore(data_file)
        try:
            assert fresh.snapshot()["notifications"][0]["body"] == "7"
        finally:
            fresh.close()


class TestSnapshots:
    def test_snapshot_is_independent_of_later_writes(self, store):
        before = store.snapshot()
        store.write(append_marker(1))
        assert before["notifications"] == []
        assert len(store.snapshot()["notifications"]) == 1

    def test_mutating_a_snapshot_does_not_touch_the_store(self, store):
        snapshot = store.snapshot()
        snapshot["hotels"].clear()
        snapshot["users"][0]["wallet_balance"] = 10**9
        fresh = store.snapshot()
        assert len(fresh["hotels"]) == 2
        assert fresh["users"][0]["wallet_balance"] == 0

    def test_get_record_copies_one_record(self, store, monkeypatch):
        monkeypatch.setattr(store, "snapshot", lambda: pytest.fail("whole document copied"))
        record = store.get_record("users", "user-ada")
        assert record["email"] == "ada@example.com"
        record["wallet_balance"] = 10**9
        assert store.get_record("users", "user-ada")["wallet_balance"] == 0
        assert store.get_record("users", "user-nobody") is None
        assert store.get_record("hotels", "user-ada") is None

    def test_snapshot_does_not_wait_for_running_writer(self, store):
        gate = threading.Event()
        future = store.submit(append_marker("slow", gate))
        try:
            assert store.snapshot()["notifications"] == []
        finally:
            gate.set()
        future.result(timeout=5)
        assert len(store.snapshot()["notifications"]) == 1


class TestShapeRepair:
    def test_missing_file_starts_empty(self, tmp_path):
        store = JsonStore(tmp_path / "nested" / "missing.json")
        try:
            assert store.snapshot() == empty_document()
            store.write(lambda data: None)
            assert (tmp_path / "nested" / "missing.json").exists()
        finally:
            store.close()

    def test_empty_file_starts_empty(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("  \n", encoding="utf-8")
        store = JsonStore(path)
        try:
            assert store.snapshot() == empty_document()
        finally:
            store.close()

    def test_old_documents_are_backfilled(self, tmp_path):
        path = tmp_path / "legacy.json"
        path.write_text(
            json.dumps(
                {
                    "hotels": [{"id": "h1", "name": "Old Hotel"}],
                    "users": [{"id": "u1", "email": "old@example.com", "wallet_balance": None}],
                    "payments": "corrupt",
                    "bookings": [{"id": "b1"}, "stray"],
                }
            ),
            encoding="utf-8",
        )
        store = JsonStore(path)
        try:
            data = store.snapshot()
        finally:
            store.close()

        assert data["users"][0]["wallet_balance"] == 0
        assert data["users"][0]["hotel_ids"] == []
        assert data["hotels"][0]["cancellation_policy"] == "moderate"
        assert data["payments"] == []
        assert [row["id"] for row in data["bookings"]] == ["b1"]
        assert data["bookings"][0]["status"] == "pending_payment"
        assert data["fraud_events"] == []
        assert data["platform"]["default_commission_rate"] == 0.12

    def test_repair_is_idempotent(self):
        data = {"users": [{"id": "u1"}], "payments": [{"id": "p1", "settled": None}], "platform": None}
        once = copy.deepcopy(repair_document(data))
        assert once["payments"][0]["settled"] is False
        assert repair_document(data) == once

    def test_repaired_legacy_file_is_stable_on_disk(self, tmp_path):
        path = tmp_path / "legacy.json"
        path.write_text(
            json.dumps(
                {
                    "hotels": [{"id": "h1", "name": "Old Hotel", "premium_listing_active": None}],
                    "users": [{"id": "u1", "email": "old@example.com"}],
                    "bookings": [{"id": "b1", "pricing": None}],
                    "platform": {"name": "HuT!"},
                }
            ),
            encoding="utf-8",
        )
        store = JsonStore(path)
        try:
            store.write(lambda data: None)
        finally:
            store.close()
        first = path.read_bytes()

        store = JsonStore(path)
        try:
            store.write(lambda data: None)
        finally:
            store.close()
        assert path.read_bytes() == first

        loaded = json.loads(first)
        assert repair_document(copy.deepcopy(loaded)) == loaded

    def test_existing_values_are_kept(self):
        data = {"users": [{"id": "u1", "wallet_balance": 4200, "role": "platform_admin"}]}
        repair_document(data)
        assert data["users"][0]["wallet_balance"] == 4200
        assert data["users"][0]["role"] == "platform_admin"

    def test_non_object_document_rejected(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        store = JsonStore(path)
        try:
            with pytest.raises(ValueError):
                store.snapshot()
        finally:
            store.close()

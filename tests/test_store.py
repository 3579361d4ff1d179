import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from cleancity.issues import create_issue
from cleancity.models import IssueCategory, IssueCreate
from cleancity.store import JsonFileStore, MemoryStore, StoreEvent, open_store
from cleancity.workers import seed_default_workers

from conftest import T0


def _new(store, description="Streetlight flickering", category=IssueCategory.STREET_LIGHT, now=T0):
    return create_issue(store, IssueCreate(description=description, category=category), now=now)


# ═══════════════════════════════════════════════════════════════════════════════
# MEMORY STORE
# ═══════════════════════════════════════════════════════════════════════════════

class TestMemoryStore:
    def test_get_returns_copy(self, store):
        issue = _new(store)
        fetched = store.get_issue(issue.id)
        fetched.title = "mutated outside the store"
        assert store.get_issue(issue.id).title != "mutated outside the store"

    def test_missing_ids(self, store):
        assert store.get_issue("nope") is None
        assert store.get_worker("nope") is None

    def test_workers_keep_insertion_order(self, seeded_store):
        assert [w.id for w in seeded_store.list_workers()] == ["w-san-1", "w-plu-1", "w-ele-1", "w-gen-1"]


# ═══════════════════════════════════════════════════════════════════════════════
# EVENTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestEventChannel:
    def test_create_and_update_events(self, store):
        seen = []
        store.events.subscribe(seen.append)
        issue = _new(store)
        store.put_issue(issue)
        assert seen == [StoreEvent("issue.created", issue.id), StoreEvent("issue.updated", issue.id)]

    def test_worker_events(self, store):
        seen = []
        store.events.subscribe(seen.append)
        seed_default_workers(store)
        assert {e.kind for e in seen} == {"worker.created"}
        assert len(seen) == 4

    def test_unsubscribe_stops_delivery(self, store):
        seen = []
        unsubscribe = store.events.subscribe(seen.append)
        _new(store)
        unsubscribe()
        _new(store)
        assert len(seen) == 1

    def test_failing_subscriber_does_not_block_others(self, store):
        seen = []

        def broken(event):
            raise RuntimeError("subscriber down")

        store.events.subscribe(broken)
        store.events.subscribe(seen.append)
        issue = _new(store)
        assert seen == [StoreEvent("issue.created", issue.id)]
        assert store.get_issue(issue.id) is not None


# ═══════════════════════════════════════════════════════════════════════════════
# JSON FILE STORE
# ═══════════════════════════════════════════════════════════════════════════════

class TestJsonFileStore:
    def test_round_trip_across_instances(self, tmp_path):
        path = tmp_path / "data" / "issues.json"
        first = JsonFileStore(path)
        seed_default_workers(first)
        issue = _new(first)

        second = JsonFileStore(path)
        assert second.get_issue(issue.id) == issue
        assert [w.id for w in second.list_workers()] == [w.id for w in first.list_workers()]

    def test_file_layout(self, tmp_path):
        path = tmp_path / "issues.json"
        store = JsonFileStore(path)
        issue = _new(store)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["workers"] == []
        assert data["issues"][0]["id"] == issue.id
        assert data["issues"][0]["category"] == "Street Light"

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "absent.json")
        assert store.list_issues() == []
        assert not (tmp_path / "absent.json").exists()

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileStore(path)
        assert store.list_issues() == []
        assert store.list_workers() == []

    def test_invalid_records_load_empty(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_text(json.dumps({"issues": [{"id": "x"}]}), encoding="utf-8")
        assert JsonFileStore(path).list_issues() == []

    @pytest.mark.parametrize("content", [
        {"issues": None, "workers": None},
        {"issues": 5},
        {"workers": "w-san-1"},
        ["not", "an", "object"],
    ])
    def test_wrong_shape_loads_empty(self, tmp_path, content):
        path = tmp_path / "issues.json"
        path.write_text(json.dumps(content), encoding="utf-8")
        store = JsonFileStore(path)
        assert store.list_issues() == []
        assert store.list_workers() == []

    def test_concurrent_writes_keep_file_valid(self, tmp_path):
        path = tmp_path / "issues.json"
        store = JsonFileStore(path)

        def submit_many(n):
            return [_new(store, description=f"Report {n}-{k}").id for k in range(40)]

        with ThreadPoolExecutor(max_workers=4) as pool:
            ids = [i for batch in pool.map(submit_many, range(4)) for i in batch]

        assert len(store.list_issues()) == 160
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data["issues"]) == 160
        reloaded = JsonFileStore(path)
        assert sorted(i.id for i in reloaded.list_issues()) == sorted(ids)
        assert not (tmp_path / "issues.json.tmp").exists()


# ═══════════════════════════════════════════════════════════════════════════════
# FACTORY
# ═══════════════════════════════════════════════════════════════════════════════

class TestOpenStore:
    def test_memory(self):
        assert isinstance(open_store("memory"), MemoryStore)

    def test_json(self, tmp_path):
        store = open_store("json", data_file=str(tmp_path / "x.json"))
        assert isinstance(store, JsonFileStore)

    def test_json_requires_path(self):
        with pytest.raises(ValueError):
            open_store("json")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown store backend"):
            open_store("sqlite")

# Repository layer: issue and worker persistence behind one interface
#
# Backends: in-memory dicts, a single JSON document on disk, or MongoDB.
# Every write publishes a StoreEvent so dashboards and notifiers can
# subscribe instead of polling the backing store.

import os
import json
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional

from pymongo import MongoClient

from .models import Issue, Worker

logger = logging.getLogger(__name__)


class StoreEvent(NamedTuple):
    kind: str          # issue.created | issue.updated | worker.created | worker.updated
    entity_id: str


class EventChannel:
    """In-process publish/subscribe for store changes."""

    def __init__(self):
        self._subscribers: List[Callable[[StoreEvent], None]] = []

    def subscribe(self, callback: Callable[[StoreEvent], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def publish(self, event: StoreEvent):
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Store subscriber failed on %s %s", event.kind, event.entity_id)


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------
class Store:
    name = "base"

    def __init__(self):
        self.events = EventChannel()

    # -- issues --
    def list_issues(self) -> List[Issue]:
        raise NotImplementedError

    def get_issue(self, issue_id: str) -> Optional[Issue]:
        raise NotImplementedError

    def put_issue(self, issue: Issue):
        created = self.get_issue(issue.id) is None
        self._save_issue(issue)
        self.events.publish(StoreEvent("issue.created" if created else "issue.updated", issue.id))

    # -- workers --
    def list_workers(self) -> List[Worker]:
        raise NotImplementedError

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        raise NotImplementedError

    def put_worker(self, worker: Worker):
        created = self.get_worker(worker.id) is None
        self._save_worker(worker)
        self.events.publish(StoreEvent("worker.created" if created else "worker.updated", worker.id))

    def close(self):
        pass

    def _save_issue(self, issue: Issue):
        raise NotImplementedError

    def _save_worker(self, worker: Worker):
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------
class MemoryStore(Store):
    """Dict-backed store. Records are copied in and out so callers cannot
    mutate stored state without going through put_*. Safe to share across
    the server's executor threads."""

    name = "memory"

    def __init__(self):
        super().__init__()
        self._lock = threading.RLock()
        self._issues: Dict[str, Issue] = {}
        self._workers: Dict[str, Worker] = {}

    def list_issues(self) -> List[Issue]:
        with self._lock:
            return [i.model_copy(deep=True) for i in self._issues.values()]

    def get_issue(self, issue_id: str) -> Optional[Issue]:
        with self._lock:
            issue = self._issues.get(issue_id)
            return issue.model_copy(deep=True) if issue else None

    def list_workers(self) -> List[Worker]:
        with self._lock:
            return [w.model_copy(deep=True) for w in self._workers.values()]

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        with self._lock:
            worker = self._workers.get(worker_id)
            return worker.model_copy(deep=True) if worker else None

    def _save_issue(self, issue: Issue):
        with self._lock:
            self._issues[issue.id] = issue.model_copy(deep=True)

    def _save_worker(self, worker: Worker):
        with self._lock:
            self._workers[worker.id] = worker.model_copy(deep=True)


class JsonFileStore(MemoryStore):
    """Whole-document JSON file, rewritten on every put.

    Each flush writes a sibling temp file and swaps it in with os.replace,
    so a reader never sees a half-written document.
    """

    name = "json"

    def __init__(self, path):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            for raw in data.get("issues") or []:
                issue = Issue.model_validate(raw)
                self._issues[issue.id] = issue
            for raw in data.get("workers") or []:
                worker = Worker.model_validate(raw)
                self._workers[worker.id] = worker
        except (json.JSONDecodeError, ValueError, AttributeError, TypeError) as e:
            logger.warning("Ignoring unreadable data file %s: %s", self.path, e)
            self._issues.clear()
            self._workers.clear()

    def _flush(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "issues": [i.model_dump(mode="json") for i in self._issues.values()],
            "workers": [w.model_dump(mode="json") for w in self._workers.values()],
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    def _save_issue(self, issue: Issue):
        with self._lock:
            super()._save_issue(issue)
            self._flush()

    def _save_worker(self, worker: Worker):
        with self._lock:
            super()._save_worker(worker)
            self._flush()


class MongoStore(Store):
    name = "mongo"

    def __init__(self, url: str, db_name: str):
        super().__init__()
        self.client = MongoClient(url)
        self.db = self.client[db_name]
        self.db.issues.create_index("created_at")
        self.db.issues.create_index("status")

    @staticmethod
    def _strip_id(doc: dict) -> dict:
        doc.pop("_id", None)
        return doc

    def list_issues(self) -> List[Issue]:
        return [Issue.model_validate(self._strip_id(d)) for d in self.db.issues.find()]

    def get_issue(self, issue_id: str) -> Optional[Issue]:
        doc = self.db.issues.find_one({"_id": issue_id})
        return Issue.model_validate(self._strip_id(doc)) if doc else None

    def list_workers(self) -> List[Worker]:
        return [Worker.model_validate(self._strip_id(d)) for d in self.db.workers.find()]

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        doc = self.db.workers.find_one({"_id": worker_id})
        return Worker.model_validate(self._strip_id(doc)) if doc else None

    def _save_issue(self, issue: Issue):
        doc = {"_id": issue.id, **issue.model_dump(mode="json")}
        self.db.issues.replace_one({"_id": issue.id}, doc, upsert=True)

    def _save_worker(self, worker: Worker):
        doc = {"_id": worker.id, **worker.model_dump(mode="json")}
        self.db.workers.replace_one({"_id": worker.id}, doc, upsert=True)

    def close(self):
        self.client.close()


def open_store(backend: str, data_file: Optional[str] = None,
               mongodb_url: Optional[str] = None, mongodb_db: Optional[str] = None) -> Store:
    if backend == "memory":
        store = MemoryStore()
    elif backend == "json":
        if not data_file:
            raise ValueError("JSON store requires a data file path")
        store = JsonFileStore(data_file)
    elif backend == "mongo":
        if not mongodb_url or not mongodb_db:
            raise ValueError("Mongo store requires a URL and database name")
        store = MongoStore(mongodb_url, mongodb_db)
    else:
        raise ValueError(f"Unknown store backend: {backend}")
    logger.info("Opened %s store", store.name)
    return store

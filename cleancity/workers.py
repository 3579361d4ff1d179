# Field-worker directory: seeding, listing, activation

import logging
from typing import List, Optional

from .models import Worker
from .seed.workers import DEFAULT_WORKERS
from .store import Store

logger = logging.getLogger(__name__)


class DuplicateWorkerError(ValueError):
    """A worker with this id is already on the roster."""


def list_workers(store: Store, active_only: bool = False) -> List[Worker]:
    workers = store.list_workers()
    if active_only:
        return [w for w in workers if w.active]
    return workers


def seed_default_workers(store: Store) -> List[Worker]:
    """Write the default roster when the store holds no workers yet."""
    existing = store.list_workers()
    if existing:
        return existing
    workers = [Worker.model_validate(w) for w in DEFAULT_WORKERS]
    for w in workers:
        store.put_worker(w)
    logger.info("Seeded %d default workers", len(workers))
    return workers


def add_worker(store: Store, worker: Worker) -> Worker:
    if store.get_worker(worker.id) is not None:
        raise DuplicateWorkerError(f"Worker '{worker.id}' already exists")
    store.put_worker(worker)
    return worker


def set_worker_active(store: Store, worker_id: str, active: bool) -> Optional[Worker]:
    worker = store.get_worker(worker_id)
    if worker is None:
        return None
    worker.active = active
    store.put_worker(worker)
    logger.info("Worker %s marked %s", worker_id, "active" if active else "inactive")
    return worker

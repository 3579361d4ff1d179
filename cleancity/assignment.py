# Nearest-worker assignment
#
# Each issue category routes to one worker role; General workers are
# eligible for every category. Among eligible active workers the one
# closest to the issue wins, ties going to the earlier worker in roster
# order.

import logging
from enum import Enum
from typing import List, NamedTuple, Optional

from .geo import distance
from .issues import update_issue
from .models import Issue, IssueCategory, IssuePatch, Worker, WorkerRole
from .store import Store

logger = logging.getLogger(__name__)

CATEGORY_ROLES = {
    IssueCategory.GARBAGE: WorkerRole.SANITATION,
    IssueCategory.BROKEN_PIPELINE: WorkerRole.PLUMBER,
    IssueCategory.STREET_LIGHT: WorkerRole.ELECTRICIAN,
}


class AssignmentOutcome(str, Enum):
    ASSIGNED = "assigned"
    NOT_FOUND = "not_found"
    MISSING_LOCATION = "missing_location"
    NO_ELIGIBLE_WORKER = "no_eligible_worker"


class AssignmentResult(NamedTuple):
    outcome: AssignmentOutcome
    worker: Optional[Worker] = None
    distance_m: Optional[float] = None
    issue: Optional[Issue] = None

    @property
    def assigned(self) -> bool:
        return self.outcome == AssignmentOutcome.ASSIGNED


def role_for_category(category: IssueCategory) -> WorkerRole:
    return CATEGORY_ROLES.get(category, WorkerRole.GENERAL)


def match_worker(issue: Issue, workers: List[Worker]) -> AssignmentResult:
    if issue.location is None:
        return AssignmentResult(AssignmentOutcome.MISSING_LOCATION, issue=issue)
    role = role_for_category(issue.category)
    candidates = [w for w in workers
                  if w.active and (w.role == role or w.role == WorkerRole.GENERAL)]
    if not candidates:
        return AssignmentResult(AssignmentOutcome.NO_ELIGIBLE_WORKER, issue=issue)

    best, best_dist = None, float("inf")
    for w in candidates:
        d = distance(issue.location, w.location)
        # strict < keeps the first worker on ties
        if d < best_dist:
            best, best_dist = w, d
    if best is None:
        # every distance was NaN
        return AssignmentResult(AssignmentOutcome.NO_ELIGIBLE_WORKER, issue=issue)
    return AssignmentResult(AssignmentOutcome.ASSIGNED, worker=best, distance_m=best_dist, issue=issue)


def nearest_worker(issue: Issue, workers: List[Worker]) -> Optional[Worker]:
    return match_worker(issue, workers).worker


def assign_issue_to_nearest(store: Store, issue_id: str, now: Optional[int] = None) -> AssignmentResult:
    issue = store.get_issue(issue_id)
    if issue is None:
        return AssignmentResult(AssignmentOutcome.NOT_FOUND)
    result = match_worker(issue, store.list_workers())
    if not result.assigned:
        logger.info("Issue %s left unassigned: %s", issue_id, result.outcome.value)
        return result
    updated = update_issue(store, issue_id, IssuePatch(assigned_to_worker_id=result.worker.id), now=now)
    logger.info("Issue %s assigned to %s (%.0f m)", issue_id, result.worker.id, result.distance_m)
    return result._replace(issue=updated)

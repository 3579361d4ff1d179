# Issue lifecycle: citizen submission, admin patches, dashboard filtering

import logging
from typing import List, Optional

from .config import SLA_WINDOW_MS, new_id, now_ms
from .models import Issue, IssueCreate, IssuePatch, IssueStatus
from .store import Store

logger = logging.getLogger(__name__)


class ProofRequiredError(ValueError):
    """Completing an issue needs a proof image."""


# optional fields an admin may reset to null
CLEARABLE_FIELDS = {"proof_image_url", "assigned_to_worker_id", "address", "location"}


def create_issue(store: Store, fields: IssueCreate, now: Optional[int] = None) -> Issue:
    now = now_ms() if now is None else now
    title = (fields.title or "").strip() or f"{fields.category.value} issue"
    issue = Issue(
        id=new_id(), title=title, description=fields.description.strip(),
        category=fields.category, image_data_url=fields.image_data_url,
        location=fields.location, address=(fields.address or "").strip() or None,
        status=IssueStatus.PENDING, created_at=now, updated_at=now,
        due_at=now + SLA_WINDOW_MS, created_by=fields.created_by,
    )
    store.put_issue(issue)
    logger.info("Issue %s created (%s)", issue.id, issue.category.value)
    return issue


def update_issue(store: Store, issue_id: str, patch: IssuePatch,
                 now: Optional[int] = None) -> Optional[Issue]:
    """Apply the fields set on *patch*. Returns None for an unknown id.

    id, created_at and due_at are not patchable, so the SLA window stays
    anchored at creation.
    """
    issue = store.get_issue(issue_id)
    if issue is None:
        return None
    changes = {k: getattr(patch, k) for k in patch.model_fields_set
               if getattr(patch, k) is not None or k in CLEARABLE_FIELDS}
    updated = issue.model_copy(update=changes)
    completing = "status" in changes or "proof_image_url" in changes
    if completing and updated.status == IssueStatus.COMPLETED and not updated.proof_image_url:
        raise ProofRequiredError("A proof image is required to mark an issue Completed")
    now = now_ms() if now is None else now
    updated.updated_at = max(now, issue.created_at)
    store.put_issue(updated)
    return updated


def list_issues(store: Store) -> List[Issue]:
    """All issues, newest first."""
    return sorted(store.list_issues(), key=lambda i: i.created_at, reverse=True)


def filter_issues(issues: List[Issue], status: Optional[IssueStatus] = None,
                  search: Optional[str] = None, created_by: Optional[str] = None) -> List[Issue]:
    out = []
    q = search.lower() if search else None
    for i in issues:
        if status is not None and i.status != status:
            continue
        # a reporter sees their own issues plus unattributed ones
        if created_by is not None and i.created_by not in (created_by, None):
            continue
        if q and not (q in i.title.lower() or q in i.description.lower()
                      or q in i.category.value.lower()):
            continue
        out.append(i)
    return out

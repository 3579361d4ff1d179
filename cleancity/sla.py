# 24h SLA evaluation. Pure functions, re-evaluated on every read; nothing
# here schedules or pushes escalations. Notifiers poll overdue_issues().

from typing import List, Optional

from .config import HOUR_MS, now_ms
from .models import Issue, IssueStatus, SlaStatus


def is_overdue(issue: Issue, now: int) -> bool:
    return issue.due_at < now and issue.status != IssueStatus.COMPLETED


def hours_remaining(issue: Issue, now: int) -> int:
    """Whole hours until due, floored and clamped at zero."""
    return max(0, (issue.due_at - now) // HOUR_MS)


def sla_status(issue: Issue, now: Optional[int] = None) -> SlaStatus:
    now = now_ms() if now is None else now
    return SlaStatus(overdue=is_overdue(issue, now),
                     hours_remaining=hours_remaining(issue, now),
                     due_at=issue.due_at)


def overdue_issues(issues: List[Issue], now: int) -> List[Issue]:
    return [i for i in issues if is_overdue(i, now)]

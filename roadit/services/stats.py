# roadit/services/stats.py
import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from roadit.core.clock import utcnow
from roadit.schemas.issue import Issue, IssueStatus, IssueType

OVERDUE_AFTER = timedelta(days=7)
CLOSED = (IssueStatus.resolved, IssueStatus.cannot_action)


def is_overdue(issue: Issue, now: Optional[datetime] = None) -> bool:
    """Not yet Resolved and submitted more than a week ago. Cannot Action still counts."""
    now = now or utcnow()
    return issue.status != IssueStatus.resolved and issue.submitted_at < now - OVERDUE_AFTER


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def summary(issues: Iterable[Issue], now: Optional[datetime] = None) -> dict:
    issues = list(issues)
    now = now or utcnow()
    by_status = {s.value: 0 for s in IssueStatus}
    for i in issues:
        by_status[i.status.value] += 1
    return {
        "total": len(issues),
        "resolved": by_status[IssueStatus.resolved.value],
        "open": sum(1 for i in issues if i.status not in CLOSED),
        "overdue": sum(1 for i in issues if is_overdue(i, now)),
        "byStatus": by_status,
    }


def by_type(issues: Iterable[Issue]) -> List[dict]:
    issues = list(issues)
    out = []
    for t in IssueType:
        of_type = [i for i in issues if i.type == t]
        out.append({
            "type": t.value,
            "total": len(of_type),
            "resolved": sum(1 for i in of_type if i.status == IssueStatus.resolved),
        })
    return out


def resolution_time(issues: Iterable[Issue]) -> List[dict]:
    """Average whole days from report to resolution, per issue type."""
    issues = list(issues)
    out = []
    for t in IssueType:
        resolved = [
            i for i in issues
            if i.type == t and i.status == IssueStatus.resolved and i.resolved_at
        ]
        if not resolved:
            out.append({"type": t.value, "averageDays": 0})
            continue
        # whole elapsed days per issue, like a calendar "days between" count
        total_days = sum((i.resolved_at - i.submitted_at).days for i in resolved)
        out.append({"type": t.value, "averageDays": _round_half_up(total_days / len(resolved))})
    return out

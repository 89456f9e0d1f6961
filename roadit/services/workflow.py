# roadit/services/workflow.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from roadit.schemas.issue import IssueStatus, StatusUpdateResult

if TYPE_CHECKING:
    from roadit.services.store import IssueStore

logger = logging.getLogger(__name__)

Transitions = Mapping[IssueStatus, frozenset]

NOT_FOUND = "Issue not found."
FAILED = "Failed to update status."


def next_resolved_at(
    old_status: IssueStatus,
    new_status: IssueStatus,
    old_resolved_at: Optional[datetime],
    now: datetime,
) -> Optional[datetime]:
    """resolvedAt after a status change: stamped on entering Resolved, kept while it stays Resolved, cleared otherwise."""
    if new_status != IssueStatus.resolved:
        return None
    if old_status == IssueStatus.resolved and old_resolved_at is not None:
        return old_resolved_at
    return now


class _StatusChange(BaseModel):
    issue_id: str = Field(min_length=1)
    status: IssueStatus

    @field_validator("issue_id", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


_MESSAGES = {
    "issue_id": "Issue ID cannot be empty.",
    "status": "Status must be one of: " + ", ".join(s.value for s in IssueStatus) + ".",
}


def _describe(e: ValidationError) -> str:
    fields = []
    for err in e.errors():
        field = str(err["loc"][0]) if err["loc"] else ""
        if field not in fields:
            fields.append(field)
    return " ".join(_MESSAGES.get(f, f"Invalid {f}.") for f in fields)


class StatusWorkflow:
    """The single entry point for changing an issue's status.

    Any status may follow any other unless a ``transitions`` table is given,
    mapping each status to the set of statuses it may move to.
    """

    def __init__(self, store: IssueStore, transitions: Optional[Transitions] = None):
        self.store = store
        self.transitions = transitions

    def set_status(self, issue_id, status) -> StatusUpdateResult:
        try:
            change = _StatusChange(issue_id=issue_id, status=status)
        except ValidationError as e:
            message = _describe(e)
            logger.warning(f"Status update validation failed: {message}")
            return StatusUpdateResult(success=False, error=f"Invalid input: {message}")

        try:
            with self.store.lock:
                if self.transitions is not None:
                    current = self.store.get(change.issue_id)
                    if current is None:
                        return self._not_found(change.issue_id)
                    allowed = self.transitions.get(current.status, frozenset())
                    if change.status not in allowed:
                        return StatusUpdateResult(
                            success=False,
                            error=f"Cannot change status from {current.status.value} to {change.status.value}.",
                        )

                issue = self.store.update_status(change.issue_id, change.status)
        except Exception as e:
            logger.error(f"Failed to update status for issue {change.issue_id}: {e}", exc_info=True)
            return StatusUpdateResult(success=False, error=FAILED)

        if issue is None:
            return self._not_found(change.issue_id)
        return StatusUpdateResult(success=True, issue=issue)

    @staticmethod
    def _not_found(issue_id: str) -> StatusUpdateResult:
        logger.warning(f"Issue not found for ID: {issue_id}")
        return StatusUpdateResult(success=False, error=NOT_FOUND)

# roadit/services/store.py
import logging
import threading
from datetime import datetime
from functools import lru_cache
from typing import Callable, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from roadit.core.clock import as_utc, truncate_ms, utcnow
from roadit.schemas.issue import Issue, IssueDraft, IssueStatus
from roadit.services.seed import SEED_ISSUES
from roadit.services.storage import SlotStorage, StorageUnavailable
from roadit.services.workflow import next_resolved_at

logger = logging.getLogger(__name__)

_issue_list = TypeAdapter(List[Issue])


def dump_issues(issues: Iterable[Issue]) -> str:
    return _issue_list.dump_json(list(issues), by_alias=True, exclude_none=True).decode("utf-8")


def load_issues(payload: str) -> List[Issue]:
    issues = _issue_list.validate_json(payload)
    seen = set()
    for issue in issues:
        if issue.id in seen:
            raise ValueError(f"duplicate issue id {issue.id!r}")
        seen.add(issue.id)
    return issues


class IssueStore:
    """Canonical issue list, most recent first, kept as one JSON document in a storage slot.

    Every operation reads the slot, works on the decoded list and writes the
    whole list back. The lock serializes those read-modify-write sequences
    between request threads of this process.
    """

    def __init__(
        self,
        storage: SlotStorage,
        clock: Callable[[], datetime] = utcnow,
        seed: Iterable[Issue] = SEED_ISSUES,
    ):
        self.storage = storage
        self.clock = clock
        self.seed = tuple(seed)
        self.lock = threading.RLock()

    def get_all(self) -> List[Issue]:
        with self.lock:
            issues, _ = self._read()
            return issues

    def get(self, issue_id: str) -> Optional[Issue]:
        for issue in self.get_all():
            if issue.id == issue_id:
                return issue
        return None

    def add(self, draft: IssueDraft) -> Issue:
        with self.lock:
            issues, persistent = self._read()
            now = self._now()
            issue = Issue(
                **draft.model_dump(exclude={"status"}),
                status=IssueStatus.received,
                id=self._new_id(issues, now),
                submitted_at=now,
                updated_at=now,
            )
            issues.insert(0, issue)
            if persistent:
                self._write(issues)
            logger.info(f"Issue {issue.id} reported ({issue.type.value}, {issue.municipality.value})")
            return issue

    def update_status(self, issue_id: str, status: IssueStatus) -> Optional[Issue]:
        """Returns the updated issue, or None when no issue has this id."""
        with self.lock:
            issues, persistent = self._read()
            index = next((i for i, issue in enumerate(issues) if issue.id == issue_id), None)
            if index is None:
                return None
            old = issues[index]
            now = self._now()
            updated = old.model_copy(update={
                "status": status,
                "updated_at": now,
                "resolved_at": next_resolved_at(old.status, status, old.resolved_at, now),
            })
            issues[index] = updated
            if persistent:
                self._write(issues)
            logger.info(f"Issue {issue_id} status {old.status.value} -> {status.value}")
            return updated

    def _now(self) -> datetime:
        return truncate_ms(as_utc(self.clock()))

    def _read(self) -> tuple[List[Issue], bool]:
        """Current list plus whether the storage slot can be written back."""
        try:
            payload = self.storage.load()
        except StorageUnavailable:
            logger.warning("Issue storage unavailable; serving seed data without persisting")
            return list(self.seed), False

        if payload is None:
            issues = list(self.seed)
            return issues, self._write(issues)

        try:
            return load_issues(payload), True
        except (ValidationError, ValueError) as e:
            logger.warning(f"Stored issues are corrupt, resetting to seed data: {e}")
            issues = list(self.seed)
            return issues, self._write(issues)

    def _write(self, issues: List[Issue]) -> bool:
        try:
            self.storage.save(dump_issues(issues))
            return True
        except StorageUnavailable:
            logger.warning("Issue storage unavailable; change kept in memory only")
            return False

    @staticmethod
    def _new_id(issues: List[Issue], now: datetime) -> str:
        taken = {issue.id for issue in issues}
        candidate = round(now.timestamp() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)


@lru_cache
def get_issue_store() -> IssueStore:
    from roadit.core.config import settings
    from roadit.db.session import SessionLocal
    from roadit.services.storage import DatabaseSlotStorage

    return IssueStore(DatabaseSlotStorage(SessionLocal, settings.issues_storage_key))

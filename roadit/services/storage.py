# roadit/services/storage.py
"""Named-slot storage backends for the issue store.

A backend holds one opaque string under one key. ``load`` returns ``None``
when the slot has never been written. Both operations raise
``StorageUnavailable`` when the backend cannot be reached at all.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from roadit.models.storage_slot import StorageSlot

logger = logging.getLogger(__name__)


class StorageUnavailable(Exception):
    pass


class SlotStorage(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, payload: str) -> None: ...


class MemorySlotStorage:
    """Process-local slot. ``available=False`` behaves like a context with no storage at all."""

    def __init__(self, payload: Optional[str] = None, available: bool = True):
        self.payload = payload
        self.available = available
        self.saves = 0

    def load(self) -> Optional[str]:
        if not self.available:
            raise StorageUnavailable("memory slot disabled")
        return self.payload

    def save(self, payload: str) -> None:
        if not self.available:
            raise StorageUnavailable("memory slot disabled")
        self.payload = payload
        self.saves += 1


class DatabaseSlotStorage:
    """Slot kept as a row of the ``storage_slots`` table."""

    def __init__(self, session_factory: sessionmaker, key: str):
        self.session_factory = session_factory
        self.key = key

    def load(self) -> Optional[str]:
        db: Session = self.session_factory()
        try:
            row = db.get(StorageSlot, self.key)
            return row.value if row else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read storage slot {self.key}: {e}")
            raise StorageUnavailable(str(e)) from e
        finally:
            db.close()

    def save(self, payload: str) -> None:
        db: Session = self.session_factory()
        try:
            row = db.get(StorageSlot, self.key)
            now = datetime.now(timezone.utc)
            if row:
                row.value = payload
                row.updated_at = now
            else:
                db.add(StorageSlot(key=self.key, value=payload, updated_at=now))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to write storage slot {self.key}: {e}")
            raise StorageUnavailable(str(e)) from e
        finally:
            db.close()

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from roadit.db.base import Base
from roadit.models.storage_slot import StorageSlot
from roadit.schemas.issue import IssueStatus
from roadit.services.storage import DatabaseSlotStorage, StorageUnavailable
from roadit.services.store import IssueStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def test_empty_slot_loads_none(session_factory):
    assert DatabaseSlotStorage(session_factory, "roadit_issues").load() is None


def test_save_then_overwrite(session_factory):
    slot = DatabaseSlotStorage(session_factory, "roadit_issues")

    slot.save("[]")
    slot.save('[{"id": "1"}]')

    assert slot.load() == '[{"id": "1"}]'
    db = session_factory()
    try:
        rows = db.query(StorageSlot).all()
        assert len(rows) == 1
        assert isinstance(rows[0].updated_at, datetime)
    finally:
        db.close()


def test_slots_are_independent(session_factory):
    a = DatabaseSlotStorage(session_factory, "a")
    b = DatabaseSlotStorage(session_factory, "b")
    a.save("A")

    assert b.load() is None
    assert a.load() == "A"


def test_missing_table_is_unavailable(engine, session_factory):
    Base.metadata.drop_all(bind=engine)
    slot = DatabaseSlotStorage(session_factory, "roadit_issues")

    with pytest.raises(StorageUnavailable):
        slot.load()
    with pytest.raises(StorageUnavailable):
        slot.save("[]")


def test_store_on_database_slot(session_factory, clock, pothole_draft):
    slot = DatabaseSlotStorage(session_factory, "roadit_issues")
    store = IssueStore(slot, clock=clock)

    created = store.add(pothole_draft)
    clock.advance(seconds=30)
    store.update_status(created.id, IssueStatus.resolved)

    reopened = IssueStore(slot, clock=clock).get_all()
    assert len(reopened) == 5
    assert reopened[0].id == created.id
    assert reopened[0].resolved_at == clock.now

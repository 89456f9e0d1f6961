import json
from datetime import datetime, timezone

from roadit.schemas.issue import IssueStatus, IssueType
from roadit.services.seed import SEED_ISSUES
from roadit.services.storage import MemorySlotStorage
from roadit.services.store import IssueStore, dump_issues, load_issues


def test_first_read_seeds_and_persists(store, storage):
    issues = store.get_all()

    assert [i.id for i in issues] == ["1", "2", "3", "4"]
    assert [i.type for i in issues] == [
        IssueType.pothole, IssueType.waterlogging, IssueType.broken_road, IssueType.pothole,
    ]
    assert issues[1].status == IssueStatus.under_review
    assert storage.payload is not None
    assert len(json.loads(storage.payload)) == 4


def test_persisted_layout_matches_browser_json(store, storage):
    store.get_all()
    records = {r["id"]: r for r in json.loads(storage.payload)}

    assert records["1"]["submittedAt"] == "2025-07-15T10:00:00.000Z"
    assert records["1"]["photoUrl"] == "https://placehold.co/600x400.png"
    assert records["1"]["location"] == {"lat": 28.6139, "lng": 77.209}
    assert "resolvedAt" not in records["1"]
    assert records["3"]["resolvedAt"] == "2025-07-18T16:45:00.000Z"
    assert records["2"]["severity"] == "Severe/Hazardous"


def test_add_prepends_new_issue(store, pothole_draft, clock):
    before = len(store.get_all())

    created = store.add(pothole_draft)
    issues = store.get_all()

    assert issues[0].id == created.id
    assert len(issues) == before + 1
    assert created.status == IssueStatus.received
    assert created.submitted_at == created.updated_at == clock.now
    assert created.resolved_at is None
    assert created.id == str(round(clock.now.timestamp() * 1000))


def test_add_always_starts_as_received(store, pothole_draft):
    draft = pothole_draft.model_copy(update={"status": IssueStatus.resolved})

    created = store.add(draft)

    assert created.status == IssueStatus.received
    assert created.resolved_at is None
    assert store.get(created.id).status == IssueStatus.received


def test_sub_millisecond_clock_is_truncated(storage, pothole_draft):
    store = IssueStore(storage, clock=lambda: datetime(2025, 8, 1, 12, 0, 0, 123456, tzinfo=timezone.utc))

    created = store.add(pothole_draft)
    resolved = store.update_status(created.id, IssueStatus.resolved)

    assert created.submitted_at.microsecond == 123000
    assert resolved.updated_at.microsecond == 123000
    assert resolved.resolved_at == resolved.updated_at
    assert IssueStore(storage).get(created.id) == resolved


def test_add_in_same_millisecond_gets_distinct_ids(store, pothole_draft):
    first = store.add(pothole_draft)
    second = store.add(pothole_draft)

    assert first.id != second.id
    assert int(second.id) == int(first.id) + 1
    assert [i.id for i in store.get_all()[:2]] == [second.id, first.id]


def test_same_status_still_touches_updated_at(store, clock):
    before = store.get("2")
    clock.advance(minutes=5)

    updated = store.update_status("2", before.status)

    assert updated.status == before.status
    assert updated.updated_at == clock.now
    assert updated.updated_at > before.updated_at


def test_resolving_stamps_and_leaving_clears_resolved_at(store, clock):
    before = store.get("1")
    clock.advance(hours=1)

    resolved = store.update_status("1", IssueStatus.resolved)
    assert resolved.resolved_at == resolved.updated_at
    assert resolved.resolved_at >= before.updated_at

    clock.advance(hours=1)
    reopened = store.update_status("1", IssueStatus.under_review)
    assert reopened.resolved_at is None
    assert reopened.submitted_at == before.submitted_at
    assert store.get("1").resolved_at is None


def test_update_keeps_position(store):
    store.update_status("3", IssueStatus.received)
    assert [i.id for i in store.get_all()] == ["1", "2", "3", "4"]


def test_unknown_id_leaves_list_untouched(store, storage):
    store.get_all()
    payload = storage.payload
    saves = storage.saves

    assert store.update_status("nonexistent-id", IssueStatus.resolved) is None
    assert storage.payload == payload
    assert storage.saves == saves


def test_round_trip_is_lossless(store, pothole_draft, clock):
    created = store.add(pothole_draft)
    clock.advance(milliseconds=1)
    store.update_status(created.id, IssueStatus.resolved)
    issues = store.get_all()

    payload = dump_issues(issues)
    reloaded = load_issues(payload)

    assert reloaded == issues
    assert dump_issues(reloaded) == payload
    assert reloaded[0].resolved_at == issues[0].resolved_at
    assert reloaded[1].resolved_at is None


def test_changes_survive_a_new_store_instance(store, storage, clock, pothole_draft):
    created = store.add(pothole_draft)

    again = IssueStore(storage, clock=clock)

    assert again.get_all()[0] == created


def test_unavailable_storage_serves_seed_in_memory(clock, pothole_draft):
    storage = MemorySlotStorage(available=False)
    store = IssueStore(storage, clock=clock)

    assert [i.id for i in store.get_all()] == ["1", "2", "3", "4"]
    created = store.add(pothole_draft)
    assert created.status == IssueStatus.received
    assert store.update_status("2", IssueStatus.resolved).status == IssueStatus.resolved
    assert storage.saves == 0
    # nothing was kept
    assert len(store.get_all()) == 4


def test_corrupt_payload_resets_to_seed(clock):
    storage = MemorySlotStorage(payload="{not json")
    store = IssueStore(storage, clock=clock)

    issues = store.get_all()

    assert issues == list(SEED_ISSUES)
    assert load_issues(storage.payload) == list(SEED_ISSUES)


def test_invalid_record_resets_to_seed(clock):
    record = json.loads(dump_issues(SEED_ISSUES[:1]))
    record[0]["status"] = "Fixed"
    storage = MemorySlotStorage(payload=json.dumps(record))

    issues = IssueStore(storage, clock=clock).get_all()

    assert len(issues) == 4
    assert json.loads(storage.payload)[0]["status"] == "Received"


def test_duplicate_ids_reset_to_seed(clock):
    records = json.loads(dump_issues(SEED_ISSUES))
    records[1]["id"] = "1"
    storage = MemorySlotStorage(payload=json.dumps(records))

    issues = IssueStore(storage, clock=clock).get_all()

    assert [i.id for i in issues] == ["1", "2", "3", "4"]
    assert [r["id"] for r in json.loads(storage.payload)] == ["1", "2", "3", "4"]


def test_resolved_at_on_open_issue_resets_to_seed(clock):
    records = json.loads(dump_issues(SEED_ISSUES))
    records[0]["resolvedAt"] = "2025-07-20T10:00:00.000Z"
    storage = MemorySlotStorage(payload=json.dumps(records))

    issues = IssueStore(storage, clock=clock).get_all()

    assert issues[0].resolved_at is None
    assert "resolvedAt" not in json.loads(storage.payload)[0]


def test_end_to_end_scenario(store, pothole_draft, clock):
    assert len(store.get_all()) == 4

    created = store.add(pothole_draft)
    issues = store.get_all()
    assert len(issues) == 5
    assert issues[0].id == created.id
    assert issues[0].status == IssueStatus.received

    clock.advance(days=2)
    resolved = store.update_status(created.id, IssueStatus.resolved)
    assert resolved.status == IssueStatus.resolved
    assert resolved.resolved_at == clock.now

    clock.advance(hours=3)
    rejected = store.update_status(created.id, IssueStatus.cannot_action)
    assert rejected.status == IssueStatus.cannot_action
    assert rejected.resolved_at is None

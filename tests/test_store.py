from __future__ import annotations

from datetime import timedelta

from birdnest.models import PilotInfo
from birdnest.store import ViolationStore

PILOT = PilotInfo("Ann", "Doe", "+210 555 0101", "ann@example.com")
OTHER_PILOT = PilotInfo("Bob", "Roe", "+210 555 0202", "bob@example.com")
RETENTION = timedelta(minutes=10)


def test_upsert_inserts_new_violation(t0) -> None:
    store = ViolationStore()

    store.upsert("SN-1", 42_000.0, PILOT, t0)

    violation = store.get("SN-1")
    assert violation.closest_distance_mm == 42_000.0
    assert violation.pilot == PILOT
    assert violation.last_seen_at == t0
    assert "SN-1" in store
    assert len(store) == 1


def test_upsert_keeps_closest_distance_and_advances_last_seen(t0) -> None:
    store = ViolationStore()
    store.upsert("SN-1", 0.0, PILOT, t0)

    store.upsert("SN-1", 50_000.0, PILOT, t0 + timedelta(seconds=2))

    violation = store.get("SN-1")
    assert violation.closest_distance_mm == 0.0
    assert violation.last_seen_at == t0 + timedelta(seconds=2)

    store.upsert("SN-1", 10_000.0, PILOT, t0 + timedelta(seconds=4))
    assert store.get("SN-1").closest_distance_mm == 0.0


def test_upsert_lowers_closest_distance(t0) -> None:
    store = ViolationStore()
    store.upsert("SN-1", 80_000.0, None, t0)

    store.upsert("SN-1", 20_000.0, None, t0 + timedelta(seconds=2))

    assert store.get("SN-1").closest_distance_mm == 20_000.0


def test_upsert_never_overwrites_pilot(t0) -> None:
    store = ViolationStore()
    store.upsert("SN-1", 1.0, None, t0)
    store.upsert("SN-2", 1.0, PILOT, t0)

    store.upsert("SN-1", 1.0, OTHER_PILOT, t0 + timedelta(seconds=2))
    store.upsert("SN-2", 1.0, None, t0 + timedelta(seconds=2))

    assert store.get("SN-1").pilot is None
    assert store.get("SN-2").pilot == PILOT


def test_one_record_per_serial_number(t0) -> None:
    store = ViolationStore()
    for i in range(5):
        store.upsert("SN-1", 1000.0 - i, PILOT, t0 + timedelta(seconds=2 * i))

    assert len(store.snapshot()) == 1


def test_evict_boundaries(t0) -> None:
    store = ViolationStore()
    now = t0 + timedelta(hours=1)
    store.upsert("stale", 1.0, None, now - timedelta(minutes=10, seconds=1))
    store.upsert("exact", 1.0, None, now - timedelta(minutes=10))
    store.upsert("fresh", 1.0, None, now - timedelta(minutes=9, seconds=59))

    removed = store.evict_older_than(now, RETENTION)

    assert removed == 1
    assert "stale" not in store
    assert "exact" in store
    assert "fresh" in store


def test_snapshot_is_independent_copy(t0) -> None:
    store = ViolationStore()
    store.upsert("SN-1", 5_000.0, PILOT, t0)

    snapshot = store.snapshot()
    snapshot[0].closest_distance_mm = 999_999.0
    snapshot[0].pilot = None
    snapshot.clear()

    violation = store.get("SN-1")
    assert violation.closest_distance_mm == 5_000.0
    assert violation.pilot == PILOT


def test_snapshot_orders_most_recent_first(t0) -> None:
    store = ViolationStore()
    store.upsert("old", 1.0, None, t0)
    store.upsert("new", 1.0, None, t0 + timedelta(seconds=30))

    assert [v.serial_number for v in store.snapshot()] == ["new", "old"]


def test_violation_to_dict(t0) -> None:
    store = ViolationStore()
    store.upsert("SN-1", 1234.5, PILOT, t0)

    assert store.snapshot()[0].to_dict() == {
        "serialNumber": "SN-1",
        "closestDistanceInMm": 1234.5,
        "pilot": PILOT.to_dict(),
        "latestCaptureDateAndTime": "2022-12-14T10:00:00+00:00",
    }

import json
import random

import pytest

from sunmeadow.ledger.store import LedgerStore
from sunmeadow.storage.blob import MemoryBlobStore


def make_clock(start: int = 1_700_000_000_000, step: int = 1):
    state = {"t": start - step}

    def clock() -> int:
        state["t"] += step
        return state["t"]

    return clock


def test_scenario_total_element_count_and_order():
    store = LedgerStore(blob_store=MemoryBlobStore())
    store.insert(1000)
    store.insert(-500)
    last = store.insert(2000)
    assert store.live_total() == 2500
    assert store.element_count() == 2
    view = store.ordered_view(50)
    assert len(view) == 3
    # Same-millisecond inserts fall back to insertion recency
    assert view[0].id == last.id and view[0].value == 2000


def test_insert_snapshot_is_total_after_insert_and_goes_stale():
    store = LedgerStore(clock=make_clock())
    a = store.insert(1000)
    b = store.insert(3000)
    assert a.cumulative_at_point == 1000
    assert b.cumulative_at_point == 4000
    assert store.delete_by_id(a.id) is True
    # Snapshot is historical and never recomputed
    assert store.get(b.id).cumulative_at_point == 4000
    assert store.live_total() == 3000


def test_live_total_matches_sum_after_random_ops():
    rng = random.Random(7)
    store = LedgerStore(clock=make_clock())
    model = {}
    for _ in range(300):
        if model and rng.random() < 0.35:
            victim = rng.choice(sorted(model))
            assert store.delete_by_id(victim) is True
            del model[victim]
        else:
            e = store.insert(rng.randint(-5, 9) * 1000)
            model[e.id] = e.value
        assert store.live_total() == sum(model.values())
        assert store.live_total() == sum(e.value for e in store.entries())


def test_rapid_inserts_have_unique_ids():
    store = LedgerStore()
    ids = [store.insert(1000).id for _ in range(500)]
    assert len(set(ids)) == 500
    assert all(isinstance(i, str) for i in ids)


def test_insert_regenerates_colliding_id():
    ids = iter(["dup", "dup", "fresh"])
    store = LedgerStore(id_factory=lambda: next(ids))
    assert store.insert(1000).id == "dup"
    assert store.insert(1000).id == "fresh"


def test_timestamps_non_decreasing_even_if_clock_goes_back():
    times = iter([5_000, 4_000, 6_000])
    store = LedgerStore(clock=lambda: next(times))
    stamps = [store.insert(1000).timestamp for _ in range(3)]
    assert stamps == [5_000, 5_000, 6_000]


def test_delete_is_idempotent_and_string_normalized():
    store = LedgerStore(id_factory=iter(["123", "456"]).__next__)
    store.insert(1000)
    store.insert(2000)
    assert store.delete_by_id(123) is True
    before = store.entries()
    assert store.delete_by_id("123") is False
    assert store.entries() == before
    assert store.live_total() == 2000


def test_delete_missing_id_does_not_flush():
    blobs = MemoryBlobStore()
    store = LedgerStore(blob_store=blobs)
    store.insert(1000)
    blobs.set(store.key, "sentinel")
    assert store.delete_by_id("nope") is False
    assert blobs.get(store.key) == "sentinel"


def test_ordered_view_limit_sorted_and_subset():
    store = LedgerStore(clock=make_clock(step=10))
    for i in range(80):
        store.insert((i % 7 - 3) * 1000)
    view = store.ordered_view(50)
    assert len(view) == 50
    stamps = [e.timestamp for e in view]
    assert stamps == sorted(stamps, reverse=True)
    all_ids = {e.id for e in store.entries()}
    assert {e.id for e in view} <= all_ids
    # read-only projection
    assert [e.timestamp for e in store.entries()] == sorted(e.timestamp for e in store.entries())


def test_clear_all_empties_and_persists_empty_blob():
    blobs = MemoryBlobStore()
    store = LedgerStore(blob_store=blobs)
    for _ in range(10):
        store.insert(1000)
    store.clear_all()
    assert store.live_total() == 0
    assert store.ordered_view(50) == []
    assert json.loads(blobs.get(store.key)) == []


def test_every_mutation_overwrites_blob():
    blobs = MemoryBlobStore()
    store = LedgerStore(blob_store=blobs, clock=make_clock())
    a = store.insert(1000)
    store.insert(2000)
    records = json.loads(blobs.get(store.key))
    assert [r["value"] for r in records] == [1000, 2000]
    assert set(records[0]) == {"id", "value", "timestamp", "cumulativeAtPoint"}
    store.delete_by_id(a.id)
    assert [r["value"] for r in json.loads(blobs.get(store.key))] == [2000]


def test_non_unit_value_is_recorded_without_breaking_invariants(caplog):
    store = LedgerStore()
    store.insert(1000)
    odd = store.insert(999)
    assert store.get(odd.id) is not None
    assert store.live_total() == 1999
    assert store.element_count() == 1
    assert any("not a multiple" in r.message for r in caplog.records)


@pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_value_is_refused_before_mutation(bad):
    blobs = MemoryBlobStore()
    store = LedgerStore(blob_store=blobs)
    store.insert(1000)
    before = blobs.get(store.key)
    with pytest.raises(ValueError):
        store.insert(bad)
    assert len(store) == 1
    assert store.live_total() == 1000
    assert store.element_count() == 1
    assert blobs.get(store.key) == before


def test_reload_from_flushed_blob():
    blobs = MemoryBlobStore()
    store = LedgerStore(blob_store=blobs, clock=make_clock())
    ids = [store.insert(v).id for v in (1000, -2000, 5000)]
    again = LedgerStore.load(blobs)
    assert [e.id for e in again.entries()] == ids
    assert again.live_total() == 4000

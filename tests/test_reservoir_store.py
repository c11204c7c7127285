"""Tests for the reservoir store: admission rule, snapshots and thread safety."""

from __future__ import annotations

import threading

import numpy as np
import pytest

from ssample.reservoir import NumpyRandomSource, RandomSource, ReservoirStore


class _ScriptedRandom(RandomSource):
    """Returns fixed draws so admission decisions are predictable."""

    def __init__(self, draw: float, slot_index: int = 0) -> None:
        self.draw = draw
        self.slot_index = slot_index
        self.slot_calls: list[int] = []

    def random(self) -> float:
        return self.draw

    def slot(self, n_slots: int) -> int:
        self.slot_calls.append(n_slots)
        return self.slot_index


def _pairs(store: ReservoirStore) -> list[tuple[int, str]]:
    return [(e.sequence_index, e.content) for e in store.snapshot().entries]


def test_rejecting_randomness_keeps_first_records() -> None:
    """When every replacement is rejected the first records stay."""
    store = ReservoirStore(3, rng=_ScriptedRandom(draw=0.999))
    for record in ["a", "b", "c", "d", "e"]:
        store.admit(record)
    assert _pairs(store) == [(0, "a"), (1, "b"), (2, "c")]
    assert store.seen_count() == 5


def test_accepting_randomness_evicts_chosen_slot() -> None:
    """Accepted records overwrite the slot the source picks."""
    rng = _ScriptedRandom(draw=0.0, slot_index=0)
    store = ReservoirStore(2, rng=rng)
    for record in ["x", "y", "z"]:
        store.admit(record)
    assert _pairs(store) == [(1, "y"), (2, "z")]
    assert rng.slot_calls == [2]


@pytest.mark.parametrize(("draw", "retained"), [(0.66, True), (0.67, False)])
def test_admission_threshold_is_capacity_over_seen_plus_one(draw: float, retained: bool) -> None:
    """Third record into a 2-slot reservoir is kept iff draw < 2/3."""
    store = ReservoirStore(2, rng=_ScriptedRandom(draw=draw))
    assert store.admit("x")
    assert store.admit("y")
    assert store.admit("z") is retained
    assert store.seen_count() == 3


def test_growth_phase_draws_no_randomness() -> None:
    """Filling the reservoir never consults the random source."""
    rng = _ScriptedRandom(draw=0.0)
    store = ReservoirStore(4, rng=rng)
    for record in "abc":
        store.admit(record)
    assert rng.slot_calls == []
    assert len(store) == 3


@pytest.mark.parametrize("capacity", [0, -1, 2.5, True])
def test_invalid_capacity_rejected(capacity) -> None:
    """Non-positive or non-integer capacities raise ValueError."""
    with pytest.raises(ValueError):
        ReservoirStore(capacity)


def test_capacity_bound_holds_at_every_step() -> None:
    """Size always equals min(seen, capacity)."""
    store = ReservoirStore(5, rng=NumpyRandomSource(seed=3))
    for i in range(200):
        store.admit(f"r{i}")
        snap = store.snapshot()
        assert len(snap) == min(snap.seen, store.capacity)


def test_snapshot_is_sorted_unique_and_indexed_below_seen() -> None:
    """Snapshots are sorted, unique and never ahead of seen."""
    store = ReservoirStore(8, rng=NumpyRandomSource(seed=11))
    for i in range(500):
        store.admit(f"r{i}")
    snap = store.snapshot()
    numbers = snap.line_numbers
    assert numbers == sorted(numbers)
    assert len(set(numbers)) == len(numbers)
    assert all(n < snap.seen for n in numbers)
    assert snap.lines == [f"r{n}" for n in numbers]


def test_repeated_snapshots_without_admit_are_identical() -> None:
    """Snapshots without intervening admits are equal."""
    store = ReservoirStore(4, rng=NumpyRandomSource(seed=5))
    for i in range(50):
        store.admit(str(i))
    assert store.snapshot() == store.snapshot()


def test_empty_store_snapshot() -> None:
    """A fresh store snapshots as empty with seen 0."""
    snap = ReservoirStore(3).snapshot()
    assert snap.entries == ()
    assert snap.seen == 0


def test_inclusion_frequency_is_uniform() -> None:
    """Each of N records ends up retained with frequency close to K/N."""
    n_records, capacity, trials = 10, 3, 4000
    rng = NumpyRandomSource(seed=1234)
    counts = np.zeros(n_records)
    for _ in range(trials):
        store = ReservoirStore(capacity, rng=rng)
        for i in range(n_records):
            store.admit(str(i))
        for number in store.snapshot().line_numbers:
            counts[number] += 1
    freqs = counts / trials
    # binomial sd is about 0.007 here
    np.testing.assert_allclose(freqs, capacity / n_records, atol=0.04)


def test_concurrent_admit_and_snapshot_never_tear_entries() -> None:
    """Concurrent readers never see torn, unsorted or future entries."""
    store = ReservoirStore(16, rng=NumpyRandomSource(seed=9))
    n_records = 20_000
    failures: list[str] = []
    done = threading.Event()

    def writer() -> None:
        for i in range(n_records):
            store.admit(f"rec-{i}")
        done.set()

    def reader() -> None:
        last_seen = 0
        while not done.is_set():
            snap = store.snapshot()
            if snap.seen < last_seen:
                failures.append(f"seen went backwards: {last_seen} -> {snap.seen}")
            last_seen = snap.seen
            numbers = snap.line_numbers
            if numbers != sorted(set(numbers)):
                failures.append(f"unsorted or duplicate indices: {numbers}")
            for entry in snap.entries:
                if entry.content != f"rec-{entry.sequence_index}":
                    failures.append(f"torn entry: {entry}")
                if entry.sequence_index >= snap.seen:
                    failures.append(f"entry from the future: {entry} seen={snap.seen}")

    threads = [threading.Thread(target=reader) for _ in range(4)]
    threads.append(threading.Thread(target=writer))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert failures == []
    assert store.seen_count() == n_records
    assert len(store) == 16


def test_numpy_random_source_ranges() -> None:
    """Numpy draws stay in range and empty slot ranges are rejected."""
    rng = NumpyRandomSource(seed=0)
    draws = [rng.random() for _ in range(100)]
    slots = [rng.slot(3) for _ in range(100)]
    assert all(0.0 <= d < 1.0 for d in draws)
    assert set(slots) <= {0, 1, 2}
    with pytest.raises(ValueError):
        rng.slot(0)

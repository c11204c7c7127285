"""Reservoir store and randomness sources."""

from ssample.reservoir.base import RandomSource
from ssample.reservoir.random_source import NumpyRandomSource
from ssample.reservoir.store import Entry, ReservoirStore, Snapshot

__all__ = [
    "Entry",
    "NumpyRandomSource",
    "RandomSource",
    "ReservoirStore",
    "Snapshot",
]

"""Thread-safe fixed-capacity reservoir over a stream of text records.

The store implements Algorithm R. Every record gets its 0-based stream
position as ``sequence_index`` on arrival; once the reservoir is full, record
number ``seen`` (0-based) replaces a uniformly chosen slot with probability
``capacity / (seen + 1)``. After ``n`` records each one is retained with
probability ``capacity / n``.

All reads and writes go through one lock, held for a single operation at a
time. :meth:`ReservoirStore.snapshot` copies under the lock and sorts after
releasing it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from ssample.reservoir.base import RandomSource
from ssample.reservoir.random_source import NumpyRandomSource


@dataclass(frozen=True)
class Entry:
    """One retained record.

    Attributes:
        content: Record text, without its line terminator.
        sequence_index: 0-based position of the record in the stream.
    """

    content: str
    sequence_index: int


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time copy of the reservoir.

    Attributes:
        entries: Retained entries, ascending by ``sequence_index``.
        seen: Records observed when the copy was taken.
    """

    entries: tuple[Entry, ...]
    seen: int

    @property
    def lines(self) -> list[str]:
        return [entry.content for entry in self.entries]

    @property
    def line_numbers(self) -> list[int]:
        return [entry.sequence_index for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


class ReservoirStore:
    """Uniform fixed-size sample of every record admitted so far."""

    def __init__(self, capacity: int, rng: RandomSource | None = None) -> None:
        """Initialize an empty reservoir.

        Args:
            capacity: Maximum number of retained records.
            rng: Randomness source. Defaults to an entropy-seeded
                :class:`NumpyRandomSource`.

        Raises:
            ValueError: If ``capacity`` is not a positive integer.
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._rng = rng if rng is not None else NumpyRandomSource()
        self._entries: list[Entry] = []
        self._seen = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def admit(self, content: str) -> bool:
        """Offer one record to the reservoir.

        Returns:
            ``True`` if the record was retained.
        """
        with self._lock:
            index = self._seen
            retained = False
            if len(self._entries) < self._capacity:
                self._entries.append(Entry(content, index))
                retained = True
            elif self._rng.random() < self._capacity / (index + 1):
                evict = self._rng.slot(self._capacity)
                self._entries[evict] = Entry(content, index)
                retained = True
            self._seen = index + 1
            return retained

    def seen_count(self) -> int:
        with self._lock:
            return self._seen

    def snapshot(self) -> Snapshot:
        """Return the retained entries sorted by stream position."""
        with self._lock:
            entries = list(self._entries)
            seen = self._seen
        entries.sort(key=lambda entry: entry.sequence_index)
        return Snapshot(entries=tuple(entries), seen=seen)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

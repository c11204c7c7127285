"""Randomness interface consumed by the reservoir store."""

from __future__ import annotations

from abc import ABC, abstractmethod


class RandomSource(ABC):
    """Source of the two random draws the admission rule needs."""

    @abstractmethod
    def random(self) -> float:
        """Return a float drawn uniformly from ``[0, 1)``."""

    @abstractmethod
    def slot(self, n_slots: int) -> int:
        """Return an integer drawn uniformly from ``[0, n_slots)``."""

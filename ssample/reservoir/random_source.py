"""Default numpy-backed randomness source."""

from __future__ import annotations

import numpy as np

from ssample.reservoir.base import RandomSource


class NumpyRandomSource(RandomSource):
    """Uniform draws from a numpy ``Generator``."""

    def __init__(self, seed: int | None = None) -> None:
        """Initialize the source.

        Args:
            seed: Random seed for reproducibility. ``None`` seeds from OS
                entropy, so separate runs draw different samples.
        """
        self._rng = np.random.default_rng(seed)

    def random(self) -> float:
        return float(self._rng.random())

    def slot(self, n_slots: int) -> int:
        if n_slots <= 0:
            raise ValueError("n_slots must be positive")
        return int(self._rng.integers(n_slots))

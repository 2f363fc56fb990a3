"""
Compute History
===============

Rolling record of plot computation times, used for the status footer.
"""

from collections import deque
from typing import Deque, List, Tuple

HISTORY_SIZE = 1024
MAX_HISTORY_AGE = 1.0


class ComputeHistory:
    """
    Timing samples kept for at most ``max_age`` seconds and ``capacity`` entries.

    ``total()`` counts every sample ever added, including pruned ones.
    """

    def __init__(self, capacity: int = HISTORY_SIZE, max_age: float = MAX_HISTORY_AGE) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self.max_age = max_age
        self._samples: Deque[Tuple[float, float]] = deque(maxlen=capacity)
        self._total = 0

    def add(self, now: float, seconds: float) -> None:
        """Record a computation that took ``seconds``, finished at time ``now``."""
        self._samples.append((now, seconds))
        self._total += 1
        self._prune(now)

    def _prune(self, now: float) -> None:
        while self._samples and now - self._samples[0][0] > self.max_age:
            self._samples.popleft()

    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._samples)

    def mean_ms(self) -> float:
        if not self._samples:
            return 0.0
        return sum(seconds for _, seconds in self._samples) / len(self._samples) * 1000.0

    def points(self) -> List[Tuple[int, float]]:
        """(index, milliseconds) pairs in insertion order."""
        return [(i, seconds * 1000.0) for i, (_, seconds) in enumerate(self._samples)]

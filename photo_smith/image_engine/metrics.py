"""In-process counters and timings for filter runs.

The cancellation protocol and the editor session record one outcome per
filter (``filters.completed`` / ``filters.cancelled`` / ``filters.failed``)
and one timing sample per run under ``filter.<display name>``. Worker threads
update it concurrently, so every access takes the lock.

Usage:
    from photo_smith.image_engine.metrics import metrics
    with metrics.timed("filter.Blur"):
        ...
    metrics.inc("filters.completed")
    metrics.outcomes()  # {"completed": 1, "cancelled": 0, "failed": 0}
"""

from __future__ import annotations

import time
from collections import Counter, defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock
from typing import Any

OUTCOMES = ("completed", "cancelled", "failed")


class _Metrics:
    def __init__(self) -> None:
        self._lock = RLock()
        self._counters: Counter[str] = Counter()
        self._timings: defaultdict[str, list[float]] = defaultdict(list)

    def inc(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[key] += int(amount)

    @contextmanager
    def timed(self, key: str) -> Iterator[None]:
        """Record the wall time of the block, also when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                self._timings[key].append(elapsed)

    def counter(self, key: str) -> int:
        with self._lock:
            return self._counters[key]

    def outcomes(self) -> dict[str, int]:
        """Filter runs per terminal status."""
        with self._lock:
            return {status: self._counters[f"filters.{status}"] for status in OUTCOMES}

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": {k: v for k, v in self._counters.items() if v},
                "timings": {k: list(v) for k, v in self._timings.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


metrics = _Metrics()

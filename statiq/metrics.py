"""Thread-safe connection-pool counters."""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass

_COUNTERS = (
    "active_count",
    "idle_count",
    "total_created",
    "total_destroyed",
    "total_checkouts",
    "total_timeouts",
    "total_deadlocks",
    "waiters",
)


@dataclass(frozen=True)
class MetricsSnapshot:
    """Point-in-time copy of the pool counters."""

    active: int = 0
    idle: int = 0
    total_created: int = 0
    total_destroyed: int = 0
    total_checkouts: int = 0
    total_timeouts: int = 0
    total_deadlocks: int = 0
    waiters: int = 0

    def to_dict(self) -> dict[str, int]:
        return dataclasses.asdict(self)


class PoolMetrics:
    """Named counters that may be updated from several threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters = dict.fromkeys(_COUNTERS, 0)

    def _check(self, name: str, amount: int) -> None:
        if name not in self._counters:
            raise ValueError(f"unknown metric: {name!r}")
        if amount < 0:
            raise ValueError("amount must not be negative")

    def increment(self, name: str, amount: int = 1) -> int:
        """Add ``amount`` to a counter and return its new value."""
        self._check(name, amount)
        with self._lock:
            self._counters[name] += amount
            return self._counters[name]

    def decrement(self, name: str, amount: int = 1) -> int:
        """Subtract ``amount`` from a counter and return its new value."""
        self._check(name, amount)
        with self._lock:
            current = self._counters[name]
            if amount > current:
                raise ValueError(f"metric {name!r} cannot go below zero")
            self._counters[name] = current - amount
            return self._counters[name]

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            counters = dict(self._counters)
        return MetricsSnapshot(
            active=counters["active_count"],
            idle=counters["idle_count"],
            total_created=counters["total_created"],
            total_destroyed=counters["total_destroyed"],
            total_checkouts=counters["total_checkouts"],
            total_timeouts=counters["total_timeouts"],
            total_deadlocks=counters["total_deadlocks"],
            waiters=counters["waiters"],
        )
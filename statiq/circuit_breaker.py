"""Circuit breaker guarding connection-pool checkout.

Closed -> (failures >= threshold) -> Open -> (recovery timeout elapsed) -> HalfOpen,
and any success closes the circuit again. While open, checks fail immediately
with :class:`PoolExhausted`.
"""

from __future__ import annotations

import enum
import threading
import time
from datetime import timedelta

from statiq.errors import PoolExhausted


class CircuitState(enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


def _now_ms() -> int:
    return int(time.time() * 1000)


class CircuitBreaker:
    """Thread-safe circuit breaker."""

    def __init__(self, failure_threshold: int, recovery_timeout: float | timedelta) -> None:
        if isinstance(recovery_timeout, timedelta):
            seconds = recovery_timeout.total_seconds()
        else:
            seconds = float(recovery_timeout)
        self.failure_threshold = int(failure_threshold)
        self.recovery_timeout = timedelta(seconds=seconds)
        self._recovery_ms = round(seconds * 1000)
        self._failure_count = 0
        self._last_failure_ms = 0
        self._state = CircuitState.CLOSED
        self._lock = threading.Lock()

    def check(self) -> None:
        """Raise :class:`PoolExhausted` if the circuit is open; otherwise return."""
        with self._lock:
            if self._state is not CircuitState.OPEN:
                return
            elapsed = max(0, _now_ms() - self._last_failure_ms)
            if elapsed >= self._recovery_ms:
                self._state = CircuitState.HALF_OPEN
                return
            raise PoolExhausted(timeout_ms=self._recovery_ms)

    def record_success(self) -> None:
        """Reset the failure count and close the circuit."""
        with self._lock:
            self._failure_count = 0
            self._state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Count a failure, opening the circuit once the threshold is reached."""
        with self._lock:
            self._failure_count += 1
            self._last_failure_ms = _now_ms()
            if self._failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN

    def state(self) -> CircuitState:
        """Snapshot of the current state."""
        with self._lock:
            return self._state
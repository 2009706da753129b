from datetime import timedelta

import pytest

from statiq.circuit_breaker import CircuitBreaker, CircuitState
from statiq.errors import PoolExhausted, SqlError


def test_starts_closed_and_allows_requests():
    breaker = CircuitBreaker(3, 30)
    breaker.check()
    assert breaker.state() is CircuitState.CLOSED


def test_opens_at_threshold():
    breaker = CircuitBreaker(3, 30)
    breaker.record_failure()
    breaker.record_failure()
    assert breaker.state() is CircuitState.CLOSED
    breaker.record_failure()
    assert breaker.state() is CircuitState.OPEN


def test_open_circuit_rejects_with_recovery_timeout():
    breaker = CircuitBreaker(1, timedelta(milliseconds=1500))
    breaker.record_failure()
    with pytest.raises(PoolExhausted) as info:
        breaker.check()
    assert info.value.timeout_ms == 1500
    assert breaker.state() is CircuitState.OPEN


def test_rejection_is_a_sql_error():
    breaker = CircuitBreaker(1, 60)
    breaker.record_failure()
    with pytest.raises(SqlError):
        breaker.check()


def test_transitions_to_half_open_after_timeout():
    breaker = CircuitBreaker(1, 0)
    breaker.record_failure()
    assert breaker.state() is CircuitState.OPEN
    breaker.check()
    assert breaker.state() is CircuitState.HALF_OPEN
    breaker.check()
    assert breaker.state() is CircuitState.HALF_OPEN


def test_success_closes_and_resets_count():
    breaker = CircuitBreaker(2, 0)
    breaker.record_failure()
    breaker.record_failure()
    breaker.check()
    breaker.record_success()
    assert breaker.state() is CircuitState.CLOSED
    breaker.record_failure()
    assert breaker.state() is CircuitState.CLOSED


def test_failure_in_half_open_reopens():
    breaker = CircuitBreaker(2, 0)
    breaker.record_failure()
    breaker.record_failure()
    breaker.check()
    assert breaker.state() is CircuitState.HALF_OPEN
    breaker.record_failure()
    assert breaker.state() is CircuitState.OPEN


def test_recovery_timeout_kept_as_timedelta():
    breaker = CircuitBreaker(5, 2)
    assert breaker.recovery_timeout == timedelta(seconds=2)
    assert breaker.failure_threshold == 5
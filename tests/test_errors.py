from http import HTTPStatus

import pytest

from statiq.errors import (
    CacheError,
    Cancelled,
    ConfigError,
    CryptoError,
    DeadlockRetryExhausted,
    InvalidTransactionState,
    IoError,
    NotFoundError,
    OdbcError,
    PoolExhausted,
    QueryTimeout,
    RowMappingError,
    SerializationError,
    SqlError,
)


@pytest.mark.parametrize(
    "error, code",
    [
        (OdbcError(0, "boom"), "odbc_error"),
        (PoolExhausted(10), "pool_exhausted"),
        (QueryTimeout(10), "query_timeout"),
        (Cancelled(), "cancelled"),
        (CacheError("down"), "cache_error"),
        (SerializationError("bad"), "serialization_error"),
        (DeadlockRetryExhausted(3), "deadlock_retry_exhausted"),
        (InvalidTransactionState(), "invalid_transaction_state"),
        (ConfigError("bad"), "config_error"),
        (RowMappingError("Name", "bad"), "row_mapping_error"),
        (NotFoundError("[dbo].[Users]", 7), "not_found"),
        (IoError("gone"), "io_error"),
        (CryptoError("bad"), "crypto_error"),
    ],
)
def test_error_codes(error, code):
    assert error.error_code() == code
    assert isinstance(error, SqlError)


def test_display_messages():
    assert str(OdbcError(42, "syntax")) == "ODBC error [42]: syntax"
    assert str(PoolExhausted(250)) == "Connection pool exhausted (timeout: 250ms)"
    assert str(QueryTimeout(90)) == "Query timeout after 90ms"
    assert str(Cancelled()) == "Operation cancelled"
    assert str(DeadlockRetryExhausted(4)) == "Deadlock detected, retries exhausted (4)"
    assert str(InvalidTransactionState()) == "Transaction already committed or rolled back"
    assert str(RowMappingError("Age", "not a number")) == (
        "Row mapping error on column 'Age': not a number"
    )
    assert str(NotFoundError("Users", 5)) == "Not found: Users with pk=5"
    assert str(ConfigError("missing")) == "Config error: missing"


def test_safe_messages():
    assert NotFoundError("Users", 5).safe_message() == "Users with pk=5 not found"
    assert PoolExhausted(250).safe_message() == "Service busy, pool timeout after 250ms"
    assert QueryTimeout(90).safe_message() == "Query timed out after 90ms"
    assert DeadlockRetryExhausted(4).safe_message() == "Deadlock retries exhausted (4)"
    assert InvalidTransactionState().safe_message() == "Invalid transaction state"
    assert Cancelled().safe_message() == "Operation cancelled"


def test_safe_message_hides_internal_details():
    secret_detail = "Server=db.example.com;Uid=user"
    for error in (OdbcError(0, secret_detail), CacheError(secret_detail), IoError(secret_detail)):
        assert secret_detail not in error.safe_message()
        assert error.safe_message() == "An internal database error occurred"


def test_is_deadlock():
    assert OdbcError(1205, "deadlock victim").is_deadlock()
    assert not OdbcError(0, "other").is_deadlock()
    assert not QueryTimeout(5).is_deadlock()


def test_http_status():
    assert NotFoundError("T", 1).http_status() == HTTPStatus.NOT_FOUND
    assert Cancelled().http_status() == 499
    assert PoolExhausted(1).http_status() == HTTPStatus.SERVICE_UNAVAILABLE
    assert DeadlockRetryExhausted(1).http_status() == HTTPStatus.SERVICE_UNAVAILABLE
    assert QueryTimeout(1).http_status() == HTTPStatus.GATEWAY_TIMEOUT
    assert OdbcError(0, "x").http_status() == HTTPStatus.INTERNAL_SERVER_ERROR


def test_to_dict():
    error = NotFoundError("Users", "abc")
    assert error.to_dict() == {"error_code": "not_found", "message": "Users with pk=abc not found"}


def test_odbc_error_fields_and_base_class():
    error = OdbcError(1205, "deadlock")
    assert error.code == 1205
    assert error.message == "deadlock"
    assert error.error_code() == "odbc_error"
    assert error.is_deadlock() is True
    assert isinstance(error, SqlError)
    assert isinstance(error, Exception)
"""Error hierarchy shared by every part of the package."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, ClassVar

_INTERNAL_MESSAGE = "An internal database error occurred"
DEADLOCK_CODE = 1205


class SqlError(Exception):
    """Base class of every error raised by the package."""

    _error_code: ClassVar[str] = "internal_error"
    _http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR

    def error_code(self) -> str:
        """Short machine-readable code for structured responses."""
        return self._error_code

    def safe_message(self) -> str:
        """A client-safe message that hides driver internals and connection details."""
        return _INTERNAL_MESSAGE

    def is_deadlock(self) -> bool:
        """True when this error is a SQL Server deadlock (error 1205)."""
        return False

    def http_status(self) -> int:
        """HTTP status code suitable for reporting this error to a web client."""
        return int(self._http_status)

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form exposing only the code and the safe message."""
        return {"error_code": self.error_code(), "message": self.safe_message()}


class OdbcError(SqlError):
    _error_code = "odbc_error"

    def __init__(self, code: int, message: str) -> None:
        self.code = int(code)
        self.message = str(message)
        super().__init__(f"ODBC error [{self.code}]: {self.message}")

    def is_deadlock(self) -> bool:
        return self.code == DEADLOCK_CODE


class PoolExhausted(SqlError):
    _error_code = "pool_exhausted"
    _http_status = HTTPStatus.SERVICE_UNAVAILABLE

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = int(timeout_ms)
        super().__init__(f"Connection pool exhausted (timeout: {self.timeout_ms}ms)")

    def safe_message(self) -> str:
        return f"Service busy, pool timeout after {self.timeout_ms}ms"


class QueryTimeout(SqlError):
    _error_code = "query_timeout"
    _http_status = HTTPStatus.GATEWAY_TIMEOUT

    def __init__(self, elapsed_ms: int) -> None:
        self.elapsed_ms = int(elapsed_ms)
        super().__init__(f"Query timeout after {self.elapsed_ms}ms")

    def safe_message(self) -> str:
        return f"Query timed out after {self.elapsed_ms}ms"


class Cancelled(SqlError):
    _error_code = "cancelled"
    _http_status = 499

    def __init__(self) -> None:
        super().__init__("Operation cancelled")

    def safe_message(self) -> str:
        return "Operation cancelled"


class CacheError(SqlError):
    _error_code = "cache_error"

    def __init__(self, detail: object) -> None:
        self.detail = str(detail)
        super().__init__(f"Redis error: {self.detail}")


class SerializationError(SqlError):
    _error_code = "serialization_error"

    def __init__(self, detail: object) -> None:
        self.detail = str(detail)
        super().__init__(f"Serialization error: {self.detail}")


class DeadlockRetryExhausted(SqlError):
    _error_code = "deadlock_retry_exhausted"
    _http_status = HTTPStatus.SERVICE_UNAVAILABLE

    def __init__(self, attempts: int) -> None:
        self.attempts = int(attempts)
        super().__init__(f"Deadlock detected, retries exhausted ({self.attempts})")

    def safe_message(self) -> str:
        return f"Deadlock retries exhausted ({self.attempts})"


class InvalidTransactionState(SqlError):
    _error_code = "invalid_transaction_state"

    def __init__(self) -> None:
        super().__init__("Transaction already committed or rolled back")

    def safe_message(self) -> str:
        return "Invalid transaction state"


class ConfigError(SqlError):
    _error_code = "config_error"

    def __init__(self, detail: object) -> None:
        self.detail = str(detail)
        super().__init__(f"Config error: {self.detail}")


class RowMappingError(SqlError):
    _error_code = "row_mapping_error"

    def __init__(self, column: str, reason: object) -> None:
        self.column = str(column)
        self.reason = str(reason)
        super().__init__(f"Row mapping error on column '{self.column}': {self.reason}")


class NotFoundError(SqlError):
    _error_code = "not_found"
    _http_status = HTTPStatus.NOT_FOUND

    def __init__(self, table: str, pk: object) -> None:
        self.table = str(table)
        self.pk = str(pk)
        super().__init__(f"Not found: {self.table} with pk={self.pk}")

    def safe_message(self) -> str:
        return f"{self.table} with pk={self.pk} not found"


class IoError(SqlError):
    _error_code = "io_error"

    def __init__(self, detail: object) -> None:
        self.detail = str(detail)
        super().__init__(f"IO error: {self.detail}")


class CryptoError(SqlError):
    _error_code = "crypto_error"

    def __init__(self, detail: object) -> None:
        self.detail = str(detail)
        super().__init__(f"Crypto error: {self.detail}")
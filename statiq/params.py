"""Typed query parameters and primary-key values."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID

_INT_RANGES = {
    "U8": (0, 2**8 - 1),
    "I16": (-(2**15), 2**15 - 1),
    "I32": (-(2**31), 2**31 - 1),
    "I64": (-(2**63), 2**63 - 1),
}


class ParamKind(enum.Enum):
    """SQL Server value families a parameter can carry."""

    BOOL = "bit"
    U8 = "tinyint"
    I16 = "smallint"
    I32 = "int"
    I64 = "bigint"
    F32 = "real"
    F64 = "float"
    DECIMAL = "decimal"
    STR = "nvarchar"
    BYTES = "varbinary"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime2"
    DATETIME_OFFSET = "datetimeoffset"
    GUID = "uniqueidentifier"
    NULL = "null"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _normalise(kind: ParamKind, value: Any) -> Any:
    """Validate ``value`` for ``kind`` and return its canonical form."""
    if kind is ParamKind.BOOL:
        if not isinstance(value, bool):
            raise TypeError("bit parameter requires a bool")
        return value
    if kind.name in _INT_RANGES:
        if not _is_int(value):
            raise TypeError(f"{kind.value} parameter requires an int")
        low, high = _INT_RANGES[kind.name]
        if not low <= value <= high:
            raise ValueError(f"{value} is out of range for {kind.value}")
        return value
    if kind in (ParamKind.F32, ParamKind.F64):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{kind.value} parameter requires a float")
        return float(value)
    if kind is ParamKind.DECIMAL:
        if not isinstance(value, Decimal):
            raise TypeError("decimal parameter requires a Decimal")
        if not value.is_finite():
            raise ValueError("decimal parameter must be finite")
        return value
    if kind is ParamKind.STR:
        if not isinstance(value, str):
            raise TypeError("string parameter requires a str")
        return value
    if kind is ParamKind.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError("binary parameter requires bytes")
        return bytes(value)
    if kind is ParamKind.DATE:
        if not isinstance(value, date) or isinstance(value, datetime):
            raise TypeError("date parameter requires a date")
        return value
    if kind is ParamKind.TIME:
        if not isinstance(value, time):
            raise TypeError("time parameter requires a time")
        return value
    if kind is ParamKind.DATETIME:
        if not isinstance(value, datetime):
            raise TypeError("datetime parameter requires a datetime")
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if kind is ParamKind.DATETIME_OFFSET:
        if not isinstance(value, datetime) or value.utcoffset() is None:
            raise TypeError("datetimeoffset parameter requires an aware datetime")
        return value
    if kind is ParamKind.GUID:
        if not isinstance(value, UUID):
            raise TypeError("uniqueidentifier parameter requires a UUID")
        return value
    if value is not None:
        raise TypeError("null parameter carries no value")
    return None


@dataclass(frozen=True)
class ParamValue:
    """A single typed parameter value."""

    kind: ParamKind
    value: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _normalise(self.kind, self.value))

    @classmethod
    def of(cls, value: Any) -> ParamValue:
        """Infer the kind of a plain Python value; ``None`` becomes NULL."""
        if isinstance(value, ParamValue):
            return value
        if value is None:
            return cls(ParamKind.NULL)
        if isinstance(value, bool):
            return cls(ParamKind.BOOL, value)
        if isinstance(value, int):
            low, high = _INT_RANGES["I32"]
            kind = ParamKind.I32 if low <= value <= high else ParamKind.I64
            return cls(kind, value)
        if isinstance(value, float):
            return cls(ParamKind.F64, value)
        if isinstance(value, Decimal):
            return cls(ParamKind.DECIMAL, value)
        if isinstance(value, str):
            return cls(ParamKind.STR, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(ParamKind.BYTES, value)
        if isinstance(value, datetime):
            if value.tzinfo is None or value.tzinfo is timezone.utc:
                return cls(ParamKind.DATETIME, value)
            return cls(ParamKind.DATETIME_OFFSET, value)
        if isinstance(value, date):
            return cls(ParamKind.DATE, value)
        if isinstance(value, time):
            return cls(ParamKind.TIME, value)
        if isinstance(value, UUID):
            return cls(ParamKind.GUID, value)
        raise TypeError(f"unsupported parameter type: {type(value).__name__}")

    @property
    def is_null(self) -> bool:
        return self.kind is ParamKind.NULL


@dataclass(frozen=True)
class OdbcParam:
    """A named query parameter; plain values are converted with :meth:`ParamValue.of`."""

    name: str
    value: ParamValue

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name))
        object.__setattr__(self, "value", ParamValue.of(self.value))


_PK_KINDS = frozenset({ParamKind.I32, ParamKind.I64, ParamKind.STR, ParamKind.GUID})


@dataclass(frozen=True)
class PkValue:
    """Primary-key value used for lookups, deletes and existence checks."""

    kind: ParamKind
    value: Any

    def __post_init__(self) -> None:
        if self.kind not in _PK_KINDS:
            raise ValueError(f"{self.kind.value} cannot be a primary key")
        object.__setattr__(self, "value", _normalise(self.kind, self.value))

    @classmethod
    def of(cls, value: Any) -> PkValue:
        if isinstance(value, PkValue):
            return value
        if _is_int(value):
            low, high = _INT_RANGES["I32"]
            return cls(ParamKind.I32 if low <= value <= high else ParamKind.I64, value)
        if isinstance(value, str):
            return cls(ParamKind.STR, value)
        if isinstance(value, UUID):
            return cls(ParamKind.GUID, value)
        raise TypeError(f"unsupported primary-key type: {type(value).__name__}")

    def as_param(self) -> ParamValue:
        return ParamValue(self.kind, self.value)

    def __str__(self) -> str:
        return str(self.value)


def params(**kwargs: Any) -> tuple[OdbcParam, ...]:
    """Build named parameters from keyword arguments, keeping their order."""
    return tuple(OdbcParam(name, value) for name, value in kwargs.items())
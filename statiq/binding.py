"""Positional parameter binding: ``@name`` placeholders become ``?`` markers."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from statiq.params import OdbcParam, ParamKind, ParamValue


class SqlType(enum.Enum):
    """Driver-side type a bound parameter is sent as."""

    BIT = "bit"
    SMALLINT = "smallint"
    INT = "int"
    BIGINT = "bigint"
    REAL = "real"
    FLOAT = "float"
    VARCHAR = "varchar"
    VARBINARY = "varbinary"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "datetime2"


@dataclass(frozen=True)
class BoundParam:
    """A value ready for positional binding."""

    sql_type: SqlType
    value: Any
    precision: int | None = None


_DIRECT = {
    ParamKind.BOOL: SqlType.BIT,
    ParamKind.U8: SqlType.SMALLINT,
    ParamKind.I16: SqlType.SMALLINT,
    ParamKind.I32: SqlType.INT,
    ParamKind.I64: SqlType.BIGINT,
    ParamKind.F32: SqlType.REAL,
    ParamKind.F64: SqlType.FLOAT,
    ParamKind.STR: SqlType.VARCHAR,
    ParamKind.BYTES: SqlType.VARBINARY,
    ParamKind.DATE: SqlType.DATE,
}


def _format_offset_datetime(value: datetime) -> str:
    total_minutes = int(value.utcoffset().total_seconds()) // 60
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}."
        f"{value.microsecond:06d}0 {sign}{hours:02d}:{minutes:02d}"
    )


def param_to_bound(value: ParamValue | Any) -> BoundParam:
    """Convert a parameter value into the form the driver binds."""
    value = ParamValue.of(value)
    kind = value.kind
    if kind in _DIRECT:
        return BoundParam(_DIRECT[kind], value.value)
    if kind is ParamKind.DECIMAL:
        return BoundParam(SqlType.VARCHAR, format(value.value, "f"))
    if kind is ParamKind.TIME:
        seconds_only = value.value.replace(microsecond=0, tzinfo=None)
        return BoundParam(SqlType.TIME, seconds_only, precision=0)
    if kind is ParamKind.DATETIME:
        return BoundParam(SqlType.TIMESTAMP, value.value, precision=7)
    if kind is ParamKind.DATETIME_OFFSET:
        return BoundParam(SqlType.VARCHAR, _format_offset_datetime(value.value))
    if kind is ParamKind.GUID:
        return BoundParam(SqlType.VARCHAR, str(value.value))
    return BoundParam(SqlType.VARCHAR, None)


def params_to_positional(sql: str, params: Iterable[OdbcParam]) -> tuple[str, list[BoundParam]]:
    """Replace known ``@name`` placeholders with ``?`` and return the bound values in order.

    Longer names are tried first, and a name only matches when it is not
    followed by an ASCII letter, digit or underscore. Unknown ``@`` sequences
    are left untouched; a name used several times is bound once per use.
    """
    params = list(params)
    if not params:
        return sql, []

    by_name: dict[str, ParamValue] = {}
    for param in params:
        by_name.setdefault(param.name, param.value)

    names = sorted(by_name, key=len, reverse=True)
    pattern = re.compile(
        "@(" + "|".join(re.escape(name) for name in names) + ")(?![A-Za-z0-9_])"
    )
    bound: list[BoundParam] = []

    def replace(match: re.Match[str]) -> str:
        bound.append(param_to_bound(by_name[match.group(1)]))
        return "?"

    return pattern.sub(replace, sql), bound
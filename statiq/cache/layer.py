"""Caching strategy interface and the JSON encoding shared by cache backends."""

from __future__ import annotations

import abc
import dataclasses
import enum
import json
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from statiq.errors import SerializationError


def _to_timedelta(ttl: timedelta | float) -> timedelta:
    if isinstance(ttl, timedelta):
        return ttl
    return timedelta(seconds=float(ttl))


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return list(bytes(value))
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class CacheLayer(abc.ABC):
    """Strategy interface for caching query results."""

    default_ttl: timedelta = timedelta(seconds=300)
    count_ttl: timedelta = timedelta(seconds=60)

    @staticmethod
    def _dumps(value: Any) -> str:
        try:
            return json.dumps(value, default=_json_default, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise SerializationError(exc) from exc

    @staticmethod
    def _loads(data: str | bytes) -> Any:
        try:
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SerializationError(exc) from exc

    @abc.abstractmethod
    async def get(self, key: str) -> Any | None:
        """The decoded value stored under ``key``, or None."""

    @abc.abstractmethod
    async def set(self, key: str, value: Any, ttl: timedelta | float) -> None:
        """Store ``value`` under ``key``."""

    async def get_vec(self, key: str) -> list[Any] | None:
        value = await self.get(key)
        if value is not None and not isinstance(value, list):
            raise SerializationError(f"cached value under {key!r} is not a sequence")
        return value

    async def set_vec(self, key: str, values: Iterable[Any], ttl: timedelta | float) -> None:
        await self.set(key, list(values), ttl)

    async def get_scalar(self, key: str) -> Any | None:
        return await self.get(key)

    async def set_scalar(self, key: str, value: Any, ttl: timedelta | float) -> None:
        await self.set(key, value, ttl)

    @abc.abstractmethod
    async def invalidate_entry(self, prefix: str, id: str) -> None:
        """Delete a single entity entry."""

    @abc.abstractmethod
    async def invalidate_table(self, prefix: str) -> None:
        """Delete the entries kept under a table prefix."""
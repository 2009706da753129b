"""Application configuration: JSON files, optionally AES-256-GCM encrypted."""

from __future__ import annotations

import base64
import binascii
import dataclasses
import json
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from statiq.errors import CryptoError, IoError, SerializationError

CONFIG_KEY_ENV = "STATIQ_CONFIG_KEY"
_NONCE_LEN = 12
_KEY_LEN = 32
_U8_MAX = 2**8 - 1
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_MISSING = object()


def _uint(max_value: int) -> Callable[[Any, str], int]:
    def convert(value: Any, key: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SerializationError(f"invalid type for `{key}`: expected unsigned integer")
        if not 0 <= value <= max_value:
            raise SerializationError(f"invalid value for `{key}`: {value} out of range")
        return value

    return convert


def _optional_uint(value: Any, key: str) -> int | None:
    return None if value is None else _uint(_U64_MAX)(value, key)


def _string(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise SerializationError(f"invalid type for `{key}`: expected a string")
    return value


def _boolean(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise SerializationError(f"invalid type for `{key}`: expected a boolean")
    return value


def _string_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise SerializationError(f"invalid type for `{key}`: expected a sequence")
    return [_string(item, key) for item in value]


def _mapping(value: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise SerializationError(f"invalid type for `{key}`: expected a map")
    return value


def _take(data: Mapping[str, Any], key: str, convert: Callable[[Any, str], Any], default: Any = _MISSING) -> Any:
    if key not in data:
        if default is _MISSING:
            raise SerializationError(f"missing field `{key}`")
        return default() if callable(default) else default
    return convert(data[key], key)


_u8 = _uint(_U8_MAX)
_u32 = _uint(_U32_MAX)
_u64 = _uint(_U64_MAX)


@dataclass
class PoolConfig:
    max_size: int = 100
    min_size: int = 5
    idle_timeout_secs: int = 300
    max_lifetime_secs: int = 1800
    checkout_timeout_ms: int = 5000
    validation_interval_secs: int = 60
    max_deadlock_retries: int = 3
    reset_connection_on_reuse: bool = False

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> PoolConfig:
        return cls(
            max_size=_take(data, "max_size", _u32),
            min_size=_take(data, "min_size", _u32),
            idle_timeout_secs=_take(data, "idle_timeout_secs", _u64),
            max_lifetime_secs=_take(data, "max_lifetime_secs", _u64, 1800),
            checkout_timeout_ms=_take(data, "checkout_timeout_ms", _u64),
            validation_interval_secs=_take(data, "validation_interval_secs", _u64),
            max_deadlock_retries=_take(data, "max_deadlock_retries", _u8),
            reset_connection_on_reuse=_take(data, "reset_connection_on_reuse", _boolean, False),
        )


@dataclass
class QueryConfig:
    default_command_timeout_secs: int = 30
    slow_query_threshold_ms: int = 1000
    max_text_bytes: int = 65536
    timeout_secs: int | None = None

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> QueryConfig:
        return cls(
            default_command_timeout_secs=_take(data, "default_command_timeout_secs", _u64),
            slow_query_threshold_ms=_take(data, "slow_query_threshold_ms", _u64),
            max_text_bytes=_take(data, "max_text_bytes", _u64, 65536),
            timeout_secs=_take(data, "timeout_secs", _optional_uint, None),
        )


@dataclass
class MssqlConfig:
    connection_string: str
    pool: PoolConfig = field(default_factory=PoolConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    read_replicas: list[str] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> MssqlConfig:
        return cls(
            connection_string=_take(data, "connection_string", _string),
            pool=PoolConfig._from_dict(_take(data, "pool", _mapping)),
            query=QueryConfig._from_dict(_take(data, "query", _mapping)),
            read_replicas=_take(data, "read_replicas", _string_list, list),
        )


@dataclass
class RedisConfig:
    url: str = "redis://127.0.0.1:6379"
    pool_size: int = 20
    default_ttl_secs: int = 300
    count_ttl_secs: int = 60
    enabled: bool = False

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> RedisConfig:
        return cls(
            url=_take(data, "url", _string),
            pool_size=_take(data, "pool_size", _u32),
            default_ttl_secs=_take(data, "default_ttl_secs", _u64),
            count_ttl_secs=_take(data, "count_ttl_secs", _u64),
            enabled=_take(data, "enabled", _boolean),
        )


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "json"

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> LoggingConfig:
        return cls(
            level=_take(data, "level", _string),
            format=_take(data, "format", _string),
        )


def _decode_key(key_hex: str) -> bytes:
    try:
        key = binascii.unhexlify(key_hex)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise CryptoError(f"Invalid key hex: {exc}") from exc
    if len(key) != _KEY_LEN:
        raise CryptoError("Key must be 32 bytes (64 hex chars)")
    return key


def _read_text(path: str | os.PathLike[str]) -> str:
    try:
        with open(path, encoding="utf-8") as handle:
            return handle.read()
    except OSError as exc:
        raise IoError(exc) from exc


@dataclass
class AppConfig:
    mssql: MssqlConfig
    redis: RedisConfig = field(default_factory=RedisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AppConfig:
        """Build a config from parsed JSON, validating field types and presence."""
        data = _mapping(data, "config")
        return cls(
            mssql=MssqlConfig._from_dict(_take(data, "mssql", _mapping)),
            redis=RedisConfig._from_dict(_take(data, "redis", _mapping)),
            logging=LoggingConfig._from_dict(_take(data, "logging", _mapping)),
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def _from_json(cls, text: str | bytes) -> AppConfig:
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SerializationError(exc) from exc
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> AppConfig:
        """Load a plain JSON config file."""
        return cls._from_json(_read_text(path))

    @classmethod
    def from_file_auto(cls, path: str | os.PathLike[str]) -> AppConfig:
        """Decrypt ``.enc`` files when the key variable is set, else read plain JSON."""
        key_hex = os.environ.get(CONFIG_KEY_ENV)
        if os.fspath(path).endswith(".enc") and key_hex is not None:
            return cls.from_encrypted_file(path, key_hex)
        return cls.from_file(path)

    @classmethod
    def from_encrypted_file(cls, path: str | os.PathLike[str], key_hex: str) -> AppConfig:
        """Read ``base64(nonce || ciphertext || tag)`` and decrypt it with AES-256-GCM."""
        raw = _read_text(path)
        try:
            payload = base64.b64decode(raw.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CryptoError(exc) from exc
        if len(payload) < _NONCE_LEN:
            raise CryptoError("Encrypted file too short")
        key = _decode_key(key_hex)
        nonce, ciphertext = payload[:_NONCE_LEN], payload[_NONCE_LEN:]
        try:
            plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
        except InvalidTag as exc:
            raise CryptoError("Decryption failed — wrong key or corrupted file") from exc
        return cls._from_json(plaintext)

    def to_encrypted_file(self, path: str | os.PathLike[str], key_hex: str) -> None:
        """Encrypt this config with AES-256-GCM and write it to ``path``."""
        key = _decode_key(key_hex)
        plaintext = json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")
        nonce = os.urandom(_NONCE_LEN)
        ciphertext = AESGCM(key).encrypt(nonce, plaintext, None)
        encoded = base64.b64encode(nonce + ciphertext).decode("ascii")
        try:
            with open(path, "w", encoding="ascii") as handle:
                handle.write(encoded)
        except OSError as exc:
            raise IoError(exc) from exc
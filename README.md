# statiq

Building blocks for working with SQL Server tables from Python.

- `statiq.entity` – `SqlEntity` and the `sql_entity` decorator map a class onto
  a table and fill in ready-made `SELECT`, `INSERT`, `UPDATE`, `DELETE`,
  `MERGE`, `COUNT` and `EXISTS` statements, with optional soft-delete and
  tenant filters.
- `statiq.schema` – `column()` declares per-field mapping options;
  `EntityInfo` and `GeneratedSql` hold the resolved metadata and statements.
- `statiq.params` – `params(...)`, `ParamValue`, `OdbcParam` and `PkValue`
  give typed, named query parameters.
- `statiq.binding` – `params_to_positional` rewrites `@name` placeholders
  into positional `?` markers and returns the values to bind, in order.
- `statiq.errors` – one `SqlError` hierarchy with `error_code()`,
  `safe_message()`, `http_status()`, `is_deadlock()` and `to_dict()`.
- `statiq.circuit_breaker` – `CircuitBreaker` turns work away with
  `PoolExhausted` while open and lets a probe through after a recovery timeout.
- `statiq.metrics` – thread-safe `PoolMetrics` counters and a frozen
  `MetricsSnapshot`.
- `statiq.config` – `AppConfig` loads JSON configuration, plain or
  AES-256-GCM encrypted.
- `statiq.logsetup` – `init()` installs a process-wide log handler once.
- `statiq.cache` – `NoCache`, the in-process `LocalCache` and `RedisCache`
  share the async `CacheLayer` interface.

## Install

```
pip install statiq
```

## Entities

```python
from statiq.entity import SqlEntity, sql_entity
from statiq.schema import column

@sql_entity("Users", schema="dbo")
class User(SqlEntity):
    id: int = column(primary_key=True, identity=True)
    name: str = column("UserName")
    active: bool = column()

User.SELECT_SQL   # "SELECT id, UserName, active FROM [dbo].[Users]"
User.INSERT_SQL   # "INSERT INTO [dbo].[Users] (UserName, active) OUTPUT INSERTED.id VALUES (@name, @active)"

user = User(id=1, name="Ali", active=True)
user.to_params()  # named parameters for INSERT / UPDATE
user.pk_value()   # PkValue for id
```

`column()` options:

- `primary_key` – the key column; `identity=True` marks an identity key
  (implies `primary_key`) that INSERT leaves out and returns through
  `OUTPUT INSERTED`.
- `computed` – read-only; left out of INSERT, UPDATE, MERGE and `to_params()`.
- `server_default` – left out of INSERT, still set by UPDATE.
- `ignore` – kept out of all SQL.
- `mask` – recorded in the field metadata (`FieldInfo.is_masked`).

`sql_entity(..., soft_delete="IsDeleted")` adds `[IsDeleted] = 0` to SELECT,
COUNT and EXISTS and turns `DELETE_SQL` into an UPDATE; `HARD_DELETE_SQL`
always deletes. `tenant_id="TenantId"` adds `[TenantId] = @__tenant_id`.
A class without a primary-key field raises `EntityDefinitionError`.

## Parameters

```python
from statiq.params import params
from statiq.binding import params_to_positional

sql, bound = params_to_positional(
    "SELECT * FROM Users WHERE active = @active AND name = @name",
    params(active=True, name="Ali"),
)
# sql == "SELECT * FROM Users WHERE active = ? AND name = ?"
# bound holds one BoundParam (sql_type, value, precision) per "?"
```

Longer names are matched first, a name only matches at a word boundary,
and unknown `@` sequences are left as they are.

## Configuration

```python
from statiq.config import AppConfig

cfg = AppConfig.from_file_auto("config.json")
```

`from_file_auto` decrypts the file when its name ends in `.enc` and the
`STATIQ_CONFIG_KEY` environment variable holds the key; otherwise it reads
plain JSON. To write an encrypted copy, pass a 64-character hex key:

```python
cfg.to_encrypted_file("config.json.enc", key_hex)
```

The encrypted file is `base64(12-byte nonce || ciphertext || tag)`.

## Logging

```python
from statiq.config import LoggingConfig
from statiq import logsetup

logsetup.init(LoggingConfig(level="INFO", format="json"))
```

The `STATIQ_LOG` environment variable (`level` or `target=level`
directives) overrides `level` when set. Any format other than `json` gives
plain text lines.

## Caching

```python
from statiq.cache.local import LocalCache

cache = LocalCache(10_000, default_ttl=300, count_ttl=60)

async def demo():
    await cache.set("SqlService::Users::GetById::1", {"id": 1}, 300)
    return await cache.get("SqlService::Users::GetById::1")
```

`LocalCache` keeps every entry for its `default_ttl`. `RedisCache.from_config`
builds an asyncio Redis client from a `RedisConfig`; its `invalidate_table`
deletes keys under a prefix with an incremental `SCAN`.

## What this package does not do

It does not open database connections, manage a connection pool or run
queries. It generates SQL text, prepares parameters for positional binding
and provides the supporting errors, circuit breaker, counters, configuration
and caches; executing the statements is left to whatever driver you use.
There is no command-line program.

## Tests

```
pip install -e .[test]
pytest
```
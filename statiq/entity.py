"""Entity base class and the decorator that maps a dataclass onto a table."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any, ClassVar, TypeVar

from statiq.params import OdbcParam, ParamValue, PkValue
from statiq.schema import EntityDefinitionError, EntityInfo, GeneratedSql

E = TypeVar("E", bound=type)


class SqlEntity:
    """Base class for table-mapped dataclasses.

    Subclasses are configured with :func:`sql_entity`, which fills in the SQL
    constants below from the class's field mapping.
    """

    TABLE_NAME: ClassVar[str]
    SCHEMA: ClassVar[str]
    SELECT_COLS: ClassVar[str]
    SELECT_SQL: ClassVar[str]
    SELECT_BY_PK_SQL: ClassVar[str]
    INSERT_SQL: ClassVar[str]
    UPDATE_SQL: ClassVar[str]
    DELETE_SQL: ClassVar[str]
    HARD_DELETE_SQL: ClassVar[str]
    UPSERT_SQL: ClassVar[str]
    COUNT_SQL: ClassVar[str]
    EXISTS_SQL: ClassVar[str]
    PK_COLUMN: ClassVar[str]
    PK_IS_IDENTITY: ClassVar[bool]
    CACHE_PREFIX: ClassVar[str]
    COLUMN_COUNT: ClassVar[int]

    @classmethod
    def _mapping(cls) -> EntityInfo:
        info = cls.__dict__.get("_entity_info")
        if info is None:
            raise EntityDefinitionError(
                f"{cls.__name__} is not mapped to a table; decorate it with sql_entity"
            )
        return info

    def to_params(self) -> list[OdbcParam]:
        """Named parameters for INSERT/UPDATE; computed and ignored fields are left out."""
        info = type(self)._mapping()
        return [
            OdbcParam(f.name, ParamValue.of(getattr(self, f.name)))
            for f in info.active_fields()
            if not f.is_computed
        ]

    def pk_value(self) -> PkValue:
        """The primary-key value of this row."""
        pk = type(self)._mapping().pk_field()
        if pk is None:
            raise EntityDefinitionError(f"{type(self).__name__} has no primary-key field")
        return PkValue.of(getattr(self, pk.name))

    @classmethod
    def rls_filter(cls) -> str | None:
        """Optional row-level security fragment appended to SELECT queries."""
        return None


def _configure(
    cls: Any,
    table: str | None,
    schema: str | None,
    soft_delete: str | None,
    tenant_id: str | None,
) -> Any:
    if not isinstance(cls, type) or not issubclass(cls, SqlEntity):
        raise EntityDefinitionError("sql_entity can only be applied to SqlEntity subclasses")
    if "__dataclass_fields__" not in cls.__dict__:
        cls = dataclasses.dataclass(cls)

    info = EntityInfo.from_class(
        cls, table=table, schema=schema, soft_delete=soft_delete, tenant_id=tenant_id
    )
    sql = GeneratedSql.from_info(info)
    pk = info.pk_field()
    assert pk is not None  # guaranteed by EntityInfo.from_class

    constants = {
        "TABLE_NAME": sql.fq_table,
        "SCHEMA": sql.schema,
        "SELECT_COLS": sql.select_cols,
        "SELECT_SQL": sql.select_sql,
        "SELECT_BY_PK_SQL": sql.select_by_pk_sql,
        "INSERT_SQL": sql.insert_sql,
        "UPDATE_SQL": sql.update_sql,
        "DELETE_SQL": sql.delete_sql,
        "HARD_DELETE_SQL": sql.hard_delete_sql,
        "UPSERT_SQL": sql.upsert_sql,
        "COUNT_SQL": sql.count_sql,
        "EXISTS_SQL": sql.exists_sql,
        "PK_COLUMN": pk.sql_name,
        "PK_IS_IDENTITY": pk.pk_is_identity,
        "CACHE_PREFIX": sql.cache_prefix,
        "COLUMN_COUNT": sum(1 for _ in info.active_fields()),
    }
    for name, value in constants.items():
        setattr(cls, name, value)
    cls._entity_info = info
    return cls


def sql_entity(
    table: str | type | None = None,
    *,
    schema: str | None = None,
    soft_delete: str | None = None,
    tenant_id: str | None = None,
) -> Any:
    """Map a :class:`SqlEntity` subclass onto a table.

    Usable bare (``@sql_entity``, table named after the class) or with
    arguments. The class is turned into a dataclass if it is not one already.
    """
    if isinstance(table, type):
        return _configure(table, None, schema, soft_delete, tenant_id)

    def decorate(cls: E) -> E:
        return _configure(cls, table, schema, soft_delete, tenant_id)

    return decorate


__all__: list[str] = ["SqlEntity", "sql_entity"]
_Decorator = Callable[[type], type]
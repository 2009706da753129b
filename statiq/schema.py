"""Entity metadata and the SQL statements generated from it."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from statiq.errors import SqlError

METADATA_KEY = "statiq"
DEFAULT_SCHEMA = "dbo"


class EntityDefinitionError(SqlError, TypeError):
    """Raised when a class cannot describe a table."""

    _error_code = "entity_definition_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class ColumnOptions:
    """Per-field mapping options attached through :func:`column`."""

    name: str | None = None
    primary_key: bool = False
    identity: bool = False
    ignore: bool = False
    computed: bool = False
    server_default: bool = False
    mask: bool = False


def column(
    name: str | None = None,
    *,
    primary_key: bool = False,
    identity: bool = False,
    ignore: bool = False,
    computed: bool = False,
    server_default: bool = False,
    mask: bool = False,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """Declare a dataclass field together with its column mapping.

    ``identity`` marks an identity primary key and therefore implies
    ``primary_key``. ``computed`` columns are read-only, ``server_default``
    columns are left out of INSERT, ``ignore`` keeps a field out of all SQL,
    and ``mask`` hides the stored value when rows are read.
    """
    options = ColumnOptions(
        name=name,
        primary_key=primary_key or identity,
        identity=identity,
        ignore=ignore,
        computed=computed,
        server_default=server_default,
        mask=mask,
    )
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={METADATA_KEY: options},
    )


@dataclass(frozen=True)
class FieldInfo:
    """One field of an entity, fully resolved."""

    name: str
    sql_name: str
    type: Any
    is_pk: bool = False
    pk_is_identity: bool = False
    is_ignored: bool = False
    is_computed: bool = False
    is_server_default: bool = False
    is_masked: bool = False

    @classmethod
    def _from_field(cls, fld: dataclasses.Field) -> FieldInfo:
        options = fld.metadata.get(METADATA_KEY, ColumnOptions())
        return cls(
            name=fld.name,
            sql_name=options.name or fld.name,
            type=fld.type,
            is_pk=options.primary_key,
            pk_is_identity=options.identity,
            is_ignored=options.ignore,
            is_computed=options.computed,
            is_server_default=options.server_default,
            is_masked=options.mask,
        )


@dataclass(frozen=True)
class EntityInfo:
    """Table-level description of an entity class."""

    name: str
    table_name: str
    schema: str
    fields: tuple[FieldInfo, ...]
    soft_delete_col: str | None = None
    tenant_id_col: str | None = None

    @classmethod
    def from_class(
        cls,
        entity_cls: type,
        table: str | None = None,
        schema: str | None = None,
        soft_delete: str | None = None,
        tenant_id: str | None = None,
    ) -> EntityInfo:
        """Read the mapping of a dataclass; it must have a primary-key field."""
        if not isinstance(entity_cls, type) or not dataclasses.is_dataclass(entity_cls):
            raise EntityDefinitionError("SqlEntity can only be derived on dataclasses")
        fields = tuple(FieldInfo._from_field(fld) for fld in dataclasses.fields(entity_cls))
        if not any(f.is_pk for f in fields):
            raise EntityDefinitionError(
                "SqlEntity requires exactly one field marked with "
                "`column(primary_key=True)` or `column(identity=True)`. "
                "Add the option to your primary-key field."
            )
        return cls(
            name=entity_cls.__name__,
            table_name=table or entity_cls.__name__,
            schema=schema or DEFAULT_SCHEMA,
            fields=fields,
            soft_delete_col=soft_delete,
            tenant_id_col=tenant_id,
        )

    def active_fields(self) -> Iterator[FieldInfo]:
        """Fields that take part in SQL at all."""
        return (f for f in self.fields if not f.is_ignored)

    def insert_fields(self) -> Iterator[FieldInfo]:
        """Fields written by INSERT: no identity key, computed or server-default columns."""
        return (
            f
            for f in self.fields
            if not f.is_ignored
            and not (f.is_pk and f.pk_is_identity)
            and not f.is_computed
            and not f.is_server_default
        )

    def update_fields(self) -> Iterator[FieldInfo]:
        """Fields set by UPDATE: every non-key, non-computed column."""
        return (f for f in self.fields if not f.is_ignored and not f.is_pk and not f.is_computed)

    def pk_field(self) -> FieldInfo | None:
        """The first primary-key field."""
        return next((f for f in self.fields if f.is_pk), None)


@dataclass(frozen=True)
class GeneratedSql:
    """Every SQL statement an entity needs, built once from its metadata."""

    table_name: str
    schema: str
    fq_table: str
    select_cols: str
    select_sql: str
    select_by_pk_sql: str
    insert_sql: str
    update_sql: str
    delete_sql: str
    hard_delete_sql: str
    upsert_sql: str
    count_sql: str
    exists_sql: str
    cache_prefix: str

    @classmethod
    def from_info(cls, info: EntityInfo) -> GeneratedSql:
        schema, table = info.schema, info.table_name
        fq = f"[{schema}].[{table}]"

        select_cols = ", ".join(f.sql_name for f in info.active_fields())

        pk = info.pk_field()
        if pk is None:
            raise EntityDefinitionError("SqlEntity requires a primary-key field")
        pk_col, pk_name = pk.sql_name, pk.name

        filters = []
        if info.soft_delete_col:
            filters.append(f"[{info.soft_delete_col}] = 0")
        if info.tenant_id_col:
            filters.append(f"[{info.tenant_id_col}] = @__tenant_id")
        joined = " AND ".join(filters)
        extra_where = f" WHERE {joined}" if filters else ""
        extra_and = f" AND {joined}" if filters else ""

        select_sql = f"SELECT {select_cols} FROM {fq}{extra_where}"
        select_by_pk_sql = f"SELECT {select_cols} FROM {fq} WHERE {pk_col} = @{pk_col}{extra_and}"

        ins_fields = list(info.insert_fields())
        ins_cols = ", ".join(f.sql_name for f in ins_fields)
        ins_params = ", ".join(f"@{f.name}" for f in ins_fields)
        if pk.pk_is_identity:
            insert_sql = f"INSERT INTO {fq} ({ins_cols}) OUTPUT INSERTED.{pk_col} VALUES ({ins_params})"
        else:
            insert_sql = f"INSERT INTO {fq} ({ins_cols}) VALUES ({ins_params})"

        upd_fields = list(info.update_fields())
        upd_sets = ", ".join(f"{f.sql_name} = @{f.name}" for f in upd_fields)
        update_sql = f"UPDATE {fq} SET {upd_sets} WHERE {pk_col} = @{pk_name}"

        hard_delete_sql = f"DELETE FROM {fq} WHERE {pk_col} = @{pk_col}"
        if info.soft_delete_col:
            delete_sql = f"UPDATE {fq} SET [{info.soft_delete_col}] = 1 WHERE {pk_col} = @{pk_col}"
        else:
            delete_sql = hard_delete_sql

        using_cols = ", ".join(f"@{f.name} AS {f.sql_name}" for f in ins_fields)
        merge_update = ", ".join(f"target.{f.sql_name} = source.{f.sql_name}" for f in upd_fields)
        insert_vals = ", ".join(f"source.{f.sql_name}" for f in ins_fields)
        upsert_sql = (
            f"MERGE {fq} AS target "
            f"USING (SELECT {using_cols}) AS source ({ins_cols}) "
            f"ON (target.{pk_col} = source.{pk_col}) "
            f"WHEN MATCHED THEN UPDATE SET {merge_update} "
            f"WHEN NOT MATCHED THEN INSERT ({ins_cols}) VALUES ({insert_vals});"
        )

        count_sql = f"SELECT COUNT_BIG(*) FROM {fq}{extra_where}"
        exists_sql = f"SELECT CAST(1 AS BIT) FROM {fq} WHERE {pk_col} = @{pk_col}{extra_and}"

        return cls(
            table_name=table,
            schema=schema,
            fq_table=fq,
            select_cols=select_cols,
            select_sql=select_sql,
            select_by_pk_sql=select_by_pk_sql,
            insert_sql=insert_sql,
            update_sql=update_sql,
            delete_sql=delete_sql,
            hard_delete_sql=hard_delete_sql,
            upsert_sql=upsert_sql,
            count_sql=count_sql,
            exists_sql=exists_sql,
            cache_prefix=f"SqlService::{table}",
        )
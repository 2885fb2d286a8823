"""
Table definition resolution.

Derives the ordered column list of a load from the record type: declared
fields first (dataclass fields, pydantic model fields or class annotations),
then read-only properties, in class-body order. With a column provider the
list is matched case-insensitively against the destination table and put in
the table's physical column order.
"""

import dataclasses
import types
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import (
    Annotated,
    Any,
    ClassVar,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic import BaseModel

from fast_insert.utils.logging import get_logger

from .models import ColumnDefinition, ColumnType, ConfigurationError, TableDefinition

logger = get_logger(__name__)

# Checked in order: bool before int, Enum before int/str, datetime before date
_TYPE_TAGS: Sequence[Tuple[Tuple[type, ...], ColumnType]] = (
    ((bool,), ColumnType.BOOLEAN),
    ((Enum,), ColumnType.ENUM),
    ((int,), ColumnType.INTEGER),
    ((float,), ColumnType.FLOAT),
    ((Decimal,), ColumnType.DECIMAL),
    ((str,), ColumnType.TEXT),
    ((datetime,), ColumnType.DATETIME),
    ((date,), ColumnType.DATE),
    ((time,), ColumnType.TIME),
    ((uuid.UUID,), ColumnType.UUID),
    ((bytes, bytearray, memoryview), ColumnType.BINARY),
)


class ColumnNameProvider(Protocol):
    """Source of a destination table's column names in physical order."""

    def get_column_names(self, table: str) -> List[str]: ...


class StaticColumnProvider:
    """In-memory column provider, keyed by table name (case-insensitive)."""

    def __init__(self, tables: Mapping[str, Sequence[str]]):
        self._tables = {name.lower(): list(columns) for name, columns in tables.items()}

    def get_column_names(self, table: str) -> List[str]:
        return list(self._tables.get(table.lower(), []))


@dataclasses.dataclass(frozen=True)
class RecordField:
    """A readable attribute of a record type."""

    attribute: str
    column: str
    type: ColumnType
    nullable: bool = False
    read_only: bool = False


def column_type_for(annotation: Any) -> Tuple[ColumnType, bool]:
    """
    Map a type annotation to a column type tag and a nullable flag.

    Unknown types map to TEXT and are written with ``str()``.

    Examples:
        >>> column_type_for(Optional[uuid.UUID])
        (<ColumnType.UUID: 'uuid'>, True)
        >>> column_type_for(datetime)
        (<ColumnType.DATETIME: 'datetime'>, False)
    """
    origin = get_origin(annotation)
    if origin is Annotated:
        return column_type_for(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        present = [arg for arg in args if arg is not type(None)]
        nullable = len(present) < len(args)
        if len(present) == 1:
            column_type, inner_nullable = column_type_for(present[0])
            return column_type, nullable or inner_nullable
        return ColumnType.TEXT, nullable

    if not isinstance(annotation, type):
        return ColumnType.TEXT, False

    for bases, column_type in _TYPE_TAGS:
        if issubclass(annotation, bases):
            return column_type, False
    return ColumnType.TEXT, False


def _type_hints(obj: Any) -> Dict[str, Any]:
    try:
        return get_type_hints(obj)
    except (NameError, TypeError):
        # Unresolvable forward references fall back to the raw annotations
        return dict(getattr(obj, "__annotations__", {}))


def _make_field(attribute: str, column: str, annotation: Any, read_only: bool = False) -> RecordField:
    column_type, nullable = column_type_for(annotation)
    return RecordField(
        attribute=attribute,
        column=column,
        type=column_type,
        nullable=nullable,
        read_only=read_only,
    )


def _declared_fields(record_type: type) -> List[RecordField]:
    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        fields = [
            _make_field(name, name, info.annotation)
            for name, info in record_type.model_fields.items()
        ]
        fields.extend(
            _make_field(name, name, info.return_type, read_only=True)
            for name, info in record_type.model_computed_fields.items()
        )
        return fields

    hints = _type_hints(record_type)
    if dataclasses.is_dataclass(record_type):
        return [
            _make_field(f.name, f.metadata.get("column", f.name), hints.get(f.name, f.type))
            for f in dataclasses.fields(record_type)
        ]

    fields = []
    seen = set()
    for klass in reversed(record_type.__mro__):
        for name in getattr(klass, "__annotations__", {}):
            if name.startswith("_") or name in seen:
                continue
            annotation = hints.get(name)
            if get_origin(annotation) is ClassVar:
                continue
            seen.add(name)
            fields.append(_make_field(name, name, annotation))
    return fields


def _property_fields(record_type: type, known: set) -> List[RecordField]:
    fields = []
    for klass in reversed(record_type.__mro__):
        if klass is object or klass.__module__.startswith("pydantic"):
            continue
        for name, member in vars(klass).items():
            if not isinstance(member, property) or name.startswith("_") or name in known:
                continue
            known.add(name)
            annotation = _type_hints(member.fget).get("return") if member.fget else None
            fields.append(_make_field(name, name, annotation, read_only=member.fset is None))
    return fields


def record_fields(record_type: type) -> List[RecordField]:
    """
    List the readable fields of ``record_type`` in declaration order.

    Properties follow the declared fields; getter-only properties are
    included and flagged ``read_only``.
    """
    fields = _declared_fields(record_type)
    fields.extend(_property_fields(record_type, {f.attribute for f in fields}))
    return fields


def align_to_table(
    fields: Sequence[RecordField],
    table: str,
    column_provider: ColumnNameProvider,
) -> List[Tuple[RecordField, str]]:
    """
    Match fields to the table's columns and order them like the table.

    Returns:
        (field, column name as spelled by the table) pairs in table order

    Raises:
        ConfigurationError: If the table has no columns, or a field matches no
            column, or two fields match the same column
    """
    table_columns = column_provider.get_column_names(table)
    if not table_columns:
        raise ConfigurationError(f"Table {table} not found or has no columns")

    positions = {name.lower(): (index, name) for index, name in enumerate(table_columns)}
    matched: Dict[int, Tuple[RecordField, str]] = {}
    unmatched: List[str] = []
    for field in fields:
        hit = positions.get(field.column.lower())
        if hit is None:
            unmatched.append(field.column)
            continue
        index, name = hit
        if index in matched:
            raise ConfigurationError(
                f"Fields {matched[index][0].attribute!r} and {field.attribute!r} "
                f"both map to column {name!r} of {table}"
            )
        matched[index] = (field, name)

    if unmatched:
        raise ConfigurationError(
            f"No column in table {table} for fields {unmatched}; "
            f"table columns are {table_columns}"
        )

    skipped = [name for index, name in enumerate(table_columns) if index not in matched]
    if skipped:
        logger.debug(
            "fast_insert.columns.defaulted", table=table, columns=skipped
        )
    return [matched[index] for index in sorted(matched)]


def build_table_definition(
    fields: Sequence[RecordField],
    table: str,
    column_provider: Optional[ColumnNameProvider] = None,
) -> TableDefinition:
    """Turn record fields into the ordered TableDefinition of a load."""
    if not fields:
        raise ConfigurationError(f"No readable fields to load into {table}")

    if column_provider is None:
        pairs = [(field, field.column) for field in fields]
    else:
        pairs = align_to_table(fields, table, column_provider)

    seen = set()
    for _, name in pairs:
        if name.lower() in seen:
            raise ConfigurationError(f"Column {name!r} is mapped more than once")
        seen.add(name.lower())

    columns = [
        ColumnDefinition(
            name=name,
            attribute=field.attribute,
            type=field.type,
            nullable=field.nullable,
            ordinal=ordinal,
            read_only=field.read_only,
        )
        for ordinal, (field, name) in enumerate(pairs)
    ]
    return TableDefinition(table=table, columns=columns)


def resolve_table_definition(
    record_type: type,
    table: str,
    column_provider: Optional[ColumnNameProvider] = None,
) -> TableDefinition:
    """
    Resolve the column layout for loading ``record_type`` into ``table``.

    Args:
        record_type: Dataclass, pydantic model or annotated class
        table: Destination table
        column_provider: Enables schema-aware mode when given

    Returns:
        TableDefinition used by both the payload writer and the load statement
    """
    definition = build_table_definition(record_fields(record_type), table, column_provider)
    logger.debug(
        "fast_insert.table_definition.resolved",
        table=table,
        record_type=record_type.__name__,
        columns=definition.column_names,
        schema_aware=column_provider is not None,
    )
    return definition

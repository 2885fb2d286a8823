"""
MySQL bulk loader for fast_insert.

Serializes typed records into delimited payload files and loads them with
LOAD DATA LOCAL INFILE, one statement per batch.
"""

from .core import FastInserter, fast_insert, fast_insert_dataframe, load_transforms
from .models import (
    BinaryEncoding,
    ColumnDefinition,
    ColumnType,
    ConfigurationError,
    FastInsertError,
    InsertOptions,
    InsertResult,
    TableDefinition,
    default_table_name,
    snake_case_table_name,
)
from .table_definition import (
    ColumnNameProvider,
    StaticColumnProvider,
    resolve_table_definition,
)

__all__ = [
    "BinaryEncoding",
    "ColumnDefinition",
    "ColumnNameProvider",
    "ColumnType",
    "ConfigurationError",
    "FastInsertError",
    "FastInserter",
    "InsertOptions",
    "InsertResult",
    "StaticColumnProvider",
    "TableDefinition",
    "default_table_name",
    "fast_insert",
    "fast_insert_dataframe",
    "load_transforms",
    "resolve_table_definition",
    "snake_case_table_name",
]

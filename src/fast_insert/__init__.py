"""
fast_insert - bulk loading of typed records into MySQL.

Records are written to a delimited payload file and inserted with
LOAD DATA LOCAL INFILE, which is far faster than row-by-row INSERTs.
"""

__version__ = "0.1.0"

from fast_insert.exceptions import ConfigurationError, FastInsertError
from fast_insert.io.connectors import InformationSchemaColumnProvider, connect
from fast_insert.io.loader import (
    BinaryEncoding,
    FastInserter,
    InsertOptions,
    InsertResult,
    StaticColumnProvider,
    default_table_name,
    fast_insert,
    fast_insert_dataframe,
    snake_case_table_name,
)

__all__ = [
    "BinaryEncoding",
    "ConfigurationError",
    "FastInsertError",
    "FastInserter",
    "InformationSchemaColumnProvider",
    "InsertOptions",
    "InsertResult",
    "StaticColumnProvider",
    "connect",
    "default_table_name",
    "fast_insert",
    "fast_insert_dataframe",
    "snake_case_table_name",
]

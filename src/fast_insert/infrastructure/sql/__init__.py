"""
SQL module for centralized SQL generation.

This module provides reusable utilities for building MySQL statements with
proper identifier quoting, literal escaping, and LOAD DATA column transforms.
"""

from .core.identifier import (
    qualify_table,
    quote_identifier,
    quote_string_literal,
    split_table_name,
)
from .dialects.mysql import MySQLDialect
from .operations.load_data import (
    ColumnTransform,
    LoadDataBuilder,
    TransformFunction,
    compose_transforms,
    null_if_empty,
    unhex,
)

__all__ = [
    "quote_identifier",
    "qualify_table",
    "quote_string_literal",
    "split_table_name",
    "MySQLDialect",
    "ColumnTransform",
    "LoadDataBuilder",
    "TransformFunction",
    "compose_transforms",
    "null_if_empty",
    "unhex",
]

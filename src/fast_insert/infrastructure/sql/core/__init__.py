"""Core SQL utilities package."""

from .identifier import (
    qualify_table,
    quote_identifier,
    quote_string_literal,
    split_table_name,
)

__all__ = [
    "quote_identifier",
    "qualify_table",
    "quote_string_literal",
    "split_table_name",
]

"""
SQL identifier and literal handling utilities.

Provides functions for quoting MySQL identifiers (table names, column names)
and rendering string literals for statements that cannot take bound
parameters, such as the file path and delimiters of LOAD DATA.
"""

from typing import Optional, Tuple

# MySQL limit for table and column names
MAX_IDENTIFIER_LENGTH = 64

_LITERAL_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\x1a": "\\Z",
}


def quote_identifier(name: str) -> str:
    """
    Quote a MySQL identifier with backticks.

    Args:
        name: The identifier to quote

    Returns:
        Properly quoted identifier

    Raises:
        ValueError: If name is empty or longer than MySQL allows

    Examples:
        >>> quote_identifier("dateCol")
        '`dateCol`'
        >>> quote_identifier("column`name")
        '`column``name`'
    """
    if not name or not isinstance(name, str):
        raise ValueError("Identifier name must be non-empty string")
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValueError(
            f"Identifier too long (max {MAX_IDENTIFIER_LENGTH} characters)"
        )

    escaped = name.replace("`", "``")
    return f"`{escaped}`"


def split_table_name(table: str) -> Tuple[Optional[str], str]:
    """
    Split ``schema.table`` into its parts.

    Examples:
        >>> split_table_name("tests.orders")
        ('tests', 'orders')
        >>> split_table_name("orders")
        (None, 'orders')
    """
    if not table or not isinstance(table, str):
        raise ValueError("Table name must be non-empty string")

    if "." in table and "`" not in table:
        schema, table_name = table.split(".", 1)
        if schema.strip() and table_name.strip():
            return schema.strip(), table_name.strip()
    return None, table


def qualify_table(table: str, schema: Optional[str] = None) -> str:
    """
    Create a fully qualified table name with optional schema prefix.

    A dotted ``table`` is split into schema and table when no explicit
    ``schema`` is given.

    Examples:
        >>> qualify_table("orders", schema="tests")
        '`tests`.`orders`'
        >>> qualify_table("tests.orders")
        '`tests`.`orders`'
        >>> qualify_table("orders")
        '`orders`'
    """
    if schema is None:
        schema, table = split_table_name(table)

    quoted_table = quote_identifier(table)
    if schema and str(schema).strip():
        return f"{quote_identifier(str(schema).strip())}.{quoted_table}"
    return quoted_table


def quote_string_literal(value: str) -> str:
    """
    Render a MySQL single-quoted string literal.

    Backslash escapes are used for the characters MySQL interprets inside
    string literals, so control characters such as a CRLF line terminator
    survive the round trip.

    Examples:
        >>> quote_string_literal("a'b")
        "'a\\\\'b'"
        >>> quote_string_literal("\\r\\n")
        "'\\\\r\\\\n'"
        >>> quote_string_literal("")
        "''"
    """
    escaped = "".join(_LITERAL_ESCAPES.get(ch, ch) for ch in value)
    return f"'{escaped}'"

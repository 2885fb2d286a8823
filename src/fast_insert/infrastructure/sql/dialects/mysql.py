"""
MySQL-specific SQL dialect implementation.

Provides MySQL syntax for LOAD DATA LOCAL INFILE statements, identifier
quoting and catalog lookups.
"""

from typing import List, Optional, Sequence

from ..core.identifier import qualify_table, quote_identifier, quote_string_literal


class MySQLDialect:
    """MySQL SQL dialect implementation."""

    name = "mysql"

    def quote(self, identifier: str) -> str:
        """Quote an identifier using MySQL syntax (backticks)."""
        return quote_identifier(identifier)

    def qualify(self, table: str, schema: Optional[str] = None) -> str:
        """Create a fully qualified table reference."""
        return qualify_table(table, schema)

    def literal(self, value: str) -> str:
        """Render a string literal."""
        return quote_string_literal(value)

    def variable(self, name: str) -> str:
        """Render a user variable reference."""
        return f"@{name}"

    def build_load_data(
        self,
        table: str,
        file_path: str,
        targets: Sequence[str],
        assignments: Sequence[str],
        field_delimiter: str,
        line_terminator: str,
        escape_char: str,
        enclosure: str = "",
        ignore_lines: int = 1,
        character_set: Optional[str] = None,
        schema: Optional[str] = None,
        local: bool = True,
    ) -> str:
        """
        Build a LOAD DATA [LOCAL] INFILE statement.

        Args:
            table: Destination table name
            file_path: Path of the payload file
            targets: Rendered positional targets (quoted columns or @variables)
            assignments: Rendered ``SET`` assignments (``col = expr``)
            field_delimiter: FIELDS TERMINATED BY value
            line_terminator: LINES TERMINATED BY value
            escape_char: FIELDS ESCAPED BY value
            enclosure: FIELDS ENCLOSED BY value (empty = fields are not quoted)
            ignore_lines: Number of leading lines to skip
            character_set: Optional CHARACTER SET clause
            schema: Optional schema name

        Returns:
            LOAD DATA SQL statement
        """
        lines: List[str] = [
            f"LOAD DATA {'LOCAL ' if local else ''}INFILE {self.literal(file_path)}",
            f"INTO TABLE {self.qualify(table, schema)}",
        ]
        if character_set:
            lines.append(f"CHARACTER SET {character_set}")
        lines.append(
            f"FIELDS TERMINATED BY {self.literal(field_delimiter)}"
            f" ENCLOSED BY {self.literal(enclosure)}"
            f" ESCAPED BY {self.literal(escape_char)}"
        )
        lines.append(f"LINES TERMINATED BY {self.literal(line_terminator)}")
        if ignore_lines:
            lines.append(f"IGNORE {int(ignore_lines)} LINES")
        lines.append(f"({', '.join(targets)})")
        if assignments:
            lines.append(f"SET {', '.join(assignments)}")
        return "\n".join(lines)

    def build_column_names_query(self) -> str:
        """
        Catalog query returning a table's columns in physical order.

        Parameters (pyformat): ``table`` and ``schema``; a NULL schema means
        the connection's current database.
        """
        return (
            "SELECT COLUMN_NAME FROM INFORMATION_SCHEMA.COLUMNS "
            "WHERE TABLE_NAME = %(table)s "
            "AND TABLE_SCHEMA = COALESCE(%(schema)s, DATABASE()) "
            "ORDER BY ORDINAL_POSITION"
        )

"""
LOAD DATA statement builders.

Positional LOAD DATA column lists cannot apply expressions to a column
directly. A column that needs conversion is bound to a user variable and
assigned in the ``SET`` clause instead, e.g. ``(`id`, @v1) SET `guid` =
UNHEX(@v1)``. :class:`ColumnTransform` models that mapping so new
conversions plug in without touching the statement layout.
"""

from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Protocol, Sequence

TransformFunction = Callable[[str], str]


def unhex(expression: str) -> str:
    """Hex text to binary."""
    return f"UNHEX({expression})"


def null_if_empty(expression: str) -> str:
    """Empty field to SQL NULL."""
    return f"NULLIF({expression}, '')"


def compose_transforms(*functions: TransformFunction) -> TransformFunction:
    """
    Compose transform functions, applying the last one first.

    Example:
        >>> compose_transforms(unhex, null_if_empty)("@v0")
        "UNHEX(NULLIF(@v0, ''))"
    """
    if not functions:
        raise ValueError("At least one transform function is required")

    def _composed(expression: str) -> str:
        for function in reversed(functions):
            expression = function(expression)
        return expression

    return _composed


class Dialect(Protocol):
    """Protocol for SQL dialects able to render LOAD DATA."""

    name: str

    def quote(self, identifier: str) -> str: ...
    def variable(self, name: str) -> str: ...
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
    ) -> str: ...


@dataclass(frozen=True)
class ColumnTransform:
    """A raw field bound to ``variable`` and stored into ``column`` via ``function``."""

    column: str
    variable: str
    function: TransformFunction

    def render(self, dialect: Dialect) -> str:
        return (
            f"{dialect.quote(self.column)} = "
            f"{self.function(dialect.variable(self.variable))}"
        )


class LoadDataBuilder:
    """
    High-level builder for LOAD DATA LOCAL INFILE statements.

    Example:
        >>> from fast_insert.infrastructure.sql import LoadDataBuilder, MySQLDialect
        >>> builder = LoadDataBuilder(MySQLDialect())
        >>> sql = builder.load(
        ...     "test", "/tmp/payload.csv", ["int", "text", "guid"],
        ...     transforms={"guid": unhex}, line_terminator="\\n",
        ... )
        >>> print(sql)
        LOAD DATA LOCAL INFILE '/tmp/payload.csv'
        INTO TABLE `test`
        FIELDS TERMINATED BY ';;' ENCLOSED BY '' ESCAPED BY '\\\\'
        LINES TERMINATED BY '\\n'
        IGNORE 1 LINES
        (`int`, `text`, @v2)
        SET `guid` = UNHEX(@v2)
    """

    variable_prefix = "v"

    def __init__(self, dialect: Dialect):
        """
        Initialize the LoadDataBuilder.

        Args:
            dialect: SQL dialect to use for statement generation
        """
        self.dialect = dialect

    def column_transforms(
        self,
        columns: Sequence[str],
        transforms: Mapping[str, TransformFunction],
    ) -> List[ColumnTransform]:
        """Bind every transformed column to a variable named after its ordinal."""
        return [
            ColumnTransform(
                column=column,
                variable=f"{self.variable_prefix}{ordinal}",
                function=transforms[column],
            )
            for ordinal, column in enumerate(columns)
            if column in transforms
        ]

    def load(
        self,
        table: str,
        file_path: str,
        columns: Sequence[str],
        transforms: Optional[Mapping[str, TransformFunction]] = None,
        field_delimiter: str = ";;",
        line_terminator: str = "\n",
        escape_char: str = "\\",
        character_set: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> str:
        """
        Build the LOAD DATA statement for one payload file.

        Args:
            table: Destination table
            file_path: Payload file path
            columns: Destination columns in payload order
            transforms: Column name -> transform function for columns that
                must be converted server-side
            field_delimiter: Field terminator written by the payload writer
            line_terminator: Line terminator written by the payload writer
            escape_char: Escape character used by the payload writer
            character_set: Optional CHARACTER SET clause
            schema: Optional schema name

        Returns:
            LOAD DATA SQL statement
        """
        if not columns:
            raise ValueError("Column list cannot be empty")

        transforms = transforms or {}
        unknown = [name for name in transforms if name not in columns]
        if unknown:
            raise ValueError(f"Transforms reference unknown columns: {unknown}")

        bound = {t.column: t for t in self.column_transforms(columns, transforms)}
        targets = [
            self.dialect.variable(bound[column].variable)
            if column in bound
            else self.dialect.quote(column)
            for column in columns
        ]
        assignments = [bound[column].render(self.dialect) for column in columns if column in bound]

        return self.dialect.build_load_data(
            table=table,
            file_path=file_path,
            targets=targets,
            assignments=assignments,
            field_delimiter=field_delimiter,
            line_terminator=line_terminator,
            escape_char=escape_char,
            enclosure="",
            ignore_lines=1,
            character_set=character_set,
            schema=schema,
        )

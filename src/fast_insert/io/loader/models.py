import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, TextIO

from fast_insert.exceptions import ConfigurationError, FastInsertError  # noqa: F401

if TYPE_CHECKING:
    from fast_insert.config import Settings
    from fast_insert.io.loader.table_definition import ColumnNameProvider

# Letters MySQL reads as an escape sequence after the escape character
ESCAPE_LETTERS = "0bnrtZN"


class BinaryEncoding(str, Enum):
    """Payload encoding for bytes fields."""

    HEX = "hex"
    ESCAPED = "escaped"


class ColumnType(str, Enum):
    """Semantic type tag of a column, driving serialization and load transforms."""

    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    TEXT = "text"
    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"
    UUID = "uuid"
    BINARY = "binary"
    ENUM = "enum"


@dataclass(frozen=True)
class ColumnDefinition:
    """One destination column fed from one record attribute."""

    name: str
    attribute: str
    type: ColumnType
    nullable: bool = False
    ordinal: int = 0
    read_only: bool = False


@dataclass(frozen=True)
class TableDefinition:
    """Resolved column layout shared by the payload writer and the load statement."""

    table: str
    columns: List[ColumnDefinition]

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]


def default_table_name(record_type: type) -> str:
    """Table named exactly like the record type."""
    return record_type.__name__


def snake_case_table_name(record_type: type) -> str:
    """
    Table named after the record type in snake_case.

    Example:
        >>> class OrderLine: ...
        >>> snake_case_table_name(OrderLine)
        'order_line'
    """
    name = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", record_type.__name__)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()


@dataclass
class InsertOptions:
    """
    Per-load configuration.

    ``batch_size=None`` loads everything with a single statement. ``output``
    receives a copy of every payload (diagnostic echo) and defaults to
    discarding it. ``column_provider`` (or ``use_table_schema``) enables
    schema-aware column ordering.
    """

    batch_size: Optional[int] = None
    binary_encoding: BinaryEncoding = BinaryEncoding.HEX
    output: Optional[TextIO] = None
    table_name_resolver: Callable[[type], str] = default_table_name
    column_provider: Optional["ColumnNameProvider"] = None
    use_table_schema: bool = False
    field_delimiter: str = ";;"
    line_terminator: str = os.linesep
    escape_char: str = "\\"
    temp_dir: Optional[str] = None
    commit: bool = True

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides) -> "InsertOptions":
        """Build options from Settings defaults, with keyword overrides."""
        values = dict(
            batch_size=settings.batch_size,
            binary_encoding=BinaryEncoding(settings.binary_encoding),
            field_delimiter=settings.field_delimiter,
            line_terminator=settings.line_terminator,
            escape_char=settings.escape_char,
            temp_dir=settings.temp_dir,
            commit=settings.commit_per_batch,
        )
        values.update(overrides)
        return cls(**values)

    def validate(self) -> None:
        """
        Check the payload layout can be loaded unambiguously.

        Raises:
            ConfigurationError: On a non-positive batch size or colliding delimiters
        """
        if self.batch_size is not None and self.batch_size < 1:
            raise ConfigurationError(
                f"batch_size must be a positive integer, got {self.batch_size}"
            )
        if not self.field_delimiter:
            raise ConfigurationError("field_delimiter must not be empty")
        if not self.line_terminator:
            raise ConfigurationError("line_terminator must not be empty")
        if len(self.escape_char.encode("utf-8")) != 1:
            raise ConfigurationError("escape_char must be a single ASCII character")
        separators = self.field_delimiter + self.line_terminator
        if not separators.isascii():
            raise ConfigurationError("Delimiters must be ASCII")
        if self.escape_char in separators:
            raise ConfigurationError(
                "escape_char must not appear in the field delimiter or line terminator"
            )
        clashing = sorted(set(separators) & set(ESCAPE_LETTERS))
        if clashing:
            raise ConfigurationError(
                f"Delimiters must not contain escape sequence letters: {clashing}"
            )
        if not isinstance(self.binary_encoding, BinaryEncoding):
            try:
                self.binary_encoding = BinaryEncoding(self.binary_encoding)
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown binary encoding: {self.binary_encoding!r}"
                ) from e


@dataclass
class InsertResult:
    """Structured response for a fast insert."""

    table: str
    rows_written: int
    rows_inserted: int
    batches: int
    duration_ms: float
    execution_id: str

"""
Column value serialization for LOAD DATA payloads.

Every value is rendered locale-independently and encoded to UTF-8, then
escaped with the payload's escape character so that delimiters, line breaks
and NUL bytes inside a value can never split a row or a field.

Rules per column type:
- DATETIME: converted to UTC (naive values are taken as UTC) and written as
  ``YYYY-MM-DD HH:MM:SS.ffffff``
- UUID: 32 hex digits, turned back into BINARY(16) by ``UNHEX`` on load
- BINARY: hex digits (``UNHEX`` on load) or the raw bytes, escaped
- ENUM: the member's integer value, or its definition ordinal
- None: an empty field
"""

import re
import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict

from .models import BinaryEncoding, ColumnDefinition, ColumnType

# Bytes MySQL reads back from an escape sequence: \0, \n, \r and \Z
_ESCAPE_SEQUENCES = {0x00: b"0", 0x0A: b"n", 0x0D: b"r", 0x1A: b"Z"}


DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def to_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to naive UTC.

    Naive values are assumed to already be UTC.

    Examples:
        >>> from datetime import timedelta
        >>> to_utc(datetime(2024, 1, 1, 12, tzinfo=timezone(timedelta(hours=2))))
        datetime.datetime(2024, 1, 1, 10, 0)
        >>> to_utc(datetime(2024, 1, 1, 12))
        datetime.datetime(2024, 1, 1, 12, 0)
    """
    if value.tzinfo is not None and value.utcoffset() is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def format_datetime(value: Any) -> str:
    """
    Render a datetime as sortable UTC text with microseconds.

    Example:
        >>> format_datetime(datetime(2024, 3, 5, 7, 8, 9, 123000))
        '2024-03-05 07:08:09.123000'
    """
    if not isinstance(value, datetime):
        if isinstance(value, date):
            value = datetime.combine(value, time())
        else:
            raise TypeError(f"Expected datetime, got {type(value).__name__}")
    return to_utc(value).strftime(DATETIME_FORMAT)


def enum_ordinal(member: Any) -> int:
    """
    Integer stored for an enumeration member.

    Integer-valued members store their value; any other member stores its
    0-based position in the enumeration.
    """
    if not isinstance(member, Enum):
        return int(member)
    if isinstance(member.value, int) and not isinstance(member.value, bool):
        return int(member.value)
    return list(type(member)).index(member)


def format_uuid(value: Any) -> str:
    """
    Render an identifier as 32 hex digits without separators.

    Example:
        >>> format_uuid("12345678-1234-5678-1234-567812345678")
        '12345678123456781234567812345678'
    """
    if isinstance(value, uuid.UUID):
        return value.hex
    if isinstance(value, (bytes, bytearray)):
        return uuid.UUID(bytes=bytes(value)).hex
    return uuid.UUID(str(value)).hex


def format_decimal(value: Any) -> str:
    """Fixed-point text (no exponent)."""
    return format(Decimal(value), "f")


def format_float(value: Any) -> str:
    """Shortest text that round-trips the float."""
    return repr(float(value))


def format_boolean(value: Any) -> str:
    return "1" if value else "0"


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return str(value)


_FORMATTERS: Dict[ColumnType, Callable[[Any], str]] = {
    ColumnType.INTEGER: lambda value: str(int(value)),
    ColumnType.FLOAT: format_float,
    ColumnType.DECIMAL: format_decimal,
    ColumnType.BOOLEAN: format_boolean,
    ColumnType.TEXT: _text,
    ColumnType.DATETIME: format_datetime,
    ColumnType.DATE: lambda value: value.isoformat(),
    ColumnType.TIME: lambda value: value.isoformat(),
    ColumnType.UUID: format_uuid,
    ColumnType.ENUM: lambda value: str(enum_ordinal(value)),
}


class FieldEncoder:
    """
    Encode single values into escaped payload fields.

    Args:
        field_delimiter: Field terminator of the payload
        line_terminator: Line terminator of the payload
        escape_char: Single ASCII escape character
        binary_encoding: How BINARY columns are written
    """

    def __init__(
        self,
        field_delimiter: str = ";;",
        line_terminator: str = "\n",
        escape_char: str = "\\",
        binary_encoding: BinaryEncoding = BinaryEncoding.HEX,
    ):
        self.escape = escape_char.encode("ascii")
        self.binary_encoding = BinaryEncoding(binary_encoding)

        special = set(self.escape) | set(_ESCAPE_SEQUENCES)
        special |= set(field_delimiter.encode("utf-8"))
        special |= set(line_terminator.encode("utf-8"))
        self._pattern = re.compile(
            b"[" + b"".join(re.escape(bytes([b])) for b in sorted(special)) + b"]"
        )

    def _escape_match(self, match: "re.Match[bytes]") -> bytes:
        byte = match.group(0)[0]
        return self.escape + _ESCAPE_SEQUENCES.get(byte, bytes([byte]))

    def escape_bytes(self, data: bytes) -> bytes:
        """Prefix every special byte with the escape character."""
        return self._pattern.sub(self._escape_match, data)

    def encode(self, value: Any, column: ColumnDefinition) -> bytes:
        """Encode ``value`` for ``column``; None becomes an empty field."""
        if value is None:
            return b""

        if column.type is ColumnType.BINARY:
            raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
            if self.binary_encoding is BinaryEncoding.HEX:
                return raw.hex().encode("ascii")
            return self.escape_bytes(raw)

        text = _FORMATTERS[column.type](value)
        return self.escape_bytes(text.encode("utf-8"))


def serialize_value(
    value: Any,
    column: ColumnDefinition,
    binary_encoding: BinaryEncoding = BinaryEncoding.HEX,
) -> bytes:
    """Encode one value with the default payload layout."""
    return FieldEncoder(binary_encoding=binary_encoding).encode(value, column)

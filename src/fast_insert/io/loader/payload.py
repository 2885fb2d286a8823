"""
Payload files for LOAD DATA LOCAL INFILE.

A payload is a header row of column names followed by one row per record,
fields joined by the field delimiter and rows ended by the line terminator.
Fields are never enclosed; the escape character protects delimiter bytes
inside values. Files are uniquely named and removed when the
:func:`payload_file` context exits, whether the load succeeded or not.
"""

import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Iterator, Mapping, Optional, TextIO

from fast_insert.utils.logging import get_logger

from .models import TableDefinition
from .serializers import FieldEncoder

logger = get_logger(__name__)

PAYLOAD_PREFIX = "fast_insert_"
PAYLOAD_SUFFIX = ".csv"


def read_attribute(record: Any, attribute: str) -> Any:
    """Read a field from an object or a mapping row; missing fields raise."""
    if isinstance(record, Mapping):
        return record[attribute]
    return getattr(record, attribute)


class PayloadWriter:
    """
    Write batches of records in the column order of a TableDefinition.

    Args:
        definition: Resolved table definition
        encoder: Field encoder sharing the delimiters below
        field_delimiter: Field terminator
        line_terminator: Line terminator
    """

    def __init__(
        self,
        definition: TableDefinition,
        encoder: FieldEncoder,
        field_delimiter: str = ";;",
        line_terminator: str = "\n",
    ):
        self.definition = definition
        self.encoder = encoder
        self.delimiter = field_delimiter.encode("utf-8")
        self.terminator = line_terminator.encode("utf-8")

    def header(self) -> bytes:
        names = [self.encoder.escape_bytes(name.encode("utf-8")) for name in self.definition.column_names]
        return self.delimiter.join(names) + self.terminator

    def row(self, record: Any) -> bytes:
        fields = [
            self.encoder.encode(read_attribute(record, column.attribute), column)
            for column in self.definition.columns
        ]
        return self.delimiter.join(fields) + self.terminator

    def write(self, records: Iterable[Any], stream: BinaryIO) -> int:
        """Write the header and ``records`` to ``stream``; returns the row count."""
        stream.write(self.header())
        count = 0
        for record in records:
            stream.write(self.row(record))
            count += 1
        return count

    def write_file(self, records: Iterable[Any], path: Path) -> int:
        with open(path, "wb") as stream:
            return self.write(records, stream)


@contextmanager
def payload_file(temp_dir: Optional[str] = None) -> Iterator[Path]:
    """
    Reserve a unique payload path and delete the file on exit.

    Deletion errors propagate to the caller.
    """
    directory = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())
    path = directory / f"{PAYLOAD_PREFIX}{uuid.uuid4().hex}{PAYLOAD_SUFFIX}"
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("fast_insert.payload.removed", path=str(path))


def echo_payload(path: Path, output: Optional[TextIO]) -> None:
    """Copy the payload text to the diagnostic sink, if one is configured."""
    if output is None or not path.exists():
        return
    output.write(path.read_bytes().decode("utf-8", errors="replace"))
    output.flush()

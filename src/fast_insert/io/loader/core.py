import time
import uuid
from itertools import chain
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

import pandas as pd
import pymysql

from fast_insert.config import get_settings
from fast_insert.exceptions import ConfigurationError
from fast_insert.infrastructure.sql import (
    LoadDataBuilder,
    MySQLDialect,
    TransformFunction,
    compose_transforms,
    null_if_empty,
    unhex,
)
from fast_insert.io.connectors.mysql_connector import (
    InformationSchemaColumnProvider,
    opened,
    validate_connection,
)
from fast_insert.utils.logging import get_logger

from .batching import partition
from .dataframe import iter_dataframe_records, resolve_dataframe_definition
from .models import (
    BinaryEncoding,
    ColumnType,
    InsertOptions,
    InsertResult,
    TableDefinition,
)
from .payload import PayloadWriter, echo_payload, payload_file
from .serializers import FieldEncoder
from .table_definition import ColumnNameProvider, resolve_table_definition

structured_logger = get_logger(__name__)

_EMPTY = object()

# The payload is UTF-8 text unless binary fields are written as raw bytes
PAYLOAD_CHARACTER_SETS = {
    BinaryEncoding.HEX: "utf8mb4",
    BinaryEncoding.ESCAPED: "binary",
}


def load_transforms(
    definition: TableDefinition, binary_encoding: BinaryEncoding
) -> Dict[str, TransformFunction]:
    """
    Server-side conversions for the columns of ``definition``.

    Identifiers and hex-encoded binary go through UNHEX; nullable columns map
    an empty field to NULL.
    """
    transforms: Dict[str, TransformFunction] = {}
    for column in definition.columns:
        hex_encoded = column.type is ColumnType.UUID or (
            column.type is ColumnType.BINARY and binary_encoding is BinaryEncoding.HEX
        )
        if hex_encoded:
            transforms[column.name] = (
                compose_transforms(unhex, null_if_empty) if column.nullable else unhex
            )
        elif column.nullable:
            transforms[column.name] = null_if_empty
    return transforms


class FastInserter:
    """
    Bulk loader issuing one LOAD DATA LOCAL INFILE statement per batch.

    The connection is validated when the inserter is created, before any
    payload file exists. It stays owned by the caller: a closed connection is
    opened for the duration of a load and closed again afterwards.
    """

    def __init__(
        self,
        connection: pymysql.connections.Connection,
        options: Optional[InsertOptions] = None,
    ):
        self.options = options or InsertOptions.from_settings(get_settings())
        self.options.validate()
        self.connection = validate_connection(connection)
        self.builder = LoadDataBuilder(MySQLDialect())
        self._logger = structured_logger

    def _column_provider(self) -> Optional[ColumnNameProvider]:
        if self.options.column_provider is not None:
            return self.options.column_provider
        if self.options.use_table_schema:
            return InformationSchemaColumnProvider(self.connection, self.builder.dialect)
        return None

    def _skipped(self, table: str, execution_id: str) -> InsertResult:
        self._logger.info(
            "fast_insert.load.skipped",
            reason="no_records",
            table=table,
            execution_id=execution_id,
        )
        return InsertResult(table, 0, 0, 0, 0.0, execution_id)

    def _echo_failed_payload(self, path: Path, log: Any) -> None:
        # The batch error propagates; a broken sink is only logged
        try:
            echo_payload(path, self.options.output)
        except Exception as echo_error:
            log.warning(
                "fast_insert.payload.echo_failed",
                error=str(echo_error),
                error_type=type(echo_error).__name__,
            )

    def insert(
        self,
        records: Iterable[Any],
        table: Optional[str] = None,
        record_type: Optional[type] = None,
    ) -> InsertResult:
        """
        Load ``records`` into ``table``.

        Args:
            records: Records of one type; consumed lazily, batch by batch
            table: Destination table; defaults to the options' table name
                resolver applied to the record type
            record_type: Type describing the records, required for mapping
                rows and otherwise taken from the first record

        Returns:
            InsertResult with the written and inserted row counts

        Raises:
            ConfigurationError: If the column mapping cannot be resolved
        """
        execution_id = uuid.uuid4().hex
        iterator = iter(records)
        first = next(iterator, _EMPTY)
        if first is _EMPTY:
            if table is None and record_type is not None:
                table = self.options.table_name_resolver(record_type)
            return self._skipped(table or "", execution_id)

        if record_type is None:
            if isinstance(first, Mapping):
                raise ConfigurationError(
                    "Mapping records need an explicit record_type", table=table
                )
            record_type = type(first)
        table = table or self.options.table_name_resolver(record_type)

        with opened(self.connection):
            definition = resolve_table_definition(
                record_type, table, self._column_provider()
            )
            return self._load(definition, chain([first], iterator), execution_id)

    def insert_dataframe(self, df: pd.DataFrame, table: str) -> InsertResult:
        """Load every row of ``df`` into ``table``; columns follow the frame."""
        if not isinstance(df, pd.DataFrame):
            raise ConfigurationError(
                "insert_dataframe() requires a pandas DataFrame", table=table
            )
        execution_id = uuid.uuid4().hex
        if df.empty:
            return self._skipped(table, execution_id)

        with opened(self.connection):
            definition = resolve_dataframe_definition(df, table, self._column_provider())
            return self._load(definition, iter_dataframe_records(df), execution_id)

    def _load(
        self,
        definition: TableDefinition,
        records: Iterator[Any],
        execution_id: str,
    ) -> InsertResult:
        options = self.options
        encoder = FieldEncoder(
            field_delimiter=options.field_delimiter,
            line_terminator=options.line_terminator,
            escape_char=options.escape_char,
            binary_encoding=options.binary_encoding,
        )
        writer = PayloadWriter(
            definition, encoder, options.field_delimiter, options.line_terminator
        )
        transforms = load_transforms(definition, options.binary_encoding)
        character_set = PAYLOAD_CHARACTER_SETS[options.binary_encoding]
        log = self._logger.bind(table=definition.table, execution_id=execution_id)

        start_time = time.perf_counter()
        rows_written = 0
        rows_inserted = 0
        batches = 0
        log.info(
            "fast_insert.load.started",
            columns=definition.column_names,
            batch_size=options.batch_size,
            binary_encoding=options.binary_encoding.value,
        )

        for batch in partition(records, options.batch_size):
            batch_number = batches + 1
            with payload_file(options.temp_dir) as path:
                try:
                    written = writer.write_file(batch, path)
                    log.debug(
                        "fast_insert.batch.written",
                        batch=batch_number,
                        rows=written,
                        path=str(path),
                    )
                    sql = self.builder.load(
                        definition.table,
                        path.as_posix(),
                        definition.column_names,
                        transforms=transforms,
                        field_delimiter=options.field_delimiter,
                        line_terminator=options.line_terminator,
                        escape_char=options.escape_char,
                        character_set=character_set,
                    )
                    with self.connection.cursor() as cursor:
                        affected = cursor.execute(sql)
                    if options.commit:
                        self.connection.commit()
                except Exception as exc:
                    log.error(
                        "fast_insert.batch.failed",
                        batch=batch_number,
                        error=str(exc),
                        error_type=type(exc).__name__,
                        duration_ms=(time.perf_counter() - start_time) * 1000,
                    )
                    self._echo_failed_payload(path, log)
                    raise
                echo_payload(path, options.output)

            batches = batch_number
            rows_written += written
            rows_inserted += int(affected or 0)
            log.info(
                "fast_insert.batch.loaded",
                batch=batch_number,
                rows_written=written,
                rows_inserted=affected,
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        log.info(
            "fast_insert.load.completed",
            batches=batches,
            rows_written=rows_written,
            rows_inserted=rows_inserted,
            duration_ms=duration_ms,
        )
        return InsertResult(
            table=definition.table,
            rows_written=rows_written,
            rows_inserted=rows_inserted,
            batches=batches,
            duration_ms=duration_ms,
            execution_id=execution_id,
        )


def fast_insert(
    connection: pymysql.connections.Connection,
    records: Iterable[Any],
    table: Optional[str] = None,
    options: Optional[InsertOptions] = None,
    record_type: Optional[type] = None,
) -> InsertResult:
    """
    Bulk insert ``records`` through LOAD DATA LOCAL INFILE.

    Example:
        >>> conn = connect("mysql+pymysql://root@localhost/tests?local_infile=1")
        >>> fast_insert(conn, rows, table="test", options=InsertOptions(batch_size=500))
    """
    return FastInserter(connection, options).insert(records, table, record_type)


def fast_insert_dataframe(
    connection: pymysql.connections.Connection,
    df: pd.DataFrame,
    table: str,
    options: Optional[InsertOptions] = None,
) -> InsertResult:
    """Bulk insert the rows of a DataFrame."""
    return FastInserter(connection, options).insert_dataframe(df, table)

"""
DataFrame support for fast_insert.

A DataFrame is loaded like a sequence of mapping records: its columns become
record fields (in frame order) and their column types are derived from the
pandas dtypes, or from the first non-null value for object columns.
"""

from typing import Any, Dict, Iterator, List, Optional

import pandas as pd
from pandas.api import types as ptypes

from .models import ColumnType, TableDefinition
from .table_definition import (
    ColumnNameProvider,
    RecordField,
    build_table_definition,
    column_type_for,
)


def _column_type(series: pd.Series) -> ColumnType:
    dtype = series.dtype
    if ptypes.is_bool_dtype(dtype):
        return ColumnType.BOOLEAN
    if ptypes.is_integer_dtype(dtype):
        return ColumnType.INTEGER
    if ptypes.is_float_dtype(dtype):
        return ColumnType.FLOAT
    if ptypes.is_datetime64_any_dtype(dtype):
        return ColumnType.DATETIME

    non_null = series.dropna()
    if non_null.empty:
        return ColumnType.TEXT
    column_type, _ = column_type_for(type(non_null.iloc[0]))
    return column_type


def dataframe_fields(df: pd.DataFrame) -> List[RecordField]:
    """Describe the frame's columns as record fields."""
    fields = []
    for name in df.columns:
        series = df[name]
        fields.append(
            RecordField(
                attribute=str(name),
                column=str(name),
                type=_column_type(series),
                nullable=bool(series.isna().any()),
            )
        )
    return fields


def resolve_dataframe_definition(
    df: pd.DataFrame,
    table: str,
    column_provider: Optional[ColumnNameProvider] = None,
) -> TableDefinition:
    return build_table_definition(dataframe_fields(df), table, column_provider)


def iter_dataframe_records(df: pd.DataFrame) -> Iterator[Dict[str, Any]]:
    """
    Yield one dict per row with missing values (NaN, NaT, None) as None.

    Example:
        >>> frame = pd.DataFrame({"a": [1.5, None]})
        >>> list(iter_dataframe_records(frame))
        [{'a': 1.5}, {'a': None}]
    """
    names = [str(name) for name in df.columns]
    cleaned = df.astype(object).where(df.notna(), None)
    for row in cleaned.itertuples(index=False, name=None):
        yield dict(zip(names, row))

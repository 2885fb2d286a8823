"""
Tests for DataFrame column typing and row iteration.
"""

import uuid

import numpy as np
import pandas as pd
import pytest

from fast_insert.io.loader.dataframe import (
    dataframe_fields,
    iter_dataframe_records,
    resolve_dataframe_definition,
)
from fast_insert.io.loader.models import ColumnType
from fast_insert.io.loader.table_definition import StaticColumnProvider

pytestmark = pytest.mark.unit


@pytest.fixture
def frame():
    return pd.DataFrame(
        {
            "id": [1, 2],
            "ratio": [0.5, np.nan],
            "flag": [True, False],
            "created": pd.to_datetime(["2024-01-01 10:00", None]),
            "guid": [uuid.uuid4(), None],
            "name": ["a", "b"],
        }
    )


def test_dtype_mapping(frame):
    fields = {f.column: f for f in dataframe_fields(frame)}
    assert fields["id"].type is ColumnType.INTEGER
    assert fields["ratio"].type is ColumnType.FLOAT
    assert fields["flag"].type is ColumnType.BOOLEAN
    assert fields["created"].type is ColumnType.DATETIME
    assert fields["guid"].type is ColumnType.UUID
    assert fields["name"].type is ColumnType.TEXT


def test_nullable_when_values_missing(frame):
    fields = {f.column: f for f in dataframe_fields(frame)}
    assert fields["ratio"].nullable
    assert fields["guid"].nullable
    assert not fields["id"].nullable


def test_missing_values_become_none(frame):
    rows = list(iter_dataframe_records(frame))
    assert len(rows) == 2
    assert rows[1]["ratio"] is None
    assert rows[1]["created"] is None
    assert rows[1]["guid"] is None
    assert rows[0]["id"] == 1


def test_schema_aware_definition(frame):
    provider = StaticColumnProvider({"t": ["NAME", "guid", "created", "flag", "ratio", "id"]})
    definition = resolve_dataframe_definition(frame, "t", provider)
    assert definition.column_names == ["NAME", "guid", "created", "flag", "ratio", "id"]

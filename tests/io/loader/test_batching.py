"""
Tests for batch partitioning.
"""

import math

import pytest

from fast_insert.io.loader.batching import partition

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(("count", "size"), [(10, 3), (9, 3), (1, 5), (100, 100), (101, 100)])
def test_batch_count_is_ceiling(count, size):
    batches = list(partition(range(count), size))
    assert len(batches) == math.ceil(count / size)
    assert all(1 <= len(batch) <= size for batch in batches)


def test_order_preserved():
    batches = list(partition(range(7), 3))
    assert [item for batch in batches for item in batch] == list(range(7))


def test_no_batch_size_yields_single_batch():
    assert list(partition(["a", "b", "c"])) == [["a", "b", "c"]]


def test_empty_input_yields_nothing():
    assert list(partition([], 10)) == []
    assert list(partition(iter(()))) == []


def test_input_consumed_lazily():
    consumed = []

    def records():
        for index in range(10):
            consumed.append(index)
            yield index

    batches = partition(records(), 4)
    first = next(batches)
    assert first == [0, 1, 2, 3]
    assert consumed == [0, 1, 2, 3]


@pytest.mark.parametrize("size", [0, -1])
def test_non_positive_batch_size_rejected(size):
    with pytest.raises(ValueError):
        list(partition([1], size))

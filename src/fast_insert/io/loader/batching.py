from itertools import islice
from typing import Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")


def partition(records: Iterable[T], batch_size: Optional[int] = None) -> Iterator[List[T]]:
    """
    Split ``records`` into consecutive batches of at most ``batch_size``.

    The input is consumed lazily, so generators of any length can be loaded
    without materializing them. ``batch_size=None`` yields a single batch with
    every record; an empty input yields nothing.

    Examples:
        >>> [len(b) for b in partition(range(10), 4)]
        [4, 4, 2]
        >>> list(partition([], 4))
        []
    """
    if batch_size is not None and batch_size < 1:
        raise ValueError("batch_size must be a positive integer")

    iterator = iter(records)
    while True:
        batch = list(islice(iterator, batch_size))
        if not batch:
            return
        yield batch

"""Fixed-size batching of lazy sequences."""

from typing import Iterable, Iterator, List, TypeVar

T = TypeVar("T")


def batched(iterable: Iterable[T], batch_size: int) -> Iterator[List[T]]:
    """Group items into lists of ``batch_size``; the last one may be shorter.

    Items are pulled on demand, so the result is single-pass like the input.

    Raises:
        ValueError: If batch_size is not positive
    """
    if batch_size <= 0:
        raise ValueError("batchSize should be positive")
    return _generate_batches(iter(iterable), batch_size)


def _generate_batches(iterator: Iterator[T], batch_size: int) -> Iterator[List[T]]:
    batch = []
    for item in iterator:
        batch.append(item)
        if len(batch) == batch_size:
            yield batch
            batch = []
    if batch:
        yield batch

"""Bounded-concurrency mapping over a list, one fixed-size batch at a time."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into consecutive slices of at most `size` elements."""
    if size < 1:
        raise ValueError(f"batch size must be positive, got {size}")
    return [items[i : i + size] for i in range(0, len(items), size)]


async def iter_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int,
) -> AsyncIterator[list[R | BaseException]]:
    """Run `worker` over `items` with at most `batch_size` calls in flight.

    Items inside a batch run concurrently. Each batch's results are yielded once
    every call in it has settled, and the next batch starts only when the
    consumer asks for it, so a consumer that stops iterating stops the work.
    A failing call never cancels its siblings: its exception takes the item's
    place in the yielded list, which keeps the order of the batch.
    """
    batches = chunked(items, batch_size)
    for index, batch in enumerate(batches, start=1):
        logger.debug("Running batch %d/%d (%d items)", index, len(batches), len(batch))
        yield await asyncio.gather(*(worker(item) for item in batch), return_exceptions=True)


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int,
) -> list[R | BaseException]:
    """Collect every result of iter_batches into one list, in item order."""
    results: list[R | BaseException] = []
    async for batch_results in iter_batches(items, worker, batch_size):
        results.extend(batch_results)
    return results


__all__ = ["chunked", "iter_batches", "run_in_batches"]

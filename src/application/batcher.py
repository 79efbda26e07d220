import asyncio
from typing import Awaitable, Callable, Iterator, List, Sequence, TypeVar

from src.infrastructure.config import DEFAULT_BATCH_SIZE

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Splits items into consecutive, order-preserving groups of at most `size`."""
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}.")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


async def run_in_batches(
    items: Sequence[T],
    operation: Callable[[T], Awaitable[R]],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> List[R]:
    """
    Runs `operation` over every item, `batch_size` at a time.

    Items within a group run concurrently; a group settles completely before the
    next one starts, which bounds the number of in-flight requests. Results are
    returned in input order. A failing item fails its whole group; callers that
    need per-item resilience must absorb errors inside `operation`.
    """
    results: List[R] = []
    for batch in chunked(items, batch_size):
        results.extend(await asyncio.gather(*(operation(item) for item in batch)))
    return results

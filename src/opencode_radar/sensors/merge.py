"""Fan-in merging of async iterators.

Values are yielded in arrival order across all inputs: every active
iterator always has exactly one pending __anext__() and whichever finishes
first wins. Each input keeps its own relative order.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EXHAUSTED = object()


async def _close_iterator(iterator: AsyncIterator) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as e:
        logger.debug(f"Error closing merged iterator: {e}")


async def _next(iterator: AsyncIterator[T]) -> Any:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return _EXHAUSTED


async def merge_iterators(iterators: Iterable[AsyncIterator[T]]) -> AsyncIterator[T]:
    """Merge several async iterators into one, first value available wins.

    Exhausted inputs are dropped without yielding. An input that raises is
    logged and dropped as well, so one broken source never ends the merge.
    Closing the merged iterator cancels pending reads and closes every input.

    Args:
        iterators: The async iterators to merge

    Yields:
        Values from all inputs in the order they became available
    """
    active = [it.__aiter__() for it in iterators]
    pending: dict[asyncio.Task, AsyncIterator[T]] = {}

    try:
        for iterator in active:
            pending[asyncio.create_task(_next(iterator))] = iterator

        while pending:
            done, _ = await asyncio.wait(
                pending.keys(), return_when=asyncio.FIRST_COMPLETED
            )

            for task in done:
                iterator = pending.pop(task)
                try:
                    value = task.result()
                except Exception as e:
                    logger.warning(f"Dropping iterator that failed during merge: {e}")
                    continue
                if value is _EXHAUSTED:
                    continue

                # One read in flight per active input
                pending[asyncio.create_task(_next(iterator))] = iterator
                yield value
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        for iterator in active:
            await _close_iterator(iterator)

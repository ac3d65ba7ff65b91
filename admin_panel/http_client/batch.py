# admin_panel/http_client/batch.py
import asyncio
from typing import Awaitable, Callable, List, Sequence, TypeVar

T = TypeVar("T")


async def run_all(operations: Sequence[Callable[[], Awaitable[T]]]) -> List[T]:
    """Start every operation at once and return their results in input order."""
    return list(await asyncio.gather(*(operation() for operation in operations)))


async def run_with_limit(operations: Sequence[Callable[[], Awaitable[T]]], limit: int = 5) -> List[T]:
    """
    Run independent async operations with at most ``limit`` in flight.

    An operation is only started once a slot frees up. Results are returned
    in input order regardless of completion order; the first failure
    propagates.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    semaphore = asyncio.Semaphore(limit)

    async def _run(operation: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await operation()

    return list(await asyncio.gather(*(_run(operation) for operation in operations)))

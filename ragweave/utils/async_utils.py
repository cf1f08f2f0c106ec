"""Async utility functions."""

import asyncio
from typing import Awaitable, Callable, Iterable, List, TypeVar

T = TypeVar('T')
R = TypeVar('R')


async def gather_with_concurrency(
    tasks: List[Awaitable[T]],
    max_concurrency: int = 10,
) -> List[T]:
    """Run multiple coroutines with limited concurrency.

    Results are returned in the order of ``tasks`` regardless of completion
    order. The first exception raised by any task propagates and the
    remaining tasks are cancelled before it does.
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def _run_with_semaphore(task: Awaitable[T]) -> T:
        async with semaphore:
            return await task

    # Wrap all tasks with semaphore
    limited_tasks = [asyncio.ensure_future(_run_with_semaphore(task)) for task in tasks]

    try:
        return await asyncio.gather(*limited_tasks)
    except BaseException:
        for task in limited_tasks:
            task.cancel()
        await asyncio.gather(*limited_tasks, return_exceptions=True)
        raise


async def map_with_concurrency(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    max_concurrency: int = 10,
) -> List[R]:
    """Apply an async function to every item, preserving input order."""
    return await gather_with_concurrency([func(item) for item in items], max_concurrency)

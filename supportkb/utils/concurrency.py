"""Bounded fan-out helper for independent async operations.

Document ingestion embeds and upserts every chunk as its own task.  The
tasks share no data, so they run concurrently; a semaphore caps how many
are in flight so a large upload does not open hundreds of simultaneous
connections to the embedding API.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, at most ``semaphore`` of them at a time.

    With ``return_exceptions=True`` (the default) a failing awaitable does
    not cancel its siblings: every awaitable settles and failures are
    returned in place of results, mirroring ``asyncio.gather``.

    Parameters
    ----------
    coros:
        Awaitable objects to execute.
    semaphore:
        Concurrency limiter shared by all wrapped awaitables.
    return_exceptions:
        Passed through to ``asyncio.gather``.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input awaitables.
    """

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    return await asyncio.gather(
        *(_wrapped(c) for c in coros),
        return_exceptions=return_exceptions,
    )

"""Shared concurrency primitives for fan-out calls to external services.

Two patterns are exposed:

1. **race_with_timeout** -- "first of {result, timeout}" for a single
   awaitable.  The awaitable is cancelled when its timer fires, and the
   timeout surfaces as :class:`asyncio.TimeoutError`.

2. **timed_gather** -- a drop-in replacement for ``asyncio.gather`` that
   wraps each awaitable in its own independent timer.  One slow call never
   delays or cancels its siblings; the group finishes in roughly the time
   of the slowest *bounded* call, not the sum.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def race_with_timeout(awaitable: Awaitable[_T], timeout: float) -> _T:
    """Await *awaitable*, giving up after *timeout* seconds.

    Raises
    ------
    asyncio.TimeoutError
        If the awaitable did not complete in time.  The underlying task is
        cancelled.
    """
    return await asyncio.wait_for(awaitable, timeout=timeout)


async def timed_gather(
    coros: list[Awaitable[_T]],
    timeout: float,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, each racing its own *timeout*.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    timeout:
        Per-awaitable bound in seconds.  Timers are independent.
    return_exceptions:
        If ``True``, exceptions (including ``asyncio.TimeoutError``) are
        returned in the results list rather than raised.  Mirrors
        ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input awaitables.
    """
    tasks = [race_with_timeout(c, timeout) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)

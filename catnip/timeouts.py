"""Racing an awaitable against a timer."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from catnip.fail import Timeout

T = TypeVar("T")


async def _discard(task: asyncio.Future) -> None:
    task.cancel()
    await asyncio.wait({task})


async def with_timeout(future: Awaitable[T], timer: Awaitable[object]) -> T:
    """Return the result of ``future``, or raise Timeout if ``timer`` finishes first.

    A future or task passed in is left running on timeout so it can be awaited again;
    a bare coroutine is cancelled, since nothing else can reach it.
    """
    owns_future = not asyncio.isfuture(future)
    owns_timer = not asyncio.isfuture(timer)
    work = asyncio.ensure_future(future)
    clock = asyncio.ensure_future(timer)
    try:
        await asyncio.wait({work, clock}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        if owns_future:
            work.cancel()
        if owns_timer:
            clock.cancel()
        raise
    if work.done():
        if owns_timer and not clock.done():
            await _discard(clock)
        return work.result()
    clock.result()
    if owns_future:
        await _discard(work)
    raise Timeout()
"""
Blocking adapter for the async API.

Every blocking method on the client is produced by ``blocking`` from its
``*_async`` counterpart: the coroutine is created once and driven to
completion by ``run_sync``.  There is never a second request and never a
second error mapping.
"""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, Coroutine, Optional, TypeVar

T = TypeVar("T")


async def _bounded(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError:
        raise TimeoutError(f"Call did not complete within {timeout}s") from None


def run_sync(awaitable: Awaitable[T], timeout: Optional[float] = None) -> T:
    """Drive ``awaitable`` to completion from synchronous code.

    Without a running loop in this thread the coroutine runs on a fresh loop.
    Inside a running loop (notebooks, async frameworks) it runs on a worker
    thread so the caller's loop is never blocked on itself.
    """
    coro = _bounded(awaitable, timeout)
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="neoconduit-sync") as pool:
        return pool.submit(asyncio.run, coro).result()


def blocking(async_fn: Callable[..., Coroutine[Any, Any, T]]) -> Callable[..., T]:
    """Make the blocking twin of an ``*_async`` method."""

    @functools.wraps(async_fn)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        return run_sync(
            async_fn(self, *args, **kwargs),
            timeout=getattr(self, "blocking_timeout", None),
        )

    name = async_fn.__name__.removesuffix("_async")
    wrapper.__name__ = name
    wrapper.__qualname__ = async_fn.__qualname__.removesuffix("_async")
    wrapper.__doc__ = async_fn.__doc__
    return wrapper


__all__ = ["run_sync", "blocking"]

"""Concurrency primitives shared by ingestion and chat streaming.

1. **throttled_gather** -- ``asyncio.gather`` with each awaitable wrapped in
   a semaphore acquire/release.  The ingestion service uses it to embed
   chunks through a bounded worker pool while keeping results in input order.

2. **CancellationToken** -- a cooperative abort handle.  The chat service
   registers one per in-flight conversation turn; the chat provider checks
   it at every chunk boundary and stops reading when it is set.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    limit: int = 1,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with semaphore throttling.

    Parameters
    ----------
    coros:
        Awaitable objects to execute.
    semaphore:
        Semaphore for concurrency control.  When omitted a fresh one is
        created with ``limit`` slots.
    limit:
        Slot count for the default semaphore.  ``1`` runs the awaitables
        one after another.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(max(1, limit))

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


class CancellationToken:
    """Cooperative cancellation flag backed by an :class:`asyncio.Event`."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until :meth:`cancel` is called."""
        await self._event.wait()

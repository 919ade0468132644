"""Concurrency primitives for outbound API fan-out.

Two patterns are exposed:

1. **throttled_gather** -- ``asyncio.gather`` with a semaphore around every
   awaitable, so at most N external calls are in flight while all of them
   are still awaited together (join-all, never a race).

2. **SingleFlight** -- a keyed single-execution latch.  Concurrent callers
   that pass the same key share one in-flight execution instead of
   starting a duplicate.  Used to make the Spotify authorization-code
   exchange idempotent when a browser submits the same code twice.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    limit: int = 5,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with at most ``limit`` executing at once.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Optional semaphore shared with other callers.  When omitted a new
        one sized ``limit`` is created for this call only.
    limit:
        Concurrency bound used when no semaphore is supplied.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list
        Results in the same order as the input awaitables, regardless of
        completion order.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(max(1, limit))

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    return await asyncio.gather(
        *(_wrapped(c) for c in coros),
        return_exceptions=return_exceptions,
    )


class SingleFlight(Generic[_T]):
    """Deduplicate concurrent executions that share a key.

    The first caller for a key starts ``factory()``; callers arriving while
    it is still running await the same future.  Once it settles the key is
    released, so a later call runs again.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Future[_T]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def run(self, key: str, factory: Callable[[], Awaitable[_T]]) -> _T:
        existing = self._inflight.get(key)
        if existing is not None:
            _logger.info("single_flight_joined", key_prefix=key[:8])
            return await asyncio.shield(existing)

        future: asyncio.Future[_T] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            result = await factory()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved; a flight with no joiners would otherwise log
            # "exception was never retrieved".
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._inflight.pop(key, None)


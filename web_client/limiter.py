from __future__ import annotations

import asyncio
import logging
from typing import Any

from .http import TransportOptions
from .models import InternalResponse, Limiter, Transport

logger = logging.getLogger(__name__)


def concurrency_limiter(max_concurrent: int) -> Limiter:
    """Allow at most ``max_concurrent`` transport calls in flight at once."""
    if max_concurrent < 1:
        raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")

    semaphore = asyncio.Semaphore(max_concurrent)

    def wrap(fn: Transport) -> Transport:
        async def limited(url: str, options: TransportOptions, body: Any, secure: bool) -> InternalResponse:
            async with semaphore:
                return await fn(url, options, body, secure)

        return limited

    return wrap


def interval_limiter(min_interval_s: float) -> Limiter:
    """Space the start of consecutive transport calls by ``min_interval_s`` seconds.

    Calls queue on a lock; the wait happens before the call starts, so slow
    responses do not hold up the next request once its slot comes.
    """
    if min_interval_s < 0:
        raise ValueError(f"min_interval_s must be >= 0, got {min_interval_s}")

    lock = asyncio.Lock()
    last_start: list[float] = []

    def wrap(fn: Transport) -> Transport:
        async def limited(url: str, options: TransportOptions, body: Any, secure: bool) -> InternalResponse:
            async with lock:
                loop = asyncio.get_running_loop()
                if last_start:
                    wait = last_start[0] + min_interval_s - loop.time()
                    if wait > 0:
                        logger.debug("interval limiter: waiting %.3fs before %s", wait, url)
                        await asyncio.sleep(wait)
                last_start[:] = [loop.time()]
            return await fn(url, options, body, secure)

        return limited

    return wrap


def compose_limiters(*limiters: Limiter) -> Limiter:
    """Chain limiters; the first one listed is the outermost wrapper."""

    def wrap(fn: Transport) -> Transport:
        for limiter in reversed(limiters):
            fn = limiter(fn)
        return fn

    return wrap

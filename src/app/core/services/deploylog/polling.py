"""Bounded polling shared by the deployment and progress waiters."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from loguru import logger

from src.app.core.services.deploylog.errors import RequestCancelled

T = TypeVar("T")


@dataclass(frozen=True)
class PollResult(Generic[T]):
    """Outcome of a bounded poll.

    Exactly one of these holds: ``succeeded`` (``value`` is the condition's
    value), ``timed_out``, or ``error`` is set.
    """

    succeeded: bool
    timed_out: bool = False
    error: Exception | None = None
    value: T | None = None


async def poll_until(
    condition: Callable[[], Awaitable[tuple[bool, T | None]]],
    *,
    interval: float,
    timeout: float,
    cancel: asyncio.Event | None = None,
) -> PollResult[T]:
    """Check ``condition`` immediately, then every ``interval`` seconds.

    ``condition`` returns ``(done, value)``. Returning ``done=False`` means
    "not yet, keep waiting"; raising means the poll fails right away with
    that error. A last check runs at the deadline, so a condition that
    becomes true at any time before ``timeout`` is seen.

    When ``cancel`` is given it is checked before every attempt and waited
    on between attempts, so setting it ends the poll within the current
    tick with a ``RequestCancelled`` error.

    Args:
        condition: Async callable evaluated on every tick
        interval: Seconds between attempts
        timeout: Seconds until the poll gives up
        cancel: Optional cancel signal

    Returns:
        PollResult describing success, timeout or error
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    attempt = 0

    while True:
        if cancel is not None and cancel.is_set():
            return PollResult(succeeded=False, error=RequestCancelled("request cancelled"))

        attempt += 1
        try:
            done, value = await condition()
        except Exception as e:
            return PollResult(succeeded=False, error=e)
        if done:
            return PollResult(succeeded=True, value=value)

        remaining = deadline - loop.time()
        if remaining <= 0:
            logger.debug(f"Poll timed out after {attempt} attempts ({timeout}s)")
            return PollResult(succeeded=False, timed_out=True)

        await _sleep(min(interval, remaining), cancel)


async def _sleep(seconds: float, cancel: asyncio.Event | None) -> None:
    """Sleep, waking up early if ``cancel`` is set."""
    if cancel is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=seconds)
    except TimeoutError:
        pass

"""
Generic poll-until-condition primitive.

Every wait-for-X operation of the client (transaction confirmation,
program availability) is a check function driven by poll_until().
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from aleo_client.network.errors import PollTimeoutError

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_MAX_DELAY = 5.0


async def poll_until(
    check: Callable[[], Awaitable[Optional[T]]],
    timeout: float,
    initial_delay: float,
    max_delay: float = DEFAULT_MAX_DELAY,
    operation: str = "poll",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """
    Call ``check`` until it returns a value other than None.

    The delay between attempts starts at ``initial_delay`` and doubles after
    every miss, capped at ``max_delay``. Exceptions raised by ``check``
    propagate unchanged; ``check`` alone decides between "not yet" (None)
    and "never" (raise).

    Args:
        check: Idempotent async check function
        timeout: Total budget in seconds
        initial_delay: First sleep in seconds
        max_delay: Cap for the doubling delay
        operation: Name used in logs and in the timeout error
        sleep: Async sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        The first non-None result of ``check``

    Raises:
        PollTimeoutError: If the budget is spent before a result
    """
    start = clock()
    delay = min(initial_delay, max_delay)
    attempts = 0

    while True:
        if clock() - start >= timeout:
            logger.warning(
                "poll.timeout",
                operation=operation,
                attempts=attempts,
                timeout_seconds=timeout,
            )
            raise PollTimeoutError(operation, timeout)

        attempts += 1
        result = await check()
        if result is not None:
            logger.debug("poll.done", operation=operation, attempts=attempts)
            return result

        logger.debug(
            "poll.waiting",
            operation=operation,
            attempt=attempts,
            delay_seconds=delay,
        )
        await sleep(delay)
        delay = min(delay * 2, max_delay)

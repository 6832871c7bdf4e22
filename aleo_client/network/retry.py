"""
Retry utilities for transient network failures.

Implements exponential backoff with optional jitter. Only failures the
caller marks as retryable are retried; everything else propagates on the
first attempt.
"""

import asyncio
import random
from typing import Awaitable, Callable, TypeVar

import structlog

from aleo_client.network.config import RetryConfig

logger = structlog.get_logger()

T = TypeVar("T")


def backoff_delay(config: RetryConfig, attempt: int) -> float:
    """
    Delay before retry number ``attempt + 1`` (attempt counts from 0).

    The delay grows exponentially from min_delay and stays within
    [min_delay, max_delay], jitter included.
    """
    delay = min(
        config.min_delay * (config.exponential_base**attempt),
        config.max_delay,
    )
    if config.jitter:
        delay = max(config.min_delay, delay * (0.5 + random.random() * 0.5))
    return delay


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig,
    operation_name: str = "operation",
    retry_on: Callable[[BaseException], bool] = lambda e: True,
    on_retry: Callable[[BaseException], None] = lambda e: None,
) -> T:
    """
    Execute an async function with exponential backoff retry.

    Args:
        func: Async function to execute
        config: Retry configuration
        operation_name: Name for logging
        retry_on: Predicate deciding whether an exception is retryable
        on_retry: Called with the exception before each retry

    Returns:
        Function result

    Raises:
        Exception: The first non-retryable exception, or the last one
            once max_retries retries are exhausted
    """
    attempt = 0
    while True:
        try:
            return await func()
        except Exception as e:
            attempt_num = attempt + 1

            if not retry_on(e):
                raise

            if attempt_num >= config.max_attempts:
                logger.error(
                    "retry_exhausted",
                    operation=operation_name,
                    attempts=attempt_num,
                    error=str(e),
                )
                raise

            delay = backoff_delay(config, attempt)
            logger.warning(
                "retry_attempt",
                operation=operation_name,
                attempt=attempt_num,
                max_attempts=config.max_attempts,
                delay_seconds=delay,
                error=str(e),
            )
            on_retry(e)

            await asyncio.sleep(delay)
            attempt += 1

"""Retry utilities for gateway calls."""

import functools
import logging
import time
from collections.abc import Callable
from typing import Tuple, Type

logger = logging.getLogger(__name__)


def retry(
    max_attempts: int = 3,
    delay: float = 0.5,
    backoff: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Retry decorator with exponential backoff.

    The wrapped call is repeated with the same arguments, so anything that
    must stay stable across retries (an idempotency key) has to be part of them.

    Args:
        max_attempts: Maximum attempts, including the first call
        delay: Initial delay between retries (seconds)
        backoff: Multiplier for delay after each retry
        exceptions: Tuple of exceptions to catch and retry
        sleep: Function used to wait between attempts
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        raise
                    logger.info(
                        "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                        func.__name__, attempt, max_attempts, e, current_delay,
                    )
                    sleep(current_delay)
                    current_delay *= backoff

        return wrapper
    return decorator

"""
RETRY UTILITY
=============

Calls a function and, if it raises one of the given exceptions, retries a few
times with exponential backoff. Used for writing state files so a transient
I/O error (file briefly locked, disk hiccup) doesn't lose a snapshot.

The backoff uses time.sleep. Store listeners save synchronously from the
async request handlers, so a retry blocks the event loop for its delays
(about 0.15s with the defaults) before the write gives up or succeeds.

Example:
  with_retry(lambda: path.write_text(data), max_retries=3, initial_delay=0.05)
"""

import logging
import time
from typing import Callable, Tuple, Type, TypeVar


logger = logging.getLogger("PromptDesk")

# Type variable: with_retry returns whatever the callable returns.
T = TypeVar("T")


def with_retry(
    fn: Callable[[], T],
    max_retries: int = 3,
    initial_delay: float = 0.05,
    retry_on: Tuple[Type[BaseException], ...] = (OSError,),
) -> T:
    """
    Execute fn(). If it raises one of retry_on, wait initial_delay seconds and try
    again; delay doubles each retry. After max_retries attempts (including the
    first), re-raise the last exception. Other exceptions propagate immediately.
    """
    delay = initial_delay

    for attempt in range(max_retries):
        try:
            return fn()
        except retry_on as e:
            if attempt == max_retries - 1:
                raise
            logger.warning(
                "Attempt %s/%s failed (%s). Retrying in %.2fs: %s",
                attempt + 1,
                max_retries,
                fn.__name__ if hasattr(fn, "__name__") else "call",
                delay,
                e,
            )
            time.sleep(delay)
            delay *= 2  # Exponential backoff

    raise ValueError("max_retries must be at least 1")

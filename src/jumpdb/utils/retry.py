"""Retry utilities with bounded attempts and uniform random backoff."""

import functools
import random
import time
from typing import Callable, Iterable, Tuple, Type, TypeVar, ParamSpec

from jumpdb.utils.logging import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def retry(
    *,
    max_attempts: int = 3,
    min_wait: float = 0.05,
    max_wait: float = 0.15,
    exceptions: Iterable[Type[BaseException]] = (Exception,),
    on_retry: Callable[[BaseException], None] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to retry a blocking call, sleeping a random interval between tries.

    Args:
        max_attempts: Maximum number of attempts before giving up.
        min_wait: Lower bound of the sleep between attempts (seconds).
        max_wait: Upper bound of the sleep between attempts (seconds).
        exceptions: Exception types that trigger a retry; anything else propagates.
        on_retry: Optional hook called with the exception before each sleep.
    """

    exc_tuple: Tuple[Type[BaseException], ...] = tuple(exceptions)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except exc_tuple as exc:
                    if attempt >= max_attempts:
                        raise
                    wait = random.uniform(min_wait, max_wait)

                    logger.warning(
                        "retrying_operation",
                        function=func.__name__,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        wait_seconds=wait,
                        error=str(exc),
                    )
                    if on_retry is not None:
                        on_retry(exc)

                    time.sleep(wait)
                    attempt += 1

        return wrapper

    return decorator


__all__ = ["retry"]

"""Retry decorator for outbound HTTP calls (file downloads, Google Calendar)."""

import logging
import time
from functools import wraps
from typing import Any, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Responses with these statuses are worth another attempt.
TRANSIENT_STATUSES = (429, 500, 502, 503, 504)


def _status_of(result: Any) -> int | None:
    status = getattr(result, "status_code", None)
    return status if isinstance(status, int) else None


def retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff_multiplier: float = 2.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    retry_statuses: Iterable[int] = (),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Retry a call on transient failures with exponential backoff.

    Database writes are never wrapped in this; a repeated insert is not
    harmless the way a repeated GET is.

    Args:
        max_attempts (int): Total attempts, the first one included.
        delay (float): Seconds to wait after the first failure.
        backoff_multiplier (float): Factor applied to the wait after each failure.
        exceptions (tuple): Exception types that trigger another attempt.
        retry_statuses (Iterable[int]): HTTP statuses that trigger another attempt
            when the call returns a response object instead of raising.

    Returns:
        Callable: The decorated function. After the last attempt the final
        exception is re-raised, or the final response is returned as is.
    """
    statuses = frozenset(retry_statuses)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            wait_time = delay
            for attempt in range(1, max_attempts + 1):
                last = attempt == max_attempts
                try:
                    result = func(*args, **kwargs)
                except exceptions as e:
                    if last:
                        logger.error(f"{func.__name__} failed after {max_attempts} attempts: {e}")
                        raise
                    reason = str(e)
                else:
                    status = _status_of(result)
                    if last or status not in statuses:
                        return result
                    reason = f"HTTP {status}"
                logger.warning(
                    f"{func.__name__} attempt {attempt}/{max_attempts} failed ({reason}); "
                    f"retrying in {wait_time:.1f}s"
                )
                time.sleep(wait_time)
                wait_time *= backoff_multiplier
            raise RuntimeError(f"retry loop for {func.__name__} exited without a result")

        return wrapper

    return decorator

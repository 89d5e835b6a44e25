"""
Retry with exponential backoff for read-only calls to the drive provider.
Handles transient failures: rate limits, timeouts, connection errors, 5xx.
"""

import functools
import time

from src.config.logging_config import setup_logger

logger = setup_logger(__name__)

# Retry config
DEFAULT_RETRIES = 2
DEFAULT_INITIAL_DELAY = 0.5
DEFAULT_MAX_DELAY = 8.0
DEFAULT_BACKOFF = 2.0


def _is_retryable(exc: BaseException) -> bool:
    """Check if exception is retryable (rate limit, timeout, connection, 5xx)."""
    # Connector errors carry their own classification (status None, 429 or 5xx)
    return getattr(exc, "retryable", False) is True


def _sync_retry_impl(
    fn,
    *args,
    retries: int = DEFAULT_RETRIES,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    backoff: float = DEFAULT_BACKOFF,
    **kwargs,
):
    """Synchronous retry with exponential backoff."""
    last_exc = None
    delay = initial_delay
    for attempt in range(retries + 1):
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            last_exc = e
            if attempt < retries and _is_retryable(e):
                logger.warning("Retry %s/%s after %s: %s", attempt + 1, retries, type(e).__name__, e)
                time.sleep(delay)
                delay = min(delay * backoff, max_delay)
            else:
                raise
    raise last_exc


def with_retry(
    retries: int = DEFAULT_RETRIES,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    backoff: float = DEFAULT_BACKOFF,
):
    """Decorator for sync functions: retry with exponential backoff."""

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            return _sync_retry_impl(
                fn, *args, retries=retries, initial_delay=initial_delay, max_delay=max_delay, backoff=backoff, **kwargs
            )

        return wrapper

    return decorator

"""Retry logic with exponential backoff for transient Google Docs API errors.

Transient errors (network failures, 429 rate limits, 5xx responses) are retried
with exponential backoff (1s, 2s, 4s). Every other error fails fast.
"""

import time
import logging
from typing import Callable, TypeVar
from functools import wraps

from .errors import APIAccessError, GoogleDocsError, TransientAPIError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3


def retry_on_transient(func: Callable[..., T], *args, **kwargs) -> T:
    """Retry function on transient errors with exponential backoff.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        APIAccessError: If the error persists after 3 retries
        Other exceptions: Passed through immediately without retry

    Example:
        >>> doc = retry_on_transient(api.get_document, "1AbC")
    """
    for retry_num in range(MAX_RETRIES + 1):  # 0, 1, 2, 3 = 4 attempts total
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_transient_error(e):
                raise

            if retry_num >= MAX_RETRIES:
                logger.error(
                    f"Transient error persisted after {MAX_RETRIES} retries, giving up: {e}"
                )
                raise APIAccessError(
                    f"Google Docs API failure (after {MAX_RETRIES} retries)"
                ) from e

            wait_time = 2 ** retry_num
            logger.info(
                f"Transient error ({e}), retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{MAX_RETRIES})"
            )
            time.sleep(wait_time)

    raise APIAccessError(f"Google Docs API failure (after {MAX_RETRIES} retries)")


def as_decorator(func: Callable[..., T]) -> Callable[..., T]:
    """Decorator version of retry_on_transient.

    Example:
        >>> @as_decorator
        ... def fetch(document_id: str):
        ...     return api.get_document(document_id)
    """
    @wraps(func)
    def wrapper(*args, **kwargs) -> T:
        return retry_on_transient(func, *args, **kwargs)

    return wrapper


def _is_transient_error(exception: Exception) -> bool:
    """Check if an exception is worth retrying.

    Typed TransientAPIError instances always are. Raw exceptions are checked
    for rate limit phrases and 429/5xx status codes so that errors from
    lower layers are recognized too.

    Args:
        exception: The exception to check

    Returns:
        True if the call should be retried, False otherwise
    """
    if isinstance(exception, TransientAPIError):
        return True
    if isinstance(exception, GoogleDocsError):
        return False

    error_msg = str(exception).lower()
    rate_limit_patterns = [
        '429',
        'too many requests',
        'rate limit exceeded',
        'rate limit hit',
        'rate limited',
        'quota exceeded',
    ]
    if any(pattern in error_msg for pattern in rate_limit_patterns):
        return True

    status_code = getattr(exception, 'status_code', None)
    if status_code is None:
        response = getattr(exception, 'response', None)
        status_code = getattr(response, 'status_code', None)

    if isinstance(status_code, int):
        return status_code == 429 or 500 <= status_code < 600

    return False

"""
Bounded retries with exponential backoff for store, object storage and email calls.
Uses tenacity; callers decide which exceptions are transient.
"""
import logging
from typing import Callable

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ibuddy.config import settings

logger = logging.getLogger(__name__)

_RETRYABLE_AWS_CODES = frozenset({
    "Throttling",
    "ThrottlingException",
    "ThrottledException",
    "RequestLimitExceeded",
    "SlowDown",
    "ServiceUnavailable",
    "InternalError",
    "InternalFailure",
    "RequestTimeout",
})


def is_transient_db_error(exc: BaseException) -> bool:
    """Retry on lost connections and SQLite lock contention."""
    from sqlalchemy.exc import OperationalError
    if not isinstance(exc, OperationalError):
        return False
    msg = str(exc).lower()
    return "locked" in msg or "busy" in msg or getattr(exc, "connection_invalidated", False) or "connection" in msg


def is_transient_aws_error(exc: BaseException) -> bool:
    """Retry on AWS throttling, 5xx and connection errors."""
    from botocore.exceptions import ClientError, ConnectionError as BotoConnectionError
    if isinstance(exc, BotoConnectionError):
        return True
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 0
        return error.get("Code") in _RETRYABLE_AWS_CODES or status >= 500
    return False


def call_with_retry(fn: Callable, *args, is_retryable: Callable[[BaseException], bool], attempts: int | None = None, **kwargs):
    """Run fn(*args, **kwargs), retrying transient failures; the last error is re-raised."""

    @retry(
        retry=retry_if_exception(is_retryable),
        stop=stop_after_attempt(max(1, attempts or settings.retry_attempts)),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=5),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _do():
        return fn(*args, **kwargs)

    return _do()

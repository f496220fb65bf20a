"""Resilient store call decorator with tenacity retry.

Retries only ``TransientError`` (locked or unavailable database) with
exponential backoff and jitter, up to ``STORE_RETRY_ATTEMPTS`` attempts.
Business-rule rejections (validation, authorization, conflicts) are raised on
the first attempt and never retried.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from partners.config import get_settings
from partners.domain.errors import TransientError

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


def _operation_name(retry_state: RetryCallState) -> str:
    if retry_state.fn is None:
        return "unknown"
    return getattr(retry_state.fn, "_operation_name", "unknown")


def _before_sleep_log(retry_state: RetryCallState) -> None:
    """Log a warning before each retry attempt.

    Args:
        retry_state: Tenacity retry state with attempt info.
    """
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying store operation",
        operation=_operation_name(retry_state),
        attempt=retry_state.attempt_number,
        wait=retry_state.next_action.sleep if retry_state.next_action else 0,
        error=str(exception),
    )


def _stop_after_configured_attempts(retry_state: RetryCallState) -> bool:
    return retry_state.attempt_number >= get_settings().store_retry_attempts


def log_final_failure(retry_state: RetryCallState) -> Any:
    """Log retry exhaustion, then re-raise the last ``TransientError``.

    Args:
        retry_state: Tenacity retry state with attempt info and exception.
    """
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.error(
        "Store operation failed after all retries",
        operation=_operation_name(retry_state),
        attempts=retry_state.attempt_number,
        exception=str(exception),
    )
    if retry_state.outcome is not None:
        return retry_state.outcome.result()
    return None


def resilient_store_call(operation: str, attempts: int | None = None) -> Callable[[F], F]:
    """Create a retry decorator for a store-backed operation.

    Returns a tenacity retry decorator configured with:
    - *attempts* attempts maximum, or ``Settings.store_retry_attempts``
      read at call time when omitted
    - Exponential backoff with jitter (1s initial, 30s max, 5s jitter)
    - Retry on ``TransientError`` only
    - Warning log before each retry, error log on exhaustion
    - Original exception re-raised after exhaustion

    Args:
        operation: Human-readable operation name (used in logs).
        attempts: Fixed maximum number of attempts, overriding settings.

    Returns:
        A decorator that wraps the function with retry logic.
    """
    stop = _stop_after_configured_attempts if attempts is None else stop_after_attempt(attempts)

    def decorator(func: F) -> F:
        func._operation_name = operation  # type: ignore[attr-defined]

        wrapped = retry(
            retry=retry_if_exception_type(TransientError),
            stop=stop,
            wait=wait_exponential_jitter(initial=1, max=30, jitter=5),
            before_sleep=_before_sleep_log,
            retry_error_callback=log_final_failure,
            reraise=True,
        )(func)

        return wrapped

    return decorator

"""Bounded retry for store operations that failed transiently."""

import functools
import typing as t

import structlog
from django.conf import settings
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from ticketing.domain.errors import TransientStoreError

logger = structlog.get_logger(__name__)

P = t.ParamSpec("P")
R = t.TypeVar("R")


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "store_operation_retry",
        operation=retry_state.fn.__qualname__ if retry_state.fn else None,
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


def retry_transient(func: t.Callable[P, R]) -> t.Callable[P, R]:
    """Re-run ``func`` on TransientStoreError with randomized exponential backoff.

    Only wrap operations whose writes run inside one store transaction, so a
    failed attempt leaves nothing behind. The last error is re-raised once
    ``TICKETING_STORE_RETRY_ATTEMPTS`` is exhausted.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        retrying = Retrying(
            retry=retry_if_exception_type(TransientStoreError),
            stop=stop_after_attempt(settings.TICKETING_STORE_RETRY_ATTEMPTS),
            wait=wait_random_exponential(
                multiplier=settings.TICKETING_STORE_RETRY_MULTIPLIER,
                max=settings.TICKETING_STORE_RETRY_MAX_WAIT,
            ),
            before_sleep=_log_retry,
            reraise=True,
        )
        return retrying(func, *args, **kwargs)

    return wrapper

"""Retrying mutating calls that Dataverse rejects while indexing is pending.

With ``assureIsIndexed=true`` Dataverse answers 409 Conflict as long as an
index action on the dataset is still pending. That answer is worth retrying,
every other failure is not.

As in :mod:`dataverse.polling`, only ``InterruptedError`` from the sleep is
wrapped; ``KeyboardInterrupt`` and other signal-handler exceptions propagate.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional, TypeVar

from .exceptions import RemoteError, RetryBudgetExhaustedError, WaitInterruptedError
from .models import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFLICT_STATUS_CODE = 409


class FailureKind(Enum):
    """Whether a failed call may be repeated."""

    TRANSIENT = "transient"
    TERMINAL = "terminal"


def classify_failure(error: BaseException) -> FailureKind:
    """Only a Dataverse 409 Conflict is transient; anything else is terminal."""
    if isinstance(error, RemoteError) and error.status_code == CONFLICT_STATUS_CODE:
        return FailureKind.TRANSIENT
    return FailureKind.TERMINAL


def retry_on_conflict(
    operation: Callable[[], T],
    policy: RetryPolicy,
    sleep: Optional[Callable[[float], None]] = None,
    description: str = "operation",
) -> T:
    """Call ``operation`` until it succeeds, retrying only on a transient conflict.

    Args:
        operation: Single-shot mutating call
        policy: Maximum number of calls and the pause between them
        sleep: Blocking sleep taking seconds
        description: Name of the operation for logs and error messages

    Returns:
        The result of the first successful call

    Raises:
        RetryBudgetExhaustedError: Every allowed call ended in a conflict
        WaitInterruptedError: The sleep between two calls raised InterruptedError
        Exception: Any terminal failure, re-raised unchanged after one call
    """
    sleep = sleep or time.sleep
    attempt = 0
    while True:
        try:
            return operation()
        except Exception as e:
            if classify_failure(e) is FailureKind.TERMINAL:
                logger.error(f"{description} failed with non-retryable error, rethrowing: {e!s}")
                raise

            attempt += 1
            logger.debug(f"{description} failed because the dataset is awaiting indexing; attempt {attempt}")
            if attempt >= policy.max_attempts:
                logger.warning(f"Max attempts ({policy.max_attempts}) reached, stop trying to {description}")
                raise RetryBudgetExhaustedError(
                    f"Gave up trying to {description} after {attempt} attempt(s): {e.message}",
                    attempts=attempt,
                    max_attempts=policy.max_attempts,
                    status_code=e.status_code,
                ) from e

            logger.debug(f"Sleeping for {policy.interval_ms} milliseconds before trying again")
            try:
                sleep(policy.interval_seconds)
            except InterruptedError as interrupted:
                raise WaitInterruptedError(
                    f"Retrying to {description} was interrupted after {attempt} attempt(s)",
                    last_observed=e,
                    attempts=attempt,
                ) from interrupted

"""Blocking waits for remote dataset state.

Dataverse has no push notification for locks or version state, so both waits
poll. :func:`await_condition` is bounded by a number of checks,
:func:`await_state_tag` by wall-clock time.

Another client may change the locks between our last read and the caller's
next request. That race cannot be closed from the client side.

``time.sleep`` resumes after EINTR (PEP 475), so a signal only ends a wait
through whatever its handler raises. ``InterruptedError`` raised by the sleep
(or by a handler) is wrapped in :class:`WaitInterruptedError`; anything else,
``KeyboardInterrupt`` included, propagates unchanged.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional

from .conditions import LockCondition
from .exceptions import DataverseError, StateWaitTimeoutError, ValidationError, WaitInterruptedError
from .models import Failed, Lock, PollOutcome, RetryPolicy, Success, TimedOut

logger = logging.getLogger(__name__)


def await_condition(
    fetch_locks: Callable[[], List[Lock]],
    condition: LockCondition,
    lock_types: Iterable[str],
    policy: RetryPolicy,
    sleep: Optional[Callable[[float], None]] = None,
    description: str = "Wait for lock state expired",
) -> PollOutcome:
    """Poll the locks until ``condition`` holds or ``policy.max_attempts`` checks were made.

    Args:
        fetch_locks: Returns a fresh lock snapshot, one round-trip per call
        condition: ALL_CLEAR or ALL_PRESENT
        lock_types: Lock types the condition is evaluated for
        policy: Number of checks and the pause between them
        sleep: Blocking sleep taking seconds
        description: Prefix for the timeout message

    Returns:
        Success on the first satisfying snapshot, TimedOut with the unsatisfied
        lock types when the checks are used up, Failed when fetching failed.

    Raises:
        WaitInterruptedError: If the sleep between two checks raised InterruptedError
    """
    sleep = sleep or time.sleep
    lock_types = tuple(lock_types)
    attempts = 0
    while True:
        try:
            locks = fetch_locks()
        except DataverseError as e:
            logger.debug(f"Fetching locks failed after {attempts} check(s): {e}")
            return Failed(cause=e, attempts=attempts)
        logger.debug(f"Current locks: {[lock.lock_type for lock in locks]}")

        if condition.is_met(locks, lock_types):
            return Success(attempts=attempts + 1)

        attempts += 1
        if attempts >= policy.max_attempts:
            remaining = condition.unsatisfied(locks, lock_types)
            logger.warning(
                f"{description}. Number of tries = {attempts}, "
                f"wait time between tries = {policy.interval_ms} ms. Remaining lock(s): {sorted(remaining)}"
            )
            return TimedOut(
                remaining=remaining,
                attempts=attempts,
                interval_ms=policy.interval_ms,
                description=description,
            )

        logger.debug(f"Sleeping {policy.interval_ms} ms before next try..")
        try:
            sleep(policy.interval_seconds)
        except InterruptedError as e:
            raise WaitInterruptedError(
                f"Lock wait was interrupted after {attempts} check(s)",
                last_observed=locks,
                attempts=attempts,
            ) from e


def await_state_tag(
    fetch_state: Callable[[], str],
    target: str,
    timeout_ms: int,
    polling_interval_ms: int,
    sleep: Optional[Callable[[float], None]] = None,
    clock: Optional[Callable[[], float]] = None,
) -> None:
    """Poll the state until it equals ``target`` or ``timeout_ms`` has elapsed.

    A fetch already in progress when the deadline passes is allowed to finish,
    but no new fetch is started after it.

    Raises:
        StateWaitTimeoutError: The state did not become ``target`` in time
        WaitInterruptedError: The sleep between two checks raised InterruptedError
        DataverseError: Fetching the state failed
    """
    if timeout_ms < 0:
        raise ValidationError("timeout_ms must not be negative")
    if polling_interval_ms < 0:
        raise ValidationError("polling_interval_ms must not be negative")
    sleep = sleep or time.sleep
    clock = clock or time.monotonic

    start = clock()
    logger.debug(f"Waiting up to {timeout_ms} ms for state {target}")
    state: Optional[str] = fetch_state()
    checks = 1
    logger.debug(f"Initial state is {state}")

    while state != target:
        elapsed_ms = _elapsed_ms(start, clock)
        if elapsed_ms >= timeout_ms:
            logger.warning(f"State did not become {target} within {timeout_ms} ms; current state is {state}")
            raise StateWaitTimeoutError(
                f"Dataset did not become {target} within the wait period ({timeout_ms} ms); "
                f"current state is {state}",
                target=target,
                last_state=state,
                elapsed_ms=elapsed_ms,
                checks=checks,
            )

        logger.debug(f"Sleeping for {polling_interval_ms} ms before checking again")
        try:
            sleep(polling_interval_ms / 1000.0)
        except InterruptedError as e:
            raise WaitInterruptedError(
                f"Dataset state check was interrupted; last known state is {state}",
                last_observed=state,
                attempts=checks,
            ) from e

        elapsed_ms = _elapsed_ms(start, clock)
        if elapsed_ms >= timeout_ms:
            continue
        state = fetch_state()
        checks += 1
        logger.debug(f"Current state is {state}, remaining time: {timeout_ms - elapsed_ms} ms")


def _elapsed_ms(start: float, clock: Callable[[], float]) -> int:
    return round((clock() - start) * 1000)

"""Dataverse client exception classes."""

from typing import FrozenSet, Optional


class DataverseError(Exception):
    """Base exception for all Dataverse client errors."""
    pass


class ValidationError(DataverseError):
    """Raised when a caller-supplied argument is invalid."""
    pass


class NetworkError(DataverseError):
    """Raised when the HTTP round-trip itself fails (connectivity, transport timeout)."""
    pass


class RemoteError(DataverseError):
    """Raised when Dataverse answers with a non-success status."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message


class AuthenticationError(RemoteError):
    """Raised when the API token is missing, invalid or lacks permission."""
    pass


class ConflictError(RemoteError):
    """Raised on HTTP 409, e.g. when a dataset is still awaiting indexing."""

    def __init__(self, message: str, status_code: int = 409):
        super().__init__(message, status_code)


class RetryBudgetExhaustedError(ConflictError):
    """Raised when a conflicting operation kept conflicting for every allowed attempt."""

    def __init__(self, message: str, attempts: int, max_attempts: int, status_code: int = 409):
        super().__init__(message, status_code)
        self.attempts = attempts
        self.max_attempts = max_attempts


class LockWaitTimeoutError(DataverseError):
    """Raised when a lock wait outcome timed out and the caller asked for an exception."""

    def __init__(self, message: str, remaining: FrozenSet[str] = frozenset(), attempts: int = 0,
                 interval_ms: int = 0):
        super().__init__(message)
        self.remaining = remaining
        self.attempts = attempts
        self.interval_ms = interval_ms


class StateWaitTimeoutError(DataverseError):
    """Raised when a dataset did not reach the expected state before the deadline."""

    def __init__(self, message: str, target: str, last_state: Optional[str], elapsed_ms: int,
                 checks: int):
        super().__init__(message)
        self.target = target
        self.last_state = last_state
        self.elapsed_ms = elapsed_ms
        self.checks = checks


class WaitInterruptedError(DataverseError):
    """Raised when the sleep between two polls was interrupted."""

    def __init__(self, message: str, last_observed=None, attempts: int = 0):
        super().__init__(message)
        self.last_observed = last_observed
        self.attempts = attempts

"""Dataverse Python SDK - dataset repository client with lock and state waits."""

from .client import DataverseClient
from .conditions import LockCondition, all_clear, all_present
from .config import DataverseConfig
from .dataset import DatasetApi
from .exceptions import (
    DataverseError,
    ValidationError,
    NetworkError,
    RemoteError,
    AuthenticationError,
    ConflictError,
    RetryBudgetExhaustedError,
    LockWaitTimeoutError,
    StateWaitTimeoutError,
    WaitInterruptedError,
)
from .models import (
    Lock,
    RetryPolicy,
    PollOutcome,
    Success,
    TimedOut,
    Failed,
    UpdateType,
    VersionState,
    DataMessage,
    DatasetVersion,
)
from .polling import await_condition, await_state_tag
from .retry import FailureKind, classify_failure, retry_on_conflict

__version__ = "1.0.0"
__all__ = [
    "DataverseClient",
    "DataverseConfig",
    "DatasetApi",
    "DataverseError",
    "ValidationError",
    "NetworkError",
    "RemoteError",
    "AuthenticationError",
    "ConflictError",
    "RetryBudgetExhaustedError",
    "LockWaitTimeoutError",
    "StateWaitTimeoutError",
    "WaitInterruptedError",
    "Lock",
    "RetryPolicy",
    "PollOutcome",
    "Success",
    "TimedOut",
    "Failed",
    "UpdateType",
    "VersionState",
    "DataMessage",
    "DatasetVersion",
    "LockCondition",
    "all_clear",
    "all_present",
    "await_condition",
    "await_state_tag",
    "FailureKind",
    "classify_failure",
    "retry_on_conflict",
]

"""Dataverse data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from .exceptions import LockWaitTimeoutError, ValidationError


class UpdateType(str, Enum):
    """Version bump applied when publishing a dataset."""
    MAJOR = "major"
    MINOR = "minor"
    UPDATE_CURRENT = "updatecurrent"


class VersionState(str, Enum):
    """Lifecycle states of a dataset version."""
    DRAFT = "DRAFT"
    RELEASED = "RELEASED"
    ARCHIVED = "ARCHIVED"
    DEACCESSIONED = "DEACCESSIONED"


@dataclass(frozen=True)
class Lock:
    """A lock Dataverse holds on a dataset."""
    lock_type: str
    date: Optional[str] = None
    user: Optional[str] = None
    dataset: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Lock":
        return cls(
            lock_type=data["lockType"],
            date=data.get("date"),
            user=data.get("user"),
            dataset=data.get("dataset"),
            message=data.get("message"),
        )


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how far apart a check or a conflicting call is repeated."""
    max_attempts: int
    interval_ms: int

    def __post_init__(self):
        for name in ("max_attempts", "interval_ms"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValidationError(f"{name} must be an integer, got {value!r}")
        if self.max_attempts < 1:
            raise ValidationError("max_attempts must be at least 1")
        if self.interval_ms < 0:
            raise ValidationError("interval_ms must not be negative")

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0


@dataclass
class DataMessage:
    """Generic Dataverse response carrying a status and an optional message."""
    status: str
    message: Optional[str] = None
    data: Any = None

    @classmethod
    def from_json(cls, body: Dict[str, Any]) -> "DataMessage":
        data = body.get("data")
        message = body.get("message")
        if message is None and isinstance(data, dict):
            message = data.get("message")
        return cls(status=body.get("status", "OK"), message=message, data=data)


@dataclass
class DatasetVersion:
    """The parts of a dataset version the client reads."""
    version_state: str
    id: Optional[int] = None
    version_number: Optional[int] = None
    version_minor_number: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "DatasetVersion":
        return cls(
            version_state=data["versionState"],
            id=data.get("id"),
            version_number=data.get("versionNumber"),
            version_minor_number=data.get("versionMinorNumber"),
            raw=data,
        )


class PollOutcome:
    """Result of waiting for a lock condition: Success, TimedOut or Failed."""

    ok = False

    def raise_for_outcome(self) -> None:
        """Raise an exception unless the outcome is a Success."""


@dataclass(frozen=True)
class Success(PollOutcome):
    attempts: int
    ok = True


@dataclass(frozen=True)
class TimedOut(PollOutcome):
    remaining: FrozenSet[str]
    attempts: int
    interval_ms: int = 0
    description: str = "Wait for lock state expired"

    def raise_for_outcome(self) -> None:
        raise LockWaitTimeoutError(
            f"{self.description}. Number of tries = {self.attempts}, "
            f"wait time between tries = {self.interval_ms} ms. "
            f"Remaining lock(s): {','.join(sorted(self.remaining))}.",
            remaining=self.remaining,
            attempts=self.attempts,
            interval_ms=self.interval_ms,
        )


@dataclass(frozen=True)
class Failed(PollOutcome):
    cause: Exception
    attempts: int = 0

    def raise_for_outcome(self) -> None:
        raise self.cause

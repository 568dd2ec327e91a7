"""Lock conditions a caller can wait for.

A condition is always evaluated against one complete snapshot of the locks on
a dataset. Locks can appear and disappear between two polls in any order, so
nothing is carried over from a previous snapshot.
"""

from enum import Enum
from typing import FrozenSet, Iterable, Sequence

from .models import Lock


def all_clear(locks: Sequence[Lock], lock_types: Iterable[str] = ()) -> bool:
    """True iff there are no locks at all. ``lock_types`` is ignored."""
    return len(locks) == 0


def all_present(locks: Sequence[Lock], lock_types: Iterable[str] = ()) -> bool:
    """True iff every lock type in ``lock_types`` is held at least once.

    An empty ``lock_types`` is vacuously satisfied; use :func:`all_clear` to
    wait for a dataset without locks.
    """
    held = {lock.lock_type for lock in locks}
    return all(lock_type in held for lock_type in lock_types)


class LockCondition(Enum):
    """The lock conditions supported by the polling loop."""

    ALL_CLEAR = "all_clear"
    ALL_PRESENT = "all_present"

    def is_met(self, locks: Sequence[Lock], lock_types: Iterable[str] = ()) -> bool:
        if self is LockCondition.ALL_CLEAR:
            return all_clear(locks, lock_types)
        return all_present(locks, lock_types)

    def unsatisfied(self, locks: Sequence[Lock], lock_types: Iterable[str] = ()) -> FrozenSet[str]:
        """Lock types that keep the condition from being met.

        For ALL_CLEAR these are the lock types still held, for ALL_PRESENT the
        requested lock types that are missing.
        """
        held = frozenset(lock.lock_type for lock in locks)
        if self is LockCondition.ALL_CLEAR:
            return held
        return frozenset(lock_type for lock_type in lock_types if lock_type not in held)

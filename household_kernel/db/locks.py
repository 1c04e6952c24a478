"""
Per-household lock registry.

One re-entrant lock per household id orders every operation on that
household.  Locks for different households are independent.
"""

import threading


class HouseholdLockRegistry:
    """Hands out one ``threading.RLock`` per household id, created on demand."""

    def __init__(self) -> None:
        self._locks: dict[int, threading.RLock] = {}
        self._guard = threading.Lock()

    def lock_for(self, household_id: int) -> threading.RLock:
        lock = self._locks.get(household_id)
        if lock is not None:
            return lock
        with self._guard:
            return self._locks.setdefault(household_id, threading.RLock())

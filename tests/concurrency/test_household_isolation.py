"""
Concurrency tests for per-household serialization.

These tests drive the ledger from real threads released together by a
Barrier and check that every invariant holds once the dust settles.

Run with: pytest tests/concurrency -v
Skip with: pytest -m "not slow_locks"
"""

import pytest

pytestmark = pytest.mark.slow_locks
from concurrent.futures import ThreadPoolExecutor, as_completed
from threading import Barrier

from household_kernel.exceptions import (
    CapacityExceededError,
    InsufficientFundsError,
)

ALICE = "alice"
BOB = "bob"
WORKERS = 8


def _run_together(calls):
    """Start every call at the same instant; return (results, errors)."""
    barrier = Barrier(len(calls))

    def _wrapped(call):
        barrier.wait()
        return call()

    results, errors = [], []
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(_wrapped, call) for call in calls]
        for future in as_completed(futures):
            exc = future.exception()
            if exc is None:
                results.append(future.result())
            else:
                errors.append(exc)
    return results, errors


class TestConcurrentHouseholdCreation:

    def test_household_ids_are_unique(self, ledger):
        calls = [
            (lambda i=i: ledger.create_household(f"House {i}", f"user-{i}", current_tick=1))
            for i in range(WORKERS * 4)
        ]
        results, errors = _run_together(calls)

        assert errors == []
        assert sorted(results) == list(range(1, WORKERS * 4 + 1))


class TestConcurrentSettlement:

    def test_balance_never_overdrawn(self, ledger, household, add_equal_expense, ticks):
        """Bob owes 100; sixteen racing settlements of 10 -> exactly ten win."""
        ledger.add_member(household, BOB, caller=ALICE, current_tick=ticks())
        add_equal_expense(household, 200, payer=ALICE)
        assert ledger.get_member_balance(household, BOB, ALICE) == 100

        calls = [
            (lambda: ledger.settle_payment(household, to=ALICE, amount=10, caller=BOB, current_tick=9))
            for _ in range(16)
        ]
        results, errors = _run_together(calls)

        assert len(results) == 10
        assert len(errors) == 6
        assert all(isinstance(e, InsufficientFundsError) for e in errors)
        assert sorted(results) == list(range(1, 11))
        assert ledger.get_member_balance(household, BOB, ALICE) == 0

    def test_concurrent_expenses_accumulate(self, ledger, household, add_equal_expense, ticks):
        ledger.add_member(household, BOB, caller=ALICE, current_tick=ticks())

        calls = [(lambda: add_equal_expense(household, 20, payer=ALICE)) for _ in range(WORKERS * 2)]
        results, errors = _run_together(calls)

        assert errors == []
        assert sorted(results) == list(range(1, WORKERS * 2 + 1))
        assert ledger.get_member_balance(household, BOB, ALICE) == 10 * WORKERS * 2


class TestConcurrentMembership:

    def test_member_cap_holds_under_contention(self, ledger, household, ticks):
        calls = [
            (lambda i=i: ledger.add_member(household, f"member-{i}", caller=ALICE, current_tick=2))
            for i in range(30)
        ]
        _, errors = _run_together(calls)

        assert len(errors) == 11
        assert all(isinstance(e, CapacityExceededError) for e in errors)
        assert len(ledger.get_household_members(household)) == 20


class TestCrossHouseholdIndependence:

    def test_households_progress_in_parallel(self, ledger, ticks, add_equal_expense):
        households = []
        for i in range(WORKERS):
            household_id = ledger.create_household(f"House {i}", ALICE, current_tick=ticks())
            ledger.add_member(household_id, BOB, caller=ALICE, current_tick=ticks())
            households.append(household_id)

        calls = [
            (lambda h=h, idx=idx: add_equal_expense(h, 100 * (idx + 1), payer=ALICE))
            for idx, h in enumerate(households)
        ]
        _, errors = _run_together(calls)

        assert errors == []
        for idx, household_id in enumerate(households):
            assert ledger.get_member_balance(household_id, BOB, ALICE) == 50 * (idx + 1)
            assert len(ledger.list_expenses(household_id)) == 1

"""
Pytest fixtures for the household ledger test suite.

Provides:
- A fresh HouseholdLedger per test (in-memory SQLite database, default settings)
- Ready-made households (creator only, and the Alice/Bob/Carol trio)
- A monotonic tick source
- Structured log capture
"""

import itertools
import json
import logging
from io import StringIO

import pytest

from household_config import LedgerSettings
from household_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from household_kernel.db.engine import LedgerDatabase
from household_kernel.db.locks import HouseholdLockRegistry
from household_services.household_ledger import HouseholdLedger

ALICE = "alice"
BOB = "bob"
CAROL = "carol"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture household_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.create_household("Flat", "alice", current_tick=1)
            logs = captured_logs()
            assert any(r["message"] == "household_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("household_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Ledger fixtures
# =============================================================================


class TickSource:
    """Monotonic tick counter standing in for the host's block height."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self.current = start - 1

    def __call__(self) -> int:
        self.current = next(self._counter)
        return self.current


@pytest.fixture
def ticks() -> TickSource:
    return TickSource()


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings()


@pytest.fixture
def database():
    """Fresh in-memory ledger database, disposed after the test."""
    db = LedgerDatabase()
    yield db
    db.dispose()


@pytest.fixture
def locks() -> HouseholdLockRegistry:
    return HouseholdLockRegistry()


@pytest.fixture
def ledger(settings, database, locks) -> HouseholdLedger:
    return HouseholdLedger(settings, database=database, locks=locks)


@pytest.fixture
def household(ledger, ticks) -> int:
    """Household created by Alice, Alice the only member."""
    return ledger.create_household("Flat 4B", ALICE, current_tick=ticks())


@pytest.fixture
def trio_household(ledger, household, ticks) -> int:
    """Alice's household with Bob and Carol added, in that order."""
    ledger.add_member(household, BOB, caller=ALICE, current_tick=ticks())
    ledger.add_member(household, CAROL, caller=ALICE, current_tick=ticks())
    return household


@pytest.fixture
def add_equal_expense(ledger, ticks):
    """Post a one-time equal-split expense and return its id."""

    def _add(household_id: int, amount: int, payer: str, caller: str | None = None) -> int:
        return ledger.add_expense(
            household_id,
            "Groceries",
            amount,
            payer=payer,
            expense_type="one-time",
            recurrence_period=0,
            allocation_type="equal",
            custom_allocations=None,
            caller=caller or payer,
            current_tick=ticks(),
        )

    return _add


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow_locks: mark test as exercising real thread contention"
    )

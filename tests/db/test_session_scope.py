"""
Tests for the ledger database, its session scopes and the household locks.
"""

import threading

import pytest
from sqlalchemy import func, inspect, select

from household_kernel.db.engine import LedgerDatabase, household_read_scope, household_scope
from household_kernel.exceptions import HouseholdNotFoundError, InvalidAmountError
from household_kernel.models.balance import BalanceModel
from household_kernel.models.sequence import GLOBAL_SCOPE, SequenceCounter
from household_kernel.services.sequence_service import SequenceService

LEDGER_TABLES = {
    "households",
    "household_members",
    "expenses",
    "expense_allocations",
    "balances",
    "settlements",
    "sequence_counters",
}


def _balance_row(household_id=1, amount=10):
    return BalanceModel(household_id=household_id, debtor="bob", creditor="alice", amount=amount)


def _balance_rows(database):
    with database.read_session() as session:
        return session.execute(select(func.count()).select_from(BalanceModel)).scalar_one()


class TestLedgerDatabase:

    def test_in_memory_database_shares_one_connection(self, database):
        assert database.shared_connection is True
        assert database.engine.dialect.name == "sqlite"

    def test_file_database_uses_a_pool(self, tmp_path):
        db = LedgerDatabase(f"sqlite:///{tmp_path / 'ledger.db'}")
        try:
            assert db.shared_connection is False
            assert LEDGER_TABLES <= set(inspect(db.engine).get_table_names())
        finally:
            db.dispose()

    def test_tables_created_on_startup(self, database):
        assert LEDGER_TABLES <= set(inspect(database.engine).get_table_names())

    def test_databases_are_private(self, database):
        with database.session_scope() as session:
            session.add(_balance_row())

        other = LedgerDatabase()
        try:
            assert _balance_rows(other) == 0
        finally:
            other.dispose()


class TestSessionScope:

    def test_commits_on_success(self, database):
        with database.session_scope() as session:
            session.add(_balance_row())

        with database.read_session() as session:
            assert session.get(BalanceModel, (1, "bob", "alice")).amount == 10

    def test_rolls_back_and_reraises_on_error(self, database):
        with pytest.raises(InvalidAmountError):
            with database.session_scope() as session:
                session.add(_balance_row())
                session.flush()
                raise InvalidAmountError(-1)

        assert _balance_rows(database) == 0

    def test_rollback_is_logged_with_error_code(self, database, captured_logs):
        with pytest.raises(InvalidAmountError):
            with database.session_scope():
                raise InvalidAmountError(-1)

        records = [r for r in captured_logs() if r["message"] == "transaction_rolled_back"]
        assert len(records) == 1
        assert records[0]["error_code"] == "INVALID_AMOUNT"

    def test_read_session_never_commits(self, database):
        with database.read_session() as session:
            session.add(_balance_row())
            session.flush()

        assert _balance_rows(database) == 0


class TestHouseholdScope:

    def test_commits_on_success(self, database, locks):
        with household_scope(database, locks, 1) as session:
            session.add(_balance_row())

        assert _balance_rows(database) == 1

    def test_discards_and_reraises_on_error(self, database, locks):
        with pytest.raises(InvalidAmountError):
            with household_scope(database, locks, 1) as session:
                session.add(_balance_row())
                session.flush()
                raise InvalidAmountError(-1)

        assert _balance_rows(database) == 0

    def test_read_scope_never_commits(self, database, locks):
        with household_read_scope(database, locks, 1) as session:
            session.add(_balance_row())
            session.flush()

        assert _balance_rows(database) == 0

    def test_lock_released_after_error(self, database, locks):
        with pytest.raises(InvalidAmountError):
            with household_scope(database, locks, 1):
                raise InvalidAmountError(-1)

        acquired = []

        def _try_lock():
            lock = locks.lock_for(1)
            acquired.append(lock.acquire(timeout=1))
            lock.release()

        worker = threading.Thread(target=_try_lock)
        worker.start()
        worker.join()
        assert acquired == [True]

    def test_one_lock_per_household(self, locks):
        assert locks.lock_for(1) is locks.lock_for(1)
        assert locks.lock_for(1) is not locks.lock_for(2)


class TestSequenceCounters:

    def test_household_ids_are_monotonic(self, database):
        drawn = []
        for _ in range(3):
            with database.session_scope() as session:
                drawn.append(SequenceService(session).next_household_id())

        assert drawn == [1, 2, 3]
        with database.read_session() as session:
            counter = session.get(SequenceCounter, (GLOBAL_SCOPE, SequenceService.HOUSEHOLD))
            assert counter.next_value == 4

    def test_rolled_back_expense_id_is_not_consumed(self, database, locks):
        with household_scope(database, locks, 1) as session:
            SequenceService(session).initialize(1)

        with pytest.raises(InvalidAmountError):
            with household_scope(database, locks, 1) as session:
                assert SequenceService(session).next_value(1, SequenceService.EXPENSE) == 1
                raise InvalidAmountError(0)

        with household_scope(database, locks, 1) as session:
            assert SequenceService(session).next_value(1, SequenceService.EXPENSE) == 1

    def test_counters_are_per_household(self, database, locks):
        for household_id in (1, 2):
            with household_scope(database, locks, household_id) as session:
                SequenceService(session).initialize(household_id)

        with household_scope(database, locks, 1) as session:
            sequences = SequenceService(session)
            assert sequences.next_value(1, SequenceService.SETTLEMENT) == 1
            assert sequences.next_value(1, SequenceService.SETTLEMENT) == 2
        with household_scope(database, locks, 2) as session:
            assert SequenceService(session).next_value(2, SequenceService.SETTLEMENT) == 1

    def test_missing_counter_raises_household_not_found(self, database, locks):
        with pytest.raises(HouseholdNotFoundError):
            with household_scope(database, locks, 9) as session:
                SequenceService(session).next_value(9, SequenceService.EXPENSE)

"""
HouseholdLedger -- the public operation surface of the ledger.

Responsibility:
    Wires configuration, the ledger database, the per-household lock
    registry, the kernel services and the expense ledger together, and exposes every
    operation a host may call.  Each mutating call runs inside one
    household_scope(): serialized per household, committed whole or not
    at all.

Architecture position:
    Services -- the outermost layer.  Hosts (RPC handlers, schedulers,
    tests) talk only to this class.  Caller identities and ticks are
    supplied by the host and trusted as given.

Invariants enforced:
    ATOMIC_OPERATION -- every mutation validates before writing and runs in
        one session scope.
    HOUSEHOLD_ISOLATION -- the lock and session scope are bound to a single
        household id; different households proceed in parallel.
    Read functions are total: they never raise for unknown keys.

Usage:
    ledger = HouseholdLedger()
    household_id = ledger.create_household("Flat 4B", "alice", current_tick=1)
    ledger.add_member(household_id, "bob", caller="alice", current_tick=2)
    ledger.add_expense(
        household_id, "Groceries", 300, payer="alice",
        expense_type="one-time", recurrence_period=0,
        allocation_type="equal", custom_allocations=None,
        caller="alice", current_tick=3,
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from uuid import uuid4

from sqlalchemy.orm import Session

from household_config import LedgerSettings, get_active_config
from household_engines.allocation import AllocationEngine
from household_kernel.db.engine import LedgerDatabase, household_read_scope, household_scope
from household_kernel.db.locks import HouseholdLockRegistry
from household_kernel.domain.records import (
    AllocationType,
    BalanceEntry,
    Expense,
    ExpenseType,
    Household,
    Member,
    Settlement,
    is_record_id,
)
from household_kernel.exceptions import HouseholdNotFoundError
from household_kernel.logging_config import LogContext, get_logger
from household_kernel.selectors.ledger_selector import LedgerSelector
from household_kernel.services.household_registry import HouseholdRegistry
from household_kernel.services.sequence_service import SequenceService
from household_kernel.services.settlement_manager import SettlementManager
from household_services.expense_ledger import ExpenseLedger

logger = get_logger("services.household_ledger")


class HouseholdLedger:
    """
    Shared-expense ledger for many independent households.

    Contract:
        Mutating methods either return their result with every write
        committed, or raise a HouseholdLedgerError subclass with prior state
        unchanged.
    """

    def __init__(
        self,
        settings: LedgerSettings | None = None,
        *,
        database: LedgerDatabase | None = None,
        locks: HouseholdLockRegistry | None = None,
        engine: AllocationEngine | None = None,
    ):
        self.settings = settings or get_active_config()
        self.database = database or LedgerDatabase(
            self.settings.database_url, echo=self.settings.database_echo
        )
        self.locks = locks or HouseholdLockRegistry()
        self.engine = engine or AllocationEngine()

    # -- wiring ---------------------------------------------------------------

    def _registry(self, session: Session) -> HouseholdRegistry:
        return HouseholdRegistry(
            session,
            max_members=self.settings.max_members,
            rebalance_on_join=self.settings.rebalance_on_join,
            restore_allocation_write=self.settings.restore_allocation_write,
        )

    def _scope(self, household_id: int):
        if not is_record_id(household_id):
            raise HouseholdNotFoundError(household_id)
        return household_scope(self.database, self.locks, household_id)

    def _bind(self, household_id: int | None, caller: str | None, operation: str):
        return LogContext.bind(
            correlation_id=uuid4().hex,
            household_id=str(household_id) if household_id is not None else None,
            actor_id=caller,
            operation=operation,
        )

    # -- household registry ---------------------------------------------------

    def create_household(self, name: str, caller: str, current_tick: int) -> int:
        with self.database.session_scope() as session:
            household_id = SequenceService(session).next_household_id()
        with self._bind(household_id, caller, "create_household"):
            with household_scope(self.database, self.locks, household_id) as session:
                self._registry(session).create_household(household_id, name, caller, current_tick)
        return household_id

    def add_member(
        self,
        household_id: int,
        new_member: str,
        caller: str,
        current_tick: int,
    ) -> None:
        with self._bind(household_id, caller, "add_member"):
            with self._scope(household_id) as session:
                self._registry(session).add_member(household_id, new_member, caller, current_tick)

    def update_member_allocation(
        self,
        household_id: int,
        member: str,
        new_bps: int,
        caller: str,
    ) -> None:
        with self._bind(household_id, caller, "update_member_allocation"):
            with self._scope(household_id) as session:
                self._registry(session).update_member_allocation(household_id, member, new_bps, caller)

    def remove_member(self, household_id: int, member: str, caller: str) -> None:
        with self._bind(household_id, caller, "remove_member"):
            with self._scope(household_id) as session:
                self._registry(session).remove_member(household_id, member, caller)

    def deactivate_household(self, household_id: int, caller: str) -> None:
        with self._bind(household_id, caller, "deactivate_household"):
            with self._scope(household_id) as session:
                self._registry(session).deactivate_household(household_id, caller)

    # -- expenses ---------------------------------------------------------------

    def add_expense(
        self,
        household_id: int,
        name: str,
        amount: int,
        payer: str,
        expense_type: ExpenseType | str,
        recurrence_period: int,
        allocation_type: AllocationType | str,
        custom_allocations: Mapping[str, int] | None,
        caller: str,
        current_tick: int,
    ) -> int:
        with self._bind(household_id, caller, "add_expense"):
            with self._scope(household_id) as session:
                expense = ExpenseLedger(session, self._registry(session), self.engine).add_expense(
                    household_id,
                    name,
                    amount,
                    payer,
                    expense_type,
                    recurrence_period,
                    allocation_type,
                    custom_allocations,
                    caller,
                    current_tick,
                )
        return expense.expense_id

    def mark_expense_settled(self, household_id: int, expense_id: int, caller: str) -> None:
        with self._bind(household_id, caller, "mark_expense_settled"):
            with self._scope(household_id) as session:
                ExpenseLedger(session, self._registry(session), self.engine).mark_expense_settled(
                    household_id, expense_id, caller
                )

    # -- settlements --------------------------------------------------------------

    def _settlements(self, session: Session) -> SettlementManager:
        return SettlementManager(
            session,
            self._registry(session),
            tx_reference_size=self.settings.tx_reference_size,
        )

    def settle_payment(
        self,
        household_id: int,
        to: str,
        amount: int,
        caller: str,
        current_tick: int,
    ) -> int:
        """The caller pays down what they owe ``to``."""
        with self._bind(household_id, caller, "settle_payment"):
            with self._scope(household_id) as session:
                settlement = self._settlements(session).settle_payment(
                    household_id, caller, to, amount, current_tick
                )
        return settlement.settlement_id

    def record_external_payment(
        self,
        household_id: int,
        settlement_id: int,
        tx_reference: bytes,
    ) -> None:
        with self._bind(household_id, None, "record_external_payment"):
            with self._scope(household_id) as session:
                self._settlements(session).record_external_payment(
                    household_id, settlement_id, tx_reference
                )

    # -- reads ------------------------------------------------------------------

    def _read(self, household_id: int, query, default, *record_ids: int):
        if not all(is_record_id(key) for key in (household_id, *record_ids)):
            return default
        with household_read_scope(self.database, self.locks, household_id) as session:
            return query(LedgerSelector(session))

    def household_exists(self, household_id: int) -> bool:
        return self._read(household_id, lambda s: s.household_exists(household_id), False)

    def get_household(self, household_id: int) -> Household | None:
        return self._read(household_id, lambda s: s.get_household(household_id), None)

    def get_household_member(self, household_id: int, member: str) -> Member | None:
        return self._read(household_id, lambda s: s.get_member(household_id, member), None)

    def get_household_members(self, household_id: int) -> tuple[Member, ...]:
        return self._read(household_id, lambda s: s.get_members(household_id), ())

    def get_expense(self, household_id: int, expense_id: int) -> Expense | None:
        return self._read(
            household_id, lambda s: s.get_expense(household_id, expense_id), None, expense_id
        )

    def list_expenses(self, household_id: int) -> tuple[Expense, ...]:
        return self._read(household_id, lambda s: s.list_expenses(household_id), ())

    def get_expense_allocation(self, household_id: int, expense_id: int, member: str) -> int:
        return self._read(
            household_id,
            lambda s: s.get_expense_allocation(household_id, expense_id, member),
            0,
            expense_id,
        )

    def get_expense_allocations(self, household_id: int, expense_id: int) -> dict[str, int]:
        """Every custom bps row of ``expense_id``; empty for equal splits."""
        return self._read(
            household_id,
            lambda s: s.get_expense_allocations(household_id, expense_id),
            {},
            expense_id,
        )

    def get_member_balance(self, household_id: int, debtor: str, creditor: str) -> int:
        return self._read(household_id, lambda s: s.get_balance(household_id, debtor, creditor), 0)

    def get_household_balances(self, household_id: int) -> tuple[BalanceEntry, ...]:
        return self._read(household_id, lambda s: s.balances(household_id), ())

    def get_net_position(self, household_id: int, member: str) -> int:
        return self._read(household_id, lambda s: s.net_position(household_id, member), 0)

    def get_settlement(self, household_id: int, settlement_id: int) -> Settlement | None:
        return self._read(
            household_id,
            lambda s: s.get_settlement(household_id, settlement_id),
            None,
            settlement_id,
        )

    def list_settlements(self, household_id: int) -> tuple[Settlement, ...]:
        return self._read(household_id, lambda s: s.list_settlements(household_id), ())

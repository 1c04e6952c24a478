"""
Module: household_kernel.selectors.ledger_selector
Responsibility: Read-only queries over one household: the household record,
    its members, expenses and their custom allocations, directed balances,
    net positions and settlements.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/base.py.  MUST NOT import from services/ or outer
    layers.

Invariants enforced:
    - Every query is total: unknown households, members, expenses or
      settlements yield None, an empty tuple or 0, never an exception.
    - Listings are deterministic: expenses and settlements by id, balances
      by (debtor, creditor), members in insertion order.
"""

from __future__ import annotations

from sqlalchemy import func, select

from household_kernel.domain.records import (
    BalanceEntry,
    Expense,
    Household,
    Member,
    Settlement,
)
from household_kernel.models.balance import BalanceModel
from household_kernel.models.expense import ExpenseAllocationModel, ExpenseModel
from household_kernel.models.household import HouseholdModel, MemberModel
from household_kernel.models.settlement import SettlementModel
from household_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector):
    """Read access to the rows of a single household."""

    # -- households & members -----------------------------------------------

    def get_household(self, household_id: int) -> Household | None:
        row = self.session.get(HouseholdModel, household_id)
        return row.to_domain() if row is not None else None

    def household_exists(self, household_id: int) -> bool:
        return self.session.get(HouseholdModel, household_id) is not None

    def get_member(self, household_id: int, member: str) -> Member | None:
        row = self.session.get(MemberModel, (household_id, member))
        return row.to_domain() if row is not None else None

    def get_members(self, household_id: int) -> tuple[Member, ...]:
        """Every member ever added, active or not, in insertion order."""
        rows = self.session.execute(
            select(MemberModel)
            .where(MemberModel.household_id == household_id)
            .order_by(MemberModel.position)
        ).scalars()
        return tuple(row.to_domain() for row in rows)

    # -- expenses -------------------------------------------------------------

    def get_expense(self, household_id: int, expense_id: int) -> Expense | None:
        row = self.session.get(ExpenseModel, (household_id, expense_id))
        return row.to_domain() if row is not None else None

    def list_expenses(self, household_id: int) -> tuple[Expense, ...]:
        rows = self.session.execute(
            select(ExpenseModel)
            .where(ExpenseModel.household_id == household_id)
            .order_by(ExpenseModel.expense_id)
        ).scalars()
        return tuple(row.to_domain() for row in rows)

    def get_expense_allocation(self, household_id: int, expense_id: int, member: str) -> int:
        """Custom bps of ``member`` on ``expense_id``; 0 when absent."""
        row = self.session.get(ExpenseAllocationModel, (household_id, expense_id, member))
        return row.bps if row is not None else 0

    def get_expense_allocations(self, household_id: int, expense_id: int) -> dict[str, int]:
        rows = self.session.execute(
            select(ExpenseAllocationModel.member, ExpenseAllocationModel.bps)
            .where(
                ExpenseAllocationModel.household_id == household_id,
                ExpenseAllocationModel.expense_id == expense_id,
            )
            .order_by(ExpenseAllocationModel.member)
        ).all()
        return {member: bps for member, bps in rows}

    # -- balances -------------------------------------------------------------

    def get_balance(self, household_id: int, debtor: str, creditor: str) -> int:
        row = self.session.get(BalanceModel, (household_id, debtor, creditor))
        return row.amount if row is not None else 0

    def balances(self, household_id: int) -> tuple[BalanceEntry, ...]:
        """Every non-zero directed entry, sorted by (debtor, creditor)."""
        rows = self.session.execute(
            select(BalanceModel)
            .where(BalanceModel.household_id == household_id)
            .order_by(BalanceModel.debtor, BalanceModel.creditor)
        ).scalars()
        return tuple(row.to_domain() for row in rows)

    def net_position(self, household_id: int, member: str) -> int:
        """What others owe ``member`` minus what ``member`` owes others."""
        owed_to = self.session.execute(
            select(func.coalesce(func.sum(BalanceModel.amount), 0))
            .where(BalanceModel.household_id == household_id, BalanceModel.creditor == member)
        ).scalar_one()
        owed_by = self.session.execute(
            select(func.coalesce(func.sum(BalanceModel.amount), 0))
            .where(BalanceModel.household_id == household_id, BalanceModel.debtor == member)
        ).scalar_one()
        return int(owed_to) - int(owed_by)

    # -- settlements ----------------------------------------------------------

    def get_settlement(self, household_id: int, settlement_id: int) -> Settlement | None:
        row = self.session.get(SettlementModel, (household_id, settlement_id))
        return row.to_domain() if row is not None else None

    def list_settlements(self, household_id: int) -> tuple[Settlement, ...]:
        rows = self.session.execute(
            select(SettlementModel)
            .where(SettlementModel.household_id == household_id)
            .order_by(SettlementModel.settlement_id)
        ).scalars()
        return tuple(row.to_domain() for row in rows)

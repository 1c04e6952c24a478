"""
Module: household_kernel.models.expense
Responsibility: ORM persistence for expenses and the custom basis-point
    rows stored with custom-split expenses.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - An expense row is immutable after insert except ``settled``.
    - ALLOCATION_SUM -- custom rows of one expense sum to 10000; checked by
      the allocation engine before any row is added.
"""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from household_kernel.db.base import Base
from household_kernel.domain.records import AllocationType, Expense, ExpenseType


class ExpenseModel(Base):
    """A recorded expense event, keyed by its per-household id."""

    __tablename__ = "expenses"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
        CheckConstraint("recurrence_period >= 0", name="ck_expense_recurrence"),
    )

    household_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    expense_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[int] = mapped_column(nullable=False)
    payer: Mapped[str] = mapped_column(String, nullable=False)
    expense_type: Mapped[str] = mapped_column(String(20), nullable=False)
    recurrence_period: Mapped[int] = mapped_column(nullable=False)
    created_tick: Mapped[int] = mapped_column(nullable=False)
    allocation_type: Mapped[str] = mapped_column(String(20), nullable=False)
    unallocated_remainder: Mapped[int] = mapped_column(nullable=False, default=0)
    settled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Expense {self.household_id}/{self.expense_id} {self.amount} by {self.payer}>"

    @classmethod
    def from_domain(cls, expense: Expense) -> ExpenseModel:
        return cls(
            household_id=expense.household_id,
            expense_id=expense.expense_id,
            name=expense.name,
            amount=expense.amount,
            payer=expense.payer,
            expense_type=expense.expense_type.value,
            recurrence_period=expense.recurrence_period,
            created_tick=expense.created_tick,
            allocation_type=expense.allocation_type.value,
            unallocated_remainder=expense.unallocated_remainder,
            settled=expense.settled,
        )

    def to_domain(self) -> Expense:
        return Expense(
            household_id=self.household_id,
            expense_id=self.expense_id,
            name=self.name,
            amount=self.amount,
            payer=self.payer,
            expense_type=ExpenseType(self.expense_type),
            recurrence_period=self.recurrence_period,
            created_tick=self.created_tick,
            allocation_type=AllocationType(self.allocation_type),
            unallocated_remainder=self.unallocated_remainder,
            settled=self.settled,
        )


class ExpenseAllocationModel(Base):
    """One member's basis points on one custom-split expense."""

    __tablename__ = "expense_allocations"

    __table_args__ = (
        CheckConstraint("bps >= 0 AND bps <= 10000", name="ck_expense_allocation_bps"),
    )

    household_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    expense_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    member: Mapped[str] = mapped_column(String, primary_key=True)
    bps: Mapped[int] = mapped_column(nullable=False)

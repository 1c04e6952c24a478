"""
Module: household_kernel.models.balance
Responsibility: ORM persistence for directed balance entries.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.  Written exclusively by BalanceStore.

Invariants enforced:
    NON_NEGATIVE_BALANCE -- stored amounts are strictly positive; an entry
        that reaches zero is deleted, so a missing row means 0.
    DIRECTED_BALANCES -- (debtor, creditor) and (creditor, debtor) are
        different primary keys.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from household_kernel.db.base import Base
from household_kernel.domain.records import BalanceEntry


class BalanceModel(Base):
    """``debtor`` owes ``creditor`` ``amount`` inside one household."""

    __tablename__ = "balances"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_balance_amount_positive"),
        CheckConstraint("debtor <> creditor", name="ck_balance_distinct_parties"),
    )

    household_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    debtor: Mapped[str] = mapped_column(String, primary_key=True)
    creditor: Mapped[str] = mapped_column(String, primary_key=True)
    amount: Mapped[int] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<Balance {self.debtor}->{self.creditor} {self.amount}@{self.household_id}>"

    def to_domain(self) -> BalanceEntry:
        return BalanceEntry(
            household_id=self.household_id,
            debtor=self.debtor,
            creditor=self.creditor,
            amount=self.amount,
        )

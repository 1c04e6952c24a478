"""
Module: household_kernel.models.settlement
Responsibility: ORM persistence for the append-only settlement trail.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - Settlement rows are never deleted.  Only ``tx_reference`` may change,
      once, from NULL to a value (SettlementManager checks this).
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from household_kernel.db.base import Base
from household_kernel.domain.records import Settlement


class SettlementModel(Base):
    """An audited reduction of one balance entry."""

    __tablename__ = "settlements"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_settlement_amount_positive"),
    )

    household_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    settlement_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    from_member: Mapped[str] = mapped_column(String, nullable=False)
    to_member: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[int] = mapped_column(nullable=False)
    tick: Mapped[int] = mapped_column(nullable=False)
    tx_reference: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Settlement {self.household_id}/{self.settlement_id} "
            f"{self.from_member}->{self.to_member} {self.amount}>"
        )

    @property
    def has_external_reference(self) -> bool:
        return self.tx_reference is not None

    def to_domain(self) -> Settlement:
        return Settlement(
            household_id=self.household_id,
            settlement_id=self.settlement_id,
            from_member=self.from_member,
            to_member=self.to_member,
            amount=self.amount,
            tick=self.tick,
            tx_reference=self.tx_reference,
        )

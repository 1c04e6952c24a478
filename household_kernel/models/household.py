"""
Module: household_kernel.models.household
Responsibility: ORM persistence for households and their members.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.  MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    MEMBER_CAP -- not at the ORM level; HouseholdRegistry checks the member
        count before inserting.  ``position`` records insertion order, which
        is display order and never reused.
    The creator is immutable once the household row exists.
"""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from household_kernel.db.base import Base
from household_kernel.domain.records import Household, Member


class HouseholdModel(Base):
    """An isolated group of members sharing one balance ledger."""

    __tablename__ = "households"

    household_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    creator: Mapped[str] = mapped_column(String, nullable=False)
    created_tick: Mapped[int] = mapped_column(nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Household {self.household_id} {self.name!r} creator={self.creator}>"

    def is_creator(self, identity: str) -> bool:
        return identity == self.creator

    def to_domain(self) -> Household:
        return Household(
            household_id=self.household_id,
            name=self.name,
            creator=self.creator,
            created_tick=self.created_tick,
            active=self.active,
        )


class MemberModel(Base):
    """
    Membership of one identity in one household.

    Removed members keep their row (``active`` False) and their position.
    """

    __tablename__ = "household_members"

    __table_args__ = (
        UniqueConstraint("household_id", "position", name="uq_member_position"),
        CheckConstraint(
            "allocation_bps >= 0 AND allocation_bps <= 10000",
            name="ck_member_allocation_bps",
        ),
        Index("idx_member_household", "household_id"),
    )

    household_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    member: Mapped[str] = mapped_column(String, primary_key=True)
    position: Mapped[int] = mapped_column(nullable=False)
    joined_tick: Mapped[int] = mapped_column(nullable=False)
    allocation_bps: Mapped[int] = mapped_column(nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        state = "active" if self.active else "removed"
        return f"<Member {self.member}@{self.household_id} {self.allocation_bps}bps {state}>"

    def to_domain(self) -> Member:
        return Member(
            household_id=self.household_id,
            member=self.member,
            joined_tick=self.joined_tick,
            allocation_bps=self.allocation_bps,
            active=self.active,
        )

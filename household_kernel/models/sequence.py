"""
Module: household_kernel.models.sequence
Responsibility: Counter rows behind every id the ledger hands out.
Architecture position: Kernel > Models.  Read and written only by
    SequenceService.

Invariants enforced:
    SEQUENCE_MONOTONICITY -- ``next_value`` only grows.  Household ids live
    under household_id 0; expense and settlement ids under their household.
"""

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from household_kernel.db.base import Base

# household_id of the counters that are not scoped to a household.
GLOBAL_SCOPE = 0


class SequenceCounter(Base):
    """One named sequence inside one scope."""

    __tablename__ = "sequence_counters"

    __table_args__ = (
        CheckConstraint("next_value > 0", name="ck_sequence_positive"),
    )

    household_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    next_value: Mapped[int] = mapped_column(nullable=False, default=1)

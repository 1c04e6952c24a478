"""
Records -- Immutable domain records for the household ledger.

Responsibility:
    Defines the records the ledger hands to its callers: Household,
    Member, Expense, Settlement and BalanceEntry, plus the ExpenseType /
    AllocationType enumerations.  ORM models convert to these with
    ``to_domain()``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by services, selectors and engines.

Invariants enforced:
    - Records are frozen snapshots; mutation happens on the ORM rows inside
      a session, never on a record.
    - Household ownership: every record except Household carries the
      ``household_id`` that owns it.

Failure modes:
    - ``InvalidExpenseTypeError`` from ``ExpenseType.parse`` /
      ``AllocationType.parse`` on unknown values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from household_kernel.exceptions import InvalidExpenseTypeError
from household_kernel.invariants import MAX_BIGINT


def is_record_id(value: object) -> bool:
    """True for values usable as a household, expense or settlement id."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_BIGINT


class ExpenseType(str, Enum):
    """Whether an expense happens once or recurs on an external schedule."""

    ONE_TIME = "one-time"
    RECURRING = "recurring"

    @classmethod
    def parse(cls, value: ExpenseType | str) -> ExpenseType:
        try:
            return cls(value)
        except ValueError:
            raise InvalidExpenseTypeError("expense_type", value) from None


class AllocationType(str, Enum):
    """How an expense amount is split across members."""

    EQUAL = "equal"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: AllocationType | str) -> AllocationType:
        try:
            return cls(value)
        except ValueError:
            raise InvalidExpenseTypeError("allocation_type", value) from None


@dataclass(frozen=True)
class Household:
    """An isolated group of members sharing one balance ledger."""

    household_id: int
    name: str
    creator: str
    created_tick: int
    active: bool = True

    def is_creator(self, identity: str) -> bool:
        return identity == self.creator


@dataclass(frozen=True)
class Member:
    """Membership of one identity in one household."""

    household_id: int
    member: str
    joined_tick: int
    allocation_bps: int
    active: bool = True


@dataclass(frozen=True)
class Expense:
    """
    A recorded expense event.

    Immutable after creation except ``settled``. ``unallocated_remainder``
    is the part of ``amount`` that the split assigned to nobody; the payer
    absorbs it.
    """

    household_id: int
    expense_id: int
    name: str
    amount: int
    payer: str
    expense_type: ExpenseType
    recurrence_period: int
    created_tick: int
    allocation_type: AllocationType
    unallocated_remainder: int = 0
    settled: bool = False


@dataclass(frozen=True)
class Settlement:
    """An audited reduction of one balance entry."""

    household_id: int
    settlement_id: int
    from_member: str
    to_member: str
    amount: int
    tick: int
    tx_reference: bytes | None = None

    @property
    def has_external_reference(self) -> bool:
        return self.tx_reference is not None



@dataclass(frozen=True)
class BalanceEntry:
    """Read model for one non-zero directed balance: debtor owes creditor."""

    household_id: int
    debtor: str
    creditor: str
    amount: int

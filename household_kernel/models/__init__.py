"""ORM models for the household ledger."""

from household_kernel.models.balance import BalanceModel
from household_kernel.models.expense import ExpenseAllocationModel, ExpenseModel
from household_kernel.models.household import HouseholdModel, MemberModel
from household_kernel.models.sequence import GLOBAL_SCOPE, SequenceCounter
from household_kernel.models.settlement import SettlementModel

__all__ = [
    "BalanceModel",
    "ExpenseAllocationModel",
    "ExpenseModel",
    "GLOBAL_SCOPE",
    "HouseholdModel",
    "MemberModel",
    "SequenceCounter",
    "SettlementModel",
]

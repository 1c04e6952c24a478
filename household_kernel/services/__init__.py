"""Services for the household kernel (write side)."""

from household_kernel.services.balance_store import BalanceStore
from household_kernel.services.household_registry import HouseholdRegistry
from household_kernel.services.sequence_service import SequenceService
from household_kernel.services.settlement_manager import SettlementManager

__all__ = [
    "BalanceStore",
    "HouseholdRegistry",
    "SequenceService",
    "SettlementManager",
]

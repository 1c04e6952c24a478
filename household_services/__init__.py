"""
household_services -- Package init and public API.

Responsibility:
    Stateful orchestration that composes the pure allocation engine
    (household_engines/) with the kernel's database, locks and services.

Architecture position:
    Services -- orchestration over engines + kernel.

    Dependency direction (enforced by tests/architecture/test_kernel_boundary.py):
        household_services/ -> household_engines/  (allowed)
        household_services/ -> household_kernel/   (allowed)
        household_services/ -> household_config/   (allowed)
        household_engines/  -> household_services/ (FORBIDDEN)
        household_kernel/   -> household_services/ (FORBIDDEN)
"""

from household_services.expense_ledger import ExpenseLedger
from household_services.household_ledger import HouseholdLedger

__all__ = [
    "ExpenseLedger",
    "HouseholdLedger",
]

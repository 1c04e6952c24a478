"""
Pure domain layer.

This module contains immutable records and enumerations with NO
dependencies on:
- The database or its sessions
- Locks or threads
- I/O

All domain objects are immutable and deterministic.
"""

from household_kernel.domain.records import (
    AllocationType,
    BalanceEntry,
    Expense,
    ExpenseType,
    Household,
    Member,
    Settlement,
    is_record_id,
)

__all__ = [
    "AllocationType",
    "BalanceEntry",
    "Expense",
    "ExpenseType",
    "Household",
    "Member",
    "Settlement",
    "is_record_id",
]

"""Selectors for the household kernel (read side)."""

from household_kernel.selectors.ledger_selector import LedgerSelector

__all__ = [
    "LedgerSelector",
]

"""
Household Ledger Kernel

A shared-expense ledger for small fixed-membership households with:
- Proportional expense allocation in basis points
- Directed pairwise debt balances that never go negative
- Atomic, per-household serialized operations
- Auditable settlements with optional external payment references
"""

__version__ = "0.1.0"

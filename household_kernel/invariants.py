"""
Kernel Invariants Contract.

These invariants are structural law. They are enforced by the balance store,
the database session scopes and the per-household lock registry. No configuration
setting may override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across BalanceStore, ExpenseLedger,
SettlementManager, SequenceService and household_scope().
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    NON_NEGATIVE_BALANCE = "non_negative_balance"
    """Every balance entry is a non-negative integer. A decrease that would
    underflow raises InsufficientFundsError and writes nothing."""

    DIRECTED_BALANCES = "directed_balances"
    """(debtor, creditor) and (creditor, debtor) are independent entries.
    The ledger never nets them against each other."""

    ALLOCATION_SUM = "allocation_sum"
    """Custom expense allocations sum to exactly 10000 basis points."""

    ATOMIC_OPERATION = "atomic_operation"
    """Every top-level operation commits all of its writes or none of them.
    Enforced by household_scope() (commit or rollback of one session)."""

    SEQUENCE_MONOTONICITY = "sequence_monotonicity"
    """Household, expense and settlement ids are strictly monotonic and never
    reused. Enforced by SequenceService and its counter rows."""

    HOUSEHOLD_ISOLATION = "household_isolation"
    """No entity references another household. Operations on one household
    are serialized; operations on different households never contend."""

    MEMBER_CAP = "member_cap"
    """The member list never exceeds the configured maximum."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "household_services",
    "household_config",
    "household_engines",
)

# Fixed-point denominator for allocation weights.
BPS_DENOMINATOR = 10_000

# Largest amount, balance or id the ledger stores (an SQL BIGINT).
MAX_BIGINT = 2**63 - 1

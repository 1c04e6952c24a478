"""
Allocation weights in basis points.

A member's weight is a display share of the household expressed in bps.
It is independent of the money split of any single expense:
floor(10000 / n) and floor(amount / n) round at different boundaries.
"""

from household_kernel.exceptions import InvalidParameterError
from household_kernel.invariants import BPS_DENOMINATOR


def equal_weight_bps(member_count: int) -> int:
    """Display weight of one member in an equal split: floor(10000 / n)."""
    if member_count <= 0:
        raise InvalidParameterError("member_count", "must be positive")
    return BPS_DENOMINATOR // member_count


def unassigned_bps(member_count: int) -> int:
    """Basis points an equal split of ``member_count`` leaves unassigned."""
    return BPS_DENOMINATOR - equal_weight_bps(member_count) * member_count

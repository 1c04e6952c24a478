"""
Module: household_engines.allocation
Responsibility:
    Split an expense amount across household members using the "equal" or
    "custom" (basis-point weighted) policy, and compute the display weight
    of an equal split.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import household_kernel.domain, household_kernel.exceptions,
    household_kernel.invariants and household_kernel.logging_config.

Invariants enforced:
    - Conservation: ``sum(line.share) + remainder == amount`` for every result.
    - Floor rounding: every share is rounded down; what is left over is
      reported as ``remainder`` and never handed to a member.
    - ALLOCATION_SUM: custom basis points sum to exactly 10000.
    - The display weight ``equal_weight_bps(n)`` is computed from the bps
      denominator alone and is never reused for the money split.

Failure modes:
    - InvalidAmountError if the amount is not a positive integer.
    - InvalidAllocationError if custom basis points are out of range,
      empty, or do not sum to 10000.
    - InvalidParameterError if the member set is empty or has duplicates.

Usage:
    from household_engines.allocation import AllocationEngine
    from household_kernel.domain import AllocationType

    engine = AllocationEngine()
    result = engine.allocate(
        amount=300,
        policy=AllocationType.EQUAL,
        members=["alice", "bob", "carol"],
    )
    result.share_of("bob")  # 100
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from household_engines.tracer import traced_engine
from household_kernel.domain.records import AllocationType
from household_kernel.domain.weights import equal_weight_bps
from household_kernel.exceptions import (
    InvalidAllocationError,
    InvalidAmountError,
    InvalidParameterError,
)
from household_kernel.invariants import BPS_DENOMINATOR
from household_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


@dataclass(frozen=True)
class AllocationLine:
    """
    Result of allocation to a single member.

    ``bps`` is the member's custom weight, or None for an equal split.
    """

    member: str
    share: int
    bps: int | None = None


@dataclass(frozen=True)
class AllocationResult:
    """
    Complete allocation result.

    Contract:
        Frozen dataclass summarising one split, lines in input order.
    Guarantees:
        - ``total_allocated + remainder == amount``.
    Non-goals:
        - Does not decide who absorbs ``remainder``; the expense ledger does.
    """

    amount: int
    policy: AllocationType
    lines: tuple[AllocationLine, ...]
    remainder: int

    @property
    def total_allocated(self) -> int:
        return sum(line.share for line in self.lines)

    @property
    def members(self) -> tuple[str, ...]:
        return tuple(line.member for line in self.lines)

    def share_of(self, member: str) -> int:
        """Share assigned to ``member``; 0 if the member is not in the split."""
        for line in self.lines:
            if line.member == member:
                return line.share
        return 0

    def as_mapping(self) -> dict[str, int]:
        return {line.member: line.share for line in self.lines}


def validate_custom_allocation(custom_bps: Mapping[str, int]) -> int:
    """
    Check a custom basis-point map before anything is written.

    Postconditions:
        Returns the total (always BPS_DENOMINATOR on success).
    Raises:
        InvalidAllocationError on empty maps, non-integer or out-of-range
        entries, or a total other than BPS_DENOMINATOR.
    """
    if not custom_bps:
        raise InvalidAllocationError("custom allocation is empty", total_bps=0)

    for member, bps in custom_bps.items():
        if isinstance(bps, bool) or not isinstance(bps, int):
            raise InvalidAllocationError(f"bps for {member} is not an integer")
        if bps < 0 or bps > BPS_DENOMINATOR:
            raise InvalidAllocationError(
                f"bps for {member} must be within 0..{BPS_DENOMINATOR}, got {bps}"
            )

    total = sum(custom_bps.values())
    if total != BPS_DENOMINATOR:
        raise InvalidAllocationError(
            f"custom allocation sums to {total} bps, expected {BPS_DENOMINATOR}",
            total_bps=total,
        )
    return total


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount)


class AllocationEngine:
    """
    Split expense amounts across members.

    Contract:
        Pure functions with deterministic floor rounding.
        No I/O, no database access.
    Guarantees:
        - Equal: each member gets ``amount // n``; ``amount % n`` is the
          remainder.
        - Custom: each member gets ``amount * bps // 10000``; the remainder
          is whatever the floors leave over.
    Non-goals:
        - Does not know who the payer is or which members are active;
          callers pass the member set to split across.
    """

    @traced_engine("allocation", "1.0", fingerprint_fields=("amount", "policy", "members", "custom_bps"))
    def allocate(
        self,
        *,
        amount: int,
        policy: AllocationType,
        members: Sequence[str] = (),
        custom_bps: Mapping[str, int] | None = None,
    ) -> AllocationResult:
        """
        Allocate ``amount`` using ``policy``.

        Args:
            amount: Positive integer in the smallest currency unit.
            policy: EQUAL splits across ``members``; CUSTOM splits across
                the keys of ``custom_bps``.
            members: Member set for the equal policy, in display order.
            custom_bps: member -> basis points for the custom policy.

        Returns:
            AllocationResult with one line per member.
        """
        _check_amount(amount)

        match AllocationType.parse(policy):
            case AllocationType.EQUAL:
                result = self._allocate_equal(amount, members)
            case AllocationType.CUSTOM:
                if custom_bps is None:
                    raise InvalidAllocationError("custom policy requires basis points")
                result = self._allocate_custom(amount, custom_bps)

        logger.debug("allocation_computed", extra={
            "amount": amount,
            "policy": result.policy.value,
            "member_count": len(result.lines),
            "remainder": result.remainder,
        })
        return result

    def _allocate_equal(self, amount: int, members: Sequence[str]) -> AllocationResult:
        count = len(members)
        if count == 0:
            raise InvalidParameterError("members", "equal split needs at least one member")
        if len(set(members)) != count:
            raise InvalidParameterError("members", "duplicate member in split")

        share = amount // count
        lines = tuple(AllocationLine(member=m, share=share) for m in members)
        return AllocationResult(
            amount=amount,
            policy=AllocationType.EQUAL,
            lines=lines,
            remainder=amount - share * count,
        )

    def _allocate_custom(self, amount: int, custom_bps: Mapping[str, int]) -> AllocationResult:
        validate_custom_allocation(custom_bps)

        lines = tuple(
            AllocationLine(
                member=member,
                share=amount * bps // BPS_DENOMINATOR,
                bps=bps,
            )
            for member, bps in custom_bps.items()
        )
        allocated = sum(line.share for line in lines)
        return AllocationResult(
            amount=amount,
            policy=AllocationType.CUSTOM,
            lines=lines,
            remainder=amount - allocated,
        )


_default_engine = AllocationEngine()


def allocate(
    amount: int,
    policy: AllocationType,
    members: Sequence[str] = (),
    custom_bps: Mapping[str, int] | None = None,
) -> AllocationResult:
    """Module-level convenience wrapper around a shared AllocationEngine."""
    return _default_engine.allocate(
        amount=amount, policy=policy, members=members, custom_bps=custom_bps
    )

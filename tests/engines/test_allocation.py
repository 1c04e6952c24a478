"""
Tests for the Allocation Engine.

Covers:
- Equal split with and without remainder
- Custom basis-point split
- Custom allocation validation (sum, range, types)
- Display weights vs money split
- Error handling
"""

import pytest

from household_engines.allocation import (
    AllocationEngine,
    AllocationResult,
    allocate,
    validate_custom_allocation,
)
from household_kernel.domain.records import AllocationType
from household_kernel.domain.weights import equal_weight_bps, unassigned_bps
from household_kernel.exceptions import (
    InvalidAllocationError,
    InvalidAmountError,
    InvalidExpenseTypeError,
    InvalidParameterError,
)


class TestEqualAllocation:
    """Tests for the equal policy."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_even_split(self):
        result = self.engine.allocate(
            amount=300,
            policy=AllocationType.EQUAL,
            members=["alice", "bob", "carol"],
        )

        assert isinstance(result, AllocationResult)
        assert result.policy == AllocationType.EQUAL
        assert result.as_mapping() == {"alice": 100, "bob": 100, "carol": 100}
        assert result.remainder == 0
        assert result.total_allocated == 300

    def test_remainder_is_reported_not_assigned(self):
        """100 across 3 -> 33 each, 1 left over for nobody."""
        result = self.engine.allocate(
            amount=100,
            policy=AllocationType.EQUAL,
            members=["alice", "bob", "carol"],
        )

        assert [line.share for line in result.lines] == [33, 33, 33]
        assert result.remainder == 1
        assert result.total_allocated + result.remainder == 100

    def test_amount_smaller_than_member_count(self):
        result = self.engine.allocate(
            amount=2,
            policy=AllocationType.EQUAL,
            members=["alice", "bob", "carol"],
        )

        assert result.total_allocated == 0
        assert result.remainder == 2

    def test_lines_keep_member_order(self):
        result = self.engine.allocate(
            amount=90,
            policy=AllocationType.EQUAL,
            members=["carol", "alice", "bob"],
        )

        assert result.members == ("carol", "alice", "bob")
        assert all(line.bps is None for line in result.lines)

    def test_string_policy_is_accepted(self):
        result = self.engine.allocate(amount=10, policy="equal", members=["alice"])
        assert result.share_of("alice") == 10

    def test_share_of_unknown_member_is_zero(self):
        result = self.engine.allocate(amount=10, policy="equal", members=["alice"])
        assert result.share_of("mallory") == 0

    def test_no_members_raises(self):
        with pytest.raises(InvalidParameterError):
            self.engine.allocate(amount=10, policy=AllocationType.EQUAL, members=[])

    def test_duplicate_members_raise(self):
        with pytest.raises(InvalidParameterError):
            self.engine.allocate(
                amount=10, policy=AllocationType.EQUAL, members=["alice", "alice"]
            )


class TestCustomAllocation:
    """Tests for the custom (basis-point weighted) policy."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_weighted_split(self):
        result = self.engine.allocate(
            amount=1000,
            policy=AllocationType.CUSTOM,
            custom_bps={"alice": 5000, "bob": 3000, "carol": 2000},
        )

        assert result.as_mapping() == {"alice": 500, "bob": 300, "carol": 200}
        assert result.remainder == 0
        assert result.lines[1].bps == 3000

    def test_floor_rounding_leaves_remainder(self):
        """101 * 3333 / 10000 = 33.66 -> 33 for each of the first two."""
        result = self.engine.allocate(
            amount=101,
            policy=AllocationType.CUSTOM,
            custom_bps={"alice": 3333, "bob": 3333, "carol": 3334},
        )

        assert result.as_mapping() == {"alice": 33, "bob": 33, "carol": 33}
        assert result.remainder == 2

    def test_zero_weight_member_owes_nothing(self):
        result = self.engine.allocate(
            amount=500,
            policy=AllocationType.CUSTOM,
            custom_bps={"alice": 10000, "bob": 0},
        )

        assert result.share_of("bob") == 0
        assert result.share_of("alice") == 500

    def test_sum_below_denominator_raises(self):
        with pytest.raises(InvalidAllocationError) as exc_info:
            self.engine.allocate(
                amount=100,
                policy=AllocationType.CUSTOM,
                custom_bps={"alice": 5000, "bob": 4999},
            )
        assert exc_info.value.total_bps == 9999
        assert exc_info.value.code == "INVALID_ALLOCATION"

    def test_sum_above_denominator_raises(self):
        with pytest.raises(InvalidAllocationError):
            self.engine.allocate(
                amount=100,
                policy=AllocationType.CUSTOM,
                custom_bps={"alice": 6000, "bob": 5000},
            )

    def test_missing_basis_points_raises(self):
        with pytest.raises(InvalidAllocationError):
            self.engine.allocate(amount=100, policy=AllocationType.CUSTOM)


class TestValidateCustomAllocation:
    """Tests for the pre-mutation validation helper."""

    def test_valid_map_returns_total(self):
        assert validate_custom_allocation({"a": 2500, "b": 7500}) == 10000

    def test_empty_map_raises(self):
        with pytest.raises(InvalidAllocationError):
            validate_custom_allocation({})

    @pytest.mark.parametrize("bps", [-1, 10001])
    def test_out_of_range_entry_raises(self, bps):
        with pytest.raises(InvalidAllocationError):
            validate_custom_allocation({"a": bps, "b": 10000 - bps})

    @pytest.mark.parametrize("bps", [5000.0, "5000", True])
    def test_non_integer_entry_raises(self, bps):
        with pytest.raises(InvalidAllocationError):
            validate_custom_allocation({"a": bps, "b": 5000})


class TestAllocationErrors:
    """Amount and policy validation."""

    @pytest.mark.parametrize("amount", [0, -5, 1.5, "10", True])
    def test_invalid_amount_raises(self, amount):
        with pytest.raises(InvalidAmountError):
            allocate(amount, AllocationType.EQUAL, ["alice"])

    def test_unknown_policy_raises(self):
        with pytest.raises(InvalidExpenseTypeError):
            allocate(100, "weighted", ["alice"])


class TestEqualWeights:
    """Display weights are independent of the money split."""

    @pytest.mark.parametrize(
        "count,expected",
        [(1, 10000), (2, 5000), (3, 3333), (7, 1428), (20, 500)],
    )
    def test_equal_weight_bps(self, count, expected):
        assert equal_weight_bps(count) == expected

    def test_unassigned_bps_is_rounding_gap(self):
        assert unassigned_bps(3) == 1
        assert unassigned_bps(4) == 0
        assert unassigned_bps(7) == 4

    def test_weight_and_money_split_round_differently(self):
        """floor(10000/3) * 300 / 10000 != floor(300/3)."""
        weight = equal_weight_bps(3)
        via_weight = 300 * weight // 10000
        result = allocate(300, AllocationType.EQUAL, ["a", "b", "c"])

        assert via_weight == 99
        assert result.share_of("a") == 100

    def test_zero_members_raises(self):
        with pytest.raises(InvalidParameterError):
            equal_weight_bps(0)

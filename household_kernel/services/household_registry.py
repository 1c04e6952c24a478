"""
HouseholdRegistry -- household identity, membership and allocation weights.

Responsibility:
    Creates households, manages the ordered member list and each member's
    allocation weight, and answers the membership / authorization questions
    every other service asks before writing.

Architecture position:
    Kernel > Services -- imperative shell.  Called by the HouseholdLedger
    facade; used by ExpenseLedger and SettlementManager for precondition
    checks.

Invariants enforced:
    MEMBER_CAP -- the member list never grows past ``max_members``.
    HOUSEHOLD_ISOLATION -- every row written carries the household id.
    Authorization is a plain equality check against the immutable creator.

Failure modes:
    - HouseholdNotFoundError, HouseholdInactiveError
    - NotAuthorizedError when the caller is not the creator
    - AlreadyMemberError, CapacityExceededError, UserNotInHouseholdError
    - InvalidAllocationError for weights outside 0..10000
    - InvalidParameterError when removing the creator

Known gaps:
    Equal weights are floor(10000 / n), so up to n - 1 bps stay
    unassigned.  By default adding a member only sets the new member's
    weight; existing members keep their stored weights until
    ``rebalance_on_join`` is enabled.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from household_kernel.domain.records import Household, Member
from household_kernel.domain.weights import equal_weight_bps, unassigned_bps
from household_kernel.exceptions import (
    AlreadyMemberError,
    CapacityExceededError,
    HouseholdInactiveError,
    HouseholdNotFoundError,
    InvalidAllocationError,
    InvalidParameterError,
    NotAuthorizedError,
    UserNotInHouseholdError,
)
from household_kernel.invariants import BPS_DENOMINATOR
from household_kernel.logging_config import get_logger
from household_kernel.models.household import HouseholdModel, MemberModel
from household_kernel.services.base import BaseService
from household_kernel.services.sequence_service import SequenceService

logger = get_logger("services.household_registry")

DEFAULT_MAX_MEMBERS = 20


class HouseholdRegistry(BaseService):
    """
    Service for household and membership state.

    Contract:
        Every mutating method validates all of its preconditions before
        its first write.

    Guarantees:
        - The creator is registered as the sole member with 10000 bps.
        - Insertion order of the member list is preserved; removed members
          keep their position and are only flagged inactive.
    """

    def __init__(
        self,
        session: Session,
        *,
        max_members: int = DEFAULT_MAX_MEMBERS,
        rebalance_on_join: bool = False,
        restore_allocation_write: bool = True,
    ):
        super().__init__(session)
        self.max_members = max_members
        self.rebalance_on_join = rebalance_on_join
        self.restore_allocation_write = restore_allocation_write

    # -- lookups -------------------------------------------------------------

    def get_household(self, household_id: int) -> HouseholdModel | None:
        return self.session.get(HouseholdModel, household_id)

    def require_household(self, household_id: int) -> HouseholdModel:
        household = self.get_household(household_id)
        if household is None:
            raise HouseholdNotFoundError(household_id)
        return household

    def require_active_household(self, household_id: int) -> HouseholdModel:
        household = self.require_household(household_id)
        if not household.active:
            raise HouseholdInactiveError(household_id)
        return household

    def require_creator(self, household: HouseholdModel, caller: str, action: str) -> None:
        if not household.is_creator(caller):
            raise NotAuthorizedError(household.household_id, caller, action)

    def get_member(self, household_id: int, member: str) -> MemberModel | None:
        return self.session.get(MemberModel, (household_id, member))

    def is_active_member(self, household_id: int, member: str) -> bool:
        row = self.get_member(household_id, member)
        return row is not None and row.active

    def require_active_member(self, household_id: int, member: str) -> MemberModel:
        row = self.get_member(household_id, member)
        if row is None or not row.active:
            raise UserNotInHouseholdError(household_id, member)
        return row

    def member_count(self, household_id: int) -> int:
        """Members ever added, removed ones included."""
        return self.session.execute(
            select(func.count())
            .select_from(MemberModel)
            .where(MemberModel.household_id == household_id)
        ).scalar_one()

    def active_members(self, household_id: int) -> tuple[str, ...]:
        """Active members in insertion order."""
        return tuple(self.session.execute(
            select(MemberModel.member)
            .where(MemberModel.household_id == household_id, MemberModel.active.is_(True))
            .order_by(MemberModel.position)
        ).scalars())

    # -- mutations -----------------------------------------------------------

    def create_household(
        self,
        household_id: int,
        name: str,
        creator: str,
        current_tick: int,
    ) -> Household:
        """
        Register a new household with its creator as the only member.

        Preconditions:
            - ``household_id`` was freshly drawn from the global sequence.
        Postconditions:
            - household, counters and creator membership are flushed
              together.
        """
        household = HouseholdModel(
            household_id=household_id,
            name=name,
            creator=creator,
            created_tick=current_tick,
            active=True,
        )
        self.session.add(household)
        self.session.add(MemberModel(
            household_id=household_id,
            member=creator,
            position=0,
            joined_tick=current_tick,
            allocation_bps=BPS_DENOMINATOR,
            active=True,
        ))
        SequenceService(self.session).initialize(household_id)

        logger.info("household_created", extra={
            "household_id": household_id,
            "creator": creator,
            "tick": current_tick,
        })
        return household.to_domain()

    def add_member(
        self,
        household_id: int,
        new_member: str,
        caller: str,
        current_tick: int,
    ) -> Member:
        """
        Add (or re-activate) ``new_member``.

        The new member's weight is floor(10000 / active member count).
        Existing members are only re-weighted when ``rebalance_on_join``
        is set.
        """
        household = self.require_active_household(household_id)
        self.require_creator(household, caller, "add members")

        existing = self.get_member(household_id, new_member)
        if existing is not None and existing.active:
            raise AlreadyMemberError(household_id, new_member)

        count = self.member_count(household_id)
        if existing is None and count >= self.max_members:
            raise CapacityExceededError(household_id, self.max_members)

        active_count = len(self.active_members(household_id)) + 1
        weight = equal_weight_bps(active_count)

        if existing is None:
            row = MemberModel(
                household_id=household_id,
                member=new_member,
                position=count,
                joined_tick=current_tick,
                allocation_bps=weight,
                active=True,
            )
            self.session.add(row)
        else:
            row = existing
            row.joined_tick = current_tick
            row.allocation_bps = weight
            row.active = True
        self.session.flush()

        if self.rebalance_on_join:
            self._rebalance(household_id, weight)

        logger.info("member_added", extra={
            "member": new_member,
            "allocation_bps": weight,
            "active_member_count": active_count,
            "unassigned_bps": unassigned_bps(active_count),
            "rejoined": existing is not None,
            "rebalanced": self.rebalance_on_join,
        })
        return row.to_domain()

    def _rebalance(self, household_id: int, weight: int) -> None:
        for member in self.active_members(household_id):
            self.get_member(household_id, member).allocation_bps = weight
        self.session.flush()

    def update_member_allocation(
        self,
        household_id: int,
        member: str,
        new_bps: int,
        caller: str,
    ) -> Member:
        """Overwrite one member's weight; peers are not rebalanced."""
        household = self.require_active_household(household_id)
        self.require_creator(household, caller, "update allocations")

        if isinstance(new_bps, bool) or not isinstance(new_bps, int):
            raise InvalidAllocationError(f"bps for {member} is not an integer")
        if new_bps < 0 or new_bps > BPS_DENOMINATOR:
            raise InvalidAllocationError(
                f"bps for {member} must be within 0..{BPS_DENOMINATOR}, got {new_bps}"
            )
        row = self.require_active_member(household_id, member)

        if not self.restore_allocation_write:
            logger.info("member_allocation_update_ignored", extra={
                "member": member,
                "requested_bps": new_bps,
            })
            return row.to_domain()

        previous = row.allocation_bps
        row.allocation_bps = new_bps
        self.session.flush()
        logger.info("member_allocation_updated", extra={
            "member": member,
            "previous_bps": previous,
            "allocation_bps": new_bps,
        })
        return row.to_domain()

    def remove_member(self, household_id: int, member: str, caller: str) -> Member:
        """Soft-delete a member.  Balances involving the member are untouched."""
        household = self.require_active_household(household_id)
        self.require_creator(household, caller, "remove members")
        if household.is_creator(member):
            raise InvalidParameterError("member", "the household creator cannot be removed")
        row = self.require_active_member(household_id, member)

        row.active = False
        self.session.flush()
        logger.info("member_removed", extra={"member": member})
        return row.to_domain()

    def deactivate_household(self, household_id: int, caller: str) -> Household:
        """Soft-delete the household.  Deactivating twice is a no-op."""
        household = self.require_household(household_id)
        self.require_creator(household, caller, "deactivate the household")
        if not household.active:
            return household.to_domain()

        household.active = False
        self.session.flush()
        logger.info("household_deactivated")
        return household.to_domain()

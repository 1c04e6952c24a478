"""
ExpenseLedger -- record expenses and post each member's share as debt.

Responsibility:
    Validates an expense, splits it with the AllocationEngine, stores the
    expense (and its custom allocation rows), and raises the balance entry
    ``(member -> payer)`` by every non-payer member's share.

Architecture position:
    Services -- composes the pure AllocationEngine with kernel services
    (HouseholdRegistry, BalanceStore, SequenceService) inside the caller's
    session.

Invariants enforced:
    ALLOCATION_SUM -- custom basis points are validated before anything is
        written, so a rejected expense leaves the expense counter, the
        allocation map and every balance entry untouched.
    Conservation -- posted debt + payer's own share + unallocated remainder
        == amount.  The remainder is recorded on the expense and absorbed by
        the payer; it is never posted as debt to anyone.

Failure modes:
    - HouseholdNotFoundError, HouseholdInactiveError
    - UserNotInHouseholdError (caller, payer, or a custom allocation member)
    - InvalidAmountError, InvalidExpenseTypeError
    - InvalidParameterError for recurrence periods that contradict the
      expense type, or custom basis points supplied to an equal split
    - InvalidAllocationError
    - ExpenseNotFoundError, NotAuthorizedError (mark_expense_settled)
"""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy.orm import Session

from household_engines.allocation import AllocationEngine, validate_custom_allocation
from household_kernel.domain.records import AllocationType, Expense, ExpenseType, is_record_id
from household_kernel.exceptions import (
    ExpenseNotFoundError,
    InvalidAmountError,
    InvalidParameterError,
    NotAuthorizedError,
)
from household_kernel.invariants import MAX_BIGINT
from household_kernel.logging_config import get_logger
from household_kernel.models.expense import ExpenseAllocationModel, ExpenseModel
from household_kernel.services.balance_store import BalanceStore
from household_kernel.services.base import BaseService
from household_kernel.services.household_registry import HouseholdRegistry
from household_kernel.services.sequence_service import SequenceService

logger = get_logger("services.expense_ledger")


class ExpenseLedger(BaseService):
    """
    Service for posting expenses into the balance ledger.

    Contract:
        ``add_expense`` reacts only to explicit calls.  Recurring expenses
        store their period; re-triggering them on tick boundaries is the
        host scheduler's job.
    """

    def __init__(
        self,
        session: Session,
        registry: HouseholdRegistry,
        engine: AllocationEngine | None = None,
    ):
        super().__init__(session)
        self.registry = registry
        self.engine = engine or AllocationEngine()
        self.balances = BalanceStore(session)
        self.sequences = SequenceService(session)

    def _check_recurrence(self, expense_type: ExpenseType, recurrence_period: int) -> None:
        if isinstance(recurrence_period, bool) or not isinstance(recurrence_period, int):
            raise InvalidParameterError("recurrence_period", "must be an integer")
        if expense_type is ExpenseType.ONE_TIME and recurrence_period != 0:
            raise InvalidParameterError(
                "recurrence_period", "one-time expenses must have a period of 0"
            )
        if expense_type is ExpenseType.RECURRING and recurrence_period <= 0:
            raise InvalidParameterError(
                "recurrence_period", "recurring expenses need a positive period"
            )

    def add_expense(
        self,
        household_id: int,
        name: str,
        amount: int,
        payer: str,
        expense_type: ExpenseType | str,
        recurrence_period: int,
        allocation_type: AllocationType | str,
        custom_allocations: Mapping[str, int] | None,
        caller: str,
        current_tick: int,
    ) -> Expense:
        """
        Record an expense paid by ``payer`` and post the members' debts.

        Preconditions:
            - caller and payer are active members of an active household.
            - ``amount`` is a positive integer no larger than MAX_BIGINT.
            - custom allocations name active members and sum to 10000 bps.
        Postconditions:
            - The expense is stored with the next expense id, settled=False.
            - For every member m != payer: balance(m -> payer) grows by m's
              share.
        """
        self.registry.require_active_household(household_id)
        self.registry.require_active_member(household_id, caller)
        self.registry.require_active_member(household_id, payer)

        if isinstance(amount, bool) or not isinstance(amount, int) or not 0 < amount <= MAX_BIGINT:
            raise InvalidAmountError(amount)

        expense_type = ExpenseType.parse(expense_type)
        allocation_type = AllocationType.parse(allocation_type)
        self._check_recurrence(expense_type, recurrence_period)

        if allocation_type is AllocationType.CUSTOM:
            custom = dict(custom_allocations or {})
            validate_custom_allocation(custom)
            for member in custom:
                self.registry.require_active_member(household_id, member)
            result = self.engine.allocate(
                amount=amount, policy=allocation_type, custom_bps=custom
            )
        else:
            if custom_allocations:
                raise InvalidParameterError(
                    "custom_allocations", "only allowed with the custom allocation type"
                )
            custom = {}
            result = self.engine.allocate(
                amount=amount,
                policy=allocation_type,
                members=self.registry.active_members(household_id),
            )

        # INVARIANT: conservation of the split
        assert result.total_allocated + result.remainder == amount, (
            "allocation must conserve the expense amount"
        )

        expense_id = self.sequences.next_value(household_id, SequenceService.EXPENSE)
        expense = Expense(
            household_id=household_id,
            expense_id=expense_id,
            name=name,
            amount=amount,
            payer=payer,
            expense_type=expense_type,
            recurrence_period=recurrence_period,
            created_tick=current_tick,
            allocation_type=allocation_type,
            unallocated_remainder=result.remainder,
        )
        self.session.add(ExpenseModel.from_domain(expense))
        for member, bps in custom.items():
            self.session.add(ExpenseAllocationModel(
                household_id=household_id,
                expense_id=expense_id,
                member=member,
                bps=bps,
            ))
        self.session.flush()

        posted = 0
        for line in result.lines:
            if line.member == payer or line.share == 0:
                continue
            self.balances.adjust_balance(household_id, line.member, payer, line.share)
            posted += line.share

        logger.info("expense_posted", extra={
            "expense_id": expense_id,
            "amount": amount,
            "payer": payer,
            "expense_type": expense_type.value,
            "allocation_type": allocation_type.value,
            "posted_debt": posted,
            "unallocated_remainder": result.remainder,
            "tick": current_tick,
        })
        return expense

    def mark_expense_settled(
        self,
        household_id: int,
        expense_id: int,
        caller: str,
    ) -> Expense:
        """
        Flag an expense as settled.  Balances are not touched.

        Only the payer or the household creator may mark an expense.
        Marking an already settled expense is a no-op.
        """
        household = self.registry.require_active_household(household_id)
        row = None
        if is_record_id(expense_id):
            row = self.session.get(ExpenseModel, (household_id, expense_id))
        if row is None:
            raise ExpenseNotFoundError(household_id, expense_id)
        if caller != row.payer and not household.is_creator(caller):
            raise NotAuthorizedError(household_id, caller, "mark expenses settled")
        if row.settled:
            return row.to_domain()

        row.settled = True
        self.session.flush()
        logger.info("expense_marked_settled", extra={"expense_id": expense_id})
        return row.to_domain()

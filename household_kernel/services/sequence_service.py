"""
SequenceService -- monotonic id allocation from counter rows.

Responsibility:
    Hands out household ids from the global counter, and expense and
    settlement ids from each household's own counters.  The counter rows
    are the sole source of id uniqueness.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by the HouseholdLedger facade (household ids), ExpenseLedger and
    SettlementManager; initialized by HouseholdRegistry when a household
    is created.

Invariants enforced:
    SEQUENCE_MONOTONICITY -- ids start at 1 and increase by exactly 1.
    A household-scoped increment is flushed in the caller's transaction,
    so a rolled-back operation does not consume the id.  Household ids are
    drawn in a transaction of their own and are never handed out twice.

Failure modes:
    - HouseholdNotFoundError if a household has no counter rows.
"""

from household_kernel.exceptions import HouseholdNotFoundError
from household_kernel.logging_config import get_logger
from household_kernel.models.sequence import GLOBAL_SCOPE, SequenceCounter
from household_kernel.services.base import BaseService

logger = get_logger("services.sequence")


class SequenceService(BaseService):
    """
    Service for allocating sequence numbers.

    Usage:
        with household_scope(database, locks, household_id) as session:
            expense_id = SequenceService(session).next_value(household_id, SequenceService.EXPENSE)
            # If the scope rolls back, expense_id is not consumed
    """

    # Well-known sequence names
    HOUSEHOLD = "household"
    EXPENSE = "expense"
    SETTLEMENT = "settlement"

    HOUSEHOLD_SEQUENCES = (EXPENSE, SETTLEMENT)

    def initialize(self, household_id: int) -> None:
        """Create the expense and settlement counters of a new household."""
        for name in self.HOUSEHOLD_SEQUENCES:
            self.session.add(SequenceCounter(household_id=household_id, name=name, next_value=1))
        self.session.flush()

    def _advance(self, counter: SequenceCounter, sequence_name: str) -> int:
        value = counter.next_value
        assert value > 0, "sequence value must be strictly positive"
        counter.next_value = value + 1
        self.session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": value},
        )
        return value

    def next_value(self, household_id: int, sequence_name: str) -> int:
        """
        Return the next id for ``sequence_name`` in ``household_id``.

        Postconditions:
            - Returns an integer >= 1 strictly greater than any id
              previously committed for this household and sequence.
        """
        counter = self.session.get(SequenceCounter, (household_id, sequence_name))
        if counter is None:
            raise HouseholdNotFoundError(household_id)
        return self._advance(counter, sequence_name)

    def next_household_id(self) -> int:
        """Draw the next household id from the global counter, creating it on first use."""
        counter = self.session.get(SequenceCounter, (GLOBAL_SCOPE, self.HOUSEHOLD))
        if counter is None:
            counter = SequenceCounter(household_id=GLOBAL_SCOPE, name=self.HOUSEHOLD, next_value=1)
            self.session.add(counter)
        return self._advance(counter, self.HOUSEHOLD)

"""
BalanceStore -- the directed pairwise debt ledger.

Responsibility:
    Owns the ``balances`` table ``(household, debtor, creditor) -> amount``
    and is the only code that writes it.  Exposes ``get_balance`` for reads
    and ``adjust_balance`` for the expense ledger (increase) and the
    settlement manager (decrease).

Architecture position:
    Kernel > Services -- imperative shell.  ``adjust_balance`` is never
    reachable from the public HouseholdLedger surface.

Invariants enforced:
    NON_NEGATIVE_BALANCE -- every mutation is checked; an underflow raises
        InsufficientFundsError before the row is touched.
    DIRECTED_BALANCES -- (a, b) and (b, a) are separate rows and are never
        netted against each other.
    Rows that reach zero are deleted, so a missing row always means 0.

Failure modes:
    - InsufficientFundsError on underflow.
    - BalanceOverflowError when the entry would pass MAX_BIGINT.
    - InvalidAmountError when ``delta`` is not a non-zero integer.
    - InvalidParameterError when debtor and creditor are the same.
"""

from household_kernel.exceptions import (
    BalanceOverflowError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidParameterError,
)
from household_kernel.invariants import MAX_BIGINT
from household_kernel.logging_config import get_logger
from household_kernel.models.balance import BalanceModel
from household_kernel.services.base import BaseService

logger = get_logger("services.balance_store")


class BalanceStore(BaseService):
    """Read and adjust directed balance rows inside the caller's transaction."""

    def _row(self, household_id: int, debtor: str, creditor: str) -> BalanceModel | None:
        return self.session.get(BalanceModel, (household_id, debtor, creditor))

    def get_balance(self, household_id: int, debtor: str, creditor: str) -> int:
        """Amount ``debtor`` owes ``creditor``; 0 when no row exists."""
        row = self._row(household_id, debtor, creditor)
        return row.amount if row is not None else 0

    def adjust_balance(
        self,
        household_id: int,
        debtor: str,
        creditor: str,
        delta: int,
    ) -> int:
        """
        Add ``delta`` (positive or negative) to one entry.

        Postconditions:
            - Returns the new amount, always within 0..MAX_BIGINT.
            - On any error the row is left as it was.
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise InvalidAmountError(delta)
        if debtor == creditor:
            raise InvalidParameterError("creditor", "a member cannot owe themselves")

        row = self._row(household_id, debtor, creditor)
        current = row.amount if row is not None else 0
        updated = current + delta

        # INVARIANT: NON_NEGATIVE_BALANCE
        if updated < 0:
            raise InsufficientFundsError(
                household_id, debtor, creditor, available=current, requested=-delta
            )
        if updated > MAX_BIGINT:
            raise BalanceOverflowError(household_id, debtor, creditor, current, delta)

        if updated == 0:
            self.session.delete(row)
        elif row is None:
            self.session.add(BalanceModel(
                household_id=household_id,
                debtor=debtor,
                creditor=creditor,
                amount=updated,
            ))
        else:
            row.amount = updated
        self.session.flush()

        logger.debug("balance_adjusted", extra={
            "debtor": debtor,
            "creditor": creditor,
            "delta": delta,
            "balance": updated,
        })
        return updated

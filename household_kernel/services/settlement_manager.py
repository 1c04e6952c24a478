"""
SettlementManager -- reduce debts and keep an auditable settlement trail.

Responsibility:
    Lowers one directed balance entry on behalf of the debtor and records
    an immutable settlement.  A reference to an externally executed payment
    can be attached to a settlement exactly once afterwards.

Architecture position:
    Kernel > Services -- imperative shell.  Uses HouseholdRegistry for
    membership checks, BalanceStore for the decrease and SequenceService
    for settlement ids.

Invariants enforced:
    NON_NEGATIVE_BALANCE -- a settlement never exceeds the current entry.
    SEQUENCE_MONOTONICITY -- settlement ids come from the household counter.
    Settlements are append-only; only ``tx_reference`` may be filled in,
    once.

Failure modes:
    - HouseholdNotFoundError, HouseholdInactiveError
    - UserNotInHouseholdError for either party
    - InvalidParameterError when debtor and creditor are the same, or the
      external reference is malformed
    - InvalidAmountError, InsufficientFundsError
    - SettlementNotFoundError, ExternalReferenceAlreadyRecordedError
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from household_kernel.domain.records import Settlement, is_record_id
from household_kernel.exceptions import (
    ExternalReferenceAlreadyRecordedError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidParameterError,
    SettlementNotFoundError,
)
from household_kernel.invariants import MAX_BIGINT
from household_kernel.logging_config import get_logger
from household_kernel.models.settlement import SettlementModel
from household_kernel.services.balance_store import BalanceStore
from household_kernel.services.base import BaseService
from household_kernel.services.household_registry import HouseholdRegistry
from household_kernel.services.sequence_service import SequenceService

logger = get_logger("services.settlement_manager")

DEFAULT_TX_REFERENCE_SIZE = 32


class SettlementManager(BaseService):
    """
    Service for settling debts between two members.

    Contract:
        ``settle_payment`` validates every precondition, then writes the
        balance decrease, the counter increment and the settlement record
        in the caller's transaction.
    """

    def __init__(
        self,
        session: Session,
        registry: HouseholdRegistry,
        *,
        tx_reference_size: int = DEFAULT_TX_REFERENCE_SIZE,
    ):
        super().__init__(session)
        self.registry = registry
        self.balances = BalanceStore(session)
        self.sequences = SequenceService(session)
        self.tx_reference_size = tx_reference_size

    def settle_payment(
        self,
        household_id: int,
        from_member: str,
        to_member: str,
        amount: int,
        current_tick: int,
    ) -> Settlement:
        """
        Pay down what ``from_member`` owes ``to_member`` by ``amount``.

        Preconditions:
            - The household exists and is active.
            - Both parties are active members and differ.
            - ``amount`` is a positive integer no larger than the entry.
        Postconditions:
            - get_balance(household_id, from_member, to_member) drops by
              exactly ``amount``.
            - A settlement with the next id and no reference is recorded.
        """
        self.registry.require_active_household(household_id)
        self.registry.require_active_member(household_id, from_member)
        self.registry.require_active_member(household_id, to_member)
        if from_member == to_member:
            raise InvalidParameterError("to", "cannot settle a debt with oneself")
        if isinstance(amount, bool) or not isinstance(amount, int) or not 0 < amount <= MAX_BIGINT:
            raise InvalidAmountError(amount)

        available = self.balances.get_balance(household_id, from_member, to_member)
        if available < amount:
            raise InsufficientFundsError(
                household_id, from_member, to_member, available=available, requested=amount
            )

        remaining = self.balances.adjust_balance(household_id, from_member, to_member, -amount)
        settlement_id = self.sequences.next_value(household_id, SequenceService.SETTLEMENT)
        row = SettlementModel(
            household_id=household_id,
            settlement_id=settlement_id,
            from_member=from_member,
            to_member=to_member,
            amount=amount,
            tick=current_tick,
        )
        self.session.add(row)
        self.session.flush()

        logger.info("settlement_recorded", extra={
            "settlement_id": settlement_id,
            "from_member": from_member,
            "to_member": to_member,
            "amount": amount,
            "remaining_balance": remaining,
            "tick": current_tick,
        })
        return row.to_domain()

    def record_external_payment(
        self,
        household_id: int,
        settlement_id: int,
        tx_reference: bytes,
    ) -> Settlement:
        """
        Attach an external payment reference to a settlement, once.

        A second attachment is rejected with
        ExternalReferenceAlreadyRecordedError and leaves the first intact.
        """
        row = None
        if is_record_id(settlement_id):
            row = self.session.get(SettlementModel, (household_id, settlement_id))
        if row is None:
            raise SettlementNotFoundError(household_id, settlement_id)

        if not isinstance(tx_reference, (bytes, bytearray)):
            raise InvalidParameterError("tx_reference", "must be bytes")
        if len(tx_reference) != self.tx_reference_size:
            raise InvalidParameterError(
                "tx_reference",
                f"must be exactly {self.tx_reference_size} bytes, got {len(tx_reference)}",
            )
        if row.has_external_reference:
            raise ExternalReferenceAlreadyRecordedError(household_id, settlement_id)

        row.tx_reference = bytes(tx_reference)
        self.session.flush()
        logger.info("external_payment_recorded", extra={
            "settlement_id": settlement_id,
            "tx_reference": row.tx_reference,
        })
        return row.to_domain()

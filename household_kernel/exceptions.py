"""
Typed Exception Hierarchy for the Household Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every rejection raised by the kernel is a precondition failure: the caller
asked for something the current ledger state does not allow. None of them
describe an internal fault, and every one leaves prior state unchanged.

Each exception therefore carries:
  1. A TYPED class (catch by type, not by message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (household id, member, amounts)

Example:
    try:
        ledger.settle_payment(household_id, caller="bob", to="alice", amount=100, current_tick=7)
    except InsufficientFundsError as e:
        api_response(code=e.code, available=e.available, requested=e.requested)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from HouseholdLedgerError:

    HouseholdLedgerError (base)
    |
    +-- HouseholdError
    |   +-- HouseholdNotFoundError
    |   +-- HouseholdInactiveError
    |
    +-- MembershipError
    |   +-- NotAuthorizedError
    |   +-- UserNotInHouseholdError
    |   +-- AlreadyMemberError
    |   +-- CapacityExceededError
    |
    +-- ExpenseError
    |   +-- ExpenseNotFoundError
    |   +-- InvalidExpenseTypeError
    |
    +-- SettlementError
    |   +-- SettlementNotFoundError
    |   +-- InsufficientFundsError
    |   +-- ExternalReferenceAlreadyRecordedError
    |
    +-- ValidationError
        +-- InvalidAmountError
        +-- BalanceOverflowError
        +-- InvalidAllocationError
        +-- InvalidParameterError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                                 | When Raised
------------|--------------------------------------|-------------------------------------
Household   | HOUSEHOLD_NOT_FOUND                  | Household id was never allocated
            | HOUSEHOLD_INACTIVE                   | Mutation on a deactivated household
------------|--------------------------------------|-------------------------------------
Membership  | NOT_AUTHORIZED                       | Caller is not the household creator
            | USER_NOT_IN_HOUSEHOLD                | Identity is not an active member
            | ALREADY_MEMBER                       | Identity is already an active member
            | CAPACITY_EXCEEDED                    | Member list is at its cap
------------|--------------------------------------|-------------------------------------
Expense     | EXPENSE_NOT_FOUND                    | Expense id unknown in household
            | INVALID_EXPENSE_TYPE                 | Unknown expense or allocation type
------------|--------------------------------------|-------------------------------------
Settlement  | SETTLEMENT_NOT_FOUND                 | Settlement id unknown in household
            | INSUFFICIENT_FUNDS                   | Balance entry would go negative
            | EXTERNAL_REFERENCE_ALREADY_RECORDED  | Reference already attached
------------|--------------------------------------|-------------------------------------
Validation  | INVALID_AMOUNT                       | Amount is not a positive BIGINT
            | BALANCE_OVERFLOW                     | Entry would exceed the BIGINT range
            | INVALID_ALLOCATION                   | Basis points out of range / sum
            | INVALID_PARAMETER                    | Any other malformed argument
"""


class HouseholdLedgerError(Exception):
    """
    Base exception for all household ledger errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "HOUSEHOLD_LEDGER_ERROR"


# Household-related exceptions


class HouseholdError(HouseholdLedgerError):
    """Base exception for household-level errors."""

    code: str = "HOUSEHOLD_ERROR"


class HouseholdNotFoundError(HouseholdError):
    """Household with given id was never created."""

    code: str = "HOUSEHOLD_NOT_FOUND"

    def __init__(self, household_id: int):
        self.household_id = household_id
        super().__init__(f"Household not found: {household_id}")


class HouseholdInactiveError(HouseholdError):
    """Household has been deactivated and accepts no further mutations."""

    code: str = "HOUSEHOLD_INACTIVE"

    def __init__(self, household_id: int):
        self.household_id = household_id
        super().__init__(f"Household {household_id} is inactive")


# Membership-related exceptions


class MembershipError(HouseholdLedgerError):
    """Base exception for membership and authorization errors."""

    code: str = "MEMBERSHIP_ERROR"


class NotAuthorizedError(MembershipError):
    """Caller is not allowed to perform the operation."""

    code: str = "NOT_AUTHORIZED"

    def __init__(self, household_id: int, caller: str, action: str):
        self.household_id = household_id
        self.caller = caller
        self.action = action
        super().__init__(
            f"{caller} is not authorized to {action} in household {household_id}"
        )


class UserNotInHouseholdError(MembershipError):
    """Identity is not an active member of the household."""

    code: str = "USER_NOT_IN_HOUSEHOLD"

    def __init__(self, household_id: int, member: str):
        self.household_id = household_id
        self.member = member
        super().__init__(f"{member} is not an active member of household {household_id}")


class AlreadyMemberError(MembershipError):
    """Identity is already an active member of the household."""

    code: str = "ALREADY_MEMBER"

    def __init__(self, household_id: int, member: str):
        self.household_id = household_id
        self.member = member
        super().__init__(f"{member} is already a member of household {household_id}")


class CapacityExceededError(MembershipError):
    """Member list has reached its cap."""

    code: str = "CAPACITY_EXCEEDED"

    def __init__(self, household_id: int, max_members: int):
        self.household_id = household_id
        self.max_members = max_members
        super().__init__(
            f"Household {household_id} already has the maximum of {max_members} members"
        )


# Expense-related exceptions


class ExpenseError(HouseholdLedgerError):
    """Base exception for expense-related errors."""

    code: str = "EXPENSE_ERROR"


class ExpenseNotFoundError(ExpenseError):
    """Expense id is unknown within the household."""

    code: str = "EXPENSE_NOT_FOUND"

    def __init__(self, household_id: int, expense_id: int):
        self.household_id = household_id
        self.expense_id = expense_id
        super().__init__(f"Expense {expense_id} not found in household {household_id}")


class InvalidExpenseTypeError(ExpenseError):
    """Expense type or allocation type is not recognised."""

    code: str = "INVALID_EXPENSE_TYPE"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r}")


# Settlement-related exceptions


class SettlementError(HouseholdLedgerError):
    """Base exception for settlement-related errors."""

    code: str = "SETTLEMENT_ERROR"


class SettlementNotFoundError(SettlementError):
    """Settlement id is unknown within the household."""

    code: str = "SETTLEMENT_NOT_FOUND"

    def __init__(self, household_id: int, settlement_id: int):
        self.household_id = household_id
        self.settlement_id = settlement_id
        super().__init__(
            f"Settlement {settlement_id} not found in household {household_id}"
        )


class InsufficientFundsError(SettlementError):
    """A decrease would drive a balance entry below zero."""

    code: str = "INSUFFICIENT_FUNDS"

    def __init__(
        self,
        household_id: int,
        debtor: str,
        creditor: str,
        available: int,
        requested: int,
    ):
        self.household_id = household_id
        self.debtor = debtor
        self.creditor = creditor
        self.available = available
        self.requested = requested
        super().__init__(
            f"{debtor} owes {creditor} {available} in household {household_id}, "
            f"cannot settle {requested}"
        )


class ExternalReferenceAlreadyRecordedError(SettlementError):
    """Settlement already carries an external payment reference."""

    code: str = "EXTERNAL_REFERENCE_ALREADY_RECORDED"

    def __init__(self, household_id: int, settlement_id: int):
        self.household_id = household_id
        self.settlement_id = settlement_id
        super().__init__(
            f"Settlement {settlement_id} in household {household_id} "
            f"already has an external reference"
        )


# Validation exceptions


class ValidationError(HouseholdLedgerError):
    """Base exception for malformed arguments."""

    code: str = "VALIDATION_ERROR"


class InvalidAmountError(ValidationError):
    """Amount is not a positive integer in the smallest currency unit, or is
    larger than a stored amount can be."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: object):
        self.amount = amount
        super().__init__(f"Amount must be a positive integer, got {amount!r}")


class BalanceOverflowError(ValidationError):
    """An increase would push a balance entry past the largest storable amount."""

    code: str = "BALANCE_OVERFLOW"

    def __init__(self, household_id: int, debtor: str, creditor: str, current: int, delta: int):
        self.household_id = household_id
        self.debtor = debtor
        self.creditor = creditor
        self.current = current
        self.delta = delta
        super().__init__(
            f"{debtor} -> {creditor} in household {household_id} holds {current}, "
            f"cannot add {delta}"
        )


class InvalidAllocationError(ValidationError):
    """Basis points are out of range or do not sum to the denominator."""

    code: str = "INVALID_ALLOCATION"

    def __init__(self, reason: str, total_bps: int | None = None):
        self.reason = reason
        self.total_bps = total_bps
        super().__init__(f"Invalid allocation: {reason}")


class InvalidParameterError(ValidationError):
    """Any other malformed argument."""

    code: str = "INVALID_PARAMETER"

    def __init__(self, parameter: str, reason: str):
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Invalid {parameter}: {reason}")

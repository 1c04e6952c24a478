"""
Module: household_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
    Selectors form the "Q" side of the ledger, providing structured read
    access without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/
    and domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but MUST
      NOT call session.add(), session.delete(), session.flush() or
      session.commit().
    - DTO return convention: selectors return frozen domain records, never
      ORM rows.
    - Total functions: selectors never raise for unknown keys; they return
      None, an empty tuple, or 0.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform reads only,
        and return frozen records or computed results.
    """

    def __init__(self, session: Session):
        self.session = session

"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write-side service in the kernel.  All concrete services receive
    a SQLAlchemy ``Session`` and use ``session.add()`` / ``session.flush()``
    -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    ATOMIC_OPERATION -- services flush within the caller's transaction and
    never commit or roll back themselves.  household_scope() owns the
    transaction, so a failure in any service called during an operation
    rolls back every write that operation made.

Failure modes:
    - If a subclass commits the session itself, later precondition
      failures in the same operation would leave partial state behind.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a ``Session`` from the caller and persists changes within
        the caller's active transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query-only methods for callers -- those belong
          in ``household_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session

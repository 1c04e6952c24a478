"""
Module: household_kernel.db.engine
Responsibility: SQLAlchemy engine and session factory for one ledger
    database, and the transactional scopes every operation runs in.
Architecture position: Kernel > DB.  May import from db/ and logging_config.
    MUST NOT import from services/, selectors/, or outer layers (except
    create_tables, which imports models to register their tables).

Invariants enforced:
    - ATOMIC_OPERATION: session_scope() commits on normal exit and rolls
      back on any exception, so an operation's writes land together or not
      at all.
    - HOUSEHOLD_ISOLATION: household_scope() holds the household's lock for
      the whole read-validate-write cycle; operations on one household are
      serialized, operations on different households take different locks.
    - An in-memory SQLite database lives on a single connection
      (StaticPool).  Sessions on it take turns on that connection, one
      transaction at a time; scopes must not be nested.

Failure modes:
    - Any exception raised inside a scope rolls the session back and is
      re-raised unchanged.
    - sqlalchemy.exc.ArgumentError for a malformed database URL.

Audit relevance:
    Every ledger mutation flows through household_scope().  Committed
    state is therefore always the result of whole operations.
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager, nullcontext

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from household_kernel.db.locks import HouseholdLockRegistry
from household_kernel.logging_config import get_logger

logger = get_logger("db.engine")

IN_MEMORY_URL = "sqlite://"


def _is_in_memory_sqlite(database_url: str) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


class LedgerDatabase:
    """
    Engine, session factory and schema of one ledger database.

    Contract:
        ``session_scope`` hands out a session that commits or rolls back
        as a unit.  ``read_session`` hands out one that is always rolled
        back.  Callers that need per-household ordering go through
        household_scope() / household_read_scope().
    """

    def __init__(self, database_url: str = IN_MEMORY_URL, *, echo: bool = False):
        self.shared_connection = _is_in_memory_sqlite(database_url)
        if self.shared_connection:
            self.engine: Engine = create_engine(
                database_url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            self.engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._connection_lock = threading.Lock()
        self.create_tables()

        logger.info("engine_initialized", extra={
            "dialect": self.engine.dialect.name,
            "shared_connection": self.shared_connection,
            "echo": echo,
        })

    def create_tables(self) -> None:
        """Create every ledger table that does not exist yet."""
        import household_kernel.models  # noqa: F401  (registers the ledger tables)
        from household_kernel.db.base import Base

        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def get_session(self) -> Session:
        return self._session_factory()

    def _turn(self):
        return self._connection_lock if self.shared_connection else nullcontext()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Postconditions: On normal exit the session is committed and closed.
            On exception it is rolled back and closed, and the exception is
            re-raised to the caller.

        Usage:
            with database.session_scope() as session:
                session.add(model)
                # Commits on successful exit, rolls back on exception
        """
        with self._turn():
            session = self.get_session()
            logger.debug("transaction_started")
            try:
                yield session
                session.commit()
                logger.debug("transaction_committed")
            except Exception as exc:
                session.rollback()
                logger.warning("transaction_rolled_back", extra={
                    "error_code": getattr(exc, "code", type(exc).__name__),
                })
                raise
            finally:
                session.close()

    @contextmanager
    def read_session(self) -> Generator[Session, None, None]:
        """Session for queries only.  It is never committed."""
        with self._turn():
            session = self.get_session()
            try:
                yield session
            finally:
                session.rollback()
                session.close()


@contextmanager
def household_scope(
    database: LedgerDatabase,
    locks: HouseholdLockRegistry,
    household_id: int,
) -> Generator[Session, None, None]:
    """
    Serialized, transactional scope for one household.

    Preconditions: ``household_id`` is the only household the block touches.

    Usage:
        with household_scope(database, locks, household_id) as session:
            BalanceStore(session).adjust_balance(household_id, "bob", "alice", 10)
    """
    with locks.lock_for(household_id):
        with database.session_scope() as session:
            yield session


@contextmanager
def household_read_scope(
    database: LedgerDatabase,
    locks: HouseholdLockRegistry,
    household_id: int,
) -> Generator[Session, None, None]:
    """Serialized read-only scope: readers see whole operations only."""
    with locks.lock_for(household_id):
        with database.read_session() as session:
            yield session

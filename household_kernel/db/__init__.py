"""Persistence layer - SQLAlchemy base, engine, session scopes and household locks."""

from household_kernel.db.base import Base
from household_kernel.db.engine import (
    LedgerDatabase,
    household_read_scope,
    household_scope,
)
from household_kernel.db.locks import HouseholdLockRegistry

__all__ = [
    "Base",
    "HouseholdLockRegistry",
    "LedgerDatabase",
    "household_read_scope",
    "household_scope",
]

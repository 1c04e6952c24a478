"""
Configuration schema (``household_config.schema``).

Frozen dataclasses describing the ledger's tunable behaviour.  Values are
validated at construction; the kernel receives plain values from the
service layer and never imports this module.
"""

from __future__ import annotations

from dataclasses import dataclass

# Hard ceiling on the member list regardless of configuration.
MAX_MEMBERS_LIMIT = 20


@dataclass(frozen=True)
class LedgerSettings:
    """
    Runtime settings for a HouseholdLedger.

    Fields:
        config_id: Identifier of the loaded configuration, for tracing.
        max_members: Cap on the member list, 1..20.
        rebalance_on_join: Re-weight every active member to the equal split
            when a member joins.  Off by default: only the newcomer's weight
            is set.
        restore_allocation_write: Persist ``update_member_allocation``.
            When off, the call validates and then changes nothing.
        tx_reference_size: Exact byte length of external payment references.
        database_url: SQLAlchemy URL of the ledger database.  The default
            is a private in-memory SQLite database per ledger.
        database_echo: Log every SQL statement (SQLAlchemy ``echo``).
    """

    config_id: str = "default"
    max_members: int = MAX_MEMBERS_LIMIT
    rebalance_on_join: bool = False
    restore_allocation_write: bool = True
    tx_reference_size: int = 32
    database_url: str = "sqlite://"
    database_echo: bool = False

    def __post_init__(self) -> None:
        if not self.config_id:
            raise ValueError("config_id must be non-empty")
        if not isinstance(self.max_members, int) or isinstance(self.max_members, bool):
            raise ValueError(f"max_members must be an integer, got {self.max_members!r}")
        if not 1 <= self.max_members <= MAX_MEMBERS_LIMIT:
            raise ValueError(
                f"max_members must be within 1..{MAX_MEMBERS_LIMIT}, got {self.max_members}"
            )
        if not isinstance(self.rebalance_on_join, bool):
            raise ValueError("rebalance_on_join must be a boolean")
        if not isinstance(self.restore_allocation_write, bool):
            raise ValueError("restore_allocation_write must be a boolean")
        if (
            not isinstance(self.tx_reference_size, int)
            or isinstance(self.tx_reference_size, bool)
            or self.tx_reference_size <= 0
        ):
            raise ValueError(
                f"tx_reference_size must be a positive integer, got {self.tx_reference_size!r}"
            )
        if not isinstance(self.database_url, str) or not self.database_url:
            raise ValueError("database_url must be a non-empty string")
        if not isinstance(self.database_echo, bool):
            raise ValueError("database_echo must be a boolean")

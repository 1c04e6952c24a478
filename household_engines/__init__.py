"""
Module: household_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import household_kernel.domain, household_kernel.exceptions,
    household_kernel.invariants and household_kernel.logging_config.
    MUST NOT import household_services.

Invariants enforced:
    - Purity: engines never read ticks, locks, or the database.  Inputs are
      passed in explicitly by the services.
    - Integer-only arithmetic: amounts are integers in the smallest
      currency unit; floats are never used.
"""

from household_engines.allocation import (
    AllocationEngine,
    AllocationLine,
    AllocationResult,
    allocate,
    equal_weight_bps,
    validate_custom_allocation,
)

__all__ = [
    "AllocationEngine",
    "AllocationLine",
    "AllocationResult",
    "allocate",
    "equal_weight_bps",
    "validate_custom_allocation",
]

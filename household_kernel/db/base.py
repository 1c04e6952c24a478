"""
Module: household_kernel.db.base
Responsibility: Declarative base for every ORM model of the ledger, and the
    column type conventions the models share.
Architecture position: Kernel > DB.  The lowest-level import target inside
    the kernel's persistence side.  MUST NOT import from models/, services/,
    selectors/, or outer layers.

Invariants enforced:
    - Integer columns are BigInteger: amounts, ticks and ids are whole
      numbers in the smallest unit and never stored as floats.
    - Every table is keyed by its natural key, led by ``household_id``, so
      no row can exist outside a household (HOUSEHOLD_ISOLATION).
"""

from typing import ClassVar

from sqlalchemy import BigInteger, LargeBinary
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all ledger models.

    Contract:
        Models declare their own composite primary keys.  The
        type_annotation_map keeps column types consistent across the schema.
    """

    type_annotation_map: ClassVar[dict] = {
        int: BigInteger,
        bytes: LargeBinary,
    }

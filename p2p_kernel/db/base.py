"""
Module: p2p_kernel.db.base
Responsibility: Declarative bases for the reference store tables
    (procurement, inventory, accounts payable).
Architecture position: Kernel > DB.  Every p2p_modules/*/orm.py imports
    from here; nothing here imports from p2p_modules.

Invariants enforced:
    - Primary keys are uuid4 values stored as 36-character strings, so the
      string ids carried on the receiving DTOs round-trip unchanged.
    - Quantities, unit prices and costs are Numeric(38, 9); never float.
    - TrackedBase rows always record the actor that created them.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID column stored as String(36); accepts ``UUID`` or its string form on bind."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        int: Integer,
    }

    id: Mapped[PyUUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Abstract base adding who/when columns.

    ``created_at`` falls back to the database clock; the stores pass the
    injected ``Clock`` value where the timestamp is part of a DTO.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False,
    )
    created_by_id: Mapped[str] = mapped_column(String(100), nullable=False)
    updated_by_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

"""
SQLAlchemy ORM persistence models for the Inventory reference store.

Maps stock positions and inventory movements to relational tables.

Invariants enforced
-------------------
* Quantities and costs use ``Decimal`` (Numeric(38,9)).
* One stock balance row per (item_id, location_id).
* Inventory transactions are append-only.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from p2p_kernel.db.base import TrackedBase

# =============================================================================
# StockBalanceModel
# =============================================================================


class StockBalanceModel(TrackedBase):
    """
    On-hand quantity and weighted-average unit cost for one item at one
    location.

    Guarantees:
        - item_id and location_id are opaque external references (no FK).
    """

    __tablename__ = "inventory_stock_balances"

    __table_args__ = (
        UniqueConstraint("item_id", "location_id", name="uq_stock_balance_item_location"),
        Index("idx_stock_balance_location", "location_id"),
    )

    item_id: Mapped[str] = mapped_column(String(200), nullable=False)
    location_id: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity_on_hand: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    average_unit_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    def __repr__(self) -> str:
        return (
            f"<StockBalanceModel {self.item_id}@{self.location_id} "
            f"qty={self.quantity_on_hand} cost={self.average_unit_cost}>"
        )


# =============================================================================
# InventoryTransactionModel
# =============================================================================


class InventoryTransactionModel(TrackedBase):
    """A single inventory movement (receipt, issue, adjustment)."""

    __tablename__ = "inventory_transactions"

    __table_args__ = (
        Index("idx_inv_txn_item_location", "item_id", "location_id"),
        Index("idx_inv_txn_reference", "reference_type", "reference_id"),
    )

    item_id: Mapped[str] = mapped_column(String(200), nullable=False)
    location_id: Mapped[str] = mapped_column(String(100), nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(nullable=False)
    reference_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reference_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    posted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def to_dto(self):
        """Convert ORM model to frozen InventoryTransaction DTO."""
        from p2p_modules.receiving.models import InventoryTransaction

        return InventoryTransaction(
            id=str(self.id),
            item_id=self.item_id,
            location_id=self.location_id,
            transaction_type=self.transaction_type,
            quantity=self.quantity,
            unit_cost=self.unit_cost,
            total_cost=self.total_cost,
            reference_type=self.reference_type,
            reference_id=self.reference_id,
            notes=self.notes,
            posted_at=self.posted_at,
        )

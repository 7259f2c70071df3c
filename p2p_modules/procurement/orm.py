"""
SQLAlchemy ORM persistence models for the Procurement reference store.

Responsibility
--------------
Back the ``SqlProcurementAdapter`` with tables for purchase orders, their
lines (carrying cumulative received and billed quantities), goods receipts
and receipt lines.

Invariants enforced
-------------------
* All quantity and money fields use ``Decimal`` (Numeric(38,9)) -- NEVER float.
* Enum fields stored as String(50) for readability and portability.
* ``po_number`` and ``receipt_number`` are unique.
* Each line belongs to exactly one parent document.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from p2p_kernel.db.base import TrackedBase

# ---------------------------------------------------------------------------
# PurchaseOrderModel
# ---------------------------------------------------------------------------


class PurchaseOrderModel(TrackedBase):
    """
    A purchase order.

    Maps to the ``PurchaseOrder`` DTO in ``p2p_modules.receiving.models``.
    """

    __tablename__ = "procurement_purchase_orders"

    __table_args__ = (
        UniqueConstraint("po_number", name="uq_purchase_order_number"),
        Index("idx_purchase_order_vendor", "vendor_id"),
        Index("idx_purchase_order_status", "status"),
    )

    po_number: Mapped[str] = mapped_column(String(50), nullable=False)
    vendor_id: Mapped[str] = mapped_column(String(100), nullable=False)
    vendor_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    order_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expected_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")
    subtotal: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    tax_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    shipping_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    lines: Mapped[list["PurchaseOrderLineModel"]] = relationship(
        "PurchaseOrderLineModel",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderLineModel.line_number",
        lazy="selectin",
    )

    def to_dto(self):
        from p2p_modules.receiving.models import POStatus, PurchaseOrder

        return PurchaseOrder(
            id=str(self.id),
            po_number=self.po_number,
            vendor_id=self.vendor_id,
            vendor_name=self.vendor_name,
            status=POStatus(self.status),
            line_items=tuple(line.to_dto() for line in self.lines),
            order_date=self.order_date,
            expected_delivery_date=self.expected_delivery_date,
            subtotal=self.subtotal,
            tax_amount=self.tax_amount,
            shipping_amount=self.shipping_amount,
            total_amount=self.total_amount,
        )


class PurchaseOrderLineModel(TrackedBase):
    """A purchase order line with cumulative received/billed quantities."""

    __tablename__ = "procurement_purchase_order_lines"

    __table_args__ = (
        UniqueConstraint("purchase_order_id", "line_number", name="uq_po_line_number"),
        Index("idx_po_line_item", "item_id"),
    )

    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("procurement_purchase_orders.id"), nullable=False,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    item_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)
    total_price: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    quantity_received: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    quantity_billed: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    gl_account_id: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    purchase_order: Mapped["PurchaseOrderModel"] = relationship(
        "PurchaseOrderModel", back_populates="lines",
    )

    def to_dto(self):
        from p2p_modules.receiving.models import PurchaseOrderLine

        return PurchaseOrderLine(
            id=str(self.id),
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            total_price=self.total_price,
            quantity_received=self.quantity_received,
            quantity_billed=self.quantity_billed,
            gl_account_id=self.gl_account_id,
            item_id=self.item_id,
            sku=self.sku,
        )


# ---------------------------------------------------------------------------
# GoodsReceiptModel
# ---------------------------------------------------------------------------


class GoodsReceiptModel(TrackedBase):
    """
    A goods receipt against a purchase order.

    Immutable once completed; a PO may have many.
    """

    __tablename__ = "procurement_goods_receipts"

    __table_args__ = (
        UniqueConstraint("receipt_number", name="uq_goods_receipt_number"),
        Index("idx_goods_receipt_po", "purchase_order_id"),
        Index("idx_goods_receipt_date", "received_date"),
    )

    receipt_number: Mapped[str] = mapped_column(String(50), nullable=False)
    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("procurement_purchase_orders.id"), nullable=False,
    )
    received_by: Mapped[str] = mapped_column(String(100), nullable=False)
    received_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="completed")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    purchase_order: Mapped["PurchaseOrderModel"] = relationship("PurchaseOrderModel")
    lines: Mapped[list["GoodsReceiptLineModel"]] = relationship(
        "GoodsReceiptLineModel",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="GoodsReceiptLineModel.line_number",
        lazy="selectin",
    )

    def to_dto(self):
        from p2p_modules.receiving.models import Receipt, ReceiptStatus

        po = self.purchase_order
        return Receipt(
            id=str(self.id),
            receipt_number=self.receipt_number,
            purchase_order_id=str(self.purchase_order_id),
            po_number=po.po_number,
            vendor_id=po.vendor_id,
            vendor_name=po.vendor_name,
            received_by=self.received_by,
            received_date=self.received_date,
            line_items=tuple(line.to_dto() for line in self.lines),
            status=ReceiptStatus(self.status),
            notes=self.notes,
            created_at=self.created_at,
        )


class GoodsReceiptLineModel(TrackedBase):
    """One received line on a goods receipt."""

    __tablename__ = "procurement_goods_receipt_lines"

    __table_args__ = (
        Index("idx_goods_receipt_line_po_line", "po_line_id"),
    )

    receipt_id: Mapped[UUID] = mapped_column(
        ForeignKey("procurement_goods_receipts.id"), nullable=False,
    )
    po_line_id: Mapped[UUID] = mapped_column(
        ForeignKey("procurement_purchase_order_lines.id"), nullable=False,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    quantity_ordered: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    quantity_received: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    quantity_rejected: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    receipt: Mapped["GoodsReceiptModel"] = relationship(
        "GoodsReceiptModel", back_populates="lines",
    )

    def to_dto(self):
        from p2p_modules.receiving.models import ReceiptLine

        return ReceiptLine(
            id=str(self.id),
            po_line_item_id=str(self.po_line_id),
            description=self.description,
            quantity_ordered=self.quantity_ordered,
            quantity_received=self.quantity_received,
            quantity_rejected=self.quantity_rejected,
            rejection_reason=self.rejection_reason,
        )

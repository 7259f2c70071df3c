"""
SQLAlchemy ORM persistence models for the Accounts Payable reference store.

Invariants enforced
-------------------
* Money and quantity fields use ``Decimal`` (Numeric(38,9)).
* ``bill_number`` is unique.
* ``purchase_order_id`` and ``po_line_item_id`` reference procurement
  rows by id only (no FK across modules).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from p2p_kernel.db.base import TrackedBase


class VendorBillModel(TrackedBase):
    """
    A vendor bill.

    Maps to the ``VendorBill`` DTO in ``p2p_modules.receiving.models``.
    """

    __tablename__ = "ap_vendor_bills"

    __table_args__ = (
        UniqueConstraint("bill_number", name="uq_vendor_bill_number"),
        Index("idx_vendor_bill_vendor", "vendor_id"),
        Index("idx_vendor_bill_po", "purchase_order_id"),
        Index("idx_vendor_bill_due", "due_date"),
    )

    bill_number: Mapped[str] = mapped_column(String(50), nullable=False)
    vendor_id: Mapped[str] = mapped_column(String(100), nullable=False)
    vendor_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    purchase_order_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bill_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")
    subtotal: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    tax_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    amount_paid: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    amount_due: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    lines: Mapped[list["VendorBillLineModel"]] = relationship(
        "VendorBillLineModel",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="VendorBillLineModel.line_number",
        lazy="selectin",
    )

    def to_dto(self):
        from p2p_modules.receiving.models import VendorBill, VendorBillStatus

        return VendorBill(
            id=str(self.id),
            bill_number=self.bill_number,
            vendor_id=self.vendor_id,
            vendor_name=self.vendor_name,
            bill_date=self.bill_date,
            due_date=self.due_date,
            status=VendorBillStatus(self.status),
            line_items=tuple(line.to_dto() for line in self.lines),
            subtotal=self.subtotal,
            tax_amount=self.tax_amount,
            total_amount=self.total_amount,
            amount_paid=self.amount_paid,
            amount_due=self.amount_due,
            purchase_order_id=self.purchase_order_id,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<VendorBillModel {self.bill_number} status={self.status} total={self.total_amount}>"


class VendorBillLineModel(TrackedBase):
    """One line on a vendor bill."""

    __tablename__ = "ap_vendor_bill_lines"

    __table_args__ = (
        UniqueConstraint("bill_id", "line_number", name="uq_vendor_bill_line_number"),
    )

    bill_id: Mapped[UUID] = mapped_column(
        ForeignKey("ap_vendor_bills.id"), nullable=False,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)
    total_price: Mapped[Decimal] = mapped_column(nullable=False)
    gl_account_id: Mapped[str] = mapped_column(String(50), nullable=False)
    po_line_item_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    bill: Mapped["VendorBillModel"] = relationship(
        "VendorBillModel", back_populates="lines",
    )

    def to_dto(self):
        from p2p_modules.receiving.models import VendorBillLine

        return VendorBillLine(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            total_price=self.total_price,
            gl_account_id=self.gl_account_id,
            po_line_item_id=self.po_line_item_id,
        )

"""
Accounts Payable Reference Store (``p2p_modules.ap.adapter``).

Responsibility
--------------
A SQLAlchemy-backed ``FinancialPort``.  Reports the three-way match of a
purchase order from the procurement tables and this module's bills, and
creates approved vendor bills.

Invariants enforced
-------------------
* A bill and the billed-quantity increments on its PO lines commit
  together.
* Bill numbers are ``BILL-<year>-<seq>``, year from the injected clock.

Failure modes
-------------
* ``ValidationError(field="lineItems")`` for a bill with no lines.
* ``NotFoundError`` for an unknown PO, PO line, or bill.
* ``NetworkError`` when the database is unavailable.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from p2p_kernel.domain.clock import Clock, SystemClock
from p2p_kernel.exceptions import NotFoundError, ValidationError
from p2p_kernel.logging_config import get_logger
from p2p_modules._store_helpers import parse_id, store_read, store_transaction
from p2p_modules.ap.matching import evaluate_three_way_match
from p2p_modules.ap.orm import VendorBillLineModel, VendorBillModel
from p2p_modules.procurement.adapter import SqlProcurementAdapter
from p2p_modules.receiving.models import (
    CreateVendorBillCommand,
    ThreeWayMatchStatus,
    VendorBill,
    VendorBillStatus,
)

logger = get_logger("modules.ap.adapter")


class SqlFinancialAdapter:
    """
    Accounts-payable collaborator backed by a SQLAlchemy session.

    Reads purchase orders and receipts through a ``SqlProcurementAdapter``
    bound to the same session.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: str = "system",
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._actor_id = actor_id
        self._procurement = SqlProcurementAdapter(session, self._clock)

    def get_three_way_match_status(self, po_id: str) -> ThreeWayMatchStatus:
        po = self._procurement.get_purchase_order(po_id)
        receipts = self._procurement.get_receipts_by_purchase_order(po_id)
        bills = self.get_bills_by_purchase_order(po_id)

        status = evaluate_three_way_match(po, receipts, bills)
        logger.debug("ap_match_status_evaluated", extra={
            "po_id": po_id,
            "receipt_count": len(receipts),
            "bill_count": len(bills),
            "fully_matched": status.fully_matched,
            "variance_count": len(status.variances),
        })
        return status

    def create_vendor_bill(self, command: CreateVendorBillCommand) -> VendorBill:
        """Create an approved bill and roll its quantities onto the PO lines."""
        if not command.line_items:
            raise ValidationError("Vendor bill must have at least one line", field="lineItems")

        with store_transaction(self._session, "create_vendor_bill"):
            vendor_name = ""
            if command.purchase_order_id is not None:
                vendor_name = self._procurement.get_purchase_order(
                    command.purchase_order_id,
                ).vendor_name

            subtotal = sum((line.total_price for line in command.line_items), Decimal("0"))
            bill = VendorBillModel(
                bill_number=command.bill_number or self._next_bill_number(),
                vendor_id=command.vendor_id,
                vendor_name=vendor_name,
                purchase_order_id=command.purchase_order_id,
                bill_date=command.bill_date,
                due_date=command.due_date,
                status=VendorBillStatus.APPROVED.value,
                subtotal=subtotal,
                tax_amount=Decimal("0"),
                total_amount=subtotal,
                amount_paid=Decimal("0"),
                amount_due=subtotal,
                created_by_id=self._actor_id,
                created_at=self._clock.now(),
            )
            for number, line in enumerate(command.line_items, start=1):
                bill.lines.append(VendorBillLineModel(
                    line_number=number,
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total_price=line.total_price,
                    gl_account_id=line.gl_account_id,
                    po_line_item_id=line.po_line_item_id,
                    created_by_id=self._actor_id,
                ))
            self._session.add(bill)

            if command.purchase_order_id is not None:
                billed: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
                for line in command.line_items:
                    if line.po_line_item_id is not None:
                        billed[line.po_line_item_id] += line.quantity
                self._procurement.apply_billed_quantities(
                    command.purchase_order_id, billed, self._actor_id,
                )

            self._session.flush()
            logger.info("ap_vendor_bill_created", extra={
                "bill_id": str(bill.id),
                "bill_number": bill.bill_number,
                "vendor_id": command.vendor_id,
                "po_id": command.purchase_order_id,
                "total_amount": str(bill.total_amount),
                "due_date": command.due_date,
            })
            return bill.to_dto()

    def get_vendor_bill(self, bill_id: str) -> VendorBill:
        with store_read(self._session, "get_vendor_bill"):
            bill = self._session.get(VendorBillModel, parse_id("VendorBill", bill_id))
            if bill is None:
                raise NotFoundError("VendorBill", bill_id)
            return bill.to_dto()

    def get_bills_by_purchase_order(self, po_id: str) -> list[VendorBill]:
        with store_read(self._session, "get_bills_by_purchase_order"):
            stmt = (
                select(VendorBillModel)
                .where(VendorBillModel.purchase_order_id == po_id)
                .order_by(VendorBillModel.bill_number)
            )
            return [b.to_dto() for b in self._session.scalars(stmt)]

    def _next_bill_number(self) -> str:
        prefix = f"BILL-{self._clock.now().year}-"
        count = self._session.scalar(
            select(func.count(VendorBillModel.id))
            .where(VendorBillModel.bill_number.like(f"{prefix}%"))
        ) or 0
        return f"{prefix}{count + 1:03d}"

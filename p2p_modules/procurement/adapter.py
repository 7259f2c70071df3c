"""
Procurement Reference Store (``p2p_modules.procurement.adapter``).

Responsibility
--------------
A SQLAlchemy-backed ``ProcurementPort``: purchase orders, their cumulative
received/billed quantities, and goods receipts.  It is the system of
record the receiving workflow re-reads after posting, so the PO status
transition on receipt happens here, not in the workflow.

Invariants enforced
-------------------
* Each public method owns its transaction boundary (commit on success,
  rollback on failure) via ``store_transaction``.
* ``create_receipt`` records exactly one receipt and adds its received
  quantities onto the PO lines in the same transaction.
* PO status transitions follow ``PURCHASE_ORDER_WORKFLOW``.

Failure modes
-------------
* ``NotFoundError`` for an unknown PO, PO line, or receipt.
* ``ValidationError(field="poStatus")`` if a receipt would drive an
  undeclared PO status transition.
* ``ValidationError(field="quantityReceived")`` if a line's cumulative
  received quantity would exceed ordered by more than the store's
  over-receipt tolerance (default 10%), or a quantity is negative.
* ``NetworkError`` when the database is unavailable.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from p2p_kernel.domain.clock import Clock, SystemClock
from p2p_kernel.exceptions import NotFoundError, ValidationError
from p2p_kernel.logging_config import get_logger
from p2p_modules._store_helpers import parse_id, store_read, store_transaction
from p2p_modules.procurement.orm import (
    GoodsReceiptLineModel,
    GoodsReceiptModel,
    PurchaseOrderLineModel,
    PurchaseOrderModel,
)
from p2p_modules.procurement.workflows import PURCHASE_ORDER_WORKFLOW
from p2p_modules.receiving.models import (
    CreateReceiptCommand,
    POStatus,
    PurchaseOrder,
    Receipt,
    ReceiptStatus,
)
from p2p_modules.receiving.validation import exceeds_tolerance

logger = get_logger("modules.procurement.adapter")


class SqlProcurementAdapter:
    """
    Procurement collaborator backed by a SQLAlchemy session.

    Contract
    --------
    Implements ``ProcurementPort``.  ``create_purchase_order`` and
    ``apply_billed_quantities`` are store-specific extras used for
    seeding and by the AP reference store.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        over_receipt_tolerance_percent: Decimal = Decimal("10"),
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._tolerance = over_receipt_tolerance_percent / Decimal("100")
        self._tolerance_percent = over_receipt_tolerance_percent

    # =========================================================================
    # Purchase Orders
    # =========================================================================

    def create_purchase_order(
        self,
        po_number: str,
        vendor_id: str,
        lines: Sequence[Mapping[str, Any]],
        actor_id: str,
        vendor_name: str = "",
        status: POStatus = POStatus.SENT,
        order_date: date | None = None,
        tax_amount: Decimal = Decimal("0"),
        shipping_amount: Decimal = Decimal("0"),
    ) -> PurchaseOrder:
        """
        Create a purchase order.

        Each line mapping takes ``description``, ``quantity``,
        ``unit_price`` and optionally ``item_id``, ``sku``,
        ``gl_account_id``.
        """
        with store_transaction(self._session, "create_purchase_order"):
            po = PurchaseOrderModel(
                po_number=po_number,
                vendor_id=vendor_id,
                vendor_name=vendor_name,
                order_date=order_date or self._clock.today(),
                status=status.value,
                tax_amount=tax_amount,
                shipping_amount=shipping_amount,
                created_by_id=actor_id,
            )
            subtotal = Decimal("0")
            for number, line in enumerate(lines, start=1):
                quantity = Decimal(str(line["quantity"]))
                unit_price = Decimal(str(line["unit_price"]))
                line_total = quantity * unit_price
                subtotal += line_total
                po.lines.append(
                    PurchaseOrderLineModel(
                        line_number=number,
                        description=line["description"],
                        item_id=line.get("item_id"),
                        sku=line.get("sku"),
                        quantity=quantity,
                        unit_price=unit_price,
                        total_price=line_total,
                        gl_account_id=line.get("gl_account_id", ""),
                        created_by_id=actor_id,
                    )
                )
            po.subtotal = subtotal
            po.total_amount = subtotal + tax_amount + shipping_amount
            self._session.add(po)
            self._session.flush()

            logger.info("procurement_po_created", extra={
                "po_id": str(po.id),
                "po_number": po_number,
                "vendor_id": vendor_id,
                "line_count": len(po.lines),
                "total_amount": str(po.total_amount),
            })
            return po.to_dto()

    def get_purchase_order(self, po_id: str) -> PurchaseOrder:
        with store_read(self._session, "get_purchase_order"):
            return self._load_po(po_id).to_dto()

    # =========================================================================
    # Receipts
    # =========================================================================

    def create_receipt(self, command: CreateReceiptCommand) -> Receipt:
        """
        Record one goods receipt and roll its quantities onto the PO.

        Rejected quantities are kept on the receipt line only.
        """
        with store_transaction(self._session, "create_receipt"):
            po = self._load_po(command.purchase_order_id)
            po_lines = {str(line.id): line for line in po.lines}

            receipt = GoodsReceiptModel(
                receipt_number=self._next_receipt_number(),
                purchase_order=po,
                received_by=command.received_by,
                received_date=command.received_date,
                status=ReceiptStatus.COMPLETED.value,
                notes=command.notes,
                created_by_id=command.received_by,
                created_at=self._clock.now(),
            )

            for number, line in enumerate(command.line_items, start=1):
                po_line = po_lines.get(line.po_line_item_id)
                if po_line is None:
                    raise NotFoundError("PurchaseOrderLine", line.po_line_item_id)

                if line.quantity_received < 0:
                    raise ValidationError(
                        f"Received quantity cannot be negative: {line.quantity_received}",
                        field="quantityReceived",
                    )
                cumulative = po_line.quantity_received + line.quantity_received
                if exceeds_tolerance(po_line.quantity, cumulative, self._tolerance):
                    logger.warning("procurement_over_receipt_rejected", extra={
                        "po_id": str(po.id),
                        "po_line_id": str(po_line.id),
                        "quantity_ordered": str(po_line.quantity),
                        "cumulative_received": str(cumulative),
                    })
                    raise ValidationError(
                        f"Cumulative received {cumulative} is "
                        f">{self._tolerance_percent}% over ordered {po_line.quantity}",
                        field="quantityReceived",
                    )
                po_line.quantity_received = cumulative
                po_line.updated_by_id = command.received_by
                receipt.lines.append(
                    GoodsReceiptLineModel(
                        po_line_id=po_line.id,
                        line_number=number,
                        description=po_line.description,
                        quantity_ordered=po_line.quantity,
                        quantity_received=line.quantity_received,
                        quantity_rejected=line.quantity_rejected or Decimal("0"),
                        rejection_reason=line.rejection_reason,
                        created_by_id=command.received_by,
                    )
                )

            self._transition_after_receipt(po, command.received_by)
            self._session.add(receipt)
            self._session.flush()

            logger.info("procurement_receipt_created", extra={
                "receipt_id": str(receipt.id),
                "receipt_number": receipt.receipt_number,
                "po_id": str(po.id),
                "po_status": po.status,
                "line_count": len(receipt.lines),
            })
            return receipt.to_dto()

    def get_receipt(self, receipt_id: str) -> Receipt:
        with store_read(self._session, "get_receipt"):
            receipt = self._session.get(
                GoodsReceiptModel, parse_id("Receipt", receipt_id),
            )
            if receipt is None:
                raise NotFoundError("Receipt", receipt_id)
            return receipt.to_dto()

    def get_receipts_by_purchase_order(self, po_id: str) -> list[Receipt]:
        with store_read(self._session, "get_receipts_by_purchase_order"):
            stmt = (
                select(GoodsReceiptModel)
                .where(GoodsReceiptModel.purchase_order_id == parse_id("PurchaseOrder", po_id))
                .order_by(GoodsReceiptModel.receipt_number)
            )
            return [r.to_dto() for r in self._session.scalars(stmt)]

    # =========================================================================
    # Billing support
    # =========================================================================

    def apply_billed_quantities(
        self,
        po_id: str,
        quantities: Mapping[str, Decimal],
        actor_id: str,
    ) -> None:
        """
        Add billed quantities onto PO lines.

        Joins the caller's transaction: no commit here.
        """
        po = self._load_po(po_id)
        po_lines = {str(line.id): line for line in po.lines}
        for line_id, quantity in quantities.items():
            po_line = po_lines.get(line_id)
            if po_line is None:
                raise NotFoundError("PurchaseOrderLine", line_id)
            po_line.quantity_billed = po_line.quantity_billed + quantity
            po_line.updated_by_id = actor_id

    # =========================================================================
    # Internals
    # =========================================================================

    def _load_po(self, po_id: str) -> PurchaseOrderModel:
        po = self._session.get(PurchaseOrderModel, parse_id("PurchaseOrder", po_id))
        if po is None:
            raise NotFoundError("PurchaseOrder", po_id)
        return po

    def _next_receipt_number(self) -> str:
        prefix = f"REC-{self._clock.now().year}-"
        count = self._session.scalar(
            select(func.count(GoodsReceiptModel.id))
            .where(GoodsReceiptModel.receipt_number.like(f"{prefix}%"))
        ) or 0
        return f"{prefix}{count + 1:03d}"

    def _transition_after_receipt(self, po: PurchaseOrderModel, actor_id: str) -> None:
        if all(line.quantity_received >= line.quantity for line in po.lines):
            new_status = POStatus.RECEIVED.value
        elif any(line.quantity_received > 0 for line in po.lines):
            new_status = POStatus.PARTIAL.value
        else:
            return

        if PURCHASE_ORDER_WORKFLOW.find_transition(po.status, new_status) is None:
            raise ValidationError(
                f"Cannot move PO {po.po_number} from {po.status} to {new_status}",
                field="poStatus",
            )
        logger.debug("procurement_po_status_changed", extra={
            "po_id": str(po.id),
            "from_status": po.status,
            "to_status": new_status,
        })
        po.status = new_status
        po.updated_by_id = actor_id

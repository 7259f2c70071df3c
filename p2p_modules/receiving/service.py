"""
Receiving Module Service (``p2p_modules.receiving.service``).

Responsibility
--------------
Orchestrates the receive-from-PO workflow: validate the delivery, record
the goods receipt, post inventory per received line, re-read the PO to
learn its new status, and -- when the PO is fully received and the caller
asked for it -- evaluate the three-way match and create the vendor bill.

Architecture position
---------------------
**Modules layer** -- thin ERP glue.  ``ReceivingService`` is the sole
public entry point for receiving.  It composes the pure validator and
bill helpers with three injected collaborator ports
(``ProcurementPort``, ``InventoryPort``, ``FinancialPort``).

Invariants enforced
-------------------
* Validation completes before any collaborator is mutated.
* The post-receipt PO read happens strictly after every inventory posting
  for the receipt has completed.
* Match evaluation happens only after the PO is confirmed ``received``.
* A vendor bill is created only when the match is ``fully_matched``.

Failure modes
-------------
* ``ValidationError`` -- status, unknown line, or over-tolerance quantity;
  raised before any receipt exists.
* ``NotFoundError`` / ``NetworkError`` -- propagated unmodified from the
  collaborator that raised it.
* Any failure after the receipt is recorded leaves a durable receipt with
  incomplete downstream effects.  It is logged as
  ``receiving_downstream_incomplete`` with the receipt id and re-raised;
  reconciliation happens out of band.

Usage::

    service = ReceivingService(procurement, inventory, financial)
    result = service.receive_inventory_from_po(
        ReceiveInventoryFromPOCommand(
            purchase_order_id="po-001",
            received_by="user-1",
            received_date=datetime.now(timezone.utc),
            location_id="main",
            line_items=(ReceiptLineInput("line-1", Decimal("5")),),
            auto_create_ap_bill=True,
        )
    )
"""

from __future__ import annotations

import contextvars
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from p2p_kernel.logging_config import LogContext, get_logger
from p2p_modules.receiving.billing import (
    build_vendor_bill_command,
    is_already_billed,
    total_amount,
    total_quantity,
)
from p2p_modules.receiving.config import ReceivingConfig
from p2p_modules.receiving.models import (
    CreateReceiptCommand,
    InventoryTransaction,
    MatchStatus,
    POStatus,
    PurchaseOrder,
    Receipt,
    ReceiptLineCommand,
    ReceiveInventoryCommand,
    ReceiveInventoryFromPOCommand,
    ReceiveInventoryFromPOResult,
    ReceivedLineItem,
    ThreeWayMatchStatus,
    VendorBill,
)
from p2p_modules.receiving.ports import FinancialPort, InventoryPort, ProcurementPort
from p2p_modules.receiving.validation import validate_receipt_lines
from p2p_modules.receiving.workflows import RECEIVING_WORKFLOW, WorkflowRun

logger = get_logger("modules.receiving.service")

BILL_SKIPPED_ALREADY_BILLED = "already_billed"


class ReceivingService:
    """
    Receives deliveries against purchase orders.

    Contract
    --------
    * ``receive_inventory_from_po`` returns a fully assembled result or
      raises at the first failing step; no partial result is returned.
    * ``get_receipts_by_po`` forwards to procurement.

    Non-goals
    ---------
    * Does NOT retry collaborator calls.
    * Does NOT serialise concurrent runs against the same PO; the
      procurement and inventory collaborators own that.
    * Does NOT compensate earlier steps when a later one fails.
    """

    def __init__(
        self,
        procurement: ProcurementPort,
        inventory: InventoryPort,
        financial: FinancialPort,
        config: ReceivingConfig | None = None,
    ):
        self._procurement = procurement
        self._inventory = inventory
        self._financial = financial
        self._config = config or ReceivingConfig.with_defaults()

    # =========================================================================
    # Receiving
    # =========================================================================

    def receive_inventory_from_po(
        self,
        command: ReceiveInventoryFromPOCommand,
    ) -> ReceiveInventoryFromPOResult:
        """
        Receive a delivery against an open purchase order.

        Steps: validate -> record_receipt -> post_inventory ->
        resolve_po_status -> [evaluate_match -> generate_bill].
        """
        with LogContext.bind(
            purchase_order_id=command.purchase_order_id,
            actor_id=command.received_by,
        ):
            logger.info("receiving_started", extra={
                "location_id": command.location_id,
                "line_count": len(command.line_items),
                "auto_create_ap_bill": command.auto_create_ap_bill,
            })

            run = WorkflowRun(RECEIVING_WORKFLOW)

            po = self._procurement.get_purchase_order(command.purchase_order_id)
            lines = validate_receipt_lines(po, command.line_items, self._config)

            run.advance("record_receipt")
            receipt = self._record_receipt(command)

            with LogContext.bind(receipt_id=receipt.id):
                try:
                    result = self._complete_receipt(run, command, po, lines, receipt)
                except Exception:
                    logger.error(
                        "receiving_downstream_incomplete",
                        extra={
                            "receipt_number": receipt.receipt_number,
                            "failed_step": run.state,
                        },
                        exc_info=True,
                    )
                    raise

                logger.info("receiving_completed", extra={
                    "receipt_number": result.receipt_number,
                    "po_status": result.po_status.value,
                    "match_status": result.match_status.value,
                    "ap_bill_id": result.ap_bill_id,
                    "total_items_received": str(result.total_items_received),
                    "total_amount": str(result.total_amount),
                    "steps": run.history,
                })
                return result

    def get_receipts_by_po(self, po_id: str) -> Sequence[Receipt]:
        """All receipts recorded against a PO (tracks partial deliveries)."""
        return self._procurement.get_receipts_by_purchase_order(po_id)

    # =========================================================================
    # Steps
    # =========================================================================

    def _complete_receipt(
        self,
        run: WorkflowRun,
        command: ReceiveInventoryFromPOCommand,
        po: PurchaseOrder,
        lines: tuple[ReceivedLineItem, ...],
        receipt: Receipt,
    ) -> ReceiveInventoryFromPOResult:
        run.advance("post_inventory")
        self._post_inventory(command, po, lines)

        run.advance("resolve_po_status")
        updated_po, po_status = self._resolve_po_status(command.purchase_order_id)

        ap_bill_id: str | None = None
        bill_skipped_reason: str | None = None
        match_status = MatchStatus.TWO_WAY

        if po_status is POStatus.RECEIVED and command.auto_create_ap_bill:
            run.advance("evaluate_match")
            match = self._evaluate_match(command.purchase_order_id)

            if match.fully_matched:
                run.advance("generate_bill")
                if self._config.prevent_duplicate_bills and is_already_billed(updated_po):
                    bill_skipped_reason = BILL_SKIPPED_ALREADY_BILLED
                    logger.warning("receiving_bill_already_exists", extra={
                        "po_number": po.po_number,
                    })
                else:
                    bill = self._generate_bill(command, po, lines)
                    ap_bill_id = bill.id
                match_status = MatchStatus.THREE_WAY

        run.advance("completed")

        return ReceiveInventoryFromPOResult(
            receipt_id=receipt.id,
            receipt_number=receipt.receipt_number,
            purchase_order_id=po.id,
            po_number=po.po_number,
            po_status=po_status,
            items_received=lines,
            total_items_received=total_quantity(lines),
            total_amount=total_amount(lines),
            match_status=match_status,
            received_date=command.received_date,
            ap_bill_id=ap_bill_id,
            created_at=receipt.created_at,
            bill_skipped_reason=bill_skipped_reason,
        )

    def _record_receipt(self, command: ReceiveInventoryFromPOCommand) -> Receipt:
        receipt_command = CreateReceiptCommand(
            purchase_order_id=command.purchase_order_id,
            received_by=command.received_by,
            received_date=command.received_date,
            line_items=tuple(
                ReceiptLineCommand(
                    po_line_item_id=line.po_line_item_id,
                    quantity_received=line.quantity_received,
                    quantity_rejected=line.quantity_rejected,
                    rejection_reason=line.rejection_reason,
                )
                for line in command.line_items
            ),
            notes=command.notes,
        )
        receipt = self._procurement.create_receipt(receipt_command)
        logger.info("receiving_receipt_recorded", extra={
            "receipt_id": receipt.id,
            "receipt_number": receipt.receipt_number,
        })
        return receipt

    def _post_inventory(
        self,
        command: ReceiveInventoryFromPOCommand,
        po: PurchaseOrder,
        lines: Sequence[ReceivedLineItem],
    ) -> list[InventoryTransaction]:
        """
        One inventory increase per line with a positive received quantity.

        Rejected quantities stay on the receipt only.  With more than one
        worker the postings run concurrently, but every posting is awaited
        and the first failure (in line order) is re-raised.
        """
        inventory_commands = [
            ReceiveInventoryCommand(
                item_id=line.item_id,
                location_id=command.location_id,
                quantity=line.quantity_received,
                unit_cost=line.unit_price,
                purchase_order_id=command.purchase_order_id,
                notes=f"Received from PO {po.po_number}",
            )
            for line in lines
            if line.quantity_received > 0
        ]

        workers = min(self._config.max_posting_workers, len(inventory_commands))
        if workers <= 1:
            transactions = [self._post_line(c) for c in inventory_commands]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [
                    pool.submit(contextvars.copy_context().run, self._post_line, c)
                    for c in inventory_commands
                ]
                # Wait for every posting before surfacing any failure.
                errors = [f.exception() for f in futures]
            for error in errors:
                if error is not None:
                    raise error
            transactions = [f.result() for f in futures]

        logger.info("receiving_inventory_posted", extra={
            "posted_lines": len(transactions),
            "skipped_lines": len(lines) - len(transactions),
        })
        return transactions

    def _post_line(self, command: ReceiveInventoryCommand) -> InventoryTransaction:
        transaction = self._inventory.receive_inventory(command)
        logger.debug("receiving_inventory_line_posted", extra={
            "item_id": command.item_id,
            "quantity": str(command.quantity),
            "unit_cost": str(command.unit_cost),
        })
        return transaction

    def _resolve_po_status(self, po_id: str) -> tuple[PurchaseOrder, POStatus]:
        """Re-read the PO from procurement and classify it."""
        updated_po = self._procurement.get_purchase_order(po_id)
        fully_received = all(line.is_fully_received for line in updated_po.line_items)
        po_status = POStatus.RECEIVED if fully_received else POStatus.PARTIAL
        logger.info("receiving_po_status_resolved", extra={
            "po_status": po_status.value,
            "reported_status": updated_po.status.value,
        })
        return updated_po, po_status

    def _evaluate_match(self, po_id: str) -> ThreeWayMatchStatus:
        match = self._financial.get_three_way_match_status(po_id)
        logger.info("receiving_match_evaluated", extra={
            "po_matched": match.po_matched,
            "receipt_matched": match.receipt_matched,
            "fully_matched": match.fully_matched,
            "variance_count": len(match.variances),
        })
        return match

    def _generate_bill(
        self,
        command: ReceiveInventoryFromPOCommand,
        po: PurchaseOrder,
        lines: Sequence[ReceivedLineItem],
    ) -> VendorBill:
        bill_command = build_vendor_bill_command(
            po,
            lines,
            bill_date=command.received_date.date(),
            term_days=self._config.payment_terms_days,
            expense_account_code=self._config.expense_account_code,
        )
        bill = self._financial.create_vendor_bill(bill_command)
        logger.info("receiving_bill_created", extra={
            "ap_bill_id": bill.id,
            "bill_number": bill.bill_number,
            "due_date": bill_command.due_date,
        })
        return bill

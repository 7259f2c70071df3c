"""
Receiving Validation (``p2p_modules.receiving.validation``).

Responsibility
--------------
Pure checks that a purchase order can be received against and that the
requested quantities respect the over-receipt tolerance.  Produces the
enriched line list every later step of the workflow consumes.

Architecture
------------
Layer: **Modules** -- pure functions.  No I/O, no session, no clock.

Failure Modes
-------------
- ``ValidationError(field="poStatus")``: PO not in a receivable status.
- ``ValidationError(field="poLineItemId")``: line not on the PO.
- ``ValidationError(field="quantityReceived")``: negative quantity, or the
  line's cumulative received quantity (earlier deliveries plus every
  line of this delivery naming it) exceeds ordered by more than the
  tolerance.  Exactly the tolerance is accepted.
- ``ValidationError(field="quantityRejected")``: negative rejected quantity.

Zero and partial quantities are always accepted (partial delivery).
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal

from p2p_kernel.exceptions import ValidationError
from p2p_kernel.logging_config import get_logger
from p2p_modules.receiving.config import ReceivingConfig
from p2p_modules.receiving.models import (
    PurchaseOrder,
    ReceiptLineInput,
    ReceivedLineItem,
)

logger = get_logger("modules.receiving.validation")


def ensure_receivable(po: PurchaseOrder, config: ReceivingConfig) -> None:
    """Raise ``ValidationError(field="poStatus")`` unless goods may be received."""
    if po.status not in config.receivable_statuses:
        logger.warning(
            "receiving_po_not_receivable",
            extra={"po_id": po.id, "po_status": po.status.value},
        )
        raise ValidationError(
            f"Cannot receive from PO in {po.status.value} status",
            field="poStatus",
        )


def exceeds_tolerance(
    quantity_ordered: Decimal,
    quantity_received: Decimal,
    tolerance: Decimal,
) -> bool:
    """True when the over-receipt is strictly above ``ordered * tolerance``."""
    return quantity_received - quantity_ordered > quantity_ordered * tolerance


def validate_receipt_lines(
    po: PurchaseOrder,
    lines: Sequence[ReceiptLineInput],
    config: ReceivingConfig,
) -> tuple[ReceivedLineItem, ...]:
    """
    Validate a delivery against its PO and enrich each line.

    Preconditions:
        - ``po`` is the current snapshot from procurement, so each line's
          ``quantity_received`` already holds earlier deliveries.

    Postconditions:
        - One ``ReceivedLineItem`` per input line, in input order.
        - ``variance == quantity_received - quantity_ordered``.
        - ``line_total == quantity_received * unit_price``.
        - For every PO line, earlier deliveries plus every input line that
          names it stay within the tolerance.

    Raises:
        ValidationError: on the first rule violated, in input order
            (status, unknown line, negative quantity, cumulative
            over-tolerance quantity).
    """
    ensure_receivable(po, config)

    tolerance = config.over_receipt_tolerance
    delivered: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    validated: list[ReceivedLineItem] = []

    for line in lines:
        po_line = po.find_line(line.po_line_item_id)
        if po_line is None:
            logger.warning(
                "receiving_unknown_po_line",
                extra={"po_id": po.id, "po_line_item_id": line.po_line_item_id},
            )
            raise ValidationError(
                f"PO line item {line.po_line_item_id} not found",
                field="poLineItemId",
            )

        quantity_ordered = po_line.quantity
        quantity_received = line.quantity_received
        _ensure_not_negative(line)

        delivered[po_line.id] += quantity_received
        cumulative = po_line.quantity_received + delivered[po_line.id]
        if exceeds_tolerance(quantity_ordered, cumulative, tolerance):
            logger.warning(
                "receiving_over_tolerance",
                extra={
                    "po_id": po.id,
                    "po_line_item_id": po_line.id,
                    "quantity_ordered": str(quantity_ordered),
                    "previously_received": str(po_line.quantity_received),
                    "quantity_received": str(delivered[po_line.id]),
                    "tolerance_percent": str(config.over_receipt_tolerance_percent),
                },
            )
            raise ValidationError(
                f"Cannot receive {quantity_received}: cumulative {cumulative} is "
                f">{config.over_receipt_tolerance_percent}% over ordered {quantity_ordered}",
                field="quantityReceived",
            )

        # Item identity falls back to the line description when the PO
        # line carries no inventory item reference.
        item_id = po_line.item_id or po_line.description
        validated.append(
            ReceivedLineItem(
                po_line_item_id=po_line.id,
                item_id=item_id,
                item_sku=po_line.sku or po_line.description,
                quantity_ordered=quantity_ordered,
                quantity_received=quantity_received,
                quantity_rejected=line.quantity_rejected or Decimal("0"),
                variance=quantity_received - quantity_ordered,
                unit_price=po_line.unit_price,
                line_total=quantity_received * po_line.unit_price,
                rejection_reason=line.rejection_reason,
            )
        )

    logger.debug(
        "receiving_lines_validated",
        extra={"po_id": po.id, "line_count": len(validated)},
    )
    return tuple(validated)


def _ensure_not_negative(line: ReceiptLineInput) -> None:
    if line.quantity_received < 0:
        raise ValidationError(
            f"Received quantity cannot be negative: {line.quantity_received}",
            field="quantityReceived",
        )
    if line.quantity_rejected is not None and line.quantity_rejected < 0:
        raise ValidationError(
            f"Rejected quantity cannot be negative: {line.quantity_rejected}",
            field="quantityRejected",
        )

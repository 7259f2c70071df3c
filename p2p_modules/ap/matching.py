"""
Three-Way Match Evaluation (``p2p_modules.ap.matching``).

Responsibility
--------------
Compare a purchase order, the goods receipts recorded against it, and the
vendor bills raised for it, and report where they disagree.  Pure: no I/O,
no session, no clock.

Rules
-----
* ``po_matched``: the PO has lines and every line has received >= ordered.
* ``receipt_matched``: at least one receipt exists, and for every PO line
  the receipt-line quantities sum to the line's cumulative received
  quantity.
* ``fully_matched``: both of the above and no variances.

Variances
---------
* ``item``: a receipt or bill line references a line not on the PO.
* ``quantity``: receipts disagree with the PO's received quantity, or
  billed quantity exceeds received quantity.
* ``price``: a bill line's unit price differs from the PO unit price.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal

from p2p_modules.receiving.models import (
    MatchVariance,
    PurchaseOrder,
    Receipt,
    ThreeWayMatchStatus,
    VarianceType,
    VendorBill,
)


def received_quantities(receipts: Sequence[Receipt]) -> dict[str, Decimal]:
    """Sum receipt-line quantities per PO line id."""
    totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for receipt in receipts:
        for line in receipt.line_items:
            totals[line.po_line_item_id] += line.quantity_received
    return dict(totals)


def evaluate_three_way_match(
    po: PurchaseOrder,
    receipts: Sequence[Receipt],
    bills: Sequence[VendorBill] = (),
) -> ThreeWayMatchStatus:
    variances: list[MatchVariance] = []
    po_line_ids = {line.id for line in po.line_items}

    receipt_totals = received_quantities(receipts)
    for line_id in receipt_totals:
        if line_id not in po_line_ids:
            variances.append(MatchVariance(
                type=VarianceType.ITEM,
                description=f"Receipt references unknown PO line {line_id}",
                expected="",
                actual=line_id,
            ))

    receipt_matched = bool(receipts)
    for line in po.line_items:
        receipted = receipt_totals.get(line.id, Decimal("0"))
        if receipted != line.quantity_received:
            receipt_matched = False
            variances.append(MatchVariance(
                type=VarianceType.QUANTITY,
                description=f"Receipts for {line.description} disagree with PO received quantity",
                expected=str(line.quantity_received),
                actual=str(receipted),
            ))
        if line.quantity_billed > line.quantity_received:
            variances.append(MatchVariance(
                type=VarianceType.QUANTITY,
                description=f"Billed quantity exceeds received quantity for {line.description}",
                expected=str(line.quantity_received),
                actual=str(line.quantity_billed),
            ))

    for bill in bills:
        for bill_line in bill.line_items:
            if bill_line.po_line_item_id is None:
                continue
            po_line = po.find_line(bill_line.po_line_item_id)
            if po_line is None:
                variances.append(MatchVariance(
                    type=VarianceType.ITEM,
                    description=f"Bill {bill.bill_number} references unknown PO line",
                    expected="",
                    actual=bill_line.po_line_item_id,
                ))
            elif bill_line.unit_price != po_line.unit_price:
                variances.append(MatchVariance(
                    type=VarianceType.PRICE,
                    description=f"Bill {bill.bill_number} price differs for {po_line.description}",
                    expected=str(po_line.unit_price),
                    actual=str(bill_line.unit_price),
                ))

    po_matched = bool(po.line_items) and all(
        line.is_fully_received for line in po.line_items
    )

    return ThreeWayMatchStatus(
        purchase_order_id=po.id,
        po_matched=po_matched,
        receipt_matched=receipt_matched,
        fully_matched=po_matched and receipt_matched and not variances,
        variances=tuple(variances),
        receipt_id=receipts[-1].id if receipts else None,
        bill_id=bills[-1].id if bills else None,
    )

"""
Tests for three-way match evaluation (pure function).

Validates:
- PO matched when every line is fully received
- Receipt matched when receipt lines sum to PO received quantities
- Quantity, price and item variances
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from p2p_modules.ap.matching import evaluate_three_way_match, received_quantities
from p2p_modules.receiving.models import (
    Receipt,
    ReceiptLine,
    VarianceType,
    VendorBill,
    VendorBillLine,
)
from tests.modules.conftest import build_po

AT = datetime(2025, 1, 15, tzinfo=timezone.utc)


def _receipt(receipt_id, *pairs):
    return Receipt(
        id=receipt_id,
        receipt_number=f"REC-{receipt_id}",
        purchase_order_id="po-001",
        received_by="receiver-001",
        received_date=AT,
        line_items=tuple(
            ReceiptLine(id=f"{receipt_id}-{i}", po_line_item_id=line_id, quantity_received=Decimal(q))
            for i, (line_id, q) in enumerate(pairs)
        ),
    )


def _bill(bill_id, line_id, quantity, unit_price):
    return VendorBill(
        id=bill_id,
        bill_number=f"BILL-{bill_id}",
        vendor_id="vendor-001",
        bill_date=date(2025, 1, 15),
        due_date=date(2025, 2, 14),
        line_items=(VendorBillLine(
            description="Oak casket",
            quantity=Decimal(quantity),
            unit_price=Decimal(unit_price),
            total_price=Decimal(quantity) * Decimal(unit_price),
            gl_account_id="5001",
            po_line_item_id=line_id,
        ),),
    )


class TestReceivedQuantities:

    def test_sums_across_receipts(self):
        totals = received_quantities([
            _receipt("r1", ("line-1", "2"), ("line-2", "1")),
            _receipt("r2", ("line-1", "3")),
        ])
        assert totals == {"line-1": Decimal("5"), "line-2": Decimal("1")}


class TestThreeWayMatch:

    def test_fully_matched(self):
        po = build_po([("5", "1200")], received=["5"])
        status = evaluate_three_way_match(po, [_receipt("r1", ("line-1", "5"))])

        assert status.po_matched
        assert status.receipt_matched
        assert status.fully_matched
        assert status.variances == ()
        assert status.receipt_id == "r1"
        assert status.bill_id is None

    def test_partial_receipt_not_po_matched(self):
        po = build_po([("10", "200")], received=["6"])
        status = evaluate_three_way_match(po, [_receipt("r1", ("line-1", "6"))])

        assert not status.po_matched
        assert status.receipt_matched
        assert not status.fully_matched

    def test_no_receipts(self):
        po = build_po([("5", "1200")])
        status = evaluate_three_way_match(po, [])
        assert not status.receipt_matched
        assert status.receipt_id is None

    def test_receipts_disagree_with_po(self):
        po = build_po([("5", "1200")], received=["5"])
        status = evaluate_three_way_match(po, [_receipt("r1", ("line-1", "4"))])

        assert not status.receipt_matched
        assert not status.fully_matched
        [variance] = status.variances
        assert variance.type is VarianceType.QUANTITY
        assert variance.expected == "5"
        assert variance.actual == "4"

    def test_over_billing_is_variance(self):
        po = build_po([("5", "1200")], received=["5"], billed=["6"])
        status = evaluate_three_way_match(po, [_receipt("r1", ("line-1", "5"))])

        assert status.po_matched and status.receipt_matched
        assert not status.fully_matched
        assert [v.type for v in status.variances] == [VarianceType.QUANTITY]

    def test_bill_price_variance(self):
        po = build_po([("5", "1200")], received=["5"], billed=["5"])
        status = evaluate_three_way_match(
            po, [_receipt("r1", ("line-1", "5"))], [_bill("b1", "line-1", "5", "1250")],
        )

        assert not status.fully_matched
        [variance] = status.variances
        assert variance.type is VarianceType.PRICE
        assert variance.expected == "1200"
        assert variance.actual == "1250"
        assert status.bill_id == "b1"

    def test_unknown_lines_are_item_variances(self):
        po = build_po([("5", "1200")], received=["5"])
        status = evaluate_three_way_match(
            po,
            [_receipt("r1", ("line-1", "5"), ("line-x", "1"))],
            [_bill("b1", "line-y", "1", "10")],
        )
        assert [v.type for v in status.variances] == [VarianceType.ITEM, VarianceType.ITEM]

    def test_empty_po_never_matches(self):
        po = build_po([])
        assert not evaluate_three_way_match(po, []).po_matched

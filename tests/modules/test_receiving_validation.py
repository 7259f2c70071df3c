"""
Tests for receiving validation (pure functions).

Validates:
- Receivable PO statuses
- Unknown PO line rejection
- Over-receipt tolerance boundary (exactly 10% passes)
- Line enrichment (variance, line total, item/sku fallback)
"""

import dataclasses
from decimal import Decimal

import pytest

from p2p_kernel.exceptions import ValidationError
from p2p_modules.receiving.config import ReceivingConfig
from p2p_modules.receiving.models import POStatus, PurchaseOrderLine, ReceiptLineInput
from p2p_modules.receiving.validation import (
    ensure_receivable,
    exceeds_tolerance,
    validate_receipt_lines,
)
from tests.modules.conftest import build_po


def _lines(*pairs):
    return tuple(
        ReceiptLineInput(po_line_item_id=line_id, quantity_received=Decimal(q))
        for line_id, q in pairs
    )


class TestEnsureReceivable:

    @pytest.mark.parametrize("status", [POStatus.SENT, POStatus.ACKNOWLEDGED, POStatus.PARTIAL])
    def test_open_statuses_accepted(self, status):
        ensure_receivable(build_po([("5", "10")], status=status), ReceivingConfig())

    @pytest.mark.parametrize(
        "status",
        [POStatus.DRAFT, POStatus.RECEIVED, POStatus.CLOSED, POStatus.CANCELLED],
    )
    def test_other_statuses_rejected(self, status):
        with pytest.raises(ValidationError) as exc_info:
            ensure_receivable(build_po([("5", "10")], status=status), ReceivingConfig())
        assert exc_info.value.field == "poStatus"
        assert status.value in exc_info.value.message

    def test_configured_statuses_respected(self):
        config = ReceivingConfig(receivable_statuses=frozenset({POStatus.ACKNOWLEDGED}))
        with pytest.raises(ValidationError):
            ensure_receivable(build_po([("5", "10")], status=POStatus.SENT), config)


class TestExceedsTolerance:

    def test_exactly_at_tolerance_is_allowed(self):
        assert not exceeds_tolerance(Decimal("10"), Decimal("11"), Decimal("0.10"))

    def test_just_above_tolerance(self):
        assert exceeds_tolerance(Decimal("10"), Decimal("11.01"), Decimal("0.10"))

    def test_under_receipt_never_exceeds(self):
        assert not exceeds_tolerance(Decimal("10"), Decimal("0"), Decimal("0"))

    def test_zero_tolerance_rejects_any_excess(self):
        assert exceeds_tolerance(Decimal("10"), Decimal("10.001"), Decimal("0"))


class TestValidateReceiptLines:

    def test_unknown_line_rejected(self):
        po = build_po([("5", "1200")])
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_lines(po, _lines(("line-99", "1")), ReceivingConfig())
        assert exc_info.value.field == "poLineItemId"
        assert "line-99" in exc_info.value.message

    def test_over_tolerance_rejected(self):
        po = build_po([("10", "200")])
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_lines(po, _lines(("line-1", "12")), ReceivingConfig())
        assert exc_info.value.field == "quantityReceived"

    def test_status_checked_before_lines(self):
        po = build_po([("10", "200")], status=POStatus.CLOSED)
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_lines(po, _lines(("line-99", "50")), ReceivingConfig())
        assert exc_info.value.field == "poStatus"

    def test_first_violation_wins(self):
        po = build_po([("10", "200"), ("5", "100")])
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_lines(
                po, _lines(("line-1", "20"), ("line-99", "1")), ReceivingConfig(),
            )
        assert exc_info.value.field == "quantityReceived"

    def test_enrichment(self):
        po = build_po([("10", "200")])
        [line] = validate_receipt_lines(po, _lines(("line-1", "6")), ReceivingConfig())
        assert line.po_line_item_id == "line-1"
        assert line.item_id == "item-1"
        assert line.item_sku == "SKU-1"
        assert line.quantity_ordered == Decimal("10")
        assert line.variance == Decimal("-4")
        assert line.unit_price == Decimal("200")
        assert line.line_total == Decimal("1200")
        assert line.quantity_rejected == Decimal("0")

    def test_item_and_sku_fall_back_to_description(self):
        po = build_po([("2", "50")])
        bare = PurchaseOrderLine(
            id="line-1", description="Memorial folder", quantity=Decimal("2"),
            unit_price=Decimal("50"),
        )
        po = dataclasses.replace(po, line_items=(bare,))
        [line] = validate_receipt_lines(po, _lines(("line-1", "2")), ReceivingConfig())
        assert line.item_id == "Memorial folder"
        assert line.item_sku == "Memorial folder"

    def test_zero_quantity_accepted(self):
        po = build_po([("10", "200")])
        [line] = validate_receipt_lines(po, _lines(("line-1", "0")), ReceivingConfig())
        assert line.quantity_received == Decimal("0")
        assert line.line_total == Decimal("0")

    def test_earlier_deliveries_count_toward_tolerance(self):
        po = build_po([("10", "200")], status=POStatus.PARTIAL, received=["8"])
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_lines(po, _lines(("line-1", "11")), ReceivingConfig())
        assert exc_info.value.field == "quantityReceived"
        assert "cumulative 19" in exc_info.value.message

    def test_cumulative_at_tolerance_accepted(self):
        # 8 already received + 3 now = 11 of 10 ordered
        po = build_po([("10", "200")], status=POStatus.PARTIAL, received=["8"])
        [line] = validate_receipt_lines(po, _lines(("line-1", "3")), ReceivingConfig())
        assert line.quantity_received == Decimal("3")
        assert line.variance == Decimal("-7")

    def test_repeated_line_summed_within_delivery(self):
        po = build_po([("10", "200")])
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_lines(
                po, _lines(("line-1", "10"), ("line-1", "10")), ReceivingConfig(),
            )
        assert exc_info.value.field == "quantityReceived"

    def test_repeated_line_within_tolerance_accepted(self):
        po = build_po([("10", "200")])
        lines = validate_receipt_lines(
            po, _lines(("line-1", "6"), ("line-1", "5")), ReceivingConfig(),
        )
        assert [line.quantity_received for line in lines] == [Decimal("6"), Decimal("5")]

    def test_custom_tolerance(self):
        config = ReceivingConfig(over_receipt_tolerance_percent=Decimal("0"))
        po = build_po([("10", "200")])
        with pytest.raises(ValidationError):
            validate_receipt_lines(po, _lines(("line-1", "10.5")), config)


class TestNegativeQuantities:

    def test_negative_received_quantity(self):
        po = build_po([("10", "200")])
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_lines(po, _lines(("line-1", "-1")), ReceivingConfig())
        assert exc_info.value.field == "quantityReceived"

    def test_negative_rejected_quantity(self):
        po = build_po([("10", "200")])
        line = ReceiptLineInput(
            po_line_item_id="line-1",
            quantity_received=Decimal("1"),
            quantity_rejected=Decimal("-2"),
        )
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_lines(po, (line,), ReceivingConfig())
        assert exc_info.value.field == "quantityRejected"

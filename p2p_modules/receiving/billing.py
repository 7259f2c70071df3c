"""
Receiving Bill Helpers (``p2p_modules.receiving.billing``).

Pure functions used by the bill-generation step: due-date arithmetic,
the duplicate-bill check, and building the vendor-bill command from the
validated receipt lines.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from decimal import Decimal

from p2p_modules.receiving.models import (
    CreateVendorBillCommand,
    PurchaseOrder,
    ReceivedLineItem,
    VendorBillLine,
)


def calculate_due_date(bill_date: date, term_days: int) -> date:
    """Due date for net-``term_days`` payment terms (e.g. 30 for Net 30)."""
    return bill_date + timedelta(days=term_days)


def is_already_billed(po: PurchaseOrder) -> bool:
    """
    True when every received quantity on the PO has already been billed.

    A PO with nothing billed yet is never considered billed.
    """
    if not po.line_items:
        return False
    if all(line.quantity_billed == 0 for line in po.line_items):
        return False
    return all(
        line.quantity_billed >= line.quantity_received for line in po.line_items
    )


def build_vendor_bill_command(
    po: PurchaseOrder,
    lines: Sequence[ReceivedLineItem],
    bill_date: date,
    term_days: int,
    expense_account_code: str,
) -> CreateVendorBillCommand:
    """One bill line per received line, priced at the PO unit price."""
    bill_lines = tuple(
        VendorBillLine(
            description=line.item_sku,
            quantity=line.quantity_received,
            unit_price=line.unit_price,
            total_price=line.line_total,
            gl_account_id=expense_account_code,
            po_line_item_id=line.po_line_item_id,
        )
        for line in lines
    )
    return CreateVendorBillCommand(
        vendor_id=po.vendor_id,
        bill_date=bill_date,
        due_date=calculate_due_date(bill_date, term_days),
        line_items=bill_lines,
        purchase_order_id=po.id,
    )


def total_quantity(lines: Sequence[ReceivedLineItem]) -> Decimal:
    return sum((line.quantity_received for line in lines), Decimal("0"))


def total_amount(lines: Sequence[ReceivedLineItem]) -> Decimal:
    return sum((line.line_total for line in lines), Decimal("0"))

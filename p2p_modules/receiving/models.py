"""
Receiving Domain Models (``p2p_modules.receiving.models``).

Responsibility
--------------
Frozen value objects for the receiving workflow: the purchase order and
goods receipt snapshots read from procurement, the three-way-match snapshot
and vendor bill exchanged with accounts payable, the inventory transaction
acknowledged by inventory, and the caller-facing command and result.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O, no database.  These
objects cross the port boundary in both directions as immutable snapshots.

Invariants enforced
-------------------
* All quantity and money fields use ``Decimal`` (never ``float``).
* All dataclasses are ``frozen=True``.
* Negative receipt quantities are rejected by ``validation.validate_receipt_lines``
  with ``ValidationError``, not at construction time.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class POStatus(str, Enum):
    """Purchase order lifecycle states."""
    DRAFT = "draft"
    SENT = "sent"
    ACKNOWLEDGED = "acknowledged"
    PARTIAL = "partial"
    RECEIVED = "received"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class ReceiptStatus(str, Enum):
    """Goods receipt states."""
    DRAFT = "draft"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class VendorBillStatus(str, Enum):
    """Vendor bill workflow states."""
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    SCHEDULED = "scheduled"
    PAID = "paid"
    CANCELLED = "cancelled"


class MatchStatus(str, Enum):
    """Strength of PO / receipt / bill agreement reported by the workflow."""
    PENDING = "pending"
    TWO_WAY = "2-way"  # PO <-> Receipt
    THREE_WAY = "3-way"  # PO <-> Receipt <-> Bill


class VarianceType(str, Enum):
    """Category of a three-way-match discrepancy."""
    QUANTITY = "quantity"
    PRICE = "price"
    ITEM = "item"


# -----------------------------------------------------------------------------
# Procurement snapshots
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseOrderLine:
    """A line item on a purchase order, with cumulative receipt/bill totals."""
    id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal = Decimal("0")
    quantity_received: Decimal = Decimal("0")
    quantity_billed: Decimal = Decimal("0")
    gl_account_id: str = ""
    item_id: str | None = None
    sku: str | None = None

    @property
    def is_fully_received(self) -> bool:
        return self.quantity_received >= self.quantity


@dataclass(frozen=True)
class PurchaseOrder:
    """A purchase order as owned by the procurement system of record."""
    id: str
    po_number: str
    vendor_id: str
    status: POStatus
    line_items: tuple[PurchaseOrderLine, ...] = field(default_factory=tuple)
    vendor_name: str = ""
    order_date: date | None = None
    expected_delivery_date: date | None = None
    subtotal: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    shipping_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")

    def find_line(self, line_id: str) -> PurchaseOrderLine | None:
        for line in self.line_items:
            if line.id == line_id:
                return line
        return None


@dataclass(frozen=True)
class ReceiptLine:
    """One received line on a goods receipt."""
    id: str
    po_line_item_id: str
    quantity_received: Decimal
    quantity_rejected: Decimal = Decimal("0")
    quantity_ordered: Decimal = Decimal("0")
    description: str = ""
    rejection_reason: str | None = None


@dataclass(frozen=True)
class Receipt:
    """An immutable goods receipt recorded against a purchase order."""
    id: str
    receipt_number: str
    purchase_order_id: str
    received_by: str
    received_date: datetime
    line_items: tuple[ReceiptLine, ...] = field(default_factory=tuple)
    status: ReceiptStatus = ReceiptStatus.COMPLETED
    po_number: str = ""
    vendor_id: str = ""
    vendor_name: str = ""
    notes: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ReceiptLineCommand:
    """A receipt line as submitted to procurement."""
    po_line_item_id: str
    quantity_received: Decimal
    quantity_rejected: Decimal | None = None
    rejection_reason: str | None = None


@dataclass(frozen=True)
class CreateReceiptCommand:
    """Request to record exactly one goods receipt."""
    purchase_order_id: str
    received_by: str
    received_date: datetime
    line_items: tuple[ReceiptLineCommand, ...]
    notes: str | None = None


# -----------------------------------------------------------------------------
# Inventory
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ReceiveInventoryCommand:
    """On-hand increase for one item at one location, with WAC inputs."""
    item_id: str
    location_id: str
    quantity: Decimal
    unit_cost: Decimal
    purchase_order_id: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class InventoryTransaction:
    """Acknowledgement of an inventory movement."""
    id: str
    item_id: str
    location_id: str
    transaction_type: str
    quantity: Decimal
    unit_cost: Decimal
    total_cost: Decimal
    reference_type: str | None = None
    reference_id: str | None = None
    notes: str | None = None
    posted_at: datetime | None = None


# -----------------------------------------------------------------------------
# Accounts payable
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class MatchVariance:
    """A single discrepancy found while matching PO, receipt and bill."""
    type: VarianceType
    description: str
    expected: str
    actual: str


@dataclass(frozen=True)
class ThreeWayMatchStatus:
    """Derived agreement between a PO, its receipts and its bills."""
    purchase_order_id: str
    po_matched: bool
    receipt_matched: bool
    fully_matched: bool
    variances: tuple[MatchVariance, ...] = field(default_factory=tuple)
    receipt_id: str | None = None
    bill_id: str | None = None


@dataclass(frozen=True)
class VendorBillLine:
    """A line on a vendor bill."""
    description: str
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal
    gl_account_id: str
    po_line_item_id: str | None = None


@dataclass(frozen=True)
class CreateVendorBillCommand:
    """Request to create a vendor bill."""
    vendor_id: str
    bill_date: date
    due_date: date
    line_items: tuple[VendorBillLine, ...]
    purchase_order_id: str | None = None
    bill_number: str | None = None


@dataclass(frozen=True)
class VendorBill:
    """A vendor bill (accounts-payable invoice)."""
    id: str
    bill_number: str
    vendor_id: str
    bill_date: date
    due_date: date
    status: VendorBillStatus = VendorBillStatus.DRAFT
    line_items: tuple[VendorBillLine, ...] = field(default_factory=tuple)
    subtotal: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    amount_paid: Decimal = Decimal("0")
    amount_due: Decimal = Decimal("0")
    purchase_order_id: str | None = None
    vendor_name: str = ""
    created_at: datetime | None = None


# -----------------------------------------------------------------------------
# Caller-facing command and result
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ReceiptLineInput:
    """One line of a physical delivery as entered by the receiving clerk."""
    po_line_item_id: str
    quantity_received: Decimal
    quantity_rejected: Decimal | None = None
    rejection_reason: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ReceiveInventoryFromPOCommand:
    """Receive a delivery against an open purchase order."""
    purchase_order_id: str
    received_by: str
    received_date: datetime
    location_id: str
    line_items: tuple[ReceiptLineInput, ...]
    notes: str | None = None
    auto_create_ap_bill: bool = False


@dataclass(frozen=True)
class ReceivedLineItem:
    """A validated receipt line enriched with PO data."""
    po_line_item_id: str
    item_id: str
    item_sku: str
    quantity_ordered: Decimal
    quantity_received: Decimal
    quantity_rejected: Decimal
    variance: Decimal  # received - ordered
    unit_price: Decimal
    line_total: Decimal
    rejection_reason: str | None = None


@dataclass(frozen=True)
class ReceiveInventoryFromPOResult:
    """Outcome of a successful receiving run."""
    receipt_id: str
    receipt_number: str
    purchase_order_id: str
    po_number: str
    po_status: POStatus
    items_received: tuple[ReceivedLineItem, ...]
    total_items_received: Decimal
    total_amount: Decimal
    match_status: MatchStatus
    received_date: datetime
    ap_bill_id: str | None = None
    created_at: datetime | None = None
    bill_skipped_reason: str | None = None

"""
Shared fixtures for module tests.

Provides in-memory collaborator fakes for the three receiving ports and
factories for purchase orders and receiving commands.  The fakes record
every call so tests can assert ordering and absence of side effects.

DESIGN RULE: Every fixture is opt-in.  No autouse.
"""

import dataclasses
import threading
import time
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from p2p_kernel.exceptions import NetworkError, NotFoundError
from p2p_modules.receiving.config import ReceivingConfig
from p2p_modules.receiving.models import (
    CreateReceiptCommand,
    CreateVendorBillCommand,
    InventoryTransaction,
    POStatus,
    PurchaseOrder,
    PurchaseOrderLine,
    Receipt,
    ReceiptLine,
    ReceiptLineInput,
    ReceiveInventoryCommand,
    ReceiveInventoryFromPOCommand,
    ThreeWayMatchStatus,
    VendorBill,
    VendorBillStatus,
)
from p2p_modules.receiving.service import ReceivingService

TEST_PO_ID = "po-001"
TEST_VENDOR_ID = "vendor-001"
TEST_RECEIVER_ID = "receiver-001"
TEST_LOCATION_ID = "main-warehouse"
TEST_RECEIVED_AT = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeProcurement:
    """In-memory ProcurementPort.  Rolls receipts onto PO lines like the real store."""

    def __init__(self):
        self.purchase_orders: dict[str, PurchaseOrder] = {}
        self.receipts: list[Receipt] = []
        self.calls: list[str] = []
        self.log: list[str] | None = None

    def add(self, po: PurchaseOrder) -> PurchaseOrder:
        self.purchase_orders[po.id] = po
        return po

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.log is not None:
            self.log.append(name)

    def get_purchase_order(self, po_id: str) -> PurchaseOrder:
        self._record("get_purchase_order")
        if po_id not in self.purchase_orders:
            raise NotFoundError("PurchaseOrder", po_id)
        return self.purchase_orders[po_id]

    def create_receipt(self, command: CreateReceiptCommand) -> Receipt:
        self._record("create_receipt")
        po = self.purchase_orders[command.purchase_order_id]
        received = {line.po_line_item_id: line.quantity_received for line in command.line_items}
        lines = tuple(
            dataclasses.replace(
                line,
                quantity_received=line.quantity_received + received.get(line.id, Decimal("0")),
            )
            for line in po.line_items
        )
        if all(line.is_fully_received for line in lines):
            status = POStatus.RECEIVED
        elif any(line.quantity_received > 0 for line in lines):
            status = POStatus.PARTIAL
        else:
            status = po.status
        self.purchase_orders[po.id] = dataclasses.replace(po, line_items=lines, status=status)

        number = len(self.receipts) + 1
        receipt = Receipt(
            id=f"rec-{number}",
            receipt_number=f"REC-2025-{number:03d}",
            purchase_order_id=po.id,
            received_by=command.received_by,
            received_date=command.received_date,
            line_items=tuple(
                ReceiptLine(
                    id=f"rec-{number}-{i}",
                    po_line_item_id=line.po_line_item_id,
                    quantity_received=line.quantity_received,
                    quantity_rejected=line.quantity_rejected or Decimal("0"),
                    rejection_reason=line.rejection_reason,
                )
                for i, line in enumerate(command.line_items, start=1)
            ),
            po_number=po.po_number,
            vendor_id=po.vendor_id,
            notes=command.notes,
            created_at=TEST_RECEIVED_AT,
        )
        self.receipts.append(receipt)
        return receipt

    def get_receipts_by_purchase_order(self, po_id: str) -> list[Receipt]:
        self._record("get_receipts_by_purchase_order")
        return [r for r in self.receipts if r.purchase_order_id == po_id]


class FakeInventory:
    """In-memory InventoryPort.  Optionally fails for one item or sleeps per call."""

    def __init__(self, fail_item_id: str | None = None, delay: float = 0.0):
        self.commands: list[ReceiveInventoryCommand] = []
        self.fail_item_id = fail_item_id
        self.delay = delay
        self.log: list[str] | None = None
        self.max_in_flight = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    def receive_inventory(self, command: ReceiveInventoryCommand) -> InventoryTransaction:
        with self._lock:
            self.commands.append(command)
            if self.log is not None:
                self.log.append("receive_inventory")
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if command.item_id == self.fail_item_id:
                raise NetworkError("receive_inventory", "inventory service unavailable")
            return InventoryTransaction(
                id=f"txn-{command.item_id}",
                item_id=command.item_id,
                location_id=command.location_id,
                transaction_type="receive",
                quantity=command.quantity,
                unit_cost=command.unit_cost,
                total_cost=command.quantity * command.unit_cost,
                reference_type="purchase_order",
                reference_id=command.purchase_order_id,
                notes=command.notes,
            )
        finally:
            with self._lock:
                self._in_flight -= 1


class FakeFinancial:
    """In-memory FinancialPort with a configurable match outcome."""

    def __init__(self, fully_matched: bool = True, fail_bill: bool = False):
        self.fully_matched = fully_matched
        self.fail_bill = fail_bill
        self.match_requests: list[str] = []
        self.bill_commands: list[CreateVendorBillCommand] = []
        self.log: list[str] | None = None

    def get_three_way_match_status(self, po_id: str) -> ThreeWayMatchStatus:
        self.match_requests.append(po_id)
        if self.log is not None:
            self.log.append("get_three_way_match_status")
        return ThreeWayMatchStatus(
            purchase_order_id=po_id,
            po_matched=True,
            receipt_matched=self.fully_matched,
            fully_matched=self.fully_matched,
        )

    def create_vendor_bill(self, command: CreateVendorBillCommand) -> VendorBill:
        if self.log is not None:
            self.log.append("create_vendor_bill")
        if self.fail_bill:
            raise NetworkError("create_vendor_bill", "accounts payable unavailable")
        self.bill_commands.append(command)
        number = len(self.bill_commands)
        total = sum((line.total_price for line in command.line_items), Decimal("0"))
        return VendorBill(
            id=f"bill-{number}",
            bill_number=f"BILL-2025-{number:03d}",
            vendor_id=command.vendor_id,
            bill_date=command.bill_date,
            due_date=command.due_date,
            status=VendorBillStatus.APPROVED,
            line_items=command.line_items,
            subtotal=total,
            total_amount=total,
            amount_due=total,
            purchase_order_id=command.purchase_order_id,
        )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_po(
    lines: list[tuple[str, str]],
    status: POStatus = POStatus.SENT,
    po_id: str = TEST_PO_ID,
    received: list[str] | None = None,
    billed: list[str] | None = None,
) -> PurchaseOrder:
    """
    Build a PO from ``(quantity, unit_price)`` pairs.

    Line ids are ``line-1``, ``line-2``, ...; items ``item-1``, ``item-2``, ...
    """
    po_lines = []
    for i, (quantity, unit_price) in enumerate(lines, start=1):
        qty = Decimal(quantity)
        price = Decimal(unit_price)
        po_lines.append(PurchaseOrderLine(
            id=f"line-{i}",
            description=f"Casket model {i}",
            quantity=qty,
            unit_price=price,
            total_price=qty * price,
            quantity_received=Decimal(received[i - 1]) if received else Decimal("0"),
            quantity_billed=Decimal(billed[i - 1]) if billed else Decimal("0"),
            gl_account_id="1400",
            item_id=f"item-{i}",
            sku=f"SKU-{i}",
        ))
    return PurchaseOrder(
        id=po_id,
        po_number="PO-2025-001",
        vendor_id=TEST_VENDOR_ID,
        vendor_name="Batesville",
        status=status,
        line_items=tuple(po_lines),
        total_amount=sum((line.total_price for line in po_lines), Decimal("0")),
    )


def build_command(
    quantities: list[str],
    po_id: str = TEST_PO_ID,
    auto_create_ap_bill: bool = False,
) -> ReceiveInventoryFromPOCommand:
    """One receipt line per quantity, targeting ``line-1``, ``line-2``, ..."""
    return ReceiveInventoryFromPOCommand(
        purchase_order_id=po_id,
        received_by=TEST_RECEIVER_ID,
        received_date=TEST_RECEIVED_AT,
        location_id=TEST_LOCATION_ID,
        line_items=tuple(
            ReceiptLineInput(po_line_item_id=f"line-{i}", quantity_received=Decimal(q))
            for i, q in enumerate(quantities, start=1)
        ),
        auto_create_ap_bill=auto_create_ap_bill,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def procurement():
    return FakeProcurement()


@pytest.fixture
def inventory():
    return FakeInventory()


@pytest.fixture
def financial():
    return FakeFinancial()


@pytest.fixture
def receiving_config():
    return ReceivingConfig.with_defaults()


@pytest.fixture
def receiving_service(procurement, inventory, financial, receiving_config):
    """ReceivingService wired to in-memory fakes."""
    return ReceivingService(procurement, inventory, financial, receiving_config)


@pytest.fixture
def po_builder():
    return build_po


@pytest.fixture
def command_builder():
    return build_command

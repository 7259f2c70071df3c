"""
Receiving Collaborator Ports (``p2p_modules.receiving.ports``).

Responsibility
--------------
The three narrow capability interfaces the receiving workflow consumes.
The workflow is agnostic to how they are implemented (local store,
remote service, test double); ``p2p_modules.procurement``,
``p2p_modules.inventory`` and ``p2p_modules.ap`` ship SQLAlchemy-backed
reference implementations.

Failure contract
----------------
Every method may raise ``NetworkError`` for transport/availability
failures.  Lookups raise ``NotFoundError`` when the record is absent.
Implementations own any locking or optimistic concurrency on the PO's
cumulative quantities.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from p2p_modules.receiving.models import (
    CreateReceiptCommand,
    CreateVendorBillCommand,
    InventoryTransaction,
    PurchaseOrder,
    Receipt,
    ReceiveInventoryCommand,
    ThreeWayMatchStatus,
    VendorBill,
)


@runtime_checkable
class ProcurementPort(Protocol):
    """Purchase orders and goods receipts (procurement system of record)."""

    def get_purchase_order(self, po_id: str) -> PurchaseOrder:
        """Return the PO; raise ``NotFoundError`` if absent."""
        ...

    def create_receipt(self, command: CreateReceiptCommand) -> Receipt:
        """Record one goods receipt and update the PO's received quantities."""
        ...

    def get_receipts_by_purchase_order(self, po_id: str) -> Sequence[Receipt]:
        ...


@runtime_checkable
class InventoryPort(Protocol):
    """On-hand stock and its weighted-average cost basis."""

    def receive_inventory(self, command: ReceiveInventoryCommand) -> InventoryTransaction:
        ...


@runtime_checkable
class FinancialPort(Protocol):
    """Accounts payable: three-way match and vendor bills."""

    def get_three_way_match_status(self, po_id: str) -> ThreeWayMatchStatus:
        ...

    def create_vendor_bill(self, command: CreateVendorBillCommand) -> VendorBill:
        ...

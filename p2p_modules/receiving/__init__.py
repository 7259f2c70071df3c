"""
Receiving Module (``p2p_modules.receiving``).

Responsibility
--------------
The procurement receiving and three-way-match workflow: take a physical
delivery against an open purchase order, validate it, record the goods
receipt, post inventory, learn the PO's new status from procurement, and
conditionally create the vendor bill.

Architecture position
---------------------
**Modules layer** -- a pure validator, declarative workflow, config
schema, collaborator ports, and a service facade.  The service depends
only on the ports; concrete collaborators are injected.

Failure modes
-------------
* ``ValidationError`` (field-tagged) before any side effect.
* ``NotFoundError`` / ``NetworkError`` propagated from collaborators.
* Steps are not transactional across collaborators: a failure after the
  receipt is recorded leaves the receipt in place.
"""

from p2p_modules.receiving.config import ReceivingConfig
from p2p_modules.receiving.models import (
    CreateReceiptCommand,
    CreateVendorBillCommand,
    InventoryTransaction,
    MatchStatus,
    MatchVariance,
    POStatus,
    PurchaseOrder,
    PurchaseOrderLine,
    Receipt,
    ReceiptLine,
    ReceiptLineCommand,
    ReceiptLineInput,
    ReceiptStatus,
    ReceiveInventoryCommand,
    ReceiveInventoryFromPOCommand,
    ReceiveInventoryFromPOResult,
    ReceivedLineItem,
    ThreeWayMatchStatus,
    VarianceType,
    VendorBill,
    VendorBillLine,
    VendorBillStatus,
)
from p2p_modules.receiving.ports import FinancialPort, InventoryPort, ProcurementPort
from p2p_modules.receiving.service import ReceivingService
from p2p_modules.receiving.workflows import RECEIVING_WORKFLOW

__all__ = [
    "ReceivingService",
    "ReceivingConfig",
    "RECEIVING_WORKFLOW",
    "ProcurementPort",
    "InventoryPort",
    "FinancialPort",
    "POStatus",
    "ReceiptStatus",
    "VendorBillStatus",
    "MatchStatus",
    "VarianceType",
    "PurchaseOrder",
    "PurchaseOrderLine",
    "Receipt",
    "ReceiptLine",
    "ReceiptLineCommand",
    "CreateReceiptCommand",
    "ReceiveInventoryCommand",
    "InventoryTransaction",
    "MatchVariance",
    "ThreeWayMatchStatus",
    "VendorBill",
    "VendorBillLine",
    "CreateVendorBillCommand",
    "ReceiptLineInput",
    "ReceiveInventoryFromPOCommand",
    "ReceiveInventoryFromPOResult",
    "ReceivedLineItem",
]

"""
Procurement Module (``p2p_modules.procurement``).

Reference SQLAlchemy implementation of ``ProcurementPort``: purchase
orders with cumulative received/billed quantities, goods receipts, and
the PO lifecycle transitions receiving drives.
"""

from p2p_modules.procurement.adapter import SqlProcurementAdapter
from p2p_modules.procurement.workflows import PURCHASE_ORDER_WORKFLOW

__all__ = [
    "SqlProcurementAdapter",
    "PURCHASE_ORDER_WORKFLOW",
]

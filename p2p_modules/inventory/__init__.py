"""
Inventory Module (``p2p_modules.inventory``).

Reference SQLAlchemy implementation of ``InventoryPort`` with per
item/location stock balances and weighted-average costing.
"""

from p2p_modules.inventory.adapter import SqlInventoryAdapter
from p2p_modules.inventory.helpers import extended_cost, weighted_average_cost
from p2p_modules.inventory.models import StockBalance, TransactionType

__all__ = [
    "SqlInventoryAdapter",
    "StockBalance",
    "TransactionType",
    "extended_cost",
    "weighted_average_cost",
]

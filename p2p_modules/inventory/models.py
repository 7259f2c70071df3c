"""
Inventory Domain Models.

Stock position snapshot returned by the reference inventory store.
Movement acknowledgements use ``InventoryTransaction`` from
``p2p_modules.receiving.models``.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class TransactionType(str, Enum):
    """Inventory movement kinds recorded by the reference store."""
    RECEIVE = "receive"


@dataclass(frozen=True)
class StockBalance:
    """On-hand position for one item at one location."""
    item_id: str
    location_id: str
    quantity_on_hand: Decimal = Decimal("0")
    average_unit_cost: Decimal = Decimal("0")

    @property
    def total_value(self) -> Decimal:
        return self.quantity_on_hand * self.average_unit_cost

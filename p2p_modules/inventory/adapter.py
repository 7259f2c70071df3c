"""
Inventory Reference Store (``p2p_modules.inventory.adapter``).

Responsibility
--------------
A SQLAlchemy-backed ``InventoryPort``.  ``receive_inventory`` raises the
on-hand quantity of one item at one location, re-blends its
weighted-average unit cost, and appends a ``receive`` transaction.

Invariants enforced
-------------------
* Balance update and transaction insert commit together.
* Unit cost after a receipt is ``weighted_average_cost`` of the prior
  position and the receipt.

Failure modes
-------------
* ``ValidationError(field="quantity")`` for a non-positive quantity.
* ``ValidationError(field="unitCost")`` for a negative unit cost.
* ``NetworkError`` when the database is unavailable.

Not thread-safe: the adapter owns one ``Session``.  Run the receiving
workflow with ``max_posting_workers=1`` against it, or give each worker
its own adapter.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from p2p_kernel.domain.clock import Clock, SystemClock
from p2p_kernel.exceptions import ValidationError
from p2p_kernel.logging_config import get_logger
from p2p_modules._store_helpers import store_read, store_transaction
from p2p_modules.inventory.helpers import extended_cost, weighted_average_cost
from p2p_modules.inventory.models import StockBalance, TransactionType
from p2p_modules.inventory.orm import InventoryTransactionModel, StockBalanceModel
from p2p_modules.receiving.models import InventoryTransaction, ReceiveInventoryCommand

logger = get_logger("modules.inventory.adapter")


class SqlInventoryAdapter:
    """Inventory collaborator backed by a SQLAlchemy session."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: str = "system",
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._actor_id = actor_id

    def receive_inventory(self, command: ReceiveInventoryCommand) -> InventoryTransaction:
        if command.quantity <= 0:
            raise ValidationError(
                f"Receipt quantity must be positive: {command.quantity}",
                field="quantity",
            )
        if command.unit_cost < 0:
            raise ValidationError(
                f"Unit cost cannot be negative: {command.unit_cost}",
                field="unitCost",
            )

        with store_transaction(self._session, "receive_inventory"):
            balance = self._find_balance(command.item_id, command.location_id)
            if balance is None:
                balance = StockBalanceModel(
                    item_id=command.item_id,
                    location_id=command.location_id,
                    quantity_on_hand=Decimal("0"),
                    average_unit_cost=Decimal("0"),
                    created_by_id=self._actor_id,
                )
                self._session.add(balance)

            new_cost = weighted_average_cost(
                balance.quantity_on_hand,
                balance.average_unit_cost,
                command.quantity,
                command.unit_cost,
            )
            balance.quantity_on_hand = balance.quantity_on_hand + command.quantity
            balance.average_unit_cost = new_cost
            balance.updated_by_id = self._actor_id

            txn = InventoryTransactionModel(
                item_id=command.item_id,
                location_id=command.location_id,
                transaction_type=TransactionType.RECEIVE.value,
                quantity=command.quantity,
                unit_cost=command.unit_cost,
                total_cost=extended_cost(command.quantity, command.unit_cost),
                reference_type="purchase_order" if command.purchase_order_id else None,
                reference_id=command.purchase_order_id,
                notes=command.notes,
                posted_at=self._clock.now(),
                created_by_id=self._actor_id,
            )
            self._session.add(txn)
            self._session.flush()

            logger.info("inventory_received", extra={
                "transaction_id": str(txn.id),
                "item_id": command.item_id,
                "location_id": command.location_id,
                "quantity": str(command.quantity),
                "quantity_on_hand": str(balance.quantity_on_hand),
                "average_unit_cost": str(new_cost),
            })
            return txn.to_dto()

    def get_balance(self, item_id: str, location_id: str) -> StockBalance:
        """Current position; an item never received has a zero balance."""
        with store_read(self._session, "get_balance"):
            balance = self._find_balance(item_id, location_id)
            if balance is None:
                return StockBalance(item_id=item_id, location_id=location_id)
            return StockBalance(
                item_id=balance.item_id,
                location_id=balance.location_id,
                quantity_on_hand=balance.quantity_on_hand,
                average_unit_cost=balance.average_unit_cost,
            )

    def get_transactions(self, item_id: str, location_id: str) -> list[InventoryTransaction]:
        with store_read(self._session, "get_transactions"):
            stmt = (
                select(InventoryTransactionModel)
                .where(
                    InventoryTransactionModel.item_id == item_id,
                    InventoryTransactionModel.location_id == location_id,
                )
                .order_by(InventoryTransactionModel.posted_at)
            )
            return [t.to_dto() for t in self._session.scalars(stmt)]

    def _find_balance(self, item_id: str, location_id: str) -> StockBalanceModel | None:
        return self._session.scalars(
            select(StockBalanceModel).where(
                StockBalanceModel.item_id == item_id,
                StockBalanceModel.location_id == location_id,
            )
        ).first()

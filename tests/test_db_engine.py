"""Tests for engine lifecycle and transactional scope."""

from decimal import Decimal

import pytest
from sqlalchemy import func, inspect, select

from p2p_kernel.db.engine import get_engine, get_session, reset_engine, session_scope
from p2p_modules.inventory.orm import StockBalanceModel


def _balance(item_id: str) -> StockBalanceModel:
    return StockBalanceModel(
        item_id=item_id,
        location_id="main",
        quantity_on_hand=Decimal("1"),
        average_unit_cost=Decimal("10"),
        created_by_id="test-actor",
    )


def _count() -> int:
    with session_scope() as session:
        return session.scalar(select(func.count(StockBalanceModel.id)))


class TestUninitialized:

    def test_get_engine_before_init(self):
        reset_engine()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_engine()

    def test_get_session_before_init(self):
        reset_engine()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_session()


class TestSchema:

    def test_module_tables_created(self, db_engine):
        tables = set(inspect(db_engine).get_table_names())
        assert {
            "procurement_purchase_orders",
            "procurement_goods_receipts",
            "inventory_stock_balances",
            "inventory_transactions",
            "ap_vendor_bills",
            "ap_vendor_bill_lines",
        } <= tables


class TestSessionScope:

    def test_commits_on_success(self, db_engine):
        with session_scope() as session:
            session.add(_balance("item-1"))
        assert _count() == 1

    def test_rolls_back_on_error(self, db_engine):
        with pytest.raises(RuntimeError, match="boom"):
            with session_scope() as session:
                session.add(_balance("item-1"))
                session.flush()
                raise RuntimeError("boom")
        assert _count() == 0

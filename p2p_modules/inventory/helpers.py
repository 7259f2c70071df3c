"""
Inventory Pure Functions (``p2p_modules.inventory.helpers``).

Responsibility
--------------
Stateless costing calculations for stock receipts.  No I/O, no session,
no clock.

Invariants
----------
- All numeric inputs and outputs use ``Decimal`` (never ``float``).
- Each function validates its own preconditions and raises ``ValueError``
  on violation.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

COST_PRECISION = Decimal("0.000001")


def weighted_average_cost(
    on_hand_quantity: Decimal,
    on_hand_unit_cost: Decimal,
    received_quantity: Decimal,
    received_unit_cost: Decimal,
) -> Decimal:
    """
    Blend a receipt into an existing stock position.

    ``(q0 * c0 + q * c) / (q0 + q)``, rounded half-up to six places.
    When both quantities are zero the position cost is unchanged.

    Raises:
        ValueError: If any quantity or cost is negative.
    """
    for name, value in (
        ("on_hand_quantity", on_hand_quantity),
        ("on_hand_unit_cost", on_hand_unit_cost),
        ("received_quantity", received_quantity),
        ("received_unit_cost", received_unit_cost),
    ):
        if value < 0:
            raise ValueError(f"{name} cannot be negative: {value}")

    total_quantity = on_hand_quantity + received_quantity
    if total_quantity == 0:
        return on_hand_unit_cost

    total_value = on_hand_quantity * on_hand_unit_cost + received_quantity * received_unit_cost
    return (total_value / total_quantity).quantize(COST_PRECISION, rounding=ROUND_HALF_UP)


def extended_cost(quantity: Decimal, unit_cost: Decimal) -> Decimal:
    """Quantity times unit cost, at cost precision."""
    return (quantity * unit_cost).quantize(COST_PRECISION, rounding=ROUND_HALF_UP)

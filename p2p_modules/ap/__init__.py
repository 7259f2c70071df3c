"""
Accounts Payable Module (``p2p_modules.ap``).

Reference SQLAlchemy implementation of ``FinancialPort``: vendor bills and
the PO / receipt / bill three-way match.
"""

from p2p_modules.ap.adapter import SqlFinancialAdapter
from p2p_modules.ap.matching import evaluate_three_way_match, received_quantities

__all__ = [
    "SqlFinancialAdapter",
    "evaluate_three_way_match",
    "received_quantities",
]

"""
Procure-to-Pay Modules.

Orchestration over the P2P kernel.

Modules:
- Receiving: receive a delivery against a PO, post inventory, three-way
  match, conditional vendor bill
- Procurement: reference purchase order / goods receipt store
- Inventory: reference stock balances with weighted-average costing
- AP: reference vendor bills and three-way match evaluation
"""

"""
Procurement Workflows.

Purchase order lifecycle as seen by the reference procurement store.
Receiving moves an open PO to ``partial`` or ``received``; billing and
closing happen elsewhere.
"""

from p2p_kernel.logging_config import get_logger
from p2p_modules.receiving.workflows import Guard, Transition, Workflow

logger = get_logger("modules.procurement.workflows")


ALL_LINES_RECEIVED = Guard(
    name="all_lines_received",
    description="All PO lines fully received",
)

PURCHASE_ORDER_WORKFLOW = Workflow(
    name="purchase_order",
    description="Purchase order lifecycle",
    initial_state="draft",
    states=(
        "draft",
        "sent",
        "acknowledged",
        "partial",
        "received",
        "closed",
        "cancelled",
    ),
    transitions=(
        Transition("draft", "sent", action="send"),
        Transition("sent", "acknowledged", action="acknowledge"),
        Transition("sent", "partial", action="receive"),
        Transition("acknowledged", "partial", action="receive"),
        Transition("partial", "partial", action="receive"),
        Transition("sent", "received", action="receive", guard=ALL_LINES_RECEIVED),
        Transition("acknowledged", "received", action="receive", guard=ALL_LINES_RECEIVED),
        Transition("partial", "received", action="receive", guard=ALL_LINES_RECEIVED),
        Transition("received", "closed", action="close"),
        Transition("draft", "cancelled", action="cancel"),
        Transition("sent", "cancelled", action="cancel"),
        Transition("acknowledged", "cancelled", action="cancel"),
    ),
    terminal_states=("closed", "cancelled"),
)

logger.info(
    "procurement_po_workflow_registered",
    extra={
        "workflow_name": PURCHASE_ORDER_WORKFLOW.name,
        "state_count": len(PURCHASE_ORDER_WORKFLOW.states),
        "transition_count": len(PURCHASE_ORDER_WORKFLOW.transitions),
        "initial_state": PURCHASE_ORDER_WORKFLOW.initial_state,
    },
)

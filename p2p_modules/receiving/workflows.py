"""
Receiving Workflows.

State machine for one receiving run.  Steps only move forward; a failure
at any step ends the run without compensation.
"""

from dataclasses import dataclass

from p2p_kernel.logging_config import get_logger

logger = get_logger("modules.receiving.workflows")


@dataclass(frozen=True)
class Guard:
    """A condition for a transition."""
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def find_transition(self, from_state: str, to_state: str) -> Transition | None:
        for transition in self.transitions:
            if transition.from_state == from_state and transition.to_state == to_state:
                return transition
        return None


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

FULLY_RECEIVED_WITH_AUTO_BILL = Guard(
    name="fully_received_with_auto_bill",
    description="Every PO line received and the caller requested an AP bill",
)

FULLY_MATCHED = Guard(
    name="fully_matched",
    description="Three-way match reports PO and receipt fully matched",
)


# -----------------------------------------------------------------------------
# Receiving Workflow
# -----------------------------------------------------------------------------

RECEIVING_WORKFLOW = Workflow(
    name="receive_inventory_from_po",
    description="Receive a delivery against a PO with optional AP bill",
    initial_state="validate",
    states=(
        "validate",
        "record_receipt",
        "post_inventory",
        "resolve_po_status",
        "evaluate_match",
        "generate_bill",
        "completed",
    ),
    transitions=(
        Transition("validate", "record_receipt", action="record"),
        Transition("record_receipt", "post_inventory", action="post"),
        Transition("post_inventory", "resolve_po_status", action="resolve"),
        Transition(
            "resolve_po_status", "evaluate_match",
            action="evaluate", guard=FULLY_RECEIVED_WITH_AUTO_BILL,
        ),
        Transition("resolve_po_status", "completed", action="complete"),
        Transition(
            "evaluate_match", "generate_bill",
            action="bill", guard=FULLY_MATCHED,
        ),
        Transition("evaluate_match", "completed", action="complete"),
        Transition("generate_bill", "completed", action="complete"),
    ),
    terminal_states=("completed",),
)

logger.info(
    "receiving_workflow_registered",
    extra={
        "workflow_name": RECEIVING_WORKFLOW.name,
        "state_count": len(RECEIVING_WORKFLOW.states),
        "transition_count": len(RECEIVING_WORKFLOW.transitions),
        "initial_state": RECEIVING_WORKFLOW.initial_state,
    },
)


class WorkflowRun:
    """
    Tracks the position of one run through a workflow.

    Raises ``RuntimeError`` on a transition the workflow does not declare,
    which also rules out moving backwards.
    """

    def __init__(self, workflow: Workflow):
        self.workflow = workflow
        self.state = workflow.initial_state
        self.history: list[str] = [workflow.initial_state]

    def advance(self, to_state: str) -> Transition:
        transition = self.workflow.find_transition(self.state, to_state)
        if transition is None:
            raise RuntimeError(
                f"{self.workflow.name}: illegal transition {self.state} -> {to_state}"
            )
        logger.debug(
            "receiving_state_transition",
            extra={
                "workflow_name": self.workflow.name,
                "from_state": self.state,
                "to_state": to_state,
                "action": transition.action,
                "guard": transition.guard.name if transition.guard else None,
            },
        )
        self.state = to_state
        self.history.append(to_state)
        return transition

    @property
    def is_complete(self) -> bool:
        return self.state in self.workflow.terminal_states

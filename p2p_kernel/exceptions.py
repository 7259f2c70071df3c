"""
Typed Exception Hierarchy for the Procure-to-Pay Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The receiving workflow talks to three collaborators (procurement, inventory,
accounts payable) and can fail at any of them.  Callers need to branch on
the failure category -- show a field-level correction, report a missing
record, or offer a retry -- without parsing message strings.

Every exception therefore:
  1. Has its own class (catch by type, not message)
  2. Carries a class-level CODE attribute (machine-readable, API-safe)
  3. Stores its context as attributes (not just a message string)

Example:
    try:
        service.receive_inventory_from_po(command)
    except ValidationError as e:
        highlight_field(e.field, e.message)
    except NotFoundError as e:
        show_missing(e.entity_type, e.entity_id)
    except NetworkError as e:
        offer_retry(e.operation)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    P2PError (base)
    |
    +-- ValidationError     field-tagged input / state rejection
    +-- NotFoundError       record absent at a collaborator boundary
    +-- NetworkError        transport / availability failure

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code              | When Raised
------------------|-----------------------------------------------------------
VALIDATION_ERROR  | PO not receivable, unknown PO line, over-tolerance receipt
NOT_FOUND         | Purchase order, receipt, or referenced entity absent
NETWORK_ERROR     | Collaborator call failed for transport/availability reasons

===============================================================================
"""


class P2PError(Exception):
    """
    Base exception for all procure-to-pay errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "P2P_ERROR"


class ValidationError(P2PError):
    """
    Input or document state rejected before any side effect.

    ``field`` names the offending input so a caller can present a
    specific correction (``poStatus``, ``poLineItemId``,
    ``quantityReceived``).
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class NotFoundError(P2PError):
    """Entity with the given ID does not exist at the collaborator."""

    code: str = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class NetworkError(P2PError):
    """A collaborator call failed for transport or availability reasons."""

    code: str = "NETWORK_ERROR"

    def __init__(self, operation: str, message: str, cause: BaseException | None = None):
        self.operation = operation
        self.message = message
        self.cause = cause
        super().__init__(f"{operation} failed: {message}")

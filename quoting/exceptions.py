"""
Typed errors for the quotation pricing and lifecycle engine.

Every error carries a machine-readable ``code`` class attribute so the API
layer can map by type, never by message text.

    QuotationError
    +-- QuotationValidationError      (caller-correctable input)
    |   +-- InvalidDimension
    |   +-- InvalidQuantity
    |   +-- InvalidPercent
    |   +-- UnknownMaterial
    |   +-- EmptyQuotation
    |   +-- AmountOutOfRange
    +-- WorkflowError                 (status policy)
        +-- IllegalTransition
        |   +-- ConcurrentModification
        +-- TerminalState
        +-- NoOpTransition
        +-- Unauthorized

None of these are retried: the engine is pure, so the same input fails
the same way every time.
"""


class QuotationError(Exception):
    """Base for all engine errors."""

    code: str = "QUOTATION_ERROR"


# --- Input validation ---


class QuotationValidationError(QuotationError):
    code: str = "VALIDATION_ERROR"


class InvalidDimension(QuotationValidationError):
    code: str = "INVALID_DIMENSION"

    def __init__(self, field: str, value, message: str = None):
        self.field = field
        self.value = value
        super().__init__(message or f"{field} must be greater than 0 (got {value})")


class InvalidQuantity(QuotationValidationError):
    code: str = "INVALID_QUANTITY"

    def __init__(self, value):
        self.value = value
        super().__init__(f"quantity must be a whole number of at least 1 (got {value})")


class InvalidPercent(QuotationValidationError):
    code: str = "INVALID_PERCENT"

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be between 0 and 100 (got {value})")


class UnknownMaterial(QuotationValidationError):
    code: str = "UNKNOWN_MATERIAL"

    def __init__(self, material_id):
        self.material_id = material_id
        super().__init__(f"Material not found: {material_id}")


class EmptyQuotation(QuotationValidationError):
    code: str = "EMPTY_QUOTATION"

    def __init__(self):
        super().__init__("A quotation needs at least one item")


class AmountOutOfRange(QuotationValidationError):
    """A computed amount does not fit the stored money precision."""

    code: str = "AMOUNT_OUT_OF_RANGE"

    def __init__(self, value):
        self.value = value
        super().__init__(f"Amount is too large to store (got {value})")


# --- Workflow policy ---


class WorkflowError(QuotationError):
    code: str = "WORKFLOW_ERROR"

    def __init__(self, current, requested, message: str):
        self.current = current
        self.requested = requested
        super().__init__(message)


class IllegalTransition(WorkflowError):
    code: str = "ILLEGAL_TRANSITION"

    def __init__(self, current, requested, message: str = None):
        super().__init__(
            current,
            requested,
            message or f"Cannot move a quotation from {current} to {requested}",
        )


class ConcurrentModification(IllegalTransition):
    """Another request changed the quotation between read and write."""

    code: str = "CONCURRENT_MODIFICATION"

    def __init__(self, quotation_id, requested):
        self.quotation_id = quotation_id
        super().__init__(
            None,
            requested,
            f"Quotation {quotation_id} was changed by someone else, reload and try again",
        )


class TerminalState(WorkflowError):
    code: str = "TERMINAL_STATE"

    def __init__(self, current, requested):
        super().__init__(
            current,
            requested,
            f"Quotation is already {current} and can no longer change status",
        )


class NoOpTransition(WorkflowError):
    code: str = "NOOP_TRANSITION"

    def __init__(self, current, requested):
        super().__init__(current, requested, f"Quotation is already {current}")


class Unauthorized(WorkflowError):
    code: str = "UNAUTHORIZED_TRANSITION"

    def __init__(self, current, requested, role):
        self.role = role
        super().__init__(
            current,
            requested,
            f"Role {role} may not move a quotation from {current} to {requested}",
        )

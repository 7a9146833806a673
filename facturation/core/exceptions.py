"""
Domain exceptions for the invoicing service.

Every error carries a machine-readable code that the API layer maps to an
HTTP status and surfaces in the error body.
"""

from typing import Any


class FacturationError(Exception):
    """Base exception for all invoicing errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(FacturationError):
    """Base exception for storage operations."""

    pass


class NotFoundError(StorageError):
    """A requested record does not exist."""

    pass


class InvoiceNotFoundError(NotFoundError):
    """Invoice not found in storage."""

    def __init__(self, invoice_id: int):
        super().__init__(
            f"Invoice not found: {invoice_id}",
            code="INVOICE_NOT_FOUND",
            details={"invoice_id": invoice_id},
        )


class LineItemNotFoundError(NotFoundError):
    """Line item not found, or it belongs to another invoice."""

    def __init__(self, line_item_id: int, invoice_id: int | None = None):
        super().__init__(
            f"Line item not found: {line_item_id}",
            code="LINE_ITEM_NOT_FOUND",
            details={"line_item_id": line_item_id, "invoice_id": invoice_id},
        )


class ClientNotFoundError(NotFoundError):
    """Client not found or archived."""

    def __init__(self, client_id: int):
        super().__init__(
            f"Client not found: {client_id}",
            code="CLIENT_NOT_FOUND",
            details={"client_id": client_id},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class DatabaseBusyError(StorageError):
    """No pooled connection became free in time."""

    def __init__(self, timeout: float):
        super().__init__(
            f"No database connection available within {timeout}s",
            code="DATABASE_BUSY",
            details={"timeout_seconds": timeout},
        )


# Validation Exceptions
class ValidationError(FacturationError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class DuplicateClientEmailError(ValidationError):
    """Another non-archived client already uses this email."""

    def __init__(self, email: str):
        super().__init__("email", "A client with this email already exists", email)
        self.code = "DUPLICATE_EMAIL"


class LineItemValueError(FacturationError):
    """Line item quantity, unit price or tax rate is out of range."""

    def __init__(self, errors: list[str], fields: list[str] | None = None):
        super().__init__(
            "Invalid line item values: " + "; ".join(errors),
            code="VALUE_ERROR",
            details={"errors": errors, "fields": fields or []},
        )
        self.errors = errors


# Workflow Exceptions
class WorkflowError(FacturationError):
    """Base exception for invoice status workflow failures."""

    pass


class IllegalTransitionError(WorkflowError):
    """The requested edge is not in the transition table."""

    def __init__(self, current_status: str, requested_status: str):
        super().__init__(
            f"Cannot transition from {current_status} to {requested_status}",
            code="ILLEGAL_TRANSITION",
            details={
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )
        self.current_status = current_status
        self.requested_status = requested_status


class TransitionNotAllowedError(WorkflowError):
    """The edge exists but one or more of its preconditions failed."""

    default_code = "TRANSITION_NOT_ALLOWED"

    def __init__(
        self,
        current_status: str,
        requested_status: str,
        errors: list[str],
    ):
        super().__init__(
            "Transition validation failed: " + "; ".join(errors),
            code=self.default_code,
            details={
                "current_status": current_status,
                "requested_status": requested_status,
                "errors": errors,
            },
        )
        self.current_status = current_status
        self.requested_status = requested_status
        self.errors = errors


class EmptyInvoiceError(TransitionNotAllowedError):
    """DRAFT to SENT attempted on an invoice without active line items."""

    default_code = "EMPTY_INVOICE"


class NotYetOverdueError(TransitionNotAllowedError):
    """SENT to OVERDUE attempted before the due date has passed."""

    default_code = "NOT_YET_OVERDUE"


class ConcurrentModificationError(WorkflowError):
    """Invoice status changed between validation and commit."""

    def __init__(self, invoice_id: int, expected_status: str):
        super().__init__(
            f"Invoice {invoice_id} was modified concurrently "
            f"(expected status {expected_status})",
            code="CONCURRENT_MODIFICATION",
            details={"invoice_id": invoice_id, "expected_status": expected_status},
        )
        self.invoice_id = invoice_id
        self.expected_status = expected_status


class ConfigurationError(FacturationError):
    """Configuration error."""

    pass

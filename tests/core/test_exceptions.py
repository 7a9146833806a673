"""Unit tests for domain exceptions."""

from facturation.core.exceptions import (
    ClientNotFoundError,
    ConcurrentModificationError,
    DatabaseBusyError,
    DatabaseError,
    EmptyInvoiceError,
    FacturationError,
    IllegalTransitionError,
    InvoiceNotFoundError,
    LineItemNotFoundError,
    LineItemValueError,
    NotFoundError,
    NotYetOverdueError,
    StorageError,
    TransitionNotAllowedError,
    ValidationError,
    WorkflowError,
)


class TestFacturationError:
    """Tests for the base exception."""

    def test_basic_initialization(self):
        error = FacturationError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "FacturationError"
        assert error.details == {}

    def test_with_custom_code(self):
        error = FacturationError("Error message", code="CUSTOM_ERROR")
        assert error.code == "CUSTOM_ERROR"

    def test_to_dict(self):
        error = FacturationError("Test error", code="TEST", details={"key": "value"})
        assert error.to_dict() == {
            "error": "TEST",
            "message": "Test error",
            "details": {"key": "value"},
        }


class TestNotFoundErrors:
    def test_invoice_not_found(self):
        error = InvoiceNotFoundError(42)
        assert isinstance(error, NotFoundError)
        assert isinstance(error, StorageError)
        assert error.code == "INVOICE_NOT_FOUND"
        assert error.details["invoice_id"] == 42
        assert "42" in error.message

    def test_line_item_not_found(self):
        error = LineItemNotFoundError(5, invoice_id=2)
        assert error.code == "LINE_ITEM_NOT_FOUND"
        assert error.details == {"line_item_id": 5, "invoice_id": 2}

    def test_client_not_found(self):
        error = ClientNotFoundError(9)
        assert error.code == "CLIENT_NOT_FOUND"

    def test_database_error(self):
        error = DatabaseError("insert", "disk I/O error")
        assert error.code == "DATABASE_ERROR"
        assert "insert" in error.message
        assert not isinstance(error, NotFoundError)

    def test_database_busy(self):
        error = DatabaseBusyError(2.5)
        assert error.code == "DATABASE_BUSY"
        assert error.details == {"timeout_seconds": 2.5}
        assert isinstance(error, StorageError)


class TestValidationErrors:
    def test_validation_error(self):
        error = ValidationError("due_date", "must be on or after invoice_date", "2024-01-01")
        assert error.code == "VALIDATION_ERROR"
        assert error.details["field"] == "due_date"
        assert error.details["value"] == "2024-01-01"

    def test_value_is_truncated(self):
        error = ValidationError("notes", "too long", "x" * 500)
        assert len(error.details["value"]) == 100

    def test_line_item_value_error(self):
        error = LineItemValueError(
            ["Quantity must be positive", "Unit price must be positive"],
            ["quantity", "unit_price"],
        )
        assert error.code == "VALUE_ERROR"
        assert error.errors == ["Quantity must be positive", "Unit price must be positive"]
        assert error.details["fields"] == ["quantity", "unit_price"]
        assert not isinstance(error, ValidationError)


class TestWorkflowErrors:
    def test_illegal_transition(self):
        error = IllegalTransitionError("PAID", "DRAFT")
        assert isinstance(error, WorkflowError)
        assert error.code == "ILLEGAL_TRANSITION"
        assert error.message == "Cannot transition from PAID to DRAFT"

    def test_transition_not_allowed_lists_errors(self):
        error = TransitionNotAllowedError("DRAFT", "SENT", ["a", "b"])
        assert error.code == "TRANSITION_NOT_ALLOWED"
        assert error.details["errors"] == ["a", "b"]
        assert "a; b" in error.message

    def test_specific_precondition_codes(self):
        empty = EmptyInvoiceError("DRAFT", "SENT", ["no items"])
        early = NotYetOverdueError("SENT", "OVERDUE", ["not yet"])

        assert isinstance(empty, TransitionNotAllowedError)
        assert empty.code == "EMPTY_INVOICE"
        assert early.code == "NOT_YET_OVERDUE"

    def test_concurrent_modification(self):
        error = ConcurrentModificationError(3, "SENT")
        assert isinstance(error, WorkflowError)
        assert error.code == "CONCURRENT_MODIFICATION"
        assert error.details == {"invoice_id": 3, "expected_status": "SENT"}

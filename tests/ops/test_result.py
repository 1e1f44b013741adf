"""Tests for the operation result envelope."""

from apple_explorer.core.errors import (
    DuplicateConflictError,
    ErrorCategory,
    InvalidConfigError,
    ParseError,
    PersistenceError,
    RowValidationError,
)
from apple_explorer.ops.result import OperationResult, PagedResult, start_timer


class TestOperationResult:
    def test_ok(self):
        result = OperationResult.ok({"id": 1}, warnings=["careful"], metadata={"source": "a.csv"})
        assert result.success
        assert result.to_dict() == {
            "success": True,
            "data": {"id": 1},
            "warnings": ["careful"],
            "metadata": {"source": "a.csv"},
        }

    def test_fail(self):
        result = OperationResult.fail("NOT_FOUND", "No apples found to export")
        assert not result.success
        assert result.to_dict()["error"] == {"code": "NOT_FOUND", "message": "No apples found to export"}

    def test_fail_with_details(self):
        result = OperationResult.fail("VALIDATION_FAILED", "Missing", details={"missing": ["originId"]})
        assert result.to_dict()["error"]["details"] == {"missing": ["originId"]}


class TestFromError:
    def test_codes_by_category(self):
        assert OperationResult.from_error(ParseError("bad")).error.code == "INVALID_INPUT"
        assert OperationResult.from_error(InvalidConfigError("k", "v")).error.code == "INVALID_INPUT"
        assert OperationResult.from_error(PersistenceError("down")).error.code == "INTERNAL"
        assert OperationResult.from_error(RowValidationError("bad")).error.code == "VALIDATION_FAILED"

    def test_duplicate_fields_in_details(self):
        error = DuplicateConflictError("Duplicate", fields=["accession"]).with_context(row_number=2)
        result = OperationResult.from_error(error)
        assert result.error.code == "CONFLICT"
        assert result.error.category is ErrorCategory.DUPLICATE
        assert result.error.details == {"row_number": 2, "fields": ["accession"]}

    def test_validation_errors_in_details(self):
        result = OperationResult.from_error(RowValidationError("Invalid", errors=["Missing or invalid accession"]))
        assert result.error.details["errors"] == ["Missing or invalid accession"]


class TestPagedResult:
    def test_from_items(self):
        result = PagedResult.from_items([1, 2], total=5, limit=2, offset=2)
        assert result.has_more
        data = result.to_dict()
        assert data["total"] == 5
        assert data["data"] == [1, 2]

    def test_last_page(self):
        assert not PagedResult.from_items([5], total=5, limit=2, offset=4).has_more

    def test_from_error_keeps_type(self):
        result = PagedResult.from_error(PersistenceError("down"))
        assert isinstance(result, PagedResult)
        assert not result.success


class TestTimer:
    def test_elapsed_is_non_negative(self):
        assert start_timer().elapsed_ms >= 0

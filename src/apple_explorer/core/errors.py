"""
Structured error types for Apple Explorer.

Provides a small hierarchy of typed errors with metadata for routing,
reporting, and root cause analysis through error chaining.

Instead of generic exceptions that lose context, AppleExplorerError and its
subclasses carry:
- **Category:** What kind of error (input, validation, duplicate, storage, ...)
- **Context:** Structured metadata (run, source, row number, custom fields)
- **Cause:** Chained underlying exception

Manifesto:
    - **Per-row vs whole-run:** Row-level errors (validation, duplicate,
      storage) are recorded and the import continues. Input errors abort the
      run before any row is processed.
    - **Rich Context:** Errors carry metadata for logging and audit files
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                    AppleExplorerError                            │
        │              (category, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  InputError          RowValidationError   DuplicateConflictError │
        │  (INPUT, whole run)  (VALIDATION, row)    (DUPLICATE, row)       │
        │       │                                                          │
        │  SourceNotFoundError                                             │
        │  ParseError                                                      │
        │                                                                  │
        │  PersistenceError    ConfigError                                 │
        │  (STORAGE, row)      (CONFIG)                                    │
        │       │                   │                                      │
        │  StoreIntegrityError InvalidConfigError                          │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = InputError("No file uploaded")
    >>> error.category
    <ErrorCategory.INPUT: 'INPUT'>

    >>> error = DuplicateConflictError("Duplicate accession 'TD001'", fields=["accession"])
    >>> error.with_context(row_number=4).context.row_number
    4

Tags:
    error-handling, exception-hierarchy, error-context, import-pipeline

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        INPUT: Missing, unreadable or oversized input (fatal to a run)
        VALIDATION: Row failed structural validation
        DUPLICATE: Natural key collides with an existing or earlier record
        STORAGE: Document store write/read failure
        CONFIG: Missing or invalid settings or column mapping
        INTERNAL: Bugs, unexpected state
    """

    INPUT = "INPUT"
    VALIDATION = "VALIDATION"
    DUPLICATE = "DUPLICATE"
    STORAGE = "STORAGE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        run_id: Import run identifier
        source_name: Name or path of the row source
        row_number: 1-based row number within the batch
        collection: Document store collection involved
        metadata: Additional key-value pairs
    """

    run_id: str | None = None
    source_name: str | None = None
    row_number: int | None = None
    collection: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["run_id", "source_name", "row_number", "collection"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class AppleExplorerError(Exception):
    """
    Base exception for all Apple Explorer errors.

    Every error carries a category (ErrorCategory), a structured context
    (ErrorContext) and an optional cause. Subclasses set ``default_category``.

    Examples:
        >>> error = AppleExplorerError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> try:
        ...     raise ConnectionError("server selection timeout")
        ... except ConnectionError as e:
        ...     error = PersistenceError("Insert failed", cause=e)
        >>> error.cause
        ConnectionError('server selection timeout')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> AppleExplorerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ParseError("Bad header").with_context(source_name="inventory.xlsx")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# INPUT ERRORS (whole run)
# =============================================================================


class InputError(AppleExplorerError):
    """
    The input as a whole could not be used.

    Raised before any row is processed: no file supplied, file unreadable,
    unsupported format, payload too large.
    """

    default_category = ErrorCategory.INPUT


class SourceNotFoundError(InputError):
    """Input file does not exist."""

    pass


class ParseError(InputError):
    """Input could not be parsed into rows."""

    pass


# =============================================================================
# ROW ERRORS
# =============================================================================


class RowValidationError(AppleExplorerError):
    """
    A row failed structural validation.

    Never escapes the import pipeline; raised by callers that need a single
    row to be valid (e.g. single-record creation).
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, errors: list[str] | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.errors = list(errors or [])

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.errors:
            result["errors"] = self.errors
        return result


class DuplicateConflictError(AppleExplorerError):
    """Natural key (accession or cultivar name) is already taken."""

    default_category = ErrorCategory.DUPLICATE

    def __init__(self, message: str, *, fields: list[str] | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.fields = list(fields or [])

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.fields:
            result["fields"] = self.fields
        return result


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class PersistenceError(AppleExplorerError):
    """Document store read or write failed."""

    default_category = ErrorCategory.STORAGE


class StoreIntegrityError(PersistenceError):
    """Storage-level unique constraint violation."""

    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(AppleExplorerError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "AppleExplorerError",
    "InputError",
    "SourceNotFoundError",
    "ParseError",
    "RowValidationError",
    "DuplicateConflictError",
    "PersistenceError",
    "StoreIntegrityError",
    "ConfigError",
    "InvalidConfigError",
]

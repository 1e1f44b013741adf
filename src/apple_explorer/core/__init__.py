"""
Core primitives: errors, settings, catalog records and the document store
contract with its adapters.
"""

from apple_explorer.core.errors import (
    AppleExplorerError,
    DuplicateConflictError,
    ErrorCategory,
    InputError,
    PersistenceError,
    RowValidationError,
)
from apple_explorer.core.models import EntityKind
from apple_explorer.core.protocols import DocumentStore

__all__ = [
    "AppleExplorerError",
    "DuplicateConflictError",
    "ErrorCategory",
    "InputError",
    "PersistenceError",
    "RowValidationError",
    "EntityKind",
    "DocumentStore",
]

"""
Canonical protocol definitions for Apple Explorer.

Every module that needs a document store imports the contract from here.
Domain code depends on the shape, not the implementation: the same import
pipeline runs against MongoDB and against the in-memory store used in tests
and dry runs.

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        └── DocumentStore   : natural-key lookup + insert/get/find/delete

        Implementations:
        ┌────────────────────────────────────────────────────────┐
        │ MemoryDocumentStore → apple_explorer.core.adapters.memory │
        │ MongoDocumentStore  → apple_explorer.core.adapters.mongo  │
        └────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Add transaction methods; writes are sequential and independent
    ✅ DO: Raise PersistenceError / StoreIntegrityError from implementations

Tags:
    protocol, document-store, contracts
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from apple_explorer.core.models import EntityKind


@runtime_checkable
class DocumentStore(Protocol):
    """
    Minimal synchronous document store interface.

    Ids are opaque to callers: ObjectId for MongoDB, hex strings for the
    memory store. Documents returned by ``get``/``find`` carry their id
    under ``_id``.
    """

    def exists_by_natural_key(self, accession: str, cultivar_name: str) -> bool:
        """True when an Apple record has this accession OR this cultivar name."""
        ...

    def find_by_natural_key(self, accession: str, cultivar_name: str) -> dict[str, Any] | None:
        """First Apple record sharing the accession or the cultivar name."""
        ...

    def insert(self, kind: EntityKind, record: dict[str, Any]) -> Any:
        """Insert a document and return its id."""
        ...

    def get(self, kind: EntityKind, record_id: Any) -> dict[str, Any] | None:
        """Fetch one document by id."""
        ...

    def find(self, kind: EntityKind, **equals: Any) -> list[dict[str, Any]]:
        """All documents whose fields equal the given values."""
        ...

    def delete(self, kind: EntityKind, record_id: Any) -> bool:
        """Delete one document by id; False when it did not exist."""
        ...


__all__ = ["DocumentStore"]

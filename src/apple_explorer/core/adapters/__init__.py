"""
Document store adapters.

``create_store(settings)`` is the single factory used by the CLI and the
API; it picks the backend from ``settings.store_backend``.
"""

from __future__ import annotations

from apple_explorer.core.adapters.memory import MemoryDocumentStore
from apple_explorer.core.errors import InvalidConfigError
from apple_explorer.core.protocols import DocumentStore
from apple_explorer.core.settings import AppleExplorerSettings


def create_store(settings: AppleExplorerSettings) -> DocumentStore:
    """Build the configured document store."""
    if settings.store_backend == "memory":
        return MemoryDocumentStore()
    if settings.store_backend == "mongo":
        from apple_explorer.core.adapters.mongo import MongoDocumentStore

        store = MongoDocumentStore.connect(
            settings.mongo_uri,
            settings.database_name,
            timeout_ms=settings.mongo_timeout_ms,
        )
        store.ensure_indexes()
        return store
    raise InvalidConfigError("store_backend", settings.store_backend)


__all__ = ["MemoryDocumentStore", "create_store"]

"""
In-memory document store.

Process-local implementation of :class:`DocumentStore` for tests, dry runs
and local experimentation. Mirrors the Mongo adapter's observable behaviour:
ids are generated on insert, documents are copied in and out, and the Apples
collection enforces unique ``accession`` and ``cultivarName`` values.
"""

from __future__ import annotations

import copy
import uuid
from collections.abc import Iterable
from typing import Any

from apple_explorer.core.errors import StoreIntegrityError
from apple_explorer.core.models import APPLE_UNIQUE_FIELDS, EntityKind


class MemoryDocumentStore:
    """Dict-of-dicts document store keyed by collection and id."""

    def __init__(self, unique_fields: dict[EntityKind, Iterable[str]] | None = None):
        self._collections: dict[EntityKind, dict[str, dict[str, Any]]] = {kind: {} for kind in EntityKind}
        if unique_fields is None:
            unique_fields = {EntityKind.APPLE: APPLE_UNIQUE_FIELDS}
        self._unique_fields = {kind: tuple(fields) for kind, fields in unique_fields.items()}

    def _new_id(self) -> str:
        return uuid.uuid4().hex[:24]

    def count(self, kind: EntityKind) -> int:
        return len(self._collections[kind])

    def exists_by_natural_key(self, accession: str, cultivar_name: str) -> bool:
        return self.find_by_natural_key(accession, cultivar_name) is not None

    def find_by_natural_key(self, accession: str, cultivar_name: str) -> dict[str, Any] | None:
        for doc in self._collections[EntityKind.APPLE].values():
            if doc.get("accession") == accession or doc.get("cultivarName") == cultivar_name:
                return copy.deepcopy(doc)
        return None

    def insert(self, kind: EntityKind, record: dict[str, Any]) -> str:
        collection = self._collections[kind]
        for field_name in self._unique_fields.get(kind, ()):
            value = record.get(field_name)
            if value is None:
                continue
            if any(doc.get(field_name) == value for doc in collection.values()):
                raise StoreIntegrityError(
                    f"Duplicate key for {field_name}: {value!r}",
                ).with_context(collection=kind.value, field=field_name)

        record_id = record.get("_id") or self._new_id()
        doc = copy.deepcopy(record)
        doc["_id"] = record_id
        collection[record_id] = doc
        return record_id

    def get(self, kind: EntityKind, record_id: Any) -> dict[str, Any] | None:
        doc = self._collections[kind].get(record_id)
        return copy.deepcopy(doc) if doc is not None else None

    def find(self, kind: EntityKind, **equals: Any) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(doc)
            for doc in self._collections[kind].values()
            if all(doc.get(k) == v for k, v in equals.items())
        ]

    def delete(self, kind: EntityKind, record_id: Any) -> bool:
        return self._collections[kind].pop(record_id, None) is not None


__all__ = ["MemoryDocumentStore"]

"""
MongoDB document store (pymongo).

Collections follow the catalog layout: ``Apples``, ``AppleProfile``,
``PhysicalAttributes`` and ``Origin``. ``ensure_indexes()`` creates the
storage-level unique indexes on ``accession`` and ``cultivarName`` that back
single-record creation; the bulk import additionally checks natural keys at
the application layer before writing.

Every pymongo failure surfaces as :class:`PersistenceError`; unique index
violations surface as :class:`StoreIntegrityError`.
"""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from apple_explorer.core.errors import PersistenceError, StoreIntegrityError
from apple_explorer.core.models import APPLE_UNIQUE_FIELDS, EntityKind
from apple_explorer.logging import get_logger

logger = get_logger(__name__)


def _coerce_id(record_id: Any) -> Any:
    """Accept ObjectId hex strings from the CLI/API."""
    if isinstance(record_id, str):
        try:
            return ObjectId(record_id)
        except InvalidId:
            return record_id
    return record_id


class MongoDocumentStore:
    """DocumentStore backed by a pymongo ``Database``."""

    def __init__(self, database: Database):
        self._db = database

    @classmethod
    def connect(cls, uri: str, database_name: str, *, timeout_ms: int = 5000) -> MongoDocumentStore:
        """Open a client and return a store bound to ``database_name``."""
        client: MongoClient = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        logger.debug("mongo_client_created", database=database_name)
        return cls(client[database_name])

    @property
    def database(self) -> Database:
        return self._db

    def _collection(self, kind: EntityKind):
        return self._db[kind.value]

    def ensure_indexes(self) -> None:
        """Create unique indexes on the Apple natural-key fields."""
        try:
            apples = self._collection(EntityKind.APPLE)
            for field_name in APPLE_UNIQUE_FIELDS:
                apples.create_index([(field_name, ASCENDING)], unique=True, name=f"uniq_{field_name}")
        except PyMongoError as e:
            raise PersistenceError("Failed to create indexes", cause=e).with_context(
                collection=EntityKind.APPLE.value
            )

    def exists_by_natural_key(self, accession: str, cultivar_name: str) -> bool:
        return self.find_by_natural_key(accession, cultivar_name) is not None

    def find_by_natural_key(self, accession: str, cultivar_name: str) -> dict[str, Any] | None:
        try:
            return self._collection(EntityKind.APPLE).find_one(
                {"$or": [{"accession": accession}, {"cultivarName": cultivar_name}]}
            )
        except PyMongoError as e:
            raise PersistenceError("Natural key lookup failed", cause=e).with_context(
                collection=EntityKind.APPLE.value
            )

    def insert(self, kind: EntityKind, record: dict[str, Any]) -> Any:
        try:
            result = self._collection(kind).insert_one(dict(record))
        except DuplicateKeyError as e:
            raise StoreIntegrityError("Duplicate key", cause=e).with_context(collection=kind.value)
        except PyMongoError as e:
            raise PersistenceError("Insert failed", cause=e).with_context(collection=kind.value)
        return result.inserted_id

    def get(self, kind: EntityKind, record_id: Any) -> dict[str, Any] | None:
        try:
            return self._collection(kind).find_one({"_id": _coerce_id(record_id)})
        except PyMongoError as e:
            raise PersistenceError("Lookup failed", cause=e).with_context(collection=kind.value)

    def find(self, kind: EntityKind, **equals: Any) -> list[dict[str, Any]]:
        if "_id" in equals:
            equals["_id"] = _coerce_id(equals["_id"])
        try:
            return list(self._collection(kind).find(equals))
        except PyMongoError as e:
            raise PersistenceError("Query failed", cause=e).with_context(collection=kind.value)

    def delete(self, kind: EntityKind, record_id: Any) -> bool:
        try:
            result = self._collection(kind).delete_one({"_id": _coerce_id(record_id)})
        except PyMongoError as e:
            raise PersistenceError("Delete failed", cause=e).with_context(collection=kind.value)
        return result.deleted_count > 0


__all__ = ["MongoDocumentStore"]

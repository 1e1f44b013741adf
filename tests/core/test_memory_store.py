"""Tests for the in-memory document store."""

import pytest

from apple_explorer.core.adapters.memory import MemoryDocumentStore
from apple_explorer.core.errors import StoreIntegrityError
from apple_explorer.core.models import EntityKind
from apple_explorer.core.protocols import DocumentStore


class TestMemoryDocumentStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, DocumentStore)

    def test_insert_assigns_id(self, store):
        record_id = store.insert(EntityKind.ORIGIN, {"country": "Canada"})
        assert store.get(EntityKind.ORIGIN, record_id) == {"_id": record_id, "country": "Canada"}
        assert store.count(EntityKind.ORIGIN) == 1

    def test_documents_are_copied(self, store):
        record = {"country": "Canada"}
        record_id = store.insert(EntityKind.ORIGIN, record)
        record["country"] = "France"
        fetched = store.get(EntityKind.ORIGIN, record_id)
        fetched["country"] = "Chile"
        assert store.get(EntityKind.ORIGIN, record_id)["country"] == "Canada"

    def test_get_missing(self, store):
        assert store.get(EntityKind.APPLE, "nope") is None

    def test_find_by_equality(self, store):
        store.insert(EntityKind.PROFILE, {"genus": "Malus", "species": "domestica"})
        store.insert(EntityKind.PROFILE, {"genus": "Malus", "species": "sieversii"})
        assert len(store.find(EntityKind.PROFILE, genus="Malus")) == 2
        assert [d["species"] for d in store.find(EntityKind.PROFILE, species="sieversii")] == ["sieversii"]

    def test_unique_apple_fields(self, store):
        store.insert(EntityKind.APPLE, {"accession": "TD001", "cultivarName": "Gala"})
        with pytest.raises(StoreIntegrityError) as exc_info:
            store.insert(EntityKind.APPLE, {"accession": "TD002", "cultivarName": "Gala"})
        assert exc_info.value.context.collection == "Apples"
        assert exc_info.value.context.metadata["field"] == "cultivarName"

    def test_sub_records_not_unique(self, store):
        store.insert(EntityKind.ORIGIN, {"country": "Canada"})
        store.insert(EntityKind.ORIGIN, {"country": "Canada"})
        assert store.count(EntityKind.ORIGIN) == 2

    def test_natural_key_matches_either_field(self, store):
        store.insert(EntityKind.APPLE, {"accession": "TD001", "cultivarName": "Gala"})
        assert store.exists_by_natural_key("TD001", "Fuji")
        assert store.exists_by_natural_key("TD999", "Gala")
        assert not store.exists_by_natural_key("TD999", "Fuji")
        assert store.find_by_natural_key("TD001", "Fuji")["cultivarName"] == "Gala"

    def test_delete(self, store):
        record_id = store.insert(EntityKind.ATTRIBUTES, {"color": "Red"})
        assert store.delete(EntityKind.ATTRIBUTES, record_id)
        assert not store.delete(EntityKind.ATTRIBUTES, record_id)

    def test_custom_unique_fields(self):
        store = MemoryDocumentStore(unique_fields={})
        store.insert(EntityKind.APPLE, {"accession": "TD001"})
        store.insert(EntityKind.APPLE, {"accession": "TD001"})
        assert store.count(EntityKind.APPLE) == 2

"""
Catalog records and their document shapes.

An Apple record references three independently persisted sub-records:
profile (taxonomy), physical attributes and origin. Each record knows how to
render itself as a store document using the collection's field names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class EntityKind(str, Enum):
    """Document store collections."""

    APPLE = "Apples"
    PROFILE = "AppleProfile"
    ATTRIBUTES = "PhysicalAttributes"
    ORIGIN = "Origin"


# Sub-record collections, in the order the import pipeline writes them
SUB_RECORD_KINDS = (EntityKind.PROFILE, EntityKind.ATTRIBUTES, EntityKind.ORIGIN)

# Apple fields holding the id of each sub-record
REFERENCE_FIELDS = {
    EntityKind.PROFILE: "appleProfileId",
    EntityKind.ATTRIBUTES: "physicalAttributesId",
    EntityKind.ORIGIN: "originId",
}

# Store-level unique fields of the Apples collection
APPLE_UNIQUE_FIELDS = ("accession", "cultivarName")


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class ProfileRecord:
    """Taxonomic profile (e.g. genus "Malus", species "domestica")."""

    genus: str | None = None
    species: str | None = None
    pedigree: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {"genus": self.genus, "species": self.species, "pedigree": self.pedigree}


@dataclass
class AttributesRecord:
    """Physical attributes; weight is absent when the source was not numeric."""

    color: str | None = None
    weight: float | None = None

    def to_document(self) -> dict[str, Any]:
        return {"color": self.color, "weight": self.weight}


@dataclass
class OriginRecord:
    country: str | None = None
    province: str | None = None
    city: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {"country": self.country, "province": self.province, "city": self.city}


@dataclass
class AppleRecord:
    """
    Apple cultivar record.

    ``accession`` and ``cultivar_name`` form the natural key; each is unique
    on its own across persisted records.
    """

    accession: str
    cultivar_name: str
    harvest_date: str | None = None
    taste_notes: str | None = None
    notes: str | None = None
    pedigree: str | None = None
    acno: str | None = None
    apple_profile_id: Any = None
    physical_attributes_id: Any = None
    origin_id: Any = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def references(self) -> dict[EntityKind, Any]:
        """Sub-record ids already set, keyed by collection."""
        refs = {
            EntityKind.PROFILE: self.apple_profile_id,
            EntityKind.ATTRIBUTES: self.physical_attributes_id,
            EntityKind.ORIGIN: self.origin_id,
        }
        return {kind: ref for kind, ref in refs.items() if ref is not None}

    def with_references(self, refs: dict[EntityKind, Any]) -> AppleRecord:
        """Attach sub-record ids keyed by collection."""
        self.apple_profile_id = refs.get(EntityKind.PROFILE, self.apple_profile_id)
        self.physical_attributes_id = refs.get(EntityKind.ATTRIBUTES, self.physical_attributes_id)
        self.origin_id = refs.get(EntityKind.ORIGIN, self.origin_id)
        return self

    def to_document(self) -> dict[str, Any]:
        return {
            "acno": self.acno,
            "accession": self.accession,
            "cultivarName": self.cultivar_name,
            "harvestDate": self.harvest_date,
            "tasteNotes": self.taste_notes,
            "notes": self.notes,
            "ePedigree": self.pedigree,
            "appleProfileId": self.apple_profile_id,
            "physicalAttributesId": self.physical_attributes_id,
            "originId": self.origin_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


__all__ = [
    "EntityKind",
    "SUB_RECORD_KINDS",
    "REFERENCE_FIELDS",
    "APPLE_UNIQUE_FIELDS",
    "ProfileRecord",
    "AttributesRecord",
    "OriginRecord",
    "AppleRecord",
    "utc_now",
]

"""
Versioned column mappings.

Input files name the same concept differently: the curator spreadsheet has
``E GENUS`` and ``CULTIVAR NAME``, the upload CSV has ``genus`` and
``cultivarName``. A :class:`ColumnMapping` is the explicit table from a
canonical field to the candidate labels of one input format, so format
drift is a mapping change rather than a code change.

A canonical field resolves to the first candidate label whose value is
present (not None, not blank). Labels are matched exactly: case and spacing
matter.

Mappings are either built in (``inventory-v1``, ``upload-v1``) or loaded
from YAML::

    name: inventory
    version: 2
    columns:
      accession: [ACCESSION]
      cultivar_name: [CULTIVAR NAME, Cultivar]
      color: [Color, E color]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from apple_explorer.core.errors import ConfigError, InvalidConfigError

# Canonical fields understood by the validator and the normalizer; the
# trailing *_id fields name existing sub-records to link instead of creating
CANONICAL_FIELDS = (
    "accession",
    "cultivar_name",
    "acno",
    "harvest_date",
    "taste_notes",
    "notes",
    "genus",
    "species",
    "pedigree",
    "color",
    "weight",
    "origin_country",
    "origin_province",
    "origin_city",
    "origin_id",
    "profile_id",
    "attributes_id",
)

REQUIRED_FIELDS = ("accession", "cultivar_name")


def is_present(value: Any) -> bool:
    """None and blank strings count as absent."""
    if value is None:
        return False
    if isinstance(value, str) and value.strip() == "":
        return False
    return True


@dataclass(frozen=True)
class ColumnMapping:
    """Canonical field -> ordered candidate column labels."""

    name: str
    version: int
    columns: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        unknown = set(self.columns) - set(CANONICAL_FIELDS)
        if unknown:
            raise InvalidConfigError(
                "columns", sorted(unknown), f"Unknown canonical fields in mapping {self.label}: {sorted(unknown)}"
            )
        missing = [f for f in REQUIRED_FIELDS if not self.columns.get(f)]
        if missing:
            raise InvalidConfigError(
                "columns", missing, f"Mapping {self.label} has no labels for required fields: {missing}"
            )

    @property
    def label(self) -> str:
        return f"{self.name}-v{self.version}"

    def labels_for(self, canonical: str) -> tuple[str, ...]:
        return self.columns.get(canonical, ())

    def resolve(self, row: Mapping[str, Any], canonical: str) -> Any:
        """Raw value of the first present candidate label, else None."""
        for label in self.labels_for(canonical):
            value = row.get(label)
            if is_present(value):
                return value
        return None

    def resolve_all(self, row: Mapping[str, Any]) -> dict[str, Any]:
        return {canonical: self.resolve(row, canonical) for canonical in self.columns}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ColumnMapping:
        try:
            columns = {
                str(canonical): tuple([labels] if isinstance(labels, str) else labels)
                for canonical, labels in (data.get("columns") or {}).items()
            }
            return cls(name=str(data["name"]), version=int(data.get("version", 1)), columns=columns)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Malformed column mapping: {e}", cause=e)


INVENTORY_V1 = ColumnMapping(
    name="inventory",
    version=1,
    columns={
        "accession": ("ACCESSION",),
        "cultivar_name": ("CULTIVAR NAME",),
        "acno": ("ACNO",),
        "harvest_date": ("E Date Collected",),
        "taste_notes": ("cmt (Inventory Comment)",),
        "notes": ("sitecmt (Site comment)",),
        "genus": ("E GENUS",),
        "species": ("E SPECIES",),
        "pedigree": ("E pedigree",),
        "color": ("Color", "E color"),
        "weight": ("Weight", "E quant (Quantity)"),
        "origin_country": ("E Origin Country", "Origin Country"),
        "origin_province": ("E Origin Province", "Origin Provir"),
        "origin_city": ("E Origin City", "Origin City"),
    },
)

UPLOAD_V1 = ColumnMapping(
    name="upload",
    version=1,
    columns={
        "accession": ("accession",),
        "cultivar_name": ("cultivarName",),
        "harvest_date": ("harvestDate",),
        "taste_notes": ("tasteNotes",),
        "notes": ("notes",),
        "genus": ("genus",),
        "species": ("species",),
        "pedigree": ("pedigree", "ePedigree"),
        "color": ("color",),
        "weight": ("weight",),
        "origin_country": ("originCountry", "country"),
        "origin_province": ("originProvince", "province"),
        "origin_city": ("originCity", "city"),
        "origin_id": ("originId",),
        "profile_id": ("appleProfileId",),
        "attributes_id": ("physicalAttributesId",),
    },
)

BUILTIN_MAPPINGS: dict[str, ColumnMapping] = {m.label: m for m in (INVENTORY_V1, UPLOAD_V1)}


def load_column_mapping(name_or_path: str | Path) -> ColumnMapping:
    """Return a built-in mapping by label, or load one from a YAML file."""
    if isinstance(name_or_path, str) and name_or_path in BUILTIN_MAPPINGS:
        return BUILTIN_MAPPINGS[name_or_path]

    path = Path(name_or_path)
    if not path.exists():
        raise InvalidConfigError(
            "column_mapping",
            str(name_or_path),
            f"Unknown column mapping {str(name_or_path)!r}; built-ins: {sorted(BUILTIN_MAPPINGS)}",
        )
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", cause=e)
    if not isinstance(data, dict):
        raise ConfigError(f"Column mapping {path} must be a mapping, got {type(data).__name__}")
    return ColumnMapping.from_dict(data)


__all__ = [
    "CANONICAL_FIELDS",
    "REQUIRED_FIELDS",
    "ColumnMapping",
    "INVENTORY_V1",
    "UPLOAD_V1",
    "BUILTIN_MAPPINGS",
    "is_present",
    "load_column_mapping",
]

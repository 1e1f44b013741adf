"""
Row validation.

``validate_row`` is a pure function: raw row in, ordered list of
human-readable error strings out. Every check runs; errors accumulate rather
than short-circuiting. An empty list means the row is structurally
acceptable.

Spreadsheet cells arrive typed (numbers, dates), so the type checks guard
against miscoded cells as well as malformed text.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from apple_explorer.ingest.columns import INVENTORY_V1, ColumnMapping

ACCESSION_PATTERN = re.compile(r"[A-Za-z0-9]+")
PROVINCE_PATTERN = re.compile(r"[A-Za-z]{2,}")
GENUS_PATTERN = re.compile(r"[A-Z][a-z]+")
SPECIES_PATTERN = re.compile(r"[a-z]+")

MSG_CULTIVAR_NAME = "Missing or invalid cultivar name"
MSG_ACCESSION = "Missing or invalid accession"
MSG_ORIGIN_COUNTRY = "Invalid origin country"
MSG_ORIGIN_PROVINCE = "Invalid origin province"
MSG_ORIGIN_CITY = "Invalid origin city"
MSG_PEDIGREE = "Invalid pedigree"
MSG_GENUS = "Invalid genus"
MSG_SPECIES = "Invalid species"


def _matches(pattern: re.Pattern, value: Any) -> bool:
    return isinstance(value, str) and pattern.fullmatch(value) is not None


def _accession_text(value: Any) -> str | None:
    # Spreadsheet cells may hold integer accessions
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return None


def validate_row(row: Mapping[str, Any], mapping: ColumnMapping = INVENTORY_V1) -> list[str]:
    """
    Validate one raw row.

    Args:
        row: Column label -> raw value, exactly as read from the source
        mapping: Column mapping used to find each field's value

    Returns:
        Ordered error messages; empty when the row is acceptable
    """
    errors: list[str] = []
    values = {canonical: mapping.resolve(row, canonical) for canonical in mapping.columns}

    cultivar_name = values.get("cultivar_name")
    if not isinstance(cultivar_name, str) or cultivar_name.strip() == "":
        errors.append(MSG_CULTIVAR_NAME)

    accession = _accession_text(values.get("accession"))
    if accession is None or ACCESSION_PATTERN.fullmatch(accession) is None:
        errors.append(MSG_ACCESSION)

    country = values.get("origin_country")
    if country is not None and not isinstance(country, str):
        errors.append(MSG_ORIGIN_COUNTRY)

    province = values.get("origin_province")
    if province is not None and not _matches(PROVINCE_PATTERN, province):
        errors.append(MSG_ORIGIN_PROVINCE)

    city = values.get("origin_city")
    if city is not None and not isinstance(city, str):
        errors.append(MSG_ORIGIN_CITY)

    pedigree = values.get("pedigree")
    if pedigree is not None and not isinstance(pedigree, str):
        errors.append(MSG_PEDIGREE)

    genus = values.get("genus")
    if genus is not None and not _matches(GENUS_PATTERN, genus):
        errors.append(MSG_GENUS)

    species = values.get("species")
    if species is not None and not _matches(SPECIES_PATTERN, species):
        errors.append(MSG_SPECIES)

    return errors


__all__ = [
    "validate_row",
    "MSG_CULTIVAR_NAME",
    "MSG_ACCESSION",
    "MSG_ORIGIN_COUNTRY",
    "MSG_ORIGIN_PROVINCE",
    "MSG_ORIGIN_CITY",
    "MSG_PEDIGREE",
    "MSG_GENUS",
    "MSG_SPECIES",
]

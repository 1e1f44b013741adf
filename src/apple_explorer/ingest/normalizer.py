"""
Related-entity normalization.

Maps a validated raw row through a column mapping into candidate Apple
fields and the three sub-records (profile, physical attributes, origin):

- strings are trimmed; absent or blank values become None
- weight is coerced to float from numbers or the leading numeric prefix of
  free text ("12.5 g" -> 12.5); anything else becomes None
- harvest date accepts date cells and common date strings; anything
  unparseable becomes None
- sub-record ids given by the row (``originId`` on uploads) are kept on the
  Apple so the pipeline links them instead of creating fresh records

Nothing here raises for bad values: validation already decided whether the
row is acceptable, normalization only coalesces.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from apple_explorer.core.models import AppleRecord, AttributesRecord, OriginRecord, ProfileRecord
from apple_explorer.ingest.columns import INVENTORY_V1, ColumnMapping

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

DATE_FORMATS = ("%m/%d/%Y", "%d-%b-%Y", "%Y/%m/%d", "%b %d, %Y")


@dataclass
class NormalizedRow:
    """Candidate records built from one raw row."""

    apple: AppleRecord
    profile: ProfileRecord
    attributes: AttributesRecord
    origin: OriginRecord

    @property
    def natural_key(self) -> tuple[str, str]:
        return self.apple.accession, self.apple.cultivar_name


def clean_text(value: Any) -> str | None:
    """Trimmed string, or None for absent/blank values."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def parse_weight(value: Any) -> float | None:
    """Float from a number or the leading numeric prefix of text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return None
        number = float(match.group(1))
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_harvest_date(value: Any) -> str | None:
    """ISO date string from a date cell or a date-like string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = clean_text(value) if isinstance(value, str) else None
    if text is None:
        return None
    try:
        return datetime.fromisoformat(text).date().isoformat()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def normalize_row(row: Mapping[str, Any], mapping: ColumnMapping = INVENTORY_V1) -> NormalizedRow:
    """Build candidate Apple fields and sub-records from a raw row."""
    values = {canonical: mapping.resolve(row, canonical) for canonical in mapping.columns}
    text = {canonical: clean_text(value) for canonical, value in values.items()}

    apple = AppleRecord(
        accession=text.get("accession") or "",
        cultivar_name=text.get("cultivar_name") or "",
        harvest_date=parse_harvest_date(values.get("harvest_date")),
        taste_notes=text.get("taste_notes"),
        notes=text.get("notes"),
        pedigree=text.get("pedigree"),
        acno=text.get("acno"),
        apple_profile_id=text.get("profile_id"),
        physical_attributes_id=text.get("attributes_id"),
        origin_id=text.get("origin_id"),
    )
    profile = ProfileRecord(
        genus=text.get("genus"),
        species=text.get("species"),
        pedigree=text.get("pedigree"),
    )
    attributes = AttributesRecord(
        color=text.get("color"),
        weight=parse_weight(values.get("weight")),
    )
    origin = OriginRecord(
        country=text.get("origin_country"),
        province=text.get("origin_province"),
        city=text.get("origin_city"),
    )
    return NormalizedRow(apple=apple, profile=profile, attributes=attributes, origin=origin)


__all__ = [
    "NormalizedRow",
    "clean_text",
    "parse_weight",
    "parse_harvest_date",
    "normalize_row",
]

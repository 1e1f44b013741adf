"""
Catalog operations.

Single-record creation, filtered query with joined origin and profile, and
sorted/paginated CSV export. Joins run in Python over the
:class:`DocumentStore` protocol, so every backend supports them.
"""

from __future__ import annotations

import csv
import io
from typing import Any

from apple_explorer.core.errors import AppleExplorerError, StoreIntegrityError
from apple_explorer.core.models import AppleRecord, EntityKind
from apple_explorer.logging import get_logger
from apple_explorer.ops.context import OperationContext
from apple_explorer.ops.requests import AppleQuery, CreateAppleRequest, ExportRequest
from apple_explorer.ops.result import OperationResult, PagedResult, start_timer

logger = get_logger(__name__)

EXPORT_FIELDS = (
    "accession",
    "cultivarName",
    "harvestDate",
    "tasteNotes",
    "notes",
    "appleProfileId",
    "physicalAttributesId",
    "originId",
)

EXPORT_FILENAME = "filtered_apple_data.csv"

# Query filter -> (joined document path, exact match)
_FILTERS: dict[str, tuple[tuple[str, ...], bool]] = {
    "cultivar_name": (("cultivarName",), False),
    "accession": (("accession",), True),
    "harvest_date": (("harvestDate",), True),
    "origin_country": (("origin", "country"), False),
    "origin_province": (("origin", "province"), False),
    "origin_city": (("origin", "city"), False),
    "genus": (("profile", "genus"), False),
    "species": (("profile", "species"), False),
    "pedigree": (("profile", "pedigree"), False),
}


def _strip(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _lookup(doc: dict[str, Any], path: tuple[str, ...]) -> Any:
    value: Any = doc
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _matches(doc: dict[str, Any], query: AppleQuery) -> bool:
    for name, (path, exact) in _FILTERS.items():
        wanted = getattr(query, name)
        if not wanted:
            continue
        actual = _lookup(doc, path)
        if actual is None:
            return False
        if exact:
            if str(actual) != wanted:
                return False
        elif wanted.casefold() not in str(actual).casefold():
            return False
    return True


def _join(ctx: OperationContext, apple: dict[str, Any]) -> dict[str, Any]:
    """Attach ``origin`` and ``profile`` sub-documents (left join)."""
    joined = dict(apple)
    origin_id = apple.get("originId")
    profile_id = apple.get("appleProfileId")
    joined["origin"] = ctx.store.get(EntityKind.ORIGIN, origin_id) if origin_id is not None else None
    joined["profile"] = ctx.store.get(EntityKind.PROFILE, profile_id) if profile_id is not None else None
    return joined


def _select(ctx: OperationContext, query: AppleQuery) -> list[dict[str, Any]]:
    equals = {}
    if query.accession:
        equals["accession"] = query.accession
    apples = ctx.store.find(EntityKind.APPLE, **equals)
    return [doc for doc in (_join(ctx, a) for a in apples) if _matches(doc, query)]


def _serialize(doc: dict[str, Any]) -> dict[str, Any]:
    """JSON-friendly copy: ids and timestamps as strings."""
    out: dict[str, Any] = {}
    for key, value in doc.items():
        if isinstance(value, dict):
            out[key] = _serialize(value)
        elif value is None or isinstance(value, (str, int, float, bool)):
            out[key] = value
        elif hasattr(value, "isoformat"):
            out[key] = value.isoformat()
        else:
            out[key] = str(value)
    return out


# ------------------------------------------------------------------ #
# Create
# ------------------------------------------------------------------ #


def create_apple(ctx: OperationContext, request: CreateAppleRequest) -> OperationResult[dict]:
    """Create one Apple record; CONFLICT when its natural key is taken."""
    timer = start_timer()

    accession = _strip(request.accession)
    cultivar_name = _strip(request.cultivar_name)
    origin_id = _strip(request.origin_id)
    missing = [
        name
        for name, value in (("accession", accession), ("cultivarName", cultivar_name), ("originId", origin_id))
        if not value
    ]
    if missing:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            "Missing required fields: accession, cultivarName, or originId",
            details={"missing": missing},
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        existing = ctx.store.find_by_natural_key(accession, cultivar_name)
        if existing is not None:
            fields = [
                name
                for name, value in (("accession", accession), ("cultivarName", cultivar_name))
                if existing.get(name) == value
            ]
            return OperationResult.fail(
                "CONFLICT",
                "Duplicate accession or cultivarName",
                details={"fields": fields},
                elapsed_ms=timer.elapsed_ms,
            )

        record = AppleRecord(
            accession=accession,
            cultivar_name=cultivar_name,
            harvest_date=_strip(request.harvest_date),
            taste_notes=_strip(request.taste_notes),
            notes=_strip(request.notes),
            apple_profile_id=request.apple_profile_id,
            physical_attributes_id=request.physical_attributes_id,
            origin_id=origin_id,
        )
        document = record.to_document()

        if ctx.dry_run:
            return OperationResult.ok(
                {"dry_run": True, "would_create": _serialize(document)},
                elapsed_ms=timer.elapsed_ms,
            )

        apple_id = ctx.store.insert(EntityKind.APPLE, document)
        document["_id"] = apple_id
        logger.info("apple.created", accession=accession, apple_id=str(apple_id), caller=ctx.caller)
        return OperationResult.ok(_serialize(document), elapsed_ms=timer.elapsed_ms)

    except StoreIntegrityError as exc:
        # Lost a race with a concurrent writer
        return OperationResult.fail(
            "CONFLICT",
            "Duplicate accession or cultivarName",
            details=exc.context.to_dict(),
            elapsed_ms=timer.elapsed_ms,
        )
    except AppleExplorerError as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)


# ------------------------------------------------------------------ #
# Query
# ------------------------------------------------------------------ #


def list_apples(ctx: OperationContext, query: AppleQuery) -> PagedResult[dict]:
    """Apple records matching every given filter, joined with origin and profile."""
    timer = start_timer()

    try:
        matched = _select(ctx, query)
    except AppleExplorerError as exc:
        logger.exception("op_failed", error=str(exc))
        return PagedResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    total = len(matched)
    offset = max(query.offset, 0)
    limit = query.limit if query.limit is not None else total
    page = matched[offset : offset + limit] if limit >= 0 else matched[offset:]
    return PagedResult.from_items(
        [_serialize(doc) for doc in page],
        total=total,
        limit=limit,
        offset=offset,
        elapsed_ms=timer.elapsed_ms,
    )


# ------------------------------------------------------------------ #
# Export
# ------------------------------------------------------------------ #


def _sort_key(field_name: str):
    path = tuple(field_name.split("."))

    def key(doc: dict[str, Any]) -> tuple[int, str]:
        value = _lookup(doc, path)
        # Missing values sort first ascending, last descending
        return (0, "") if value is None else (1, str(value))

    return key


def render_csv(docs: list[dict[str, Any]], fields: tuple[str, ...] = EXPORT_FIELDS) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(fields), extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for doc in docs:
        writer.writerow({name: "" if doc.get(name) is None else doc.get(name) for name in fields})
    return buffer.getvalue()


def export_apples_csv(ctx: OperationContext, request: ExportRequest) -> OperationResult[dict]:
    """
    Filtered, sorted, paginated CSV export.

    Returns ``{"filename", "content", "count", "total"}``; NOT_FOUND when the
    requested page is empty.
    """
    timer = start_timer()

    if request.page < 1 or request.limit < 1:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            "page and limit must be positive integers",
            details={"page": request.page, "limit": request.limit},
            elapsed_ms=timer.elapsed_ms,
        )
    if request.order not in ("asc", "desc"):
        return OperationResult.fail(
            "VALIDATION_FAILED",
            f"order must be 'asc' or 'desc', got {request.order!r}",
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        matched = _select(ctx, request.query)
    except AppleExplorerError as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    matched.sort(key=_sort_key(request.sort_by), reverse=request.order == "desc")
    start = (request.page - 1) * request.limit
    page = [_serialize(doc) for doc in matched[start : start + request.limit]]

    if not page:
        return OperationResult.fail("NOT_FOUND", "No apples found to export", elapsed_ms=timer.elapsed_ms)

    return OperationResult.ok(
        {
            "filename": EXPORT_FILENAME,
            "content": render_csv(page),
            "count": len(page),
            "total": len(matched),
        },
        elapsed_ms=timer.elapsed_ms,
    )


__all__ = [
    "EXPORT_FIELDS",
    "EXPORT_FILENAME",
    "create_apple",
    "list_apples",
    "export_apples_csv",
    "render_csv",
]

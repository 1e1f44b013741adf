"""
Maintenance operations.

Writes during import are sequential and non-transactional: when the Apple
insert fails after its sub-records landed, those sub-records are orphans.
:func:`sweep_orphans` removes every Profile, Attributes and Origin record
that no Apple references.

An import in flight writes each row's sub-records before its Apple, so a
sweep must not overlap a running import.
"""

from __future__ import annotations

from apple_explorer.core.errors import AppleExplorerError
from apple_explorer.core.models import REFERENCE_FIELDS, SUB_RECORD_KINDS, EntityKind
from apple_explorer.logging import get_logger
from apple_explorer.ops.context import OperationContext
from apple_explorer.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def find_orphans(ctx: OperationContext) -> dict[EntityKind, list]:
    """
    Ids of unreferenced sub-records, per collection.

    Sub-records are listed before the Apple snapshot is taken, so records
    written after the scan starts are never candidates.
    """
    candidates = {kind: ctx.store.find(kind) for kind in SUB_RECORD_KINDS}
    apples = ctx.store.find(EntityKind.APPLE)
    orphans: dict[EntityKind, list] = {}
    for kind, docs in candidates.items():
        field_name = REFERENCE_FIELDS[kind]
        referenced = {str(a.get(field_name)) for a in apples if a.get(field_name) is not None}
        orphans[kind] = [doc["_id"] for doc in docs if str(doc["_id"]) not in referenced]
    return orphans


def sweep_orphans(ctx: OperationContext) -> OperationResult[dict]:
    """
    Delete unreferenced sub-records (report only when ``ctx.dry_run``).

    Returns per-collection counts: ``{"dry_run": bool, "found": {...},
    "deleted": {...}}`` keyed by collection name.
    """
    timer = start_timer()

    try:
        orphans = find_orphans(ctx)
        found = {kind.value: len(ids) for kind, ids in orphans.items()}
        deleted = {kind.value: 0 for kind in orphans}

        if not ctx.dry_run:
            for kind, ids in orphans.items():
                for record_id in ids:
                    if ctx.store.delete(kind, record_id):
                        deleted[kind.value] += 1
    except AppleExplorerError as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

    logger.info("maintenance.sweep_orphans", dry_run=ctx.dry_run, found=found, deleted=deleted)
    return OperationResult.ok(
        {"dry_run": ctx.dry_run, "found": found, "deleted": deleted},
        elapsed_ms=timer.elapsed_ms,
    )


__all__ = ["find_orphans", "sweep_orphans"]

"""
FastAPI dependency injection: shared singletons and per-request factories.

Usage in routers::

    from apple_explorer.api.deps import OpContext, Settings

    @router.get("/apples")
    def list_apples(ctx: OpContext, settings: Settings):
        ...

Tags:
    api, dependency-injection, singletons, OpContext

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Request

from apple_explorer.core.adapters import create_store
from apple_explorer.core.protocols import DocumentStore
from apple_explorer.core.settings import AppleExplorerSettings, get_settings
from apple_explorer.ops.context import OperationContext

# ── Document store (one per app) ─────────────────────────────────────────


def get_store(
    request: Request,
    settings: Annotated[AppleExplorerSettings, Depends(get_settings)],
) -> DocumentStore:
    """The app's document store, created on first use."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        store = create_store(settings)
        request.app.state.store = store
    return store


# ── Operation context (per-request) ──────────────────────────────────────


def get_operation_context(
    request: Request,
    store: Annotated[DocumentStore, Depends(get_store)],
) -> OperationContext:
    """Build an :class:`OperationContext` from the current request."""
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return OperationContext(store=store, request_id=request_id, caller="api")


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[AppleExplorerSettings, Depends(get_settings)]
Store = Annotated[DocumentStore, Depends(get_store)]
OpContext = Annotated[OperationContext, Depends(get_operation_context)]

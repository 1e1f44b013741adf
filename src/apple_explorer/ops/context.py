"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument: the document store, who is calling, and the dry-run flag.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from apple_explorer.core.protocols import DocumentStore


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        store: Document store satisfying :class:`DocumentStore`.
        request_id: Unique ID for this invocation (auto-generated).
        caller: Origin of the request, ``"api"``, ``"cli"`` or ``"sdk"``.
        dry_run: When ``True``, operations report what they would do
            without writing.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    store: DocumentStore
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    dry_run: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

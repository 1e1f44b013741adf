"""
Operations layer: catalog and import logic shared by the CLI and the API.

- All functions accept ``OperationContext`` as first argument
- All functions return ``OperationResult[T]`` instead of raising
- No HTTP or CLI knowledge lives here

Usage::

    from apple_explorer.ops import OperationContext
    from apple_explorer.ops.apples import list_apples
    from apple_explorer.ops.requests import AppleQuery

    ctx = OperationContext(store=store, caller="cli")
    result = list_apples(ctx, AppleQuery(genus="malus"))
"""

from apple_explorer.ops.context import OperationContext
from apple_explorer.ops.result import OperationError, OperationResult, PagedResult

__all__ = [
    "OperationContext",
    "OperationError",
    "OperationResult",
    "PagedResult",
]

"""
Operation result envelope.

Every catalog and import operation returns an :class:`OperationResult`:
a typed success/failure envelope the CLI and the API both render. Failures
carry a machine-readable code that the API maps to an HTTP status:

============================  ====================================
code                          meaning
============================  ====================================
``VALIDATION_FAILED``         request fields missing or malformed
``CONFLICT``                  natural key already taken
``NOT_FOUND``                 nothing matched
``INVALID_INPUT``             input file/payload unusable
``INTERNAL``                  storage or unexpected failure
============================  ====================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from apple_explorer.core.errors import AppleExplorerError, ErrorCategory

# Error category -> operation error code
CATEGORY_TO_CODE = {
    ErrorCategory.INPUT: "INVALID_INPUT",
    ErrorCategory.VALIDATION: "VALIDATION_FAILED",
    ErrorCategory.DUPLICATE: "CONFLICT",
    ErrorCategory.CONFIG: "INVALID_INPUT",
    ErrorCategory.STORAGE: "INTERNAL",
    ErrorCategory.INTERNAL: "INTERNAL",
}

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class OperationError:
    """Structured error detail for failed operations.

    Attributes:
        code: Machine-readable code (``CONFLICT``, ``VALIDATION_FAILED``, ...).
        message: Human-readable description of the error.
        category: Optional :class:`ErrorCategory` of the underlying error.
        details: Extra key/value context (colliding fields, missing fields).
    """

    code: str
    message: str
    category: ErrorCategory | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class OperationResult(Generic[T]):
    """Envelope returned by every operation function.

    Use the :meth:`ok`, :meth:`fail` and :meth:`from_error` factories rather
    than the constructor.
    """

    success: bool
    data: T | None = None
    error: OperationError | None = None
    warnings: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        data: T,
        *,
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
        metadata: dict[str, Any] | None = None,
    ) -> OperationResult[T]:
        return cls(
            success=True,
            data=data,
            warnings=warnings or [],
            elapsed_ms=elapsed_ms,
            metadata=metadata or {},
        )

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        *,
        category: ErrorCategory | None = None,
        details: dict[str, Any] | None = None,
        elapsed_ms: float = 0.0,
        metadata: dict[str, Any] | None = None,
    ) -> OperationResult[T]:
        return cls(
            success=False,
            error=OperationError(code=code, message=message, category=category, details=details or {}),
            elapsed_ms=elapsed_ms,
            metadata=metadata or {},
        )

    @classmethod
    def from_error(cls, exc: AppleExplorerError, *, elapsed_ms: float = 0.0) -> OperationResult[T]:
        """Failed result for a domain error, coded by its category."""
        details = exc.context.to_dict()
        fields = getattr(exc, "fields", None)
        if fields:
            details["fields"] = list(fields)
        errors = getattr(exc, "errors", None)
        if errors:
            details["errors"] = list(errors)
        return cls.fail(
            CATEGORY_TO_CODE.get(exc.category, "INTERNAL"),
            exc.message,
            category=exc.category,
            details=details,
            elapsed_ms=elapsed_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict (for JSON output)."""
        d: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            d["data"] = self.data
        if self.error is not None:
            d["error"] = {"code": self.error.code, "message": self.error.message}
            if self.error.details:
                d["error"]["details"] = self.error.details
        if self.warnings:
            d["warnings"] = self.warnings
        if self.elapsed_ms:
            d["elapsed_ms"] = round(self.elapsed_ms, 2)
        if self.metadata:
            d["metadata"] = self.metadata
        return d


@dataclass
class PagedResult(OperationResult[list[T]]):
    """Paginated list result; ``has_more`` is derived from total/offset/limit."""

    total: int = 0
    limit: int = 50
    offset: int = 0
    has_more: bool = False

    @classmethod
    def from_items(
        cls,
        items: list[T],
        total: int,
        *,
        limit: int = 50,
        offset: int = 0,
        elapsed_ms: float = 0.0,
        metadata: dict[str, Any] | None = None,
    ) -> PagedResult[T]:
        return cls(
            success=True,
            data=items,
            total=total,
            limit=limit,
            offset=offset,
            has_more=(offset + limit) < total,
            elapsed_ms=elapsed_ms,
            metadata=metadata or {},
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["total"] = self.total
        d["limit"] = self.limit
        d["offset"] = self.offset
        d["has_more"] = self.has_more
        return d


class _Timer:
    __slots__ = ("_start",)

    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000


def start_timer() -> _Timer:
    """Return a stopwatch; read ``timer.elapsed_ms`` when done."""
    return _Timer()

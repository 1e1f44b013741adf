"""
API schemas: shared envelopes, RFC 7807 errors and request bodies.

Every endpoint returns either :class:`SuccessResponse` / :class:`PagedResponse`
or :class:`ProblemDetail` (4xx/5xx). The CSV endpoints return ``text/csv``
bodies directly.

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


# ── RFC 7807 Problem Detail ─────────────────────────────────────────────


class ErrorDetail(BaseModel):
    """Field-level error detail."""

    code: str = Field(description="Machine-readable error code (e.g. 'REQUIRED')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field name if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Error Codes:
        - ``VALIDATION_FAILED`` (400): Missing or malformed fields
        - ``INVALID_INPUT`` (400): Unusable upload or file
        - ``NOT_FOUND`` (404): Nothing matched
        - ``CONFLICT`` (409): Accession or cultivar name already taken
        - ``PAYLOAD_TOO_LARGE`` (413): Upload exceeds the size cap
        - ``INTERNAL`` (500): Unexpected server error

    Example:
        {
            "type": "about:blank",
            "title": "Duplicate accession or cultivarName",
            "status": 409,
            "detail": "",
            "instance": "/api/v1/apples",
            "errors": [{"code": "CONFLICT", "message": "accession", "field": "accession"}]
        }
    """

    type: str = Field(default="about:blank")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="")
    instance: str = Field(default="")
    errors: list[ErrorDetail] = Field(default_factory=list)


# ── Success Envelopes ────────────────────────────────────────────────────


class PageMeta(BaseModel):
    total: int = Field(description="Total items across all pages")
    limit: int = Field(description="Items per page (requested)")
    offset: int = Field(description="Current offset (0-based)")
    has_more: bool = Field(description="True if more pages exist after current")


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success envelope for single-item responses."""

    data: T = Field(description="Response payload")
    elapsed_ms: float = Field(default=0.0, description="Server-side processing time in milliseconds")
    warnings: list[str] = Field(default_factory=list)


class PagedResponse(BaseModel, Generic[T]):
    """Paged success envelope for list responses."""

    data: list[T] = Field(description="Items for this page")
    page: PageMeta
    elapsed_ms: float = Field(default=0.0)
    warnings: list[str] = Field(default_factory=list)


# ── Request bodies ───────────────────────────────────────────────────────


class AppleCreateBody(BaseModel):
    """Body for ``POST /apples``.

    Every field is optional at the schema level so a missing required field
    comes back as a 400 problem rather than a 422.
    """

    model_config = ConfigDict(populate_by_name=True)

    accession: str | None = None
    cultivar_name: str | None = Field(default=None, alias="cultivarName")
    harvest_date: str | None = Field(default=None, alias="harvestDate")
    taste_notes: str | None = Field(default=None, alias="tasteNotes")
    notes: str | None = None
    apple_profile_id: str | None = Field(default=None, alias="appleProfileId")
    physical_attributes_id: str | None = Field(default=None, alias="physicalAttributesId")
    origin_id: str | None = Field(default=None, alias="originId")


class UploadResult(BaseModel):
    """Outcome of a CSV upload import."""

    message: str = "CSV processed"
    insertedCount: int
    skippedCount: int
    validationFailedCount: int
    duplicateCount: int
    errors: list[dict[str, Any]] = Field(default_factory=list)
    run_id: str
    error_log: str | None = Field(default=None, description="Download path of the error CSV, if written")


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    store_backend: str
    timestamp: str

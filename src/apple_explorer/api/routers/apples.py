"""
Apples router: catalog query, single create, CSV upload import and export.

Endpoints:
    GET  /apples                 Filtered query joined with origin and profile
    POST /apples                 Create one record (400 / 409 / 201)
    POST /apples/upload          Bulk import of an uploaded CSV
    GET  /apples/upload/errors   Download the last upload error log
    GET  /apples/export          Filtered, sorted, paginated CSV export

Query parameters use the catalog's camelCase field names
(``cultivarName``, ``originCountry``, ...).

Tags:
    api, apples, catalog, import, export

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import FileResponse, Response
from starlette.concurrency import run_in_threadpool

from apple_explorer.api.deps import OpContext, Settings
from apple_explorer.api.middleware.errors import problem_response
from apple_explorer.api.schemas import (
    AppleCreateBody,
    PagedResponse,
    PageMeta,
    SuccessResponse,
    UploadResult,
)
from apple_explorer.api.utils import handle_error
from apple_explorer.ingest.columns import UPLOAD_V1
from apple_explorer.ops.apples import create_apple, export_apples_csv, list_apples
from apple_explorer.ops.imports import run_import
from apple_explorer.ops.requests import AppleQuery, CreateAppleRequest, ExportRequest, ImportRequest

router = APIRouter(prefix="/apples")

UPLOAD_LOG_NAME = "upload-errors"


def apple_query(
    cultivar_name: str | None = Query(None, alias="cultivarName", description="Substring, case-insensitive"),
    accession: str | None = Query(None, description="Exact accession"),
    origin_country: str | None = Query(None, alias="originCountry"),
    origin_province: str | None = Query(None, alias="originProvince"),
    origin_city: str | None = Query(None, alias="originCity"),
    genus: str | None = Query(None),
    species: str | None = Query(None),
    pedigree: str | None = Query(None),
    harvest_date: str | None = Query(None, alias="harvestDate", description="Exact ISO date"),
) -> AppleQuery:
    """Catalog filters shared by the query and export endpoints."""
    return AppleQuery(
        cultivar_name=cultivar_name,
        accession=accession,
        origin_country=origin_country,
        origin_province=origin_province,
        origin_city=origin_city,
        genus=genus,
        species=species,
        pedigree=pedigree,
        harvest_date=harvest_date,
    )


Filters = Annotated[AppleQuery, Depends(apple_query)]


@router.get("", response_model=PagedResponse[dict[str, Any]])
def get_apples(ctx: OpContext, request: Request, filters: Filters):
    """Apples matching every given filter, with ``origin`` and ``profile`` joined in."""
    result = list_apples(ctx, filters)
    if not result.success:
        return handle_error(result, request)
    return PagedResponse[dict[str, Any]](
        data=result.data or [],
        page=PageMeta(total=result.total, limit=result.limit, offset=result.offset, has_more=result.has_more),
        elapsed_ms=result.elapsed_ms,
    )


@router.post("", status_code=201, response_model=SuccessResponse[dict[str, Any]])
def post_apple(ctx: OpContext, request: Request, body: AppleCreateBody):
    """Create one apple; 400 on missing accession/cultivarName/originId, 409 on duplicate."""
    result = create_apple(ctx, CreateAppleRequest(**body.model_dump()))
    if not result.success:
        return handle_error(result, request)
    return SuccessResponse[dict[str, Any]](data=result.data, elapsed_ms=result.elapsed_ms)


@router.post("/upload", response_model=SuccessResponse[UploadResult])
async def upload_apples(
    ctx: OpContext,
    settings: Settings,
    request: Request,
    file: UploadFile | None = File(None),
):
    """
    Import an uploaded CSV through the bulk pipeline (``upload-v1`` columns).

    Rejected rows of both kinds are written to ``upload-errors.json/csv`` in
    the configured log directory. The previous upload's log is removed
    first, so a clean upload leaves none behind.
    """
    if file is None or not file.filename:
        return problem_response(status=400, title="No file uploaded", instance=str(request.url))

    payload = await file.read(settings.max_upload_bytes + 1)
    await file.close()
    if len(payload) > settings.max_upload_bytes:
        return problem_response(
            status=413,
            title="File too large",
            detail=f"Uploads are limited to {settings.max_upload_bytes} bytes",
            instance=str(request.url),
        )

    log_dir = Path(settings.log_dir)
    for suffix in (".json", ".csv"):
        (log_dir / f"{UPLOAD_LOG_NAME}{suffix}").unlink(missing_ok=True)

    result = await run_in_threadpool(
        run_import,
        ctx,
        ImportRequest(
            payload=payload,
            source_name=file.filename,
            mapping=UPLOAD_V1.label,
            output_dir=log_dir,
            log_prefix=UPLOAD_LOG_NAME,
        ),
    )
    if not result.success:
        return handle_error(result, request)

    summary = result.data
    error_log = None
    if UPLOAD_LOG_NAME in summary.audit_files:
        error_log = request.url_for("download_upload_errors").path
    entries = summary.validation_failures + summary.duplicates
    data = UploadResult(
        insertedCount=summary.inserted,
        skippedCount=len(entries),
        validationFailedCount=summary.validation_failed,
        duplicateCount=summary.duplicate_count,
        errors=[e.to_dict() for e in sorted(entries, key=lambda e: e.row_number)],
        run_id=summary.run_id,
        error_log=error_log,
    )
    return SuccessResponse[UploadResult](data=data, elapsed_ms=result.elapsed_ms, warnings=result.warnings)


@router.get("/upload/errors")
def download_upload_errors(settings: Settings, request: Request):
    """The last upload's error log as CSV; 404 when none exists."""
    path = Path(settings.log_dir) / f"{UPLOAD_LOG_NAME}.csv"
    if not path.is_file():
        return problem_response(status=404, title="No error log found", instance=str(request.url))
    return FileResponse(path, media_type="text/csv", filename=path.name)


@router.get("/export")
def export_apples(
    ctx: OpContext,
    request: Request,
    filters: Filters,
    sort_by: str = Query("cultivarName", alias="sortBy"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=10_000),
):
    """Filtered, sorted, paginated CSV export; 404 when the page is empty."""
    result = export_apples_csv(
        ctx,
        ExportRequest(query=filters, sort_by=sort_by, order=order, page=page, limit=limit),
    )
    if not result.success:
        return handle_error(result, request)
    return Response(
        content=result.data["content"],
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{result.data["filename"]}"'},
    )

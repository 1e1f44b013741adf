"""
CLI: ``apple-explorer apples``, catalog records.
"""

from __future__ import annotations

from pathlib import Path

import typer

from apple_explorer.cli.utils import console, fail, make_context, output_paged, output_result
from apple_explorer.ops.apples import create_apple, export_apples_csv, list_apples
from apple_explorer.ops.requests import AppleQuery, CreateAppleRequest, ExportRequest

app = typer.Typer(no_args_is_help=True)

LIST_COLUMNS = ["accession", "cultivarName", "harvestDate", "profile.genus", "profile.species", "origin.country"]


def _query(
    cultivar_name: str | None,
    accession: str | None,
    origin_country: str | None,
    origin_province: str | None,
    origin_city: str | None,
    genus: str | None,
    species: str | None,
    pedigree: str | None,
    harvest_date: str | None,
    **paging,
) -> AppleQuery:
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
        **paging,
    )


@app.command("add")
def add(
    accession: str = typer.Option(..., "--accession", "-a"),
    cultivar_name: str = typer.Option(..., "--cultivar-name", "-n"),
    origin_id: str = typer.Option(..., "--origin-id"),
    harvest_date: str | None = typer.Option(None, "--harvest-date"),
    taste_notes: str | None = typer.Option(None, "--taste-notes"),
    notes: str | None = typer.Option(None, "--notes"),
    profile_id: str | None = typer.Option(None, "--profile-id"),
    attributes_id: str | None = typer.Option(None, "--attributes-id"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Add one apple record."""
    ctx, _ = make_context(dry_run=dry_run)
    request = CreateAppleRequest(
        accession=accession,
        cultivar_name=cultivar_name,
        origin_id=origin_id,
        harvest_date=harvest_date,
        taste_notes=taste_notes,
        notes=notes,
        apple_profile_id=profile_id,
        physical_attributes_id=attributes_id,
    )
    output_result(create_apple(ctx, request), as_json=json_out, title="Created apple")


@app.command("list")
def list_cmd(
    cultivar_name: str | None = typer.Option(None, "--cultivar-name"),
    accession: str | None = typer.Option(None, "--accession"),
    origin_country: str | None = typer.Option(None, "--country"),
    origin_province: str | None = typer.Option(None, "--province"),
    origin_city: str | None = typer.Option(None, "--city"),
    genus: str | None = typer.Option(None, "--genus"),
    species: str | None = typer.Option(None, "--species"),
    pedigree: str | None = typer.Option(None, "--pedigree"),
    harvest_date: str | None = typer.Option(None, "--harvest-date"),
    limit: int = typer.Option(50, "--limit", "-n"),
    offset: int = typer.Option(0, "--offset"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List apples matching the given filters."""
    ctx, _ = make_context()
    query = _query(
        cultivar_name,
        accession,
        origin_country,
        origin_province,
        origin_city,
        genus,
        species,
        pedigree,
        harvest_date,
        limit=limit,
        offset=offset,
    )
    output_paged(list_apples(ctx, query), as_json=json_out, title="Apples", columns=LIST_COLUMNS)


@app.command("export")
def export(
    cultivar_name: str | None = typer.Option(None, "--cultivar-name"),
    accession: str | None = typer.Option(None, "--accession"),
    origin_country: str | None = typer.Option(None, "--country"),
    origin_province: str | None = typer.Option(None, "--province"),
    origin_city: str | None = typer.Option(None, "--city"),
    genus: str | None = typer.Option(None, "--genus"),
    species: str | None = typer.Option(None, "--species"),
    pedigree: str | None = typer.Option(None, "--pedigree"),
    harvest_date: str | None = typer.Option(None, "--harvest-date"),
    sort_by: str = typer.Option("cultivarName", "--sort-by"),
    order: str = typer.Option("asc", "--order"),
    page: int = typer.Option(1, "--page"),
    limit: int = typer.Option(10, "--limit"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write CSV here instead of stdout"),
) -> None:
    """Export apples as CSV."""
    ctx, _ = make_context()
    query = _query(
        cultivar_name,
        accession,
        origin_country,
        origin_province,
        origin_city,
        genus,
        species,
        pedigree,
        harvest_date,
    )
    result = export_apples_csv(ctx, ExportRequest(query=query, sort_by=sort_by, order=order, page=page, limit=limit))
    if not result.success:
        fail(result)

    if output is None:
        typer.echo(result.data["content"], nl=False)
        return
    output.write_text(result.data["content"], encoding="utf-8")
    console.print(f"Wrote {result.data['count']} of {result.data['total']} apples to {output}")

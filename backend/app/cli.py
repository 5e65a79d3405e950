"""Typer-based CLI for operating the directory service locally."""

from __future__ import annotations

import asyncio
import csv
from pathlib import Path
from typing import Iterable

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.db import dispose_engine, get_session, init_models
from app.core.errors import CompanyNotFoundError
from app.core.logging import setup_logging
from app.models.company import CompanyFields
from app.models.tables import Company
from app.services import analytics, investigate, likes
from app.services.classifier import SectorClassifier
from app.services.identity import JsonFileStore, load_or_create_device_id

app = typer.Typer(help="Utilities for the TSK directory service")
console = Console()

_DEFAULT_STATE_FILE = Path.home() / ".tsk-directory" / "state.json"


def _run(coro):
    async def _wrapped():
        try:
            return await coro
        finally:
            await dispose_engine()

    return asyncio.run(_wrapped())


def _read_csv_rows(path: Path) -> list[dict[str, str]]:
    with path.open(newline="", encoding="utf-8-sig") as handle:
        return [dict(row) for row in csv.DictReader(handle)]


async def import_rows(session: AsyncSession, rows: Iterable[dict[str, str]]) -> tuple[int, int, int]:
    """Insert validated rows, skipping registration numbers already present.

    Returns ``(inserted, skipped, invalid)``.
    """

    existing = set(await session.scalars(select(Company.reg_number)))
    inserted = skipped = invalid = 0

    for index, row in enumerate(rows, start=1):
        try:
            fields = CompanyFields.model_validate(row)
        except ValidationError as exc:
            invalid += 1
            typer.secho(f"Row {index}: {exc.error_count()} validation error(s), skipped.", fg=typer.colors.YELLOW)
            continue

        if fields.reg_number in existing:
            skipped += 1
            continue

        data = fields.model_dump()
        data["office_type"] = fields.office_type.value
        session.add(Company(**data))
        existing.add(fields.reg_number)
        inserted += 1

    await session.commit()
    return inserted, skipped, invalid


@app.command("init-db")
def init_db() -> None:
    """Create the directory tables."""

    _run(init_models())
    typer.secho("Tables created.", fg=typer.colors.GREEN)


@app.command("import-csv")
def import_csv(csv_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV export of the registry.")):
    """Load company rows from a CSV file into the directory."""

    rows = _read_csv_rows(csv_path)
    if not rows:
        typer.secho("No rows found.", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    async def _import() -> tuple[int, int, int]:
        await init_models()
        async with get_session() as session:
            return await import_rows(session, rows)

    inserted, skipped, invalid = _run(_import())
    typer.secho("Import complete", fg=typer.colors.GREEN)
    typer.echo(f"Inserted: {inserted}")
    typer.echo(f"Skipped (already present): {skipped}")
    typer.echo(f"Invalid: {invalid}")


@app.command()
def classify(
    company_id: int = typer.Argument(..., help="Directory id of the company."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Classify without saving tags."),
):
    """Run the AI sector classifier for one company."""

    settings = get_settings()
    setup_logging(settings.log_level)
    classifier = SectorClassifier.from_settings(settings)
    if not classifier.credentials:
        raise typer.BadParameter("No OpenAI API key configured (OPENAI_API_KEY / CLASSIFIER_API_KEYS).")

    async def _classify():
        async with get_session() as session:
            if dry_run:
                company = await investigate.load_company(session, company_id)
                return await classifier.classify(company), None
            result = await investigate.investigate(
                session, company_id, classifier, base_url=settings.search_handoff_url
            )
            return result.tags, result

    try:
        tags, result = _run(_classify())
    except CompanyNotFoundError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Tags: {tags or '(none)'}")
    if result is not None:
        typer.echo(f"Saved: {result.saved}")
        typer.echo(f"Search URL: {result.search_url}")


@app.command()
def like(
    company_id: int = typer.Argument(..., help="Directory id of the company."),
    state_file: Path = typer.Option(_DEFAULT_STATE_FILE, "--state-file", help="Where the device id is kept."),
):
    """Toggle this machine's like for a company."""

    device_id = load_or_create_device_id(JsonFileStore(state_file))

    async def _toggle():
        async with get_session() as session:
            return await likes.toggle_like(session, device_id, company_id)

    try:
        result = _run(_toggle())
    except CompanyNotFoundError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    state = "liked" if result.liked else "not liked"
    typer.echo(f"Company {company_id}: {state} ({result.total} total)")


@app.command("analytics")
def show_analytics(top: int = typer.Option(5, "--top", min=1, help="Number of most-liked companies.")):
    """Print national totals and the per-prefecture leaderboard."""

    async def _load():
        async with get_session() as session:
            return await analytics.get_analytics(session, top_n=top)

    snapshot = _run(_load())

    console.rule("Overview")
    console.print(f"Organizations: {snapshot.overview.total_companies}")
    console.print(f"Analyzed: {snapshot.overview.total_analyzed}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Prefecture")
    table.add_column("TSK", justify="right")
    table.add_column("Analyzed", justify="right")
    for row in snapshot.rows:
        table.add_row(row.prefecture, str(row.total_tsk), str(row.total_tags_analyzed))
    console.print(table)

    console.rule("Most liked")
    for company in snapshot.top_liked:
        console.print(f"{company.total_likes:>5}  {company.display_name}")


if __name__ == "__main__":  # pragma: no cover
    app()

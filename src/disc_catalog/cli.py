"""Command line interface for the disc catalog."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from . import __version__
from .core.resolver import MetadataResolver
from .domain.barcode import is_lookup_candidate
from .domain.lookup import LookupFailure, LookupResult
from .domain.records import DVD_RATINGS, MediaKind, MediaRecord, new_record
from .domain.services import CatalogService, SaveOutcome
from .exceptions import DiscCatalogError, NotFoundError
from .infrastructure.repositories import create_repositories
from .models.config import Config, create_default_config, load_config

console = Console()

KIND_CHOICE = click.Choice([kind.value for kind in MediaKind], case_sensitive=False)


class AppContext:
    """Lazily built services shared by the commands of one invocation."""

    def __init__(
        self,
        config: Config,
        service: Optional[CatalogService] = None,
        resolver: Optional[MetadataResolver] = None
    ):
        self.config = config
        self._service = service
        self._resolver = resolver

    @property
    def service(self) -> CatalogService:
        if self._service is None:
            self._service = CatalogService(create_repositories(self.config.store))
        return self._service

    @property
    def resolver(self) -> MetadataResolver:
        if self._resolver is None:
            self._resolver = MetadataResolver.from_config(self.config.lookup)
        return self._resolver


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(message: str) -> None:
    console.print(f"\n[red]Error: {message}[/red]")
    sys.exit(1)


def _record_options(fn):
    """Field options shared by ``add`` and ``edit``."""
    options = [
        click.option('--title', help='Title'),
        click.option('--credit', help='Artist (CD) or director (DVD)'),
        click.option('--year', help='Release year'),
        click.option('--genre', help='Genre; `genres` lists the suggestions'),
        click.option('--barcode', help='UPC/EAN barcode'),
        click.option('--cover-url', help='Cover image URL'),
        click.option('--minutes', type=click.IntRange(min=0), help='Playing time (CD) or runtime (DVD) in minutes'),
        click.option('--rating', type=click.Choice(DVD_RATINGS), help='Classification (DVD only)'),
        click.option('--notes', help='Free-text notes'),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _field_values(**options) -> Dict[str, object]:
    """Map CLI option values onto record field names, skipping unset options."""
    names = {
        "title": "title",
        "credit": "primary_credit",
        "year": "year",
        "genre": "genre",
        "barcode": "barcode",
        "cover_url": "cover_url",
        "minutes": "length_minutes",
        "rating": "rating",
        "notes": "notes",
    }
    return {names[key]: value for key, value in options.items() if key in names and value is not None}


def _apply_values(record: MediaRecord, values: Dict[str, object]) -> None:
    for key, value in values.items():
        if key == "rating" and record.kind is not MediaKind.DVD:
            raise click.UsageError("--rating only applies to DVDs")
        setattr(record, key, value)

    genre = values.get("genre")
    if genre and str(genre).strip().lower() not in {g.lower() for g in record.kind.genres}:
        console.print(
            f"[yellow]Note: '{genre}' is not a suggested {record.kind.label} genre "
            f"(see `disc-catalog genres --kind {record.kind.value}`)[/yellow]"
        )


def _print_lookup_result(result: LookupResult, kind: MediaKind) -> None:
    if result.found:
        console.print(f"\n[green]✓ {kind.label} found via {result.source}[/green]")
        table = Table(show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for key, value in result.fields.populated().items():
            label = kind.credit_label if key == "primary_credit" else key.replace("_", " ")
            table.add_row(label, str(value))
        console.print(table)
        if result.rating_needs_verification:
            console.print("[yellow]Note: rating converted from a US classification (verify accuracy)[/yellow]")
        return

    style = "yellow" if result.reason is LookupFailure.NOT_FOUND else "red"
    console.print(f"\n[{style}]{result.message}[/{style}]")
    if result.attempted:
        console.print("Formats tried:")
        for variant in result.attempted:
            console.print(f"  - {variant}")


def _records_table(records: List[MediaRecord], title: str, show_kind: bool = False) -> Table:
    table = Table(title=title)
    if show_kind:
        table.add_column("Type", style="magenta")
    table.add_column("Title", style="cyan")
    table.add_column("Credit")
    table.add_column("Year", justify="right")
    table.add_column("Genre")
    table.add_column("Minutes", justify="right")
    table.add_column("Barcode")
    table.add_column("Added")
    table.add_column("ID", style="dim")

    for record in records:
        row = [
            record.title,
            record.primary_credit,
            str(record.year or ""),
            record.genre,
            str(record.length_minutes or ""),
            record.barcode or "",
            record.date_added.strftime("%Y-%m-%d") if record.date_added else "",
            record.id or "",
        ]
        if show_kind:
            row.insert(0, record.kind.label)
        table.add_row(*row)
    return table


def _duplicate_prompt(kind: MediaKind, assume_yes: bool):
    def confirm(existing: MediaRecord) -> bool:
        console.print(
            f"\n[yellow]⚠ A {kind.label} with this barcode already exists:[/yellow] "
            f"{existing.get_display_name()}"
        )
        if assume_yes:
            return True
        return Confirm.ask("Do you want to add it anyway?", default=False)
    return confirm


async def _save(app: AppContext, record: MediaRecord, assume_yes: bool) -> SaveOutcome:
    return await app.service.save(record, confirm_duplicate=_duplicate_prompt(record.kind, assume_yes))


async def _existing_record(app: AppContext, kind: MediaKind, record_id: str) -> MediaRecord:
    record = await app.service.get(kind, record_id)
    if record is None:
        raise NotFoundError(f"No {kind.label} with id {record_id}")
    return record


def _report_outcome(outcome: SaveOutcome) -> None:
    if outcome.cancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    if not outcome.saved:
        _fail(outcome.error or "Save failed")

    saved = outcome.record
    verb = "added to your collection" if outcome.created else "updated"
    console.print(f"\n[green]✓ {saved.get_display_name()} has been {verb}! (id {saved.id})[/green]")


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    help='Configuration file path'
)
@click.option('--verbose', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Catalog your CDs and DVDs by barcode."""
    _configure_logging(verbose)
    if ctx.obj is None:
        try:
            config = load_config(config_path) if config_path else Config.default()
        except DiscCatalogError as e:
            _fail(str(e))
        ctx.obj = AppContext(config)


@cli.command()
@click.argument('barcode')
@click.option('--kind', type=KIND_CHOICE, required=True, help='cd or dvd')
@click.pass_obj
def lookup(app: AppContext, barcode: str, kind: str):
    """Look up BARCODE in the public catalogs without saving anything."""
    media_kind = MediaKind(kind.lower())
    with console.status(f"Looking up {barcode}..."):
        result = asyncio.run(app.resolver.resolve(barcode, media_kind))
    _print_lookup_result(result, media_kind)
    if not result.found:
        sys.exit(1)


@cli.command()
@click.option('--kind', type=KIND_CHOICE, required=True, help='cd or dvd')
@_record_options
@click.option('--lookup/--no-lookup', 'do_lookup', default=True, help='Pre-fill fields from the barcode')
@click.option('--yes', 'assume_yes', is_flag=True, help='Save even if the barcode is already cataloged')
@click.pass_obj
def add(app: AppContext, kind: str, do_lookup: bool, assume_yes: bool, **options):
    """Add a CD or DVD, optionally pre-filled from its barcode."""
    media_kind = MediaKind(kind.lower())
    record = new_record(media_kind)
    values = _field_values(**options)

    barcode = values.get("barcode")
    if do_lookup and barcode and is_lookup_candidate(barcode):
        with console.status(f"Looking up {barcode}..."):
            result = asyncio.run(app.resolver.resolve(barcode, media_kind))
        _print_lookup_result(result, media_kind)
        if result.found:
            result.fields.apply_to(record)

    try:
        _apply_values(record, values)
        if not record.title:
            record.title = Prompt.ask("Title")
        if not record.primary_credit:
            record.primary_credit = Prompt.ask(media_kind.credit_label.capitalize())

        outcome = asyncio.run(_save(app, record, assume_yes))
    except DiscCatalogError as e:
        _fail(str(e))
    _report_outcome(outcome)


@cli.command()
@click.argument('record_id')
@click.option('--kind', type=KIND_CHOICE, required=True, help='cd or dvd')
@_record_options
@click.option('--yes', 'assume_yes', is_flag=True, help='Save even if the barcode is already cataloged')
@click.pass_obj
def edit(app: AppContext, record_id: str, kind: str, assume_yes: bool, **options):
    """Update fields of an existing record."""
    media_kind = MediaKind(kind.lower())

    async def run() -> SaveOutcome:
        record = await _existing_record(app, media_kind, record_id)
        _apply_values(record, _field_values(**options))
        return await _save(app, record, assume_yes)

    try:
        outcome = asyncio.run(run())
    except DiscCatalogError as e:
        _fail(str(e))
    _report_outcome(outcome)


@cli.command()
@click.argument('record_id')
@click.option('--kind', type=KIND_CHOICE, required=True, help='cd or dvd')
@click.option('--yes', 'assume_yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_obj
def delete(app: AppContext, record_id: str, kind: str, assume_yes: bool):
    """Delete a record."""
    media_kind = MediaKind(kind.lower())

    async def run() -> None:
        record = await _existing_record(app, media_kind, record_id)
        if not assume_yes and not Confirm.ask(f"Delete {record.get_display_name()}?", default=False):
            console.print("[yellow]Cancelled[/yellow]")
            return
        await app.service.delete(media_kind, record_id)
        console.print(f"[green]✓ Deleted {record.get_display_name()}[/green]")

    try:
        asyncio.run(run())
    except DiscCatalogError as e:
        _fail(str(e))


@cli.command(name='list')
@click.option('--kind', type=KIND_CHOICE, required=True, help='cd or dvd')
@click.option('--search', help='Filter by title, credit, genre, barcode or year')
@click.pass_obj
def list_records(app: AppContext, kind: str, search: Optional[str]):
    """List records, newest first."""
    media_kind = MediaKind(kind.lower())
    try:
        records = asyncio.run(app.service.list_records(media_kind, search))
    except DiscCatalogError as e:
        _fail(str(e))

    if not records:
        if search:
            console.print(f"[yellow]No {media_kind.label}s match '{search}'[/yellow]")
        else:
            console.print(f"[yellow]No {media_kind.label}s in your collection yet[/yellow]")
        return

    console.print(_records_table(records, f"My {media_kind.label} Collection ({len(records)})"))


@cli.command()
@click.pass_obj
def dashboard(app: AppContext):
    """Show collection statistics and recently added items."""
    async def gather():
        return await app.service.statistics(), await app.service.recent_items()

    try:
        stats, recent = asyncio.run(gather())
    except DiscCatalogError as e:
        _fail(str(e))

    console.print(Panel(
        f"CDs: [bold]{stats.cd_count}[/bold]   DVDs: [bold]{stats.dvd_count}[/bold]   "
        f"Total items: [bold]{stats.total_count}[/bold]   Runtime: [bold]{stats.total_hours}h[/bold]",
        title="Media Collection",
    ))
    if recent:
        console.print(_records_table(recent, "Recently Added", show_kind=True))
    else:
        console.print("[yellow]Nothing cataloged yet[/yellow]")


@cli.command()
@click.option('--kind', type=KIND_CHOICE, required=True, help='cd or dvd')
def genres(kind: str):
    """List the suggested genres for a kind of record."""
    media_kind = MediaKind(kind.lower())
    console.print(f"[bold]{media_kind.label} genres[/bold]")
    for genre in media_kind.genres:
        console.print(f"  {genre}")


@cli.command(name='init-config')
@click.argument('path', type=click.Path(path_type=Path))
def init_config(path: Path):
    """Write a default configuration file to PATH."""
    if path.exists() and not Confirm.ask(f"{path} exists. Overwrite?", default=False):
        console.print("[yellow]Cancelled[/yellow]")
        return
    create_default_config(path)
    console.print(f"[green]✓ Wrote default configuration to {path}[/green]")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()

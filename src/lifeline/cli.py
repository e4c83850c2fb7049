# src/lifeline/cli.py
"""
Lifeline Command Line Interface (CLI).

This module implements the terminal front-end using `typer` and `rich`. It is
a thin collaborator: every command opens a `TimelineSession` on the
configured data file, calls one operation of the command surface and renders
the result.

Usage
-----
    $ lifeline add Job "Software Developer" 2023-06-01 --notes "Startup"
    $ lifeline list --category Job
    $ lifeline at 2021-01-01
    $ lifeline import events.csv
    $ lifeline export -o backup.json
    $ lifeline delete 3f2a...           # asks for confirmation
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from lifeline.core.contracts.event import CATEGORY_COLORS, Category, LifeEvent
from lifeline.core.contracts.timeline import Container
from lifeline.core.errors import LifelineError
from lifeline.pipelines.csv_import import RowValidationError
from lifeline.session import TimelineSession, infer_kind

load_dotenv()

app = typer.Typer(
    help="Lifeline: record life events and ask what was true on any day.",
    rich_markup_mode="markdown",
)
console = Console()


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


@contextmanager
def _guard(action: str) -> Iterator[None]:
    """Turn core errors into a red message and exit code 1."""
    try:
        yield
    except RowValidationError as e:
        console.print(f"[bold red]❌ {action} failed on line {e.issue.line}:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    except LifelineError as e:
        console.print(f"[bold red]❌ {action} failed:[/bold red] {e}")
        raise typer.Exit(code=1) from e


def _open_session() -> TimelineSession:
    with _guard("Load"):
        session = TimelineSession.open()
    return session


def _label(category: Category) -> str:
    return f"[{CATEGORY_COLORS[category]}]{category.value}[/]"


def _events_table(events: list[LifeEvent], title: str) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Category")
    table.add_column("Title", style="bold")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Notes", style="italic")
    for e in events:
        table.add_row(
            e.id,
            _label(e.category),
            e.title,
            e.start.isoformat(),
            e.end.isoformat() if e.end else "Present",
            e.notes,
        )
    return table


def _write_or_print(text: str, output: Path | None) -> None:
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    console.print(f"[dim]Saved to: {output}[/dim]")


# --------------------------------------------------------------------------- #
# Commands: CRUD
# --------------------------------------------------------------------------- #


@app.command("list")  # type: ignore[misc]
def list_events(
    category: Annotated[
        Category | None,
        typer.Option("--category", "-c", help="Only show one category."),
    ] = None,
) -> None:
    """List every recorded event in insertion order."""
    session = _open_session()
    events = session.list_events(category)
    if not events:
        console.print("[dim]No events yet.[/dim]")
        return
    console.print(_events_table(events, f"{len(events)} event(s)"))


@app.command()  # type: ignore[misc]
def add(
    category: Annotated[Category, typer.Argument(help="Residence, Job, Relationship or Vehicle.")],
    title: Annotated[str, typer.Argument(help="Short label for the event.")],
    start: Annotated[str, typer.Argument(help="Start date, YYYY-MM-DD.")],
    end: Annotated[
        str, typer.Option("--end", "-e", help="End date, YYYY-MM-DD. Omit if ongoing.")
    ] = "",
    notes: Annotated[str, typer.Option("--notes", "-n", help="Free-text notes.")] = "",
) -> None:
    """Record a new life event."""
    session = _open_session()
    with _guard("Add"):
        event = session.create(
            {"category": category, "title": title, "start": start, "end": end, "notes": notes}
        )
    console.print(f"[bold green]✅ Added[/bold green] {event.title} [dim]({event.id})[/dim]")


@app.command()  # type: ignore[misc]
def edit(
    event_id: Annotated[str, typer.Argument(help="Id of the event to replace.")],
    category: Annotated[Category | None, typer.Option("--category", "-c")] = None,
    title: Annotated[str | None, typer.Option("--title", "-t")] = None,
    start: Annotated[str | None, typer.Option("--start", "-s")] = None,
    end: Annotated[str | None, typer.Option("--end", "-e")] = None,
    notes: Annotated[str | None, typer.Option("--notes", "-n")] = None,
    ongoing: Annotated[
        bool, typer.Option("--ongoing", help="Clear the end date (event still true).")
    ] = False,
) -> None:
    """
    Replace an event's fields.

    Options not given keep their current value; the whole record is then
    written back in one update.
    """
    session = _open_session()
    with _guard("Edit"):
        current = session.get(event_id).model_dump()
        changes = {
            "category": category,
            "title": title,
            "start": start,
            "end": "" if ongoing else end,
            "notes": notes,
        }
        record = {**current, **{k: v for k, v in changes.items() if v is not None}}
        event = session.update(event_id, record)
    console.print(f"[bold green]✅ Updated[/bold green] {event.title}")


@app.command()  # type: ignore[misc]
def delete(
    event_id: Annotated[str, typer.Argument(help="Id of the event to delete.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation.")] = False,
) -> None:
    """Delete an event permanently (asks for confirmation first)."""
    session = _open_session()
    with _guard("Delete"):
        event = session.get(event_id)
    session.stage_delete(event_id)
    if yes or Confirm.ask(f"Delete [bold]{event.title}[/bold]? This cannot be undone", default=False):
        session.commit_delete()
        console.print(f"[bold red]🗑  Deleted[/bold red] {event.title}")
    else:
        session.cancel_delete()
        console.print("[dim]Cancelled.[/dim]")


@app.command()  # type: ignore[misc]
def clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation.")] = False,
) -> None:
    """Remove every event."""
    session = _open_session()
    if not yes and not Confirm.ask("Clear all data? This cannot be undone", default=False):
        console.print("[dim]Cancelled.[/dim]")
        return
    session.clear()
    console.print("[bold red]All events removed.[/bold red]")


# --------------------------------------------------------------------------- #
# Commands: queries
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def at(
    day: Annotated[str, typer.Argument(help="Query date, YYYY-MM-DD.")],
) -> None:
    """Show what was true on a given day, grouped by category."""
    session = _open_session()
    with _guard("Query"):
        snap = session.snapshot(day)

    console.rule(f"[bold]{snap.query_date.isoformat()}[/bold]")
    for group in snap.results:
        console.print(f"[bold]{_label(group.category)}[/bold]")
        if not group.matches:
            console.print("  [dim]None[/dim]")
        for e in group.matches:
            until = e.end.isoformat() if e.end else "Present"
            console.print(f"  • {e.title} [dim]({e.start.isoformat()} – {until})[/dim]")


@app.command()  # type: ignore[misc]
def layout(
    width: Annotated[float, typer.Option("--width", "-w", min=1)] = 800.0,
    height: Annotated[float, typer.Option("--height", min=1)] = 400.0,
    category: Annotated[Category | None, typer.Option("--category", "-c")] = None,
) -> None:
    """Print the projected timeline geometry (ticks and bars)."""
    session = _open_session()
    geo = session.project_layout(Container(width=width, height=height), category)

    console.print(
        Panel.fit(
            f"{geo.min_date.isoformat()} → {geo.max_date.isoformat()}",
            title="Range",
            border_style="cyan",
        )
    )
    ticks = Table(title="Ticks")
    ticks.add_column("Date")
    ticks.add_column("x", justify="right")
    for t in geo.ticks:
        ticks.add_row(t.when.isoformat(), f"{t.x:.1f}")
    console.print(ticks)

    bars = Table(title="Bars")
    for col in ("Row", "Title", "x", "y", "Width"):
        bars.add_column(col, justify="right" if col in {"x", "y", "Width"} else "left")
    for b in geo.bars:
        bars.add_row(str(b.row), f"[{b.color}]{b.title}[/]", f"{b.x:.1f}", f"{b.y:.0f}", f"{b.width:.1f}")
    console.print(bars)


# --------------------------------------------------------------------------- #
# Commands: import / export
# --------------------------------------------------------------------------- #


@app.command("import")  # type: ignore[misc]
def import_file(
    file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="CSV file to merge or JSON backup to restore.",
        ),
    ],
    kind: Annotated[
        str | None,
        typer.Option("--kind", "-k", help="csv or json (default: from the file suffix)."),
    ] = None,
) -> None:
    """
    Import events from a file.

    CSV rows are merged (duplicates dropped); a JSON backup **replaces** the
    whole dataset. Nothing changes if the file has any invalid row.
    """
    session = _open_session()
    chosen = kind or infer_kind(file)
    with _guard("Import"):
        report = asyncio.run(
            session.import_from(
                lambda: asyncio.to_thread(file.read_bytes),
                chosen,  # type: ignore[arg-type]
            )
        )
    console.print(f"[bold green]✅ Successfully imported {report.imported} events[/bold green]")
    if report.skipped_duplicate:
        console.print(f"[dim]{report.skipped_duplicate} duplicate row(s) skipped[/dim]")


@app.command()  # type: ignore[misc]
def export(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to a file instead of stdout.")
    ] = None,
) -> None:
    """Export every event as a JSON backup."""
    session = _open_session()
    _write_or_print(session.export(), output)


@app.command()  # type: ignore[misc]
def template(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to a file instead of stdout.")
    ] = None,
) -> None:
    """Print the CSV import template."""
    _write_or_print(TimelineSession.csv_template(), output)


if __name__ == "__main__":
    app()

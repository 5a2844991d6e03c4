"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.factory import create_store
from ..adapters.memory_store import DEFAULT_SEED_FILE, InMemoryBookingStore
from ..config import AppConfig, load_config
from ..domain.exceptions import RepeatBookerError
from ..domain.exclusion_calendar import is_excluded
from ..domain.models import Booking, RepeatRule, RepeatType, parse_date, parse_time
from ..domain.recurrence import RecurrenceExpander
from ..services.repeated_bookings import RepeatedBookingService

app = typer.Typer(
    name="repeatbooker",
    help="Generate the repeats of a room booking",
    add_completion=False
)

console = Console()


def configure_logging(level: str) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    try:
        return load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _parse_repeat(value: str) -> RepeatType:
    try:
        return RepeatType.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


@app.command()
def serve(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address (overrides config)")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port (overrides config)")] = None,
):
    """
    Run the HTTP endpoint.
    """
    import uvicorn

    from ..api.app import create_app

    config = _load_config(config_file)
    configure_logging(config.log_level)

    console.print(f"[bold cyan]Serving on {host or config.server.host}:{port or config.server.port}[/bold cyan]")
    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
        log_config=None,
    )


@app.command()
def expand(
    room: Annotated[str, typer.Option("--room", "-r", help="Room id")],
    date: Annotated[str, typer.Option("--date", help="Date of the first booking (YYYY-MM-DD)")],
    start: Annotated[str, typer.Option("--start", help="Start time (HH:MM)")],
    end: Annotated[str, typer.Option("--end", help="End time (HH:MM)")],
    user: Annotated[str, typer.Option("--user", "-u", help="Id of the booking owner")],
    repeat: Annotated[str, typer.Option("--repeat", help="daily, weekly, monthly or custom")] = "weekly",
    until: Annotated[Optional[str], typer.Option("--until", help="Last possible date (YYYY-MM-DD)")] = None,
    title: Annotated[str, typer.Option("--title", "-t", help="Booking title")] = "",
    remarks: Annotated[Optional[str], typer.Option("--remarks", help="Free-text remarks")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use the bundled in-memory data instead of the configured store.")] = False,
):
    """
    Generate and store the repeats of a booking.

    The first booking itself must already exist; only later dates are stored.

    Examples:

        repeatbooker expand --mock -r R1 --date 2024-01-01 --start 10:00 --end 11:00 -u u1 --until 2024-01-22
    """
    config = _load_config(config_file)
    configure_logging(config.log_level)
    repeat_type = _parse_repeat(repeat)

    try:
        template = Booking(
            room_id=room,
            user_id=user,
            title=title,
            date=parse_date(date),
            start_time=parse_time(start),
            end_time=parse_time(end),
            remarks=remarks,
        )
        end_date = parse_date(until) if until else None
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if mock:
        console.print("[yellow]⚠  MOCK MODE: using bundled booking data[/yellow]\n")
        store = InMemoryBookingStore.from_json(DEFAULT_SEED_FILE, timezone=config.timezone)
    else:
        store = create_store(config)

    service = RepeatedBookingService(store=store)

    try:
        result = asyncio.run(
            service.expand(
                template=template,
                repeat_type=repeat_type,
                end_date=end_date,
                requester_id=user,
            )
        )
    except RepeatBookerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not result.ok:
        console.print(f"[bold red]Error:[/bold red] {result.error}")
        raise typer.Exit(1)

    console.print(f"[bold green]✓ {result.generated_count} repeated booking(s) stored[/bold green]")
    console.print(
        f"   Candidates: {result.candidates_considered}   "
        f"Conflicts: {result.conflicts_skipped}   "
        f"Unchecked: {result.uncertain_skipped}"
    )

    if mock and result.generated_count:
        table = Table(title=f"Bookings in room {room}", show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold yellow")
        table.add_column("Time")
        table.add_column("Title", style="dim")
        for booking in store.bookings_for_room(room):
            table.add_row(
                booking.date.format("ddd DD.MM.YYYY"),
                f"{booking.start_time:%H:%M} – {booking.end_time:%H:%M}",
                booking.title,
            )
        console.print()
        console.print(table)


@app.command()
def preview(
    date: Annotated[str, typer.Option("--date", help="Date of the first booking (YYYY-MM-DD)")],
    repeat: Annotated[str, typer.Option("--repeat", help="daily, weekly, monthly or custom")] = "daily",
    until: Annotated[Optional[str], typer.Option("--until", help="Last possible date (YYYY-MM-DD)")] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum number of dates to list")] = 31,
):
    """
    List the repeat dates of a rule without touching any storage.
    """
    repeat_type = _parse_repeat(repeat)

    try:
        rule = RepeatRule(repeat_type=repeat_type, end_date=parse_date(until) if until else None)
        seed = parse_date(date)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"{repeat_type.value} from {seed.format('DD.MM.YYYY')}", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date", style="bold yellow")
    table.add_column("Status")

    expander = RecurrenceExpander()
    for number, current in enumerate(expander.iter_repeat_dates(seed, rule), 1):
        if number > limit:
            break
        if repeat_type.uses_exclusion_calendar and is_excluded(current):
            status = "[red]day off[/red]"
        else:
            status = "[green]candidate[/green]"
        table.add_row(str(number), current.format("ddd DD.MM.YYYY"), status)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]repeatbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

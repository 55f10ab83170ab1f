"""
Main CLI application using Typer.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.availability_store import AvailabilityStore
from ..adapters.database import Database
from ..adapters.session_store import SessionStore
from ..adapters.user_directory import ConfigUserDirectory
from ..config import AppConfig, get_default_config_path
from ..domain.civil import parse_weekday, weekday_name
from ..domain.exceptions import MentorBookError
from ..domain.models import UserRole
from ..domain.slot_generator import format_slot
from ..services.availability_resolver import AvailabilityResolver
from ..services.booking_service import BookingService
from ..services.requests import (
    ScheduleRequest,
    ScheduleUpdateRequest,
    StatusUpdateRequest,
    parse_request,
)

app = typer.Typer(
    name="mentorbook",
    help="Book mentorship sessions against recurring weekly availability",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


@dataclass
class _Context:
    config: AppConfig
    database: Database
    users: ConfigUserDirectory
    service: BookingService


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show engine log output.")] = False,
):
    """
    Mentorship session booking.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_context(config_file: Optional[Path], create_schema: bool = True) -> _Context:
    """Load config and wire stores, resolver and service."""
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)

    database = Database(config.database_url)
    if create_schema:
        database.create_all()

    availability_store = AvailabilityStore(
        database.session_factory,
        slot_width_minutes=config.defaults.slot_width_minutes,
    )
    session_store = SessionStore(database.session_factory)
    users = ConfigUserDirectory.from_config(config)
    resolver = AvailabilityResolver(
        availability_store=availability_store,
        session_store=session_store,
        timezone=config.timezone,
    )
    service = BookingService(
        users=users,
        resolver=resolver,
        availability_store=availability_store,
        session_store=session_store,
        strict_status_transitions=config.strict_status_transitions,
    )
    return _Context(config=config, database=database, users=users, service=service)


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _parse_date(value: str, tz: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        _fail(f"Could not parse date '{value}': {e}")


@app.command()
def init_db(config_file: ConfigOption = None):
    """
    Create the database tables.
    """
    try:
        ctx = _load_context(config_file, create_schema=False)
        ctx.database.create_all()
        console.print(f"[green]✓ Database ready:[/green] {ctx.config.database_url}")
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def mentors(config_file: ConfigOption = None):
    """
    List all configured mentors.
    """
    try:
        ctx = _load_context(config_file)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    mentor_list = ctx.users.list_by_role(UserRole.MENTOR)
    if not mentor_list:
        console.print("[yellow]No mentors defined in the config file.[/yellow]")
        return

    table = Table(title="Mentors", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")
    table.add_column("E-Mail", style="dim")

    for mentor in mentor_list:
        table.add_row(mentor.id, mentor.name, mentor.email)

    console.print()
    console.print(table)
    console.print()


@app.command()
def add_window(
    mentor_id: Annotated[str, typer.Argument(help="Mentor id")],
    day: Annotated[str, typer.Argument(help="Day of week: 0-6 (0=Monday) or a name such as 'monday'")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    end: Annotated[str, typer.Argument(help="End time (HH:MM)")],
    config_file: ConfigOption = None,
):
    """
    Add a recurring weekly availability window for a mentor.
    """
    try:
        ctx = _load_context(config_file)
        request = parse_request(
            ScheduleRequest,
            mentor_id=mentor_id,
            day_of_week=parse_weekday(day),
            start_time=start,
            end_time=end,
        )
        window = ctx.service.create_schedule(request)
    except MentorBookError as e:
        _fail(e.message)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Window {window.id} created:[/green] {window}")
    console.print(f"   Slots: {', '.join(window.slots) or '-'}")


@app.command()
def update_window(
    window_id: Annotated[int, typer.Argument(help="Window id")],
    start: Annotated[str, typer.Argument(help="New start time (HH:MM)")],
    end: Annotated[str, typer.Argument(help="New end time (HH:MM)")],
    config_file: ConfigOption = None,
):
    """
    Move an availability window to a new time range.
    """
    try:
        ctx = _load_context(config_file)
        request = parse_request(
            ScheduleUpdateRequest,
            window_id=window_id,
            start_time=start,
            end_time=end,
        )
        window = ctx.service.update_schedule(request)
    except MentorBookError as e:
        _fail(e.message)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Window {window.id} updated:[/green] {window}")
    console.print(f"   Slots: {', '.join(window.slots) or '-'}")


@app.command()
def schedule(
    mentor_id: Annotated[str, typer.Argument(help="Mentor id")],
    config_file: ConfigOption = None,
):
    """
    Show a mentor's weekly schedule.
    """
    try:
        ctx = _load_context(config_file)
        windows = ctx.service.schedule_for(mentor_id)
    except MentorBookError as e:
        _fail(e.message)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    if not windows:
        console.print("[yellow]No availability windows defined.[/yellow]")
        return

    table = Table(title=f"Schedule of {mentor_id}", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Day")
    table.add_column("Window")
    table.add_column("Slots", style="dim")

    for window in windows:
        table.add_row(
            str(window.id),
            weekday_name(window.day_of_week),
            f"{format_slot(window.start_time)} - {format_slot(window.end_time)}",
            ", ".join(window.slots),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def slots(
    mentor_id: Annotated[str, typer.Argument(help="Mentor id")],
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD). Defaults to today")] = None,
    config_file: ConfigOption = None,
):
    """
    Show the free slots of a mentor on a date.
    """
    try:
        ctx = _load_context(config_file)
        tz = ctx.config.timezone
        session_date = _parse_date(date, tz) if date else pendulum.today(tz).date()
        availability = ctx.service.available_slots(mentor_id, session_date)
    except MentorBookError as e:
        _fail(e.message)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    header = f"{weekday_name(availability.day_of_week)}, {session_date.isoformat()}"
    if not availability.has_windows:
        console.print(f"[yellow]⚠ Mentor is not available this day of the week ({header}).[/yellow]")
    elif not availability.free_slots:
        console.print(f"[yellow]⚠ Mentor is fully booked on {header}.[/yellow]")
    else:
        console.print(f"[bold green]✓ {len(availability.free_slots)} free slot(s) on {header}:[/bold green]\n")
        for slot in availability.free_slots:
            console.print(f"  {slot}")


@app.command()
def book(
    mentor_id: Annotated[str, typer.Argument(help="Mentor id")],
    mentee: Annotated[str, typer.Option("--mentee", "-m", help="Mentee id")],
    date: Annotated[str, typer.Option("--date", "-d", help="Date (YYYY-MM-DD)")],
    slot: Annotated[str, typer.Option("--slot", "-s", help="Slot start (HH:MM)")],
    note: Annotated[str, typer.Option("--note", help="Note for the mentor")] = "",
    config_file: ConfigOption = None,
):
    """
    Book a session with a mentor.
    """
    try:
        ctx = _load_context(config_file)
        session = ctx.service.book_slot(
            mentor_id=mentor_id,
            mentee_id=mentee,
            session_date=_parse_date(date, ctx.config.timezone),
            slot=slot,
            note=note,
        )
    except MentorBookError as e:
        _fail(e.message)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    console.print(f"[bold green]✓ Session {session.id} created:[/bold green] {session.format_display()}")


@app.command()
def sessions(
    user_id: Annotated[str, typer.Argument(help="User id")],
    role: Annotated[UserRole, typer.Option("--role", "-r", help="Role of the user in the sessions")] = UserRole.MENTEE,
    config_file: ConfigOption = None,
):
    """
    List the sessions of a mentor or mentee.
    """
    try:
        ctx = _load_context(config_file)
        session_list = ctx.service.sessions_for(user_id, role)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    if not session_list:
        console.print("[yellow]No sessions found.[/yellow]")
        return

    table = Table(title=f"Sessions of {user_id}", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Date")
    table.add_column("Slot")
    table.add_column("Mentor")
    table.add_column("Mentee")
    table.add_column("Status")
    table.add_column("Note", style="dim")

    for item in session_list:
        table.add_row(
            str(item.id),
            item.session_date.isoformat(),
            item.slot,
            item.mentor_id,
            item.mentee_id,
            item.status.value,
            item.note,
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def session(
    session_id: Annotated[int, typer.Argument(help="Session id")],
    user: Annotated[str, typer.Option("--user", "-u", help="Id of the user asking")],
    role: Annotated[UserRole, typer.Option("--role", "-r", help="Role of the user in the session")] = UserRole.MENTEE,
    config_file: ConfigOption = None,
):
    """
    Show one session, if the user takes part in it.
    """
    try:
        ctx = _load_context(config_file)
        item = ctx.service.session_for(session_id, user, role)
    except MentorBookError as e:
        _fail(e.message)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    console.print(f"[bold]Session {item.id}:[/bold] {item.format_display()}")
    console.print(f"   Mentor: {item.mentor_id}")
    console.print(f"   Mentee: {item.mentee_id}")
    if item.note:
        console.print(f"   Note: {item.note}")


@app.command()
def set_status(
    session_id: Annotated[int, typer.Argument(help="Session id")],
    status: Annotated[str, typer.Argument(help="requested, confirmed, cancelled or completed")],
    config_file: ConfigOption = None,
):
    """
    Update the status of a session.
    """
    try:
        ctx = _load_context(config_file)
        request = parse_request(StatusUpdateRequest, session_id=session_id, status=status)
        session = ctx.service.update_status(request)
    except MentorBookError as e:
        _fail(e.message)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Session {session.id} successfully {session.status.value}[/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]mentorbook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

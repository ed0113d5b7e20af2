"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Iterable, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import PlannerError
from ..domain.ledger import SuggestionLedger
from ..domain.models import PlanningResult
from ..domain.planner import ActivityPlanner
from ..services.planning_service import CalendarClientProtocol, MaterializationReport, PlanningService

app = typer.Typer(
    name="slotplanner",
    help="Fit flexible activities into the free time of your calendar",
    add_completion=False
)

console = Console()

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _format_days(days: Iterable[int]) -> str:
    days = list(days)
    if not days:
        return "every day"
    return ", ".join(WEEKDAY_NAMES[day] for day in sorted(days))


def _build_client(
    config: AppConfig,
    *,
    mock: bool,
    events_file: Optional[Path],
    token: Optional[str]
) -> CalendarClientProtocol:
    if mock or events_file:
        console.print("[yellow]⚠  MOCK MODE: using sample calendar data[/yellow]\n")
        return MockCalendarClient(data_file=events_file)

    if not token:
        console.print(
            "[bold red]Error:[/bold red] No access token. Pass --token, set "
            "SLOTPLANNER_ACCESS_TOKEN or use --mock."
        )
        raise typer.Exit(1)

    return GoogleCalendarClient(
        access_token=token,
        calendar_id=config.calendar.calendar_id,
        base_url=config.calendar.base_url,
        reminder_minutes=config.calendar.reminder_minutes
    )


def _print_result(result: PlanningResult) -> None:
    for advisory in result.advisories:
        console.print(f"[yellow]⚠ {advisory.message}[/yellow]")

    if not result.suggestions:
        console.print(
            "[yellow]⚠ No suggestions found.[/yellow]\n"
            "Try a longer horizon, a wider daily window or shorter activities."
        )
        return

    table = Table(
        title="Suggestions",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("#", style="dim")
    table.add_column("Activity", style="bold yellow")
    table.add_column("When")

    for idx, suggestion in enumerate(result.suggestions, 1):
        table.add_row(str(idx), suggestion.activity_name, suggestion.format_display())

    console.print()
    console.print(table)
    console.print()


def _review(ledger: SuggestionLedger, accept_all: bool) -> None:
    """Ask the user to accept or reject each proposed suggestion."""
    for suggestion in list(ledger):
        if accept_all or typer.confirm(
            f"→ Accept {suggestion.activity_name} on {suggestion.format_display()}?",
            default=True
        ):
            ledger.accept(suggestion.id)
        else:
            ledger.reject(suggestion.id)


def _print_report(report: MaterializationReport) -> None:
    if report.created:
        console.print(f"[bold green]✓ Added {len(report.created)} activity(ies) to your calendar[/bold green]")
    for suggestion, error in report.failed:
        console.print(f"[red]✗ {suggestion.activity_name} ({suggestion.format_display()}): {error}[/red]")


@app.command()
def plan(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="First day of the horizon (YYYY-MM-DD). Defaults to today.")] = None,
    days: Annotated[Optional[int], typer.Option("--days", "-d", help="Horizon length in days")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use sample calendar data instead of the provider.")] = False,
    events_file: Annotated[Optional[Path], typer.Option("--events-file", help="JSON file with calendar events (implies --mock).")] = None,
    token: Annotated[Optional[str], typer.Option("--token", envvar="SLOTPLANNER_ACCESS_TOKEN", help="OAuth access token for the calendar provider.")] = None,
    accept_all: Annotated[bool, typer.Option("--accept-all", help="Accept every suggestion without asking.")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Do not write accepted suggestions to the calendar.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Suggest times for flexible activities and add the accepted ones to the calendar.

    Examples:

        # Interactive review against the real calendar
        slotplanner plan --token $TOKEN

        # Plan the next 3 days from a fixed date with sample data
        slotplanner plan --mock --start 2024-11-25 --days 3

        # Accept everything, but only show what would be created
        slotplanner plan --mock --accept-all --dry-run
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        settings = config.to_schedule_settings(horizon_days=days)
        tz = settings.timezone

        if start:
            try:
                start_date = pendulum.from_format(start, "YYYY-MM-DD", tz=tz)
            except ValueError as e:
                console.print(f"[red]Could not parse start date: {e}[/red]")
                raise typer.Exit(1)
        else:
            start_date = settings.today()

        client = _build_client(config, mock=mock, events_file=events_file, token=token)
        service = PlanningService(calendar_client=client, planner=ActivityPlanner(settings))

        console.print("[bold cyan]📊 Planning pass:[/bold cyan]")
        console.print(f"   Horizon: {start_date.format('YYYY-MM-DD')} + {settings.horizon_days} day(s)")
        console.print(f"   Window: {config.window.start} - {config.window.end} ({tz})")
        console.print(f"   Flexible activities: {len(config.flexible_activities)}")
        console.print()

        result = asyncio.run(
            service.plan(
                recurring_activities=config.to_recurring_activities(),
                flexible_activities=config.to_flexible_activities(),
                start_date=start_date
            )
        )

        _print_result(result)
        if not result.suggestions:
            return

        _review(service.ledger, accept_all)
        accepted = service.ledger.accepted_suggestions()

        if not accepted:
            console.print("[yellow]No suggestions accepted.[/yellow]")
            return

        if dry_run:
            console.print(f"[yellow]Dry run: {len(accepted)} event(s) would be created.[/yellow]")
            return

        report = asyncio.run(service.materialize_accepted())
        _print_report(report)

        if not report.ok:
            raise typer.Exit(1)

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    except PlannerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def activities(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    List the configured recurring and flexible activities.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, PlannerError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not config.recurring_activities and not config.flexible_activities:
        console.print("[yellow]No activities defined in the config file.[/yellow]")
        return

    recurring = Table(title="Recurring activities", show_header=True, header_style="bold cyan")
    recurring.add_column("Name", style="bold yellow")
    recurring.add_column("Start")
    recurring.add_column("Duration")
    recurring.add_column("Days", style="dim")

    for activity in config.recurring_activities:
        recurring.add_row(
            activity.name,
            activity.start_time,
            f"{activity.duration_minutes} min",
            _format_days(activity.days)
        )

    flexible = Table(title="Flexible activities", show_header=True, header_style="bold cyan")
    flexible.add_column("Name", style="bold yellow")
    flexible.add_column("Duration")
    flexible.add_column("Days", style="dim")

    for activity in config.flexible_activities:
        flexible.add_row(activity.name, f"{activity.duration_minutes} min", _format_days(activity.days))

    console.print()
    console.print(recurring)
    console.print(flexible)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotplanner[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

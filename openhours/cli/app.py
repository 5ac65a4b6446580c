"""
Main CLI application using Typer.
"""

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Annotated, Optional, Tuple

import pendulum
import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..adapters.schedule_store import YamlScheduleStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SchedulerError
from ..domain.models import ScheduleConfig, Weekday
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="openhours",
    help="Opening hours, schedule overrides and bookable appointment slots",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
DurationOption = Annotated[
    Optional[int],
    typer.Option("--duration", "-d", help="Session duration in minutes (defaults to the stored one)"),
]


def _load_settings(config_file: Optional[Path]) -> Tuple[AppConfig, Path]:
    """
    Load deployment settings.

    An explicitly given config file must exist; without one, defaults are used
    when no config.yaml can be found.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file), config_file.parent

    config_path = get_default_config_path()
    if config_path.exists():
        return AppConfig.load_from_yaml(config_path), config_path.parent

    return AppConfig(), Path.cwd()


def _configure_logging(settings: AppConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_service(config_file: Optional[Path]) -> Tuple[AppConfig, YamlScheduleStore, AvailabilityService]:
    settings, base_dir = _load_settings(config_file)
    _configure_logging(settings)

    store = YamlScheduleStore(settings.resolve_schedule_file(base_dir))
    service = AvailabilityService(store=store, timezone=settings.timezone)
    return settings, store, service


def _parse_date(value: str, tz: str) -> date:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except Exception as e:
        console.print(f"[red]Could not parse date {value!r} (expected YYYY-MM-DD): {e}[/red]")
        raise typer.Exit(1)


def _parse_datetime(value: str, tz: str):
    try:
        return pendulum.parse(value, tz=tz)
    except Exception as e:
        console.print(f"[red]Could not parse date/time {value!r}: {e}[/red]")
        raise typer.Exit(1)


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


def _format_slots(slots) -> str:
    return ", ".join(f"{slot.start_time}-{slot.end_time}" for slot in slots) or "-"


def _render_schedule(config: ScheduleConfig) -> None:
    weekly = Table(title="Weekly schedule", show_header=True, header_style="bold cyan")
    weekly.add_column("Day", style="bold yellow")
    weekly.add_column("Open")
    weekly.add_column("Hours", style="dim")
    for weekday in Weekday:
        day = config.weekly.for_weekday(weekday)
        weekly.add_row(
            weekday.value.capitalize(),
            "[green]yes[/green]" if day.enabled else "[red]no[/red]",
            _format_slots(day.time_slots),
        )

    console.print()
    console.print(weekly)
    console.print(f"\n[bold]Session duration:[/bold] {config.session_duration} min")
    if config.last_updated is not None:
        console.print(f"[bold]Last updated:[/bold] {config.last_updated.to_iso8601_string()}")

    if config.special_dates:
        table = Table(title="Special dates", show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold yellow")
        table.add_column("Type")
        table.add_column("Description")
        table.add_column("Hours", style="dim")
        for special in config.special_dates:
            table.add_row(
                special.date.isoformat(),
                special.type.value,
                escape(special.description),
                "closed" if special.is_full_day_off else _format_slots(special.time_slots),
            )
        console.print()
        console.print(table)

    if config.recurring_holidays:
        table = Table(title="Recurring holidays", show_header=True, header_style="bold cyan")
        table.add_column("Month-Day", style="bold yellow")
        table.add_column("Description")
        table.add_column("Hours", style="dim")
        for holiday in config.recurring_holidays:
            table.add_row(
                f"{holiday.month:02d}-{holiday.day:02d}",
                escape(holiday.description),
                "closed" if holiday.is_full_day_off else _format_slots(holiday.time_slots),
            )
        console.print()
        console.print(table)

    if config.seasonal_schedules:
        table = Table(title="Seasonal schedules", show_header=True, header_style="bold cyan")
        table.add_column("Period", style="bold yellow")
        table.add_column("Description")
        table.add_column("Hours", style="dim")
        for season in config.seasonal_schedules:
            if season.is_full_period_off:
                hours = "closed"
            elif season.schedule is None:
                hours = "default weekly hours"
            else:
                hours = "; ".join(
                    f"{weekday.value[:3]} {_format_slots(season.schedule.for_weekday(weekday).open_slots())}"
                    for weekday in Weekday
                )
            table.add_row(
                f"{season.start_date.isoformat()} - {season.end_date.isoformat()}",
                escape(season.description),
                hours,
            )
        console.print()
        console.print(table)

    console.print()


@app.command()
def init(
    config_file: ConfigOption = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing schedule with the defaults.")] = False,
):
    """
    Create the schedule file with the default opening hours.
    """
    try:
        _, store, _ = _build_service(config_file)

        if store.exists() and not force:
            console.print(f"[yellow]Schedule already exists at {store.path}. Use --force to reset it.[/yellow]")
            return

        store.replace(ScheduleConfig.default())
        console.print(f"[green]✓ Default schedule written to {store.path}[/green]")

    except (SchedulerError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def show(config_file: ConfigOption = None):
    """
    Show the stored weekly schedule and all overrides.
    """
    try:
        _, _, service = _build_service(config_file)
        _render_schedule(service.get_schedule())

    except (SchedulerError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def day(
    target: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
):
    """
    Show which override governs a date and its opening hours.
    """
    try:
        settings, _, service = _build_service(config_file)
        effective = service.effective_schedule(_parse_date(target, settings.timezone))
        console.print(f"\n  {escape(effective.format_display())}\n")

    except (SchedulerError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def slots(
    target: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    duration: DurationOption = None,
):
    """
    List the bookable session slots of a date.

    Examples:

        openhours slots 2024-07-04
        openhours slots 2024-07-04 --duration 30
    """
    try:
        settings, _, service = _build_service(config_file)
        target_date = _parse_date(target, settings.timezone)
        effective = service.effective_schedule(target_date)
        available = service.available_slots(target_date, duration)

        console.print(f"\n[bold cyan]{escape(effective.format_display())}[/bold cyan]\n")
        if not available:
            console.print("[yellow]⚠ No bookable slots on this date.[/yellow]\n")
            return

        console.print(f"[bold green]✓ {len(available)} slot(s):[/bold green]")
        for slot in available:
            console.print(f"  {slot.start.format('HH:mm')} – {slot.end.format('HH:mm')}")
        console.print()

    except (SchedulerError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def week(
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="First date (YYYY-MM-DD), defaults to today")] = None,
    days: Annotated[Optional[int], typer.Option("--days", help="Number of days to show")] = None,
    duration: DurationOption = None,
):
    """
    Show opening hours and slot counts for the coming days.
    """
    try:
        settings, _, service = _build_service(config_file)
        tz = settings.timezone

        first = _parse_date(start, tz) if start else pendulum.today(tz).date()
        count = days if days is not None else settings.week_days
        if count <= 0:
            console.print("[red]--days must be greater than zero.[/red]")
            raise typer.Exit(1)
        last = first + timedelta(days=count - 1)

        overview = service.range_overview(first, last, duration)

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold yellow")
        table.add_column("Effective hours")
        table.add_column("Slots", justify="right")
        for current, (effective, day_slots) in overview.items():
            table.add_row(current.isoformat(), escape(effective.format_display()), str(len(day_slots)))

        console.print()
        console.print(table)
        console.print()

    except (SchedulerError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def check(
    start: Annotated[str, typer.Argument(help="Start, e.g. '2024-07-04 09:00'")],
    end: Annotated[str, typer.Argument(help="End, e.g. '2024-07-04 10:30'")],
    config_file: ConfigOption = None,
):
    """
    Check whether an interval lies inside the opening hours.
    """
    try:
        settings, _, service = _build_service(config_file)
        start_dt = _parse_datetime(start, settings.timezone)
        end_dt = _parse_datetime(end, settings.timezone)

        if service.is_slot_available(start_dt, end_dt):
            console.print("[bold green]✓ Available[/bold green]")
        else:
            console.print("[bold red]✗ Not available[/bold red]")
            raise typer.Exit(2)

    except (SchedulerError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def update(
    payload_file: Annotated[Path, typer.Argument(help="YAML or JSON file with the full schedule document")],
    config_file: ConfigOption = None,
):
    """
    Replace the stored schedule with the document in PAYLOAD_FILE.
    """
    try:
        _, store, service = _build_service(config_file)

        if not payload_file.exists():
            raise FileNotFoundError(f"Payload file not found: {payload_file}")
        try:
            with open(payload_file, "r", encoding="utf-8") as f:
                payload = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {payload_file}: {exc}") from exc

        config, warnings = service.update_schedule(payload)

        console.print(f"[green]✓ Schedule saved to {store.path}[/green]")
        for warning in warnings:
            console.print(f"[yellow]⚠ {escape(warning)}[/yellow]")
        _render_schedule(config)

    except (SchedulerError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(Panel.fit(f"[bold cyan]openhours[/bold cyan] version [bold]{__version__}[/bold]"))


if __name__ == "__main__":
    app()

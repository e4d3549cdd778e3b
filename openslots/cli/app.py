"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.json_repository import JsonScheduleRepository
from ..config import AppConfig, get_default_config_path
from ..domain.dates import parse_timestamp
from ..domain.exceptions import SlotFinderError
from ..domain.occupancy import OccupancyResolver
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="openslots",
    help="Find open replacement-session slots at a school site",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> tuple:
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    return config, config_path


def _build_repository(config: AppConfig, config_path: Path, data_file: Optional[Path]) -> JsonScheduleRepository:
    return JsonScheduleRepository(
        data_file=data_file or config.resolve_data_file(config_path),
        timezone=config.timezone,
    )


@app.command()
def find(
    site: Annotated[str, typer.Argument(help="School name")],
    student: Annotated[List[str], typer.Option("--student", "-s", help="Student ID of the vacated session (repeatable)")],
    start: Annotated[str, typer.Option("--start", help="Start time of the vacated session (HH:mm)")],
    date: Annotated[Optional[str], typer.Option("--date", help="Day to search (YYYY-MM-DD). Defaults to today")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End time of the vacated session (HH:mm)")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Required length in minutes")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Override the current time (ISO-8601)")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    data_file: Annotated[Optional[Path], typer.Option("--data", help="Path to the schedule data JSON file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
):
    """
    Find open slots to replace a cancelled session.

    Examples:

        openslots find "Lincoln Elementary" -s stu-1 --start 10:00

        openslots find "Lincoln Elementary" -s stu-1 -s stu-2 --start 10:00 --end 10:45 --date 2024-11-25

        openslots find "Lincoln Elementary" -s stu-1 --start 10:00 --duration 45 --now 2024-11-25T09:15
    """
    _configure_logging(verbose)

    try:
        config, config_path = _load_config(config_file)
        tz = config.timezone

        repository = _build_repository(config, config_path, data_file)
        service = AvailabilityService(
            repository,
            resolver=OccupancyResolver(config.defaults.exclusion_tolerance_minutes),
            timezone=tz,
            default_session_minutes=config.defaults.session_minutes,
            default_operating_hours=config.defaults.get_operating_hours(),
        )

        current = parse_timestamp(now, tz, "now") if now else pendulum.now(tz)
        target_date = date or current.to_date_string()

        if duration is None:
            slots = asyncio.run(
                service.find_slots_after_cancellation(
                    site=site,
                    target_date=target_date,
                    student_ids=student,
                    start_time=start,
                    end_time=end,
                    now=current,
                )
            )
        else:
            slots = asyncio.run(
                service.find_open_slots(
                    site=site,
                    target_date=target_date,
                    required_duration_minutes=duration,
                    exclusion=service.exclusion_from_clock(student, start, end),
                    now=current,
                )
            )

        console.print()
        if not slots:
            console.print(
                f"[yellow]⚠ No open slots at {site} on {target_date}.[/yellow]\n"
                "Try another day or a shorter duration."
            )
        else:
            console.print(f"[bold green]✓ {len(slots)} open slot(s) at {site} on {target_date}:[/bold green]\n")
            for slot in slots:
                console.print(f"  {slot}")
        console.print()

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    except (SlotFinderError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def list_sites(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    ),
    data_file: Optional[Path] = typer.Option(
        None,
        "--data",
        help="Path to the schedule data JSON file"
    ),
):
    """
    List all sites with their operating hours.
    """
    try:
        config, config_path = _load_config(config_file)
        repository = _build_repository(config, config_path, data_file)
        sites = repository.list_sites()

        if not sites:
            console.print("[yellow]No schools found in the data file.[/yellow]")
            return

        default_hours = config.defaults.get_operating_hours()

        table = Table(
            title="Sites",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("School", style="bold yellow")
        table.add_column("Hours", style="dim")

        for school in sites:
            hours = asyncio.run(repository.fetch_operating_hours(school.get("name", ""))) or default_hours
            table.add_row(
                str(school.get("name", "")),
                f"{hours.start_hour}:00 - {hours.end_hour}:00"
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, SlotFinderError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]openslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

"""Main CLI application for ralli."""

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ralli import __version__
from ralli.config.parser import PROJECT_FILE, ConfigError
from ralli.core.matrix import MatrixError, java_version_for, next_version_down, next_version_up
from ralli.core.project import Project
from ralli.core.rangeset import format_range_list, simplify_range_set
from ralli.utils.ranges import VersionRange, find_best_version
from ralli.utils.version import ParseError, Version

# Create the main Typer app
app = typer.Typer(
    name="ralli",
    help="Version range tooling for mods built against many game versions",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

# Set up logger for the ralli package
logger = logging.getLogger("ralli")


class Direction(str, Enum):
    up = "up"
    down = "down"


def setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2=DEBUG, 3+=DEBUG with source paths
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logger.setLevel(level)

    # Only add handler if not already configured
    if not logger.handlers:
        handler = RichHandler(
            console=error_console,
            show_time=verbosity >= 2,
            show_path=verbosity >= 3,
            rich_tracebacks=True,
        )
        handler.setLevel(level)
        logger.addHandler(handler)
    else:
        for h in logger.handlers:
            h.setLevel(level)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {escape(message)}")


def parse_version_arg(text: str) -> Version:
    """Parse a version argument, exiting on failure."""
    try:
        return Version.parse(text)
    except ParseError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


def parse_range_arg(text: str) -> VersionRange:
    """Parse a range argument, exiting on failure."""
    try:
        return VersionRange.parse(text)
    except ParseError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


def get_project(path: Path | None = None) -> Project:
    """Get the current project, raising an error if not found."""
    try:
        return Project.load(path)
    except FileNotFoundError as e:
        print_error(str(e))
        print_error("Run 'ralli init' to create a new project")
        raise typer.Exit(1) from e
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


ProjectPath = Annotated[
    Path | None,
    typer.Option(
        "--path",
        "-p",
        help="Project directory (defaults to searching from the current directory)",
    ),
]


@app.callback()
def callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v info, -vv debug, -vvv trace)",
        ),
    ] = 0,
) -> None:
    """ralli - version range tooling for multi-version mod builds."""
    setup_logging(verbose)


@app.command()
def version() -> None:
    """Show the ralli version."""
    console.print(f"ralli {__version__}")


@app.command()
def compare(
    first: Annotated[str, typer.Argument(help="First version")],
    second: Annotated[str, typer.Argument(help="Second version")],
) -> None:
    """Compare two versions by precedence."""
    a = parse_version_arg(first)
    b = parse_version_arg(second)

    if a < b:
        operator = "<"
    elif a > b:
        operator = ">"
    else:
        operator = "=="
    console.print(f"{a} {operator} {b}", markup=False)


@app.command("sort")
def sort_versions(
    versions: Annotated[list[str], typer.Argument(help="Versions to sort")],
    reverse: Annotated[
        bool,
        typer.Option("--reverse", "-r", help="Newest first"),
    ] = False,
) -> None:
    """Sort versions by precedence."""
    parsed = sorted((parse_version_arg(v) for v in versions), reverse=reverse)
    for v in parsed:
        console.print(str(v), markup=False)


@app.command()
def check(
    spec: Annotated[str, typer.Argument(help="Range (e.g., '>=1.20 <1.21')")],
    versions: Annotated[list[str], typer.Argument(help="Versions to test")],
) -> None:
    """Check which versions a range contains.

    Exits with status 1 if any version is outside the range.
    """
    range_ = parse_range_arg(spec)
    parsed = [parse_version_arg(v) for v in versions]

    table = Table(title=f"Range {escape(str(range_))}")
    table.add_column("Version", style="cyan")
    table.add_column("Contained")

    outside = 0
    for v in parsed:
        contained = range_.contains(v)
        if not contained:
            outside += 1
        table.add_row(escape(str(v)), "[green]yes[/green]" if contained else "[red]no[/red]")

    console.print(table)
    if outside:
        raise typer.Exit(1)


@app.command()
def best(
    spec: Annotated[str, typer.Argument(help="Range to match")],
    versions: Annotated[list[str], typer.Argument(help="Available versions")],
) -> None:
    """Show the highest version a range contains."""
    try:
        match = find_best_version(spec, versions)
    except ParseError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    if match is None:
        print_error(f"No version matches {spec}")
        raise typer.Exit(1)
    console.print(match, markup=False)


@app.command()
def simplify(
    specs: Annotated[list[str], typer.Argument(help="Ranges to merge")],
    as_list: Annotated[
        bool,
        typer.Option("--list", "-l", help="Print as a bracketed property value"),
    ] = False,
) -> None:
    """Merge ranges into a minimal sorted set."""
    ranges = simplify_range_set(parse_range_arg(spec) for spec in specs)

    if as_list:
        console.print(format_range_list(ranges), markup=False)
        return
    for range_ in ranges:
        console.print(str(range_), markup=False)


@app.command()
def java(
    game_version: Annotated[
        str | None,
        typer.Argument(help="Game version (defaults to the project's current version)"),
    ] = None,
    path: ProjectPath = None,
) -> None:
    """Show the Java release needed for a game version.

    An explicit version without --path uses the built-in table; otherwise
    the project's java_versions overrides apply.
    """
    if game_version is not None and path is None:
        console.print(str(java_version_for(parse_version_arg(game_version))))
        return

    project = get_project(path)
    target = parse_version_arg(game_version) if game_version is not None else None
    console.print(str(project.java_version(target)))


@app.command()
def init(
    project_name: Annotated[
        str | None,
        typer.Option(
            "--name",
            "-n",
            help="Project name (defaults to directory name)",
        ),
    ] = None,
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Project directory (defaults to current directory)",
        ),
    ] = None,
) -> None:
    """Initialize a new ralli project.

    Creates a ralli.yaml configuration file in the specified directory.
    """
    path = Path.cwd() if path is None else path.resolve()

    if not path.exists():
        print_error(f"Directory does not exist: {path}")
        raise typer.Exit(1)

    if (path / PROJECT_FILE).exists():
        print_error(f"Project already initialized in {path}")
        print_error(f"To reinitialize, delete {PROJECT_FILE} first")
        raise typer.Exit(1)

    Project.init(path, project_name)
    print_success("Initialized ralli project")
    console.print(f"  Created: {path / PROJECT_FILE}")


@app.command()
def status(path: ProjectPath = None) -> None:
    """Show the project's current version and compatible ranges."""
    project = get_project(path)

    current = project.minecraft_version
    shown = escape(str(current)) if current is not None else "[dim]not set[/dim]"
    console.print(f"[bold]{escape(str(project.project_name))}[/bold]")
    console.print(f"  Game version: {shown}")
    console.print(f"  Java: {project.java_version()}")

    ranges = project.compatible_ranges()
    if not ranges:
        console.print("[dim]No known compatible versions yet.[/dim]")
        return

    table = Table(title="Compatible Ranges")
    table.add_column("Range", style="cyan")
    table.add_column("Known versions", style="green")
    known = project.known_versions
    for range_ in ranges:
        covered = [escape(str(entry)) for entry in known if range_.contains(entry.version)]
        table.add_row(escape(str(range_)), ", ".join(covered) or "-")
    console.print(table)


@app.command()
def use(
    game_version: Annotated[str, typer.Argument(help="Game version to build against")],
    path: ProjectPath = None,
) -> None:
    """Switch the project to a known game version."""
    project = get_project(path)
    target = parse_version_arg(game_version)
    known = project.known_versions

    try:
        entry = known[known.index_of(target)]
    except MatrixError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    project.config.minecraft_version = str(entry.version)
    project.save()
    print_success(f"Testing game version {entry}")
    console.print(f"  Mappings: {entry.mappings}", markup=False)
    console.print(f"  Java: {project.java_version(entry.version)}")


@app.command()
def confirm(
    game_version: Annotated[
        str | None,
        typer.Argument(help="Version that works (defaults to the project's current version)"),
    ] = None,
    path: ProjectPath = None,
) -> None:
    """Record a game version as compatible."""
    project = get_project(path)

    target = parse_version_arg(game_version) if game_version is not None else None
    if target is None:
        target = project.minecraft_version
    if target is None:
        print_error("No game version given and none set in the project")
        raise typer.Exit(1)

    try:
        ranges = project.confirm(target)
    except MatrixError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    project.save()
    print_success(f"Added game version {target} to the compatibility range")
    console.print(f"  {format_range_list(ranges)}", markup=False)


@app.command("next")
def next_version(
    direction: Annotated[Direction, typer.Argument(help="Search above or below the ranges")],
    path: ProjectPath = None,
) -> None:
    """Show the next game version to test outside the compatible ranges."""
    project = get_project(path)
    find_next = next_version_up if direction is Direction.up else next_version_down

    try:
        entry = find_next(project.compatible_ranges(), project.known_versions)
    except MatrixError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    console.print(str(entry), markup=False)


if __name__ == "__main__":
    app()

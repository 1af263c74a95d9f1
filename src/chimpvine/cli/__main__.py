"""Session CLI for exercising a backend from the terminal.

The CLI stands in for the game: it runs the authentication handshake
and, for ``play``, sends one start report and one end report.

Usage:
    uv run chimpvine connect --game-id 5 --origin https://example.org
    uv run chimpvine connect --testing --game-id 5
    uv run chimpvine play --testing --game-id 5 --level 2 --points 10 --total 40
    uv run python -m chimpvine.cli play --api-disabled
"""

import asyncio
import logging
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from chimpvine.config import Settings, settings
from chimpvine.errors import SessionFailedError
from chimpvine.models import GameProgress
from chimpvine.session import SessionClient

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="chimpvine",
    help="Game session client CLI",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()

GameIdOption = Annotated[
    int | None, typer.Option("--game-id", "-g", help="Game identifier")
]
OriginOption = Annotated[
    str | None, typer.Option("--origin", "-o", help="Backend origin URL")
]
TestingOption = Annotated[
    bool | None,
    typer.Option("--testing/--no-testing", help="Use the configured test origin"),
]
ApiDisabledOption = Annotated[
    bool,
    typer.Option("--api-disabled", help="Skip all network calls"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose logging"),
]


def _configure(
    *,
    game_id: int | None,
    origin: str | None,
    testing: bool | None,
    api_disabled: bool,
    verbose: bool,
) -> Settings:
    """Set up logging and merge command-line overrides into settings."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

    overrides: dict[str, Any] = {}
    if game_id is not None:
        overrides["game_id"] = game_id
    if origin is not None:
        overrides["origin"] = origin
    if testing is not None:
        overrides["testing"] = testing
    if api_disabled:
        overrides["api_disabled"] = True
    return settings.model_copy(update=overrides)


def _print_progress(progress: GameProgress) -> None:
    table = Table(title="Game progress", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for name, value in progress.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


async def _connect(session: SessionClient) -> GameProgress:
    await session.start()
    return await session.wait_ready()


async def connect_session(config: Settings) -> GameProgress:
    """Run the handshake and return the fetched progress.

    Raises:
        SessionFailedError: If the handshake failed.
    """
    async with SessionClient(config) as session:
        return await _connect(session)


async def play_session(
    config: Settings,
    *,
    level: int | None,
    points_earned: int,
    total_points: int,
    level_data: str,
    completed: bool,
) -> int | None:
    """Run the handshake, then report one level start and end.

    Returns:
        The user instance after the end report, or None if a report failed.

    Raises:
        SessionFailedError: If the handshake failed.
    """
    async with SessionClient(config) as session:
        progress = await _connect(session)
        _print_progress(progress)

        instance = await session.report_start(
            progress.level if level is None else level
        )
        if instance is None:
            return None
        logger.info("Level started, user instance %d", instance)

        return await session.report_end(
            points_earned, total_points, level_data, is_level_completed=completed
        )


@app.callback(invoke_without_command=True)
def callback(ctx: typer.Context) -> None:
    """Game session client CLI."""
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


@app.command()
def connect(
    game_id: GameIdOption = None,
    origin: OriginOption = None,
    testing: TestingOption = None,
    api_disabled: ApiDisabledOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Authenticate and print the saved progress."""
    config = _configure(
        game_id=game_id,
        origin=origin,
        testing=testing,
        api_disabled=api_disabled,
        verbose=verbose,
    )

    try:
        progress = asyncio.run(connect_session(config))
    except SessionFailedError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    _print_progress(progress)


@app.command()
def play(
    level: Annotated[
        int | None,
        typer.Option("--level", "-l", help="Level to report (default: saved level)"),
    ] = None,
    points_earned: Annotated[
        int, typer.Option("--points", help="Points earned in the level")
    ] = 0,
    total_points: Annotated[
        int, typer.Option("--total", help="Total points after the level")
    ] = 0,
    level_data: Annotated[
        str, typer.Option("--level-data", help="Opaque level data blob")
    ] = "",
    completed: Annotated[
        bool,
        typer.Option("--completed/--failed", help="Whether the level was passed"),
    ] = True,
    game_id: GameIdOption = None,
    origin: OriginOption = None,
    testing: TestingOption = None,
    api_disabled: ApiDisabledOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Authenticate, then send a start report and an end report.

    Example:
        uv run chimpvine play --testing -g 5 --level 2 --points 10 --total 40
    """
    config = _configure(
        game_id=game_id,
        origin=origin,
        testing=testing,
        api_disabled=api_disabled,
        verbose=verbose,
    )

    try:
        instance = asyncio.run(
            play_session(
                config,
                level=level,
                points_earned=points_earned,
                total_points=total_points,
                level_data=level_data,
                completed=completed,
            )
        )
    except SessionFailedError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if instance is None:
        typer.echo("Error: report failed, see log for details", err=True)
        raise typer.Exit(1)
    typer.echo(f"User instance: {instance}")


if __name__ == "__main__":
    app()

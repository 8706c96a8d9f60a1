"""Deezify CLI - main application entry point."""

import asyncio
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Annotated, TypeVar

import typer

from deezify.config import get_logger, setup_loguru_logger
from deezify.domain.entities import WeatherQuery, WeatherUnits
from deezify.infrastructure.cli.ui import (
    command_error_handler,
    display_playlist,
    display_weather,
    print_json,
)
from deezify.infrastructure.factories import AppContainer, create_container

logger = get_logger(__name__)

T = TypeVar("T")

app = typer.Typer(
    help="🎵 Deezify - Spotify playlists with Deezer previews",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_show_locals=False,
)


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"


def run_with_container(operation: Callable[[AppContainer], Awaitable[T]]) -> T:
    """Run one async operation against a freshly built container."""

    async def runner() -> T:
        async with create_container() as container:
            return await operation(container)

    return asyncio.run(runner())


@app.callback()
def init_cli(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Configure logging before any command runs."""
    setup_loguru_logger(verbose)


@app.command(name="playlist")
@command_error_handler
def playlist(
    playlist_id: Annotated[
        str | None,
        typer.Argument(help="Spotify playlist ID (defaults to SPOTIFY_PLAYLIST_ID)"),
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """Show a Spotify playlist matched to Deezer previews."""
    derived = run_with_container(
        lambda container: container.music.get_playlist(playlist_id)
    )

    if output_format is OutputFormat.JSON:
        print_json(derived.to_dict())
    else:
        display_playlist(derived)


@app.command(name="weather")
@command_error_handler
def weather(
    latitude: Annotated[
        float, typer.Option("--lat", min=-90, max=90, help="Latitude")
    ],
    longitude: Annotated[
        float, typer.Option("--lon", min=-180, max=180, help="Longitude")
    ],
    timezone: Annotated[
        str, typer.Option("--timezone", "-t", help="IANA timezone or 'auto'")
    ] = "auto",
    units: Annotated[
        WeatherUnits, typer.Option("--units", "-u", help="Unit system")
    ] = WeatherUnits.METRIC,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """Show current weather for a location."""
    query = WeatherQuery(
        latitude=latitude, longitude=longitude, timezone=timezone, units=units
    )
    current = run_with_container(lambda container: container.weather.get_weather(query))

    if output_format is OutputFormat.JSON:
        print_json(current.to_dict())
    else:
        display_weather(current)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

"""UI helpers for CLI interaction.

Keeps presentation separate from the query services: the services return
plain payloads and raise typed errors, this module renders both.
"""

from collections.abc import Callable
import functools
import json
from typing import Any, ParamSpec, TypeVar

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
import typer

from deezify.config import get_logger
from deezify.domain.entities import DerivedPlaylist, WeatherPayload
from deezify.domain.errors import ConfigurationError, DeezifyError, UpstreamError

console = Console()
logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    Typed pipeline failures render an "unavailable" panel, anything else is
    logged with its traceback. Both exit with code 1.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except DeezifyError as e:
                logger.warning(
                    "{} unavailable: {}", operation, e, error_type=type(e).__name__
                )
                display_unavailable(operation, e)
                raise typer.Exit(code=1) from e

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {e}")
                raise typer.Exit(code=1) from e

    return wrapper


def describe_error(error: DeezifyError) -> str:
    if isinstance(error, ConfigurationError):
        return f"Not configured: {error}"
    if isinstance(error, UpstreamError):
        status = f" (HTTP {error.status_code})" if error.status_code else ""
        return f"{error.service}: {error}{status}"
    return str(error)


def display_unavailable(what: str, error: DeezifyError) -> None:
    console.print(
        Panel(
            describe_error(error),
            title=f"[bold yellow]{what.capitalize()} unavailable[/bold yellow]",
            border_style="yellow",
        )
    )


def print_json(payload: dict[str, Any]) -> None:
    # Plain print, no Rich wrapping
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def format_duration(duration_ms: int | None) -> str:
    if duration_ms is None:
        return "-"
    seconds = duration_ms // 1000
    return f"{seconds // 60}:{seconds % 60:02d}"


def display_playlist(playlist: DerivedPlaylist) -> None:
    table = Table(title=f"🎵 {playlist.name}", caption=playlist.external_url)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Artists")
    table.add_column("Length", justify="right")
    table.add_column("Preview", justify="center")

    for position, track in enumerate(playlist.tracks, start=1):
        table.add_row(
            str(position),
            track.name,
            ", ".join(track.artists),
            format_duration(track.duration_ms),
            "[green]✓[/green]" if track.preview_url else "[red]✗[/red]",
        )

    console.print(table)
    previews = sum(1 for track in playlist.tracks if track.preview_url)
    curator = f" by {playlist.curator_name}" if playlist.curator_name else ""
    console.print(
        f"[dim]{playlist.total_tracks} tracks{curator}, {previews} with previews[/dim]"
    )


def display_weather(weather: WeatherPayload) -> None:
    unit = "°C" if weather.units == "metric" else "°F"
    temperature = "-" if weather.temperature is None else f"{weather.temperature}{unit}"
    body = f"[bold]{weather.kind.value}[/bold]  {temperature}"
    if weather.observed_at:
        body += f"\n[dim]observed {weather.observed_at}[/dim]"
    console.print(Panel(body, title="Current weather", border_style="blue"))

"""Main entry point for the Pomodoro CLI."""

import asyncio

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console

from pomodoro_cli import __version__
from pomodoro_cli.commands import calendar, config, sessions, tags, tasks, timer
from pomodoro_cli.services.api import APIError, SessionsAPI, get_client
from pomodoro_cli.services.config_service import get_config_service
from pomodoro_cli.utils.typer_helpers import SuggestingGroup

# Create main app with custom group class
app = typer.Typer(
    name="pomodoro",
    cls=SuggestingGroup,
    help="A terminal client for the Pomodoro focus timer",
    no_args_is_help=True,
)

console = Console()


# Add subcommands
app.add_typer(timer.app, name="timer", help="Pomodoro timer for focus sessions")
app.add_typer(sessions.app, name="sessions", help="Completed focus sessions")
app.add_typer(tags.app, name="tags", help="Tag management commands")
app.add_typer(tasks.app, name="tasks", help="Google Tasks commands")
app.add_typer(calendar.app, name="calendar", help="Google Calendar commands")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information and server health."""
    console.print(f"[bold]Pomodoro CLI[/bold] version [cyan]{__version__}[/cyan]")
    console.print()

    credentials = get_config_service().load_credentials()
    if not credentials:
        console.print("[yellow]Not signed in - unable to check the server[/yellow]")
        return

    async def check_health():
        async with get_client() as client:
            try:
                summary = await SessionsAPI(client).today()
                console.print(
                    f"[green]✓ Server is healthy[/green] "
                    f"({summary.today_count} sessions today)"
                )
            except (APIError, httpx.HTTPError, ValidationError) as e:
                console.print(f"[red]✗ Server check failed: {str(e)}[/red]")

    asyncio.run(check_health())


def main() -> None:
    """Entry point for the ``pomodoro`` console script."""
    app()


if __name__ == "__main__":
    main()

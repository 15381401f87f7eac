"""Google Calendar commands."""

import typer
from rich.table import Table

from pomodoro_cli.services.api import CalendarAPI, get_client
from pomodoro_cli.services.sidebars import (
    REAUTH_MESSAGE,
    CalendarSidebar,
    format_event_time,
)
from pomodoro_cli.utils.exit_codes import ERROR_AUTH_FAILURE, ERROR_NETWORK
from pomodoro_cli.utils.typer_helpers import SuggestingGroup
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import format_output, resolve_format

from .decorators import SIGN_IN_HINT, AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Google Calendar commands")
console = get_console()


def _raise_reauth() -> None:
    raise AppError(f"{REAUTH_MESSAGE} {SIGN_IN_HINT}", ERROR_AUTH_FAILURE)


@app.command("today")
@command_wrapper
async def todays_events(
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format: table, json or yaml"
    ),
) -> None:
    """Show today's calendar events."""
    output = resolve_format(output)
    async with get_client() as client:
        sidebar = CalendarSidebar(CalendarAPI(client), on_reauth=_raise_reauth)
        if not await sidebar.refresh():
            raise AppError(sidebar.error, ERROR_NETWORK)

    if sidebar.empty_message:
        console.print(f"[dim]{sidebar.empty_message}[/dim]")
        return

    if output != "table":
        format_output(
            [
                {"id": e.id, "title": e.title, "time": format_event_time(e)}
                for e in sidebar.events
            ],
            output,
        )
        return

    table = Table(title="Today", show_header=True, header_style="bold magenta")
    table.add_column("Time", style="cyan")
    table.add_column("Event")
    for event in sidebar.events:
        table.add_row(format_event_time(event), event.title or "(no title)")
    console.print(table)

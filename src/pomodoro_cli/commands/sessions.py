"""Completed session commands."""

import typer

from pomodoro_cli.services.api import SessionsAPI, get_client
from pomodoro_cli.utils.typer_helpers import SuggestingGroup
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import (
    format_output,
    format_success,
    resolve_format,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Completed focus sessions")
console = get_console()


@app.command("today")
@command_wrapper
async def today(
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format: table, json or yaml"
    ),
) -> None:
    """Show today's completed sessions."""
    output = resolve_format(output)
    async with get_client() as client:
        summary = await SessionsAPI(client).today()

    if output != "table":
        format_output(summary.model_dump(mode="json"), output)
        return

    console.print(
        f"[bold]{summary.today_date:%A, %B} {summary.today_date.day}[/bold]  "
        f"[cyan]{summary.today_count}[/cyan] completed"
    )
    if not summary.sessions:
        console.print("[dim]No sessions yet today[/dim]")
        return

    format_output(
        [
            {
                "id": s.id,
                "description": s.description,
                "started_at": s.started_at,
            }
            for s in summary.sessions
        ],
        output,
    )


@app.command("delete")
@command_wrapper
async def delete_session(
    session_id: str = typer.Argument(..., help="Session ID (from 'pomodoro sessions today')"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a completed session."""
    if not yes and not typer.confirm(f"Delete session {session_id}?"):
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)

    async with get_client() as client:
        result = await SessionsAPI(client).delete_session(session_id)

    format_success(
        f"Session {session_id} deleted ({result.today_count} completed today)"
    )

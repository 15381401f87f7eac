"""Google Tasks commands."""

import typer

from pomodoro_cli.services.api import TasksAPI, get_client
from pomodoro_cli.services.sidebars import REAUTH_MESSAGE, TaskSidebar, format_due
from pomodoro_cli.utils.exit_codes import ERROR_AUTH_FAILURE, ERROR_NETWORK
from pomodoro_cli.utils.typer_helpers import SuggestingGroup
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import (
    format_output,
    format_success,
    resolve_format,
)

from .decorators import SIGN_IN_HINT, AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Google Tasks commands")
console = get_console()


def _raise_reauth() -> None:
    raise AppError(f"{REAUTH_MESSAGE} {SIGN_IN_HINT}", ERROR_AUTH_FAILURE)


@app.command("list")
@command_wrapper
async def list_tasks(
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format: table, json or yaml"
    ),
) -> None:
    """List incomplete tasks."""
    output = resolve_format(output)
    async with get_client() as client:
        sidebar = TaskSidebar(TasksAPI(client), on_reauth=_raise_reauth)
        if not await sidebar.refresh():
            raise AppError(sidebar.error, ERROR_NETWORK)

    if sidebar.empty_message:
        console.print(f"[dim]{sidebar.empty_message}[/dim]")
        return

    format_output(
        [
            {"id": t.id, "title": t.title, "due": format_due(t.due) or None}
            for t in sidebar.tasks
        ],
        output,
    )


@app.command("complete")
@command_wrapper
async def complete_task(
    task_id: str = typer.Argument(..., help="Task ID (from 'pomodoro tasks list')"),
) -> None:
    """Mark a task as completed."""
    async with get_client() as client:
        sidebar = TaskSidebar(TasksAPI(client), on_reauth=_raise_reauth)
        if not await sidebar.complete(task_id):
            raise AppError(sidebar.error, ERROR_NETWORK)

    format_success(f"Task {task_id} completed")

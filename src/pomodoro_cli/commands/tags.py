"""Tag management commands."""

import typer
from rich.table import Table
from rich.text import Text

from pomodoro_cli.models.timer.projection import tag_distribution
from pomodoro_cli.services.api import SessionsAPI, TagsAPI, get_client
from pomodoro_cli.utils.exit_codes import ERROR_NOT_FOUND
from pomodoro_cli.utils.typer_helpers import SuggestingGroup
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import (
    format_output,
    format_success,
    resolve_format,
)

from .decorators import AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Tag management commands")
console = get_console()


@app.command("list")
@command_wrapper
async def list_tags(
    search: str | None = typer.Option(None, "--search", help="Search tags"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format: table, json or yaml"
    ),
) -> None:
    """List all tags with their session counts."""
    output = resolve_format(output)
    async with get_client() as client:
        tags = await TagsAPI(client).list_tags()

    if search:
        search_lower = search.lower()
        tags = [t for t in tags if search_lower in t.name.lower()]
    if not tags:
        console.print("[yellow]No tags found[/yellow]")
        return
    format_output([t.model_dump(mode="json") for t in tags], output)


@app.command("add")
@command_wrapper
async def add_tag(
    name: str = typer.Argument(..., help="Tag name"),
) -> None:
    """Create a tag. Names are unique regardless of case."""
    async with get_client() as client:
        result = await TagsAPI(client).create_tag(name.strip())

    if result.is_new:
        format_success(f"Tag '{result.tag}' created")
    else:
        console.print(f"[yellow]Tag '{result.tag}' already exists[/yellow]")


@app.command("remove")
@command_wrapper
async def remove_tag(
    name: str = typer.Argument(..., help="Tag name or ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a tag. Sessions keep their label."""
    async with get_client() as client:
        api = TagsAPI(client)
        tags = await api.list_tags()
        match = next(
            (t for t in tags if t.name.lower() == name.lower() or str(t.id) == name),
            None,
        )
        if match is None:
            raise AppError(f"Tag '{name}' not found", ERROR_NOT_FOUND)

        if not yes and not typer.confirm(f"Delete tag '{match.name}'?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

        await api.delete_tag(match.id)

    format_success(f"Tag '{match.name}' deleted")


@app.command("stats")
@command_wrapper
async def tag_stats(
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format: table, json or yaml"
    ),
) -> None:
    """Show how completed sessions split across tags."""
    output = resolve_format(output)
    async with get_client() as client:
        summary = await SessionsAPI(client).today()

    slices = tag_distribution(summary.tag_statistics)
    if output != "table":
        format_output(
            [
                {"tag": s.tag, "count": s.count, "percent": s.percent_label}
                for s in slices
            ],
            output,
        )
        return

    if not slices:
        console.print("[dim]No tagged sessions yet[/dim]")
        return

    table = Table(title="Sessions by tag", show_header=True, header_style="bold magenta")
    table.add_column("")
    table.add_column("Tag")
    table.add_column("Sessions", justify="right")
    table.add_column("Share", justify="right")
    for s in slices:
        table.add_row(Text("■", style=s.color), s.tag, str(s.count), s.percent_label)
    console.print(table)

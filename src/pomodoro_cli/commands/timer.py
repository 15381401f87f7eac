"""Interactive Pomodoro timer."""

import asyncio

import typer
from rich.panel import Panel

from pomodoro_cli.models.timer.engine import TimerEngine, debug_enabled
from pomodoro_cli.models.timer.tags import TagPicker
from pomodoro_cli.models.timer.ui import TimerDisplay
from pomodoro_cli.services.api import (
    CalendarAPI,
    SessionsAPI,
    TagsAPI,
    TasksAPI,
    get_client,
)
from pomodoro_cli.services.config_service import get_config_service
from pomodoro_cli.services.notifier import ConsoleNotifier
from pomodoro_cli.services.sidebars import REAUTH_MESSAGE, CalendarSidebar, TaskSidebar
from pomodoro_cli.utils.exit_codes import ERROR_AUTH_FAILURE, ERROR_INVALID_ARGS
from pomodoro_cli.utils.typer_helpers import SuggestingGroup
from pomodoro_cli.utils.ui.console import get_console

from .decorators import SIGN_IN_HINT, AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Pomodoro timer for focus sessions")
console = get_console()


async def _apply_tag(engine: TimerEngine, tag: str) -> None:
    """Select ``tag``, creating it on the server when it is new."""
    match = TagPicker(list(engine.snapshot().available_tags)).filter(tag)
    if not match.query:
        return
    if match.exact is not None:
        engine.select_tag(match.exact)
        return

    errors = await engine.create_tag(match.query)
    if errors:
        raise AppError(f"Could not create tag '{tag}': {'; '.join(errors)}", ERROR_INVALID_ARGS)


@app.command("start")
@command_wrapper
async def start_timer(
    description: str | None = typer.Option(
        None, "--description", "-d", help="What the session is about"
    ),
    tag: str | None = typer.Option(None, "--tag", "-t", help="Tag for the session"),
    sidebars: bool = typer.Option(
        True, "--sidebars/--no-sidebars", help="Show Google Tasks and Calendar"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable the D/B shortcuts that finish a phase early"
    ),
    now: bool = typer.Option(False, "--now", help="Start focusing immediately"),
) -> None:
    """Open the full-screen timer."""
    config = get_config_service().config
    reauth_needed = False

    def on_reauth() -> None:
        nonlocal reauth_needed
        reauth_needed = True

    async with get_client() as client:
        engine = TimerEngine.from_config(
            config,
            SessionsAPI(client),
            tags=TagsAPI(client),
            notifier=ConsoleNotifier(config.notifications, console),
            debug=debug or debug_enabled(config.timer),
        )
        try:
            await engine.load_today()
            if tag:
                await _apply_tag(engine, tag.strip())
            if description:
                engine.set_description(description)

            task_sidebar = calendar_sidebar = None
            if sidebars:
                task_sidebar = TaskSidebar(
                    TasksAPI(client), engine=engine, on_reauth=on_reauth
                )
                calendar_sidebar = CalendarSidebar(
                    CalendarAPI(client), on_reauth=on_reauth
                )
                await asyncio.gather(task_sidebar.refresh(), calendar_sidebar.refresh())
                if reauth_needed:
                    raise AppError(f"{REAUTH_MESSAGE} {SIGN_IN_HINT}", ERROR_AUTH_FAILURE)

            display = TimerDisplay(
                engine,
                console=console,
                daily_target=config.timer.daily_target,
                break_options=config.timer.break_options,
                task_sidebar=task_sidebar,
                calendar_sidebar=calendar_sidebar,
            )
            if now:
                engine.start()
            await display.run()
            await engine.wait_until_settled()
            snapshot = engine.snapshot()
        finally:
            engine.close()

    console.print(
        Panel(
            f"[bold]{snapshot.completed_today_count}[/bold] of "
            f"{config.timer.daily_target} sessions completed today",
            title="🍅 Pomodoro",
            border_style="red",
            padding=(1, 2),
        )
    )

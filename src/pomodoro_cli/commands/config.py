"""Configuration management commands."""

import json
from typing import Any, Optional

import typer

from pomodoro_cli.services.config_service import get_config_service
from pomodoro_cli.utils.exit_codes import ERROR_INVALID_ARGS, ERROR_NOT_FOUND
from pomodoro_cli.utils.typer_helpers import SuggestingGroup
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import format_output, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()


def parse_value(value: str) -> Any:
    """Interpret a command-line value as JSON where possible (numbers, booleans, lists)."""
    try:
        return json.loads(value)
    except ValueError:
        return value


@app.command("view")
@command_wrapper(auth_required=False)
def view_config(
    output: str = typer.Option("json", "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    config_dict = get_config_service().config.model_dump()
    format_output(config_dict, output)


@app.command("get")
@command_wrapper(auth_required=False)
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., timer.daily_target)"),
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not found", ERROR_NOT_FOUND)
    console.print(value)


@app.command("set")
@command_wrapper(auth_required=False)
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value = parse_value(value)
    try:
        get_config_service().set(key, parsed_value)
    except KeyError as e:
        raise AppError(str(e.args[0]), ERROR_NOT_FOUND) from e
    except ValueError as e:
        raise AppError(str(e), ERROR_INVALID_ARGS) from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper(auth_required=False)
def reset_config(
    key: Optional[str] = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    try:
        get_config_service().reset(key)
    except KeyError as e:
        raise AppError(str(e.args[0]), ERROR_NOT_FOUND) from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")


@app.command("set-token")
@command_wrapper(auth_required=False)
def set_token(
    token: str = typer.Argument(..., help="API token issued after signing in on the website"),
) -> None:
    """Store the API token used for every request."""
    token = token.strip()
    if not token:
        raise AppError("Token cannot be empty", ERROR_INVALID_ARGS)
    get_config_service().save_credentials(token)
    format_success("Token saved")


@app.command("clear-token")
@command_wrapper(auth_required=False)
def clear_token() -> None:
    """Forget the stored API token."""
    get_config_service().clear_credentials()
    format_success("Token removed")

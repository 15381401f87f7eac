"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import httpx
import typer
from pydantic import ValidationError

from pomodoro_cli.services.api.errors import APIError, ReauthRequiredError
from pomodoro_cli.services.config_service import get_config_service
from pomodoro_cli.utils.exit_codes import (
    ERROR_AUTH_FAILURE,
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_NETWORK,
    ERROR_NOT_FOUND,
    get_exit_code_name,
)
from pomodoro_cli.utils.logger import get_logger
from pomodoro_cli.utils.ui.formatters import format_error

SIGN_IN_HINT = (
    "Sign in on the Pomodoro website, then run 'pomodoro config set-token <token>'."
)


def _require_auth() -> None:
    """Require an API token to be stored."""
    credentials = get_config_service().load_credentials()
    if not credentials or not credentials.get("token"):
        raise AppError(f"Not signed in. {SIGN_IN_HINT}", ERROR_AUTH_FAILURE)


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def exit_code_for(exc: Exception) -> int:
    """Map an API failure onto a semantic exit code."""
    if isinstance(exc, ReauthRequiredError):
        return ERROR_AUTH_FAILURE
    if isinstance(exc, APIError):
        if exc.status_code == 404:
            return ERROR_NOT_FOUND
        if exc.status_code is not None and exc.status_code >= 500:
            return ERROR_NETWORK
        return ERROR_INVALID_ARGS
    if isinstance(exc, (httpx.RequestError, ValidationError)):
        return ERROR_NETWORK
    return ERROR_GENERAL


def command_wrapper(_func: Callable | None = None, *, auth_required: bool = True):
    """Decorator to wrap command functions with common functionality."""

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                # 1. Handle Auth
                if auth_required:
                    _require_auth()

                # 2. Run Sync or Async
                if asyncio.iscoroutinefunction(func):
                    result = asyncio.run(func(*args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                elapsed = time.monotonic() - start
                logger.info("command completed: %s (%.3fs)", cmd, elapsed)
                return result

            except AppError as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) %s - %s",
                    cmd,
                    elapsed,
                    get_exit_code_name(e.exit_code),
                    str(e),
                )
                format_error(str(e))
                raise typer.Exit(code=e.exit_code) from e

            except typer.Exit:
                # Re-raise Typer's own exits (like --help or explicit Exit(0))
                raise

            except ReauthRequiredError as e:
                logger.warning("command needs re-authentication: %s - %s", cmd, e)
                format_error(f"{e} {SIGN_IN_HINT}")
                raise typer.Exit(code=ERROR_AUTH_FAILURE) from e

            except (APIError, httpx.RequestError, ValidationError) as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s: %s",
                    cmd,
                    elapsed,
                    type(e).__name__,
                    e,
                )
                if isinstance(e, httpx.RequestError):
                    format_error(f"Could not reach the Pomodoro server: {e}")
                elif isinstance(e, ValidationError):
                    format_error("The server sent an unexpected response")
                else:
                    format_error(str(e))
                raise typer.Exit(code=exit_code_for(e)) from e

            except Exception as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
                # Generic fallback for unexpected crashes
                format_error(f"An unexpected error occurred: {str(e)}")
                raise typer.Exit(code=ERROR_GENERAL) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)

"""Shared rich consoles for the Pomodoro CLI."""

from functools import lru_cache

from rich.console import Console


@lru_cache(maxsize=4)
def get_console(highlight: bool = True, stderr: bool = False) -> Console:
    """Return a cached Rich console; ``stderr=True`` targets standard error."""
    return Console(highlight=highlight, stderr=stderr)

"""Pomodoro CLI - focus timer backed by the Pomodoro web server."""

__version__ = "0.4.0"

"""Typer sub-applications for the pomodoro command."""

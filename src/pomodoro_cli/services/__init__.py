"""Services module for the Pomodoro CLI - API access and collaborators."""

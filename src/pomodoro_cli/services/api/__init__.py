"""Pomodoro server API client and endpoint wrappers."""

from .calendar import CalendarAPI
from .client import APIClient, get_client
from .errors import APIError, ReauthRequiredError
from .sessions import SessionsAPI
from .tags import TagsAPI
from .tasks import TasksAPI

__all__ = [
    "APIClient",
    "APIError",
    "CalendarAPI",
    "ReauthRequiredError",
    "SessionsAPI",
    "TagsAPI",
    "TasksAPI",
    "get_client",
]

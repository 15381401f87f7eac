"""Google Tasks and Google Calendar sidebars.

Each sidebar performs a single read (and, for tasks, a single write) against
the server, keeps the result for display, and turns failures into an inline
error message. When the server says the Google authorization has lapsed, the
``on_reauth`` callback is invoked so the caller can send the user back to
sign in.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import httpx
from pydantic import ValidationError

from pomodoro_cli.models.core import CalendarEvent, Task
from pomodoro_cli.services.api.calendar import CalendarAPI
from pomodoro_cli.services.api.errors import APIError, ReauthRequiredError
from pomodoro_cli.services.api.tasks import TasksAPI
from pomodoro_cli.utils.logger import get_module_logger

logger = get_module_logger("sidebars")

NO_TASKS_MESSAGE = "No incomplete tasks"
NO_EVENTS_MESSAGE = "No events today"
REAUTH_MESSAGE = "Google authorization expired. Please sign in again."


def format_due(due: datetime | None) -> str:
    """Format a due date as ``Mon D, YYYY``."""
    if due is None:
        return ""
    return f"{due:%b} {due.day}, {due.year}"


def _local_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone()
    return f"{value:%H:%M}"


def format_event_time(event: CalendarEvent) -> str:
    """Format an event's time range as ``HH:MM - HH:MM``, or ``All day``."""
    if event.all_day:
        return "All day"
    if event.start_time is None:
        return ""
    if event.end_time is None:
        return _local_time(event.start_time)
    return f"{_local_time(event.start_time)} - {_local_time(event.end_time)}"


class _Sidebar:
    """Error bookkeeping shared by both sidebars."""

    load_error_message = "Failed to load"

    def __init__(self, on_reauth: Callable[[], None] | None = None):
        self.on_reauth = on_reauth
        self.error: str | None = None
        self.loaded = False

    def _fail(self, action: str, exc: Exception, fallback: str | None = None) -> None:
        if isinstance(exc, ReauthRequiredError):
            logger.warning("%s needs re-authentication: %s", action, exc)
            self.error = REAUTH_MESSAGE
            if self.on_reauth is not None:
                self.on_reauth()
            return

        logger.warning("%s failed: %s", action, exc)
        if isinstance(exc, APIError) and exc.errors:
            self.error = "; ".join(exc.errors)
        else:
            self.error = fallback or self.load_error_message


class TaskSidebar(_Sidebar):
    """Incomplete Google Tasks, any of which can label the next session."""

    load_error_message = "Failed to load tasks"

    def __init__(
        self,
        api: TasksAPI,
        *,
        engine=None,
        on_reauth: Callable[[], None] | None = None,
    ):
        super().__init__(on_reauth)
        self.api = api
        self.engine = engine
        self.tasks: list[Task] = []

    async def refresh(self) -> bool:
        try:
            tasks = await self.api.list_tasks()
        except (APIError, httpx.HTTPError, ValidationError) as e:
            self._fail("Loading tasks", e)
            return False

        self.tasks = tasks
        self.error = None
        self.loaded = True
        logger.debug("Loaded %d tasks", len(tasks))
        return True

    async def complete(self, task_id: str) -> bool:
        """Mark a task done on the server and drop it from the list."""
        try:
            await self.api.complete_task(task_id)
        except (APIError, httpx.HTTPError) as e:
            self._fail("Completing task", e, "Failed to complete task")
            return False

        self.tasks = [t for t in self.tasks if t.id != task_id]
        self.error = None
        logger.info("Task %s completed", task_id)
        return True

    def select_for_session(self, task: Task) -> bool:
        """Use the task's title as the next session's description."""
        if self.engine is None:
            return False
        return self.engine.set_description(task.title)

    @property
    def empty_message(self) -> str | None:
        if self.error or self.tasks or not self.loaded:
            return None
        return NO_TASKS_MESSAGE


class CalendarSidebar(_Sidebar):
    """Today's events from the primary Google Calendar."""

    load_error_message = "Failed to load events"

    def __init__(self, api: CalendarAPI, *, on_reauth: Callable[[], None] | None = None):
        super().__init__(on_reauth)
        self.api = api
        self.events: list[CalendarEvent] = []

    async def refresh(self) -> bool:
        try:
            events = await self.api.todays_events()
        except (APIError, httpx.HTTPError, ValidationError) as e:
            self._fail("Loading calendar events", e)
            return False

        self.events = events
        self.error = None
        self.loaded = True
        logger.debug("Loaded %d calendar events", len(events))
        return True

    @property
    def empty_message(self) -> str | None:
        if self.error or self.events or not self.loaded:
            return None
        return NO_EVENTS_MESSAGE

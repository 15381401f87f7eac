"""Tests for the Google Tasks and Calendar sidebars."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from pomodoro_cli.models.core import CalendarEvent, Task
from pomodoro_cli.services.api.errors import APIError, ReauthRequiredError
from pomodoro_cli.services.sidebars import (
    NO_EVENTS_MESSAGE,
    NO_TASKS_MESSAGE,
    REAUTH_MESSAGE,
    CalendarSidebar,
    TaskSidebar,
    format_due,
    format_event_time,
)


@pytest.fixture
def tasks_api():
    api = MagicMock()
    api.list_tasks = AsyncMock(
        return_value=[Task(id="a", title="Write report"), Task(id="b", title="Call Sam")]
    )
    api.complete_task = AsyncMock()
    return api


@pytest.fixture
def calendar_api():
    api = MagicMock()
    api.todays_events = AsyncMock(return_value=[])
    return api


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestFormatting:
    def test_due_date(self):
        assert format_due(datetime(2026, 3, 5, tzinfo=timezone.utc)) == "Mar 5, 2026"
        assert format_due(None) == ""

    def test_all_day_event(self):
        assert format_event_time(CalendarEvent(id="1", all_day=True)) == "All day"

    def test_timed_event(self):
        event = CalendarEvent(
            id="1",
            start_time=datetime(2026, 3, 10, 9, 5),
            end_time=datetime(2026, 3, 10, 10, 30),
        )

        assert format_event_time(event) == "09:05 - 10:30"

    def test_event_without_times(self):
        assert format_event_time(CalendarEvent(id="1")) == ""


# ---------------------------------------------------------------------------
# TaskSidebar
# ---------------------------------------------------------------------------


class TestTaskSidebar:
    @pytest.mark.asyncio
    async def test_refresh(self, tasks_api):
        sidebar = TaskSidebar(tasks_api)

        assert await sidebar.refresh() is True

        assert [t.id for t in sidebar.tasks] == ["a", "b"]
        assert sidebar.error is None
        assert sidebar.empty_message is None

    @pytest.mark.asyncio
    async def test_empty_list_message(self, tasks_api):
        tasks_api.list_tasks.return_value = []
        sidebar = TaskSidebar(tasks_api)

        await sidebar.refresh()

        assert sidebar.empty_message == NO_TASKS_MESSAGE

    @pytest.mark.asyncio
    async def test_network_failure_is_inline(self, tasks_api):
        tasks_api.list_tasks.side_effect = httpx.ConnectError("offline")
        on_reauth = MagicMock()
        sidebar = TaskSidebar(tasks_api, on_reauth=on_reauth)

        assert await sidebar.refresh() is False

        assert sidebar.error == "Failed to load tasks"
        assert sidebar.empty_message is None
        on_reauth.assert_not_called()

    @pytest.mark.asyncio
    async def test_server_error_message_shown(self, tasks_api):
        tasks_api.list_tasks.side_effect = APIError(
            "No task list selected", errors=["No task list selected"]
        )
        sidebar = TaskSidebar(tasks_api)

        await sidebar.refresh()

        assert sidebar.error == "No task list selected"

    @pytest.mark.asyncio
    async def test_reauth_invokes_callback(self, tasks_api):
        tasks_api.list_tasks.side_effect = ReauthRequiredError("expired")
        on_reauth = MagicMock()
        sidebar = TaskSidebar(tasks_api, on_reauth=on_reauth)

        assert await sidebar.refresh() is False

        on_reauth.assert_called_once_with()
        assert sidebar.error == REAUTH_MESSAGE

    @pytest.mark.asyncio
    async def test_complete_removes_task(self, tasks_api):
        sidebar = TaskSidebar(tasks_api)
        await sidebar.refresh()

        assert await sidebar.complete("a") is True

        tasks_api.complete_task.assert_awaited_once_with("a")
        assert [t.id for t in sidebar.tasks] == ["b"]

    @pytest.mark.asyncio
    async def test_complete_failure_keeps_task(self, tasks_api):
        tasks_api.complete_task.side_effect = APIError("Task not found", status_code=404)
        sidebar = TaskSidebar(tasks_api)
        await sidebar.refresh()

        assert await sidebar.complete("a") is False

        assert len(sidebar.tasks) == 2
        assert sidebar.error == "Failed to complete task"

    def test_select_for_session_sets_description(self, tasks_api):
        engine = MagicMock()
        engine.set_description.return_value = True
        sidebar = TaskSidebar(tasks_api, engine=engine)

        assert sidebar.select_for_session(Task(id="a", title="Write report")) is True

        engine.set_description.assert_called_once_with("Write report")

    def test_select_without_engine(self, tasks_api):
        assert TaskSidebar(tasks_api).select_for_session(Task(id="a", title="x")) is False


# ---------------------------------------------------------------------------
# CalendarSidebar
# ---------------------------------------------------------------------------


class TestCalendarSidebar:
    @pytest.mark.asyncio
    async def test_empty_day(self, calendar_api):
        sidebar = CalendarSidebar(calendar_api)

        assert await sidebar.refresh() is True

        assert sidebar.empty_message == NO_EVENTS_MESSAGE

    @pytest.mark.asyncio
    async def test_events_loaded(self, calendar_api):
        calendar_api.todays_events.return_value = [CalendarEvent(id="e", title="Standup")]
        sidebar = CalendarSidebar(calendar_api)

        await sidebar.refresh()

        assert sidebar.events[0].title == "Standup"
        assert sidebar.empty_message is None

    @pytest.mark.asyncio
    async def test_reauth(self, calendar_api):
        calendar_api.todays_events.side_effect = ReauthRequiredError("expired")
        on_reauth = MagicMock()
        sidebar = CalendarSidebar(calendar_api, on_reauth=on_reauth)

        await sidebar.refresh()

        on_reauth.assert_called_once_with()
        assert sidebar.error == REAUTH_MESSAGE

    @pytest.mark.asyncio
    async def test_failure(self, calendar_api):
        calendar_api.todays_events.side_effect = httpx.ReadTimeout("slow")
        sidebar = CalendarSidebar(calendar_api)

        await sidebar.refresh()

        assert sidebar.error == "Failed to load events"

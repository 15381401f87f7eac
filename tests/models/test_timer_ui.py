"""Tests for the full-screen timer display: key bindings and rendering."""

from __future__ import annotations

import io
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from pomodoro_cli.models.core import SessionDeleteResult, SessionSummary, Task, TodaySummary
from pomodoro_cli.services.api.errors import APIError
from pomodoro_cli.models.timer.ui import TimerDisplay, next_break_option
from pomodoro_cli.services.sidebars import CalendarSidebar, TaskSidebar


def make_console() -> Console:
    return Console(file=io.StringIO(), width=100, height=30, color_system=None)


def render(display: TimerDisplay) -> str:
    console = display.console
    console.print(display.create_layout())
    return console.file.getvalue()


def task_sidebar(engine) -> TaskSidebar:
    api = MagicMock()
    api.complete_task = AsyncMock()
    sidebar = TaskSidebar(api, engine=engine)
    sidebar.tasks = [Task(id="a", title="Write report"), Task(id="b", title="Call Sam")]
    return sidebar


async def load_sessions(engine, sessions_store):
    sessions_store.today.return_value = TodaySummary(
        today_count=2,
        today_date=date(2026, 3, 10),
        sessions=[
            SessionSummary(id=7, description="Draft report"),
            SessionSummary(id=8, description="Inbox"),
        ],
    )
    await engine.load_today()


class FakeKeyboard:
    def __init__(self, keys):
        self.keys = list(keys)
        self.stopped = False

    def get_key(self):
        return self.keys.pop(0) if self.keys else None

    def stop(self):
        self.stopped = True


class TestNextBreakOption:
    @pytest.mark.parametrize(
        "current,expected",
        [(300, 10), (600, 15), (420, 10), (1800, 5), (3600, 5)],
    )
    def test_cycles_upward_and_wraps(self, current, expected):
        assert next_break_option(current, [5, 10, 15, 30]) == expected

    def test_unsorted_options(self):
        assert next_break_option(300, [30, 5, 10, 10]) == 10


class TestKeys:
    def test_quit(self, make_engine):
        display = TimerDisplay(make_engine(), console=make_console())

        assert display.handle_key("q") is False

    def test_start_and_cancel(self, make_engine):
        engine = make_engine()
        display = TimerDisplay(engine, console=make_console())

        assert display.handle_key("s") is True
        assert engine.phase == "focusing"
        assert display.snapshot.phase == "focusing"

        display.handle_key("x")
        assert engine.phase == "ready"

    def test_debug_keys_ignored_without_debug(self, make_engine):
        engine = make_engine()
        display = TimerDisplay(engine, console=make_console())
        display.handle_key("s")

        display.handle_key("D")

        assert engine.phase == "focusing"

    def test_unbound_key(self, make_engine):
        display = TimerDisplay(make_engine(), console=make_console())

        assert display.handle_key("z") is True

    @pytest.mark.asyncio
    async def test_tag_key_cycles_through_tags(self, make_engine, sessions_store):
        sessions_store.today.return_value = TodaySummary(
            today_count=0,
            today_date=date(2026, 3, 10),
            available_tags=["Reading", "Deep work"],
        )
        engine = make_engine()
        await engine.load_today()
        display = TimerDisplay(engine, console=make_console())

        display.handle_key("t")
        assert engine.snapshot().selected_tag == "Deep work"
        display.handle_key("t")
        assert engine.snapshot().selected_tag == "Reading"
        display.handle_key("t")
        assert engine.snapshot().selected_tag is None

    def test_digit_uses_task_title(self, make_engine):
        engine = make_engine()
        sidebar = TaskSidebar(MagicMock(), engine=engine)
        sidebar.tasks = [Task(id="a", title="Write report"), Task(id="b", title="Call Sam")]
        display = TimerDisplay(engine, console=make_console(), task_sidebar=sidebar)

        display.handle_key("2")
        assert engine.snapshot().description == "Call Sam"

        display.handle_key("7")
        assert engine.snapshot().description == "Call Sam"

    @pytest.mark.asyncio
    async def test_break_keys(self, make_engine, scheduler):
        engine = make_engine(focus_duration=2, debug=True)
        display = TimerDisplay(engine, console=make_console())
        display.handle_key("s")
        display.handle_key("D")
        await engine.wait_until_settled()
        assert engine.phase == "on_break"
        assert display.message.startswith("Pomodoro complete")

        display.handle_key("b")
        assert engine.snapshot().current_break_duration_seconds == 600

        display.handle_key("e")
        assert engine.transitioning == "ending_break"
        scheduler.advance(1.5)
        assert engine.phase == "ready"


class TestPendingActions:
    @pytest.mark.asyncio
    async def test_complete_task_by_number(self, make_engine):
        engine = make_engine()
        sidebar = task_sidebar(engine)
        display = TimerDisplay(engine, console=make_console(), task_sidebar=sidebar)

        display.handle_key("c")
        assert display.mode == "complete_task"
        display.handle_key("2")
        await display.run_pending()

        sidebar.api.complete_task.assert_awaited_once_with("b")
        assert [t.id for t in sidebar.tasks] == ["a"]
        assert display.message == "Completed: Call Sam"
        assert display.mode is None
        assert engine.snapshot().description is None

    @pytest.mark.asyncio
    async def test_failed_completion_keeps_task(self, make_engine):
        engine = make_engine()
        sidebar = task_sidebar(engine)
        sidebar.api.complete_task.side_effect = APIError("boom", status_code=500)
        display = TimerDisplay(engine, console=make_console(), task_sidebar=sidebar)

        display.handle_key("c")
        display.handle_key("1")
        await display.run_pending()

        assert len(sidebar.tasks) == 2
        assert sidebar.error == "Failed to complete task"

    @pytest.mark.asyncio
    async def test_other_key_cancels_choice(self, make_engine):
        engine = make_engine()
        sidebar = task_sidebar(engine)
        display = TimerDisplay(engine, console=make_console(), task_sidebar=sidebar)

        display.handle_key("c")
        display.handle_key("s")
        await display.run_pending()

        assert display.mode is None
        assert engine.phase == "ready"
        sidebar.api.complete_task.assert_not_called()

    def test_complete_needs_tasks(self, make_engine):
        display = TimerDisplay(make_engine(), console=make_console())

        display.handle_key("c")

        assert display.mode is None

    @pytest.mark.asyncio
    async def test_delete_session_by_number(self, make_engine, sessions_store):
        engine = make_engine()
        await load_sessions(engine, sessions_store)
        sessions_store.delete_session.return_value = SessionDeleteResult(today_count=1)
        display = TimerDisplay(engine, console=make_console())

        display.handle_key("d")
        display.handle_key("1")
        await display.run_pending()

        sessions_store.delete_session.assert_awaited_once_with(7)
        snapshot = engine.snapshot()
        assert [s.id for s in snapshot.today_sessions] == [8]
        assert snapshot.completed_today_count == 1
        assert display.message == "Session deleted"

    @pytest.mark.asyncio
    async def test_failed_delete_shows_error(self, make_engine, sessions_store):
        engine = make_engine()
        await load_sessions(engine, sessions_store)
        sessions_store.delete_session.side_effect = APIError(
            "Not found", errors=["Session not found"], status_code=404
        )
        display = TimerDisplay(engine, console=make_console())

        display.handle_key("d")
        display.handle_key("2")
        await display.run_pending()

        assert display.message == "Session not found"
        assert engine.snapshot().completed_today_count == 2
        assert len(engine.snapshot().today_sessions) == 2

    @pytest.mark.asyncio
    async def test_number_past_the_list_does_nothing(self, make_engine, sessions_store):
        engine = make_engine()
        await load_sessions(engine, sessions_store)
        display = TimerDisplay(engine, console=make_console())

        display.handle_key("d")
        display.handle_key("5")
        await display.run_pending()

        sessions_store.delete_session.assert_not_called()


class TestRendering:
    def test_ready_screen(self, make_engine):
        display = TimerDisplay(make_engine(), console=make_console(), daily_target=4)

        output = render(display)

        assert "Ready to start" in output
        assert "25:00" in output
        assert "0/4" in output
        assert "'s' start" in output

    def test_focus_screen_with_label(self, make_engine, scheduler):
        engine = make_engine()
        engine.set_description("Draft")
        display = TimerDisplay(engine, console=make_console())
        display.handle_key("s")
        scheduler.advance(60)

        output = render(display)

        assert "Focus time" in output
        assert "24:00" in output
        assert "Draft" in output
        assert "'x' cancel" in output

    def test_sidebars(self, make_engine):
        engine = make_engine()
        tasks = TaskSidebar(MagicMock(), engine=engine)
        tasks.loaded = True
        calendar = CalendarSidebar(MagicMock())
        calendar.error = "Failed to load events"
        display = TimerDisplay(
            engine,
            console=make_console(),
            task_sidebar=tasks,
            calendar_sidebar=calendar,
        )

        output = render(display)

        assert "No incomplete tasks" in output
        assert "Failed to load events" in output

    @pytest.mark.asyncio
    async def test_todays_sessions_listed(self, make_engine, sessions_store):
        engine = make_engine()
        await load_sessions(engine, sessions_store)
        display = TimerDisplay(engine, console=make_console())

        output = render(display)

        assert "1. Draft report" in output
        assert "2. Inbox" in output
        assert "'d' delete session" in output


class TestRun:
    @pytest.mark.asyncio
    async def test_quits_on_q(self, make_engine):
        engine = make_engine()
        display = TimerDisplay(engine, console=make_console())
        keyboard = FakeKeyboard(["s", "q"])

        result = await display.run(keyboard=keyboard, refresh_interval=0)

        assert result == "stopped"
        assert keyboard.stopped
        assert engine.phase == "focusing"

    @pytest.mark.asyncio
    async def test_loop_awaits_task_completion(self, make_engine):
        engine = make_engine()
        sidebar = task_sidebar(engine)
        display = TimerDisplay(engine, console=make_console(), task_sidebar=sidebar)
        keyboard = FakeKeyboard(["c", "1", "q"])

        result = await display.run(keyboard=keyboard, refresh_interval=0)

        assert result == "stopped"
        sidebar.api.complete_task.assert_awaited_once_with("a")
        assert [t.id for t in sidebar.tasks] == ["b"]

"""Full-screen timer UI for the interactive ``timer start`` command."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Sequence

import httpx

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pomodoro_cli.services.api.errors import APIError
from pomodoro_cli.services.sidebars import (
    CalendarSidebar,
    TaskSidebar,
    format_due,
    format_event_time,
)
from pomodoro_cli.utils.logger import get_module_logger
from pomodoro_cli.utils.ui.console import get_console

from .engine import TimerEngine
from .events import TimerEvent
from .projection import (
    daily_progress,
    format_countdown,
    progress_fraction,
    progress_segments,
    status_text,
    tag_distribution,
)
from .state import PHASE_FOCUSING, PHASE_ON_BREAK, PHASE_READY, TimerSnapshot
from .tags import TagPicker

logger = get_module_logger("ui")

BAR_WIDTH = 40
MAX_TASK_SHORTCUTS = 9
MAX_SESSION_SHORTCUTS = 9

MODE_COMPLETE_TASK = "complete_task"
MODE_DELETE_SESSION = "delete_session"


def next_break_option(current_seconds: int, options: Sequence[int]) -> int:
    """The break length (minutes) after the current one, wrapping around."""
    ordered = sorted(set(options))
    current = current_seconds // 60
    for minutes in ordered:
        if minutes > current:
            return minutes
    return ordered[0]


class TimerDisplay:
    """Renders engine events and turns keypresses into engine commands."""

    def __init__(
        self,
        engine: TimerEngine,
        *,
        console: Console | None = None,
        daily_target: int | None = None,
        break_options: Sequence[int] = (5, 10, 15, 30),
        task_sidebar: TaskSidebar | None = None,
        calendar_sidebar: CalendarSidebar | None = None,
    ):
        self.engine = engine
        self.console = console or get_console()
        self.daily_target = daily_target
        self.break_options = list(break_options)
        self.task_sidebar = task_sidebar
        self.calendar_sidebar = calendar_sidebar

        self.snapshot = engine.snapshot()
        self.picker = TagPicker(list(self.snapshot.available_tags))
        self.message: str | None = None
        self.dirty = True
        self.mode: str | None = None
        self._pending: list[Coroutine] = []
        self._unsubscribe = engine.subscribe(self._on_event)

    def close(self) -> None:
        for action in self._pending:
            action.close()
        self._pending.clear()
        self._unsubscribe()

    def _on_event(self, event: TimerEvent) -> None:
        self.snapshot = event.snapshot
        self.dirty = True

        if event.kind in ("today_loaded", "session_saved", "tags_changed"):
            self.picker.merge(list(event.snapshot.available_tags))
            self.picker.selected = event.snapshot.selected_tag
        if event.kind == "session_saved":
            self.message = "Session saved"
        elif event.kind == "session_save_failed":
            self.message = "Session could not be saved; counted locally"
        elif event.kind == "break_started":
            self.message = f"Pomodoro complete. {event.payload['plan'].minutes} minute break."
        elif event.kind == "break_completed":
            self.message = "Break over. Ready to focus again."
        elif event.kind == "session_deleted":
            self.message = "Session deleted"
        elif event.kind == "started":
            self.message = None

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Apply a keypress. Returns False when the user asked to quit."""
        engine = self.engine
        phase = self.snapshot.phase

        if self.mode is not None:
            self._finish_mode(key)
            return True

        if key == "q":
            return False
        if key == "s":
            engine.start()
        elif key == "x":
            engine.cancel()
        elif key == "e":
            engine.end_break()
        elif key == "b" and phase == PHASE_ON_BREAK:
            minutes = next_break_option(
                self.snapshot.current_break_duration_seconds, self.break_options
            )
            engine.retarget_break(minutes)
        elif key == "t" and phase == PHASE_READY:
            self._cycle_tag()
        elif key == "c" and self.task_sidebar is not None and self.task_sidebar.tasks:
            self._enter_mode(MODE_COMPLETE_TASK, "Complete which task? (1-9, any other key cancels)")
        elif key == "d" and self.snapshot.today_sessions:
            self._enter_mode(MODE_DELETE_SESSION, "Delete which session? (1-9, any other key cancels)")
        elif key.isdigit() and key != "0":
            self._select_task(int(key) - 1)
        elif key == "D":
            engine.force_complete()
        elif key == "B":
            engine.force_end_break()
        else:
            logger.debug("Unbound key %r", key)
        return True

    def _cycle_tag(self) -> None:
        tags = self.picker.tags
        if not tags:
            return
        current = self.picker.selected
        if current is None:
            self.picker.toggle(tags[0])
        else:
            keys = [t.casefold() for t in tags]
            index = keys.index(current.casefold()) if current.casefold() in keys else -1
            if index + 1 < len(tags):
                self.picker.toggle(tags[index + 1])
            else:
                self.picker.clear()
        self.engine.select_tag(self.picker.selected)

    def _select_task(self, index: int) -> None:
        sidebar = self.task_sidebar
        if sidebar is None or index >= len(sidebar.tasks):
            return
        if sidebar.select_for_session(sidebar.tasks[index]):
            self.dirty = True

    def _enter_mode(self, mode: str, prompt: str) -> None:
        self.mode = mode
        self.message = prompt
        self.dirty = True

    def _finish_mode(self, key: str) -> None:
        mode, self.mode = self.mode, None
        self.message = None
        self.dirty = True
        if not key.isdigit() or key == "0":
            return

        index = int(key) - 1
        if mode == MODE_COMPLETE_TASK:
            tasks = self.task_sidebar.tasks[:MAX_TASK_SHORTCUTS]
            if index < len(tasks):
                self._pending.append(self._complete_task(tasks[index]))
        elif mode == MODE_DELETE_SESSION:
            sessions = self.snapshot.today_sessions[:MAX_SESSION_SHORTCUTS]
            if index < len(sessions):
                self._pending.append(self._delete_session(sessions[index].id))

    async def _complete_task(self, task) -> None:
        if await self.task_sidebar.complete(task.id):
            self.message = f"Completed: {task.title or '(untitled)'}"
        self.dirty = True

    async def _delete_session(self, session_id) -> None:
        try:
            await self.engine.delete_session(session_id)
        except (APIError, httpx.HTTPError) as e:
            logger.warning("Deleting session %s failed: %s", session_id, e)
            self.message = "; ".join(getattr(e, "errors", None) or []) or "Failed to delete session"
            self.dirty = True

    async def run_pending(self) -> None:
        """Await the server calls queued by keypresses, in order."""
        while self._pending:
            await self._pending.pop(0)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def create_layout(self) -> Layout:
        snapshot = self.snapshot
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="main"),
            Layout(name="footer", size=3),
        )

        if snapshot.phase == PHASE_FOCUSING:
            color = "red"
        elif snapshot.phase == PHASE_ON_BREAK:
            color = "green"
        else:
            color = "cyan"
        header = Text(f"🍅  {status_text(snapshot)}", style=f"bold {color}", justify="center")
        layout["header"].update(Align.center(header, vertical="middle"))

        body = Align.center(self._create_body(snapshot, color), vertical="middle")
        if self.task_sidebar is not None or self.calendar_sidebar is not None:
            layout["main"].split_row(
                Layout(body, name="body", ratio=2),
                Layout(self._create_sidebar(), name="side", ratio=1),
            )
        else:
            layout["main"].update(body)

        layout["footer"].update(
            Align.center(self._create_footer(snapshot), vertical="middle")
        )
        return layout

    def _create_body(self, snapshot: TimerSnapshot, color: str) -> Group:
        components = []

        if snapshot.description or snapshot.selected_tag:
            label = Text(justify="center")
            if snapshot.description:
                label.append(snapshot.description[:50], style="bold white")
            if snapshot.selected_tag:
                label.append(f"  #{snapshot.selected_tag}", style="magenta")
            components.append(label)
            components.append(Text(""))

        components.append(
            Text(format_countdown(snapshot.seconds_remaining), style=f"bold {color}", justify="center")
        )
        components.append(Text(""))

        fraction = progress_fraction(snapshot)
        filled = int(BAR_WIDTH * fraction)
        bar = Text(justify="center")
        bar.append("▓" * filled + "░" * (BAR_WIDTH - filled), style=color)
        bar.append(f"  {int(fraction * 100)}%", style="dim")
        components.append(bar)
        components.append(Text(""))

        segments = progress_segments(snapshot.completed_today_count, self.daily_target)
        today = Text(justify="center")
        today.append("Today  ", style="bold")
        today.append("".join("●" if done else "○" for done in segments), style="red")
        today.append(
            f"  {snapshot.completed_today_count}/{len(segments)}"
            f"  ({int(daily_progress(snapshot.completed_today_count, self.daily_target) * 100)}%)",
            style="dim",
        )
        components.append(today)

        slices = tag_distribution(snapshot.tag_statistics)
        if slices:
            components.append(Text(""))
            legend = Table.grid(padding=(0, 2))
            for tag_slice in slices:
                legend.add_row(
                    Text("■", style=tag_slice.color),
                    tag_slice.tag,
                    str(tag_slice.count),
                    Text(tag_slice.percent_label, style="dim"),
                )
            components.append(Align.center(legend))

        if snapshot.today_sessions:
            components.append(Text(""))
            components.append(Text("Completed today", style="bold", justify="center"))
            listing = Table.grid(padding=(0, 1))
            for i, session in enumerate(snapshot.today_sessions[:MAX_SESSION_SHORTCUTS], start=1):
                line = Text(f"{i}. ", style="dim")
                line.append(session.description or "(no description)")
                if session.started_at:
                    line.append(f"  {session.started_at}", style="dim")
                listing.add_row(line)
            components.append(Align.center(listing))

        if self.message:
            components.append(Text(""))
            components.append(Text(self.message, style="yellow", justify="center"))

        return Group(*components)

    def _create_sidebar(self) -> Group:
        panels = []

        if self.task_sidebar is not None:
            sidebar = self.task_sidebar
            rows = Table.grid(padding=(0, 1))
            if sidebar.error:
                rows.add_row(Text(sidebar.error, style="red"))
            elif sidebar.empty_message:
                rows.add_row(Text(sidebar.empty_message, style="dim"))
            for i, task in enumerate(sidebar.tasks[:MAX_TASK_SHORTCUTS], start=1):
                line = Text(f"{i}. ", style="dim")
                line.append(task.title or "(untitled)")
                if task.due:
                    line.append(f"  {format_due(task.due)}", style="dim")
                rows.add_row(line)
            panels.append(Panel(rows, title="Tasks", border_style="blue"))

        if self.calendar_sidebar is not None:
            sidebar = self.calendar_sidebar
            rows = Table.grid(padding=(0, 1))
            if sidebar.error:
                rows.add_row(Text(sidebar.error, style="red"))
            elif sidebar.empty_message:
                rows.add_row(Text(sidebar.empty_message, style="dim"))
            for event in sidebar.events:
                rows.add_row(
                    Text(format_event_time(event), style="cyan"),
                    event.title or "(no title)",
                )
            panels.append(Panel(rows, title="Today", border_style="blue"))

        return Group(*panels)

    def _create_footer(self, snapshot: TimerSnapshot) -> Text:
        if self.mode is not None:
            return Text("'1-9' choose  •  any other key cancels", style="dim", justify="center")
        debug = self.engine.debug
        if snapshot.phase == PHASE_FOCUSING:
            hints = ["'x' cancel"]
            if debug:
                hints.append("'D' complete now")
        elif snapshot.phase == PHASE_ON_BREAK:
            minutes = snapshot.current_break_duration_seconds // 60
            hints = ["'e' end break", f"'b' break length ({minutes} min)"]
            if debug:
                hints.append("'B' end now")
        else:
            hints = ["'s' start", "'t' tag"]
            if self.task_sidebar is not None and self.task_sidebar.tasks:
                hints.append("'1-9' use task")
        if self.task_sidebar is not None and self.task_sidebar.tasks:
            hints.append("'c' complete task")
        if snapshot.today_sessions:
            hints.append("'d' delete session")
        hints.append("'q' quit")
        return Text("  •  ".join(hints), style="dim", justify="center")

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(self, keyboard=None, refresh_interval: float = 0.1) -> str:
        """Run the live display until the user quits.

        The engine's own tick keeps time; this loop only polls the keyboard
        and redraws after events.
        """
        from .keyboard import KeyboardHandler

        keyboard = keyboard or KeyboardHandler()
        try:
            with Live(
                self.create_layout(),
                console=self.console,
                refresh_per_second=4,
                screen=True,
            ) as live:
                while True:
                    key = keyboard.get_key()
                    if key is not None and not self.handle_key(key):
                        return "stopped"
                    await self.run_pending()

                    if self.dirty:
                        self.dirty = False
                        live.update(self.create_layout())
                    await asyncio.sleep(refresh_interval)
        finally:
            keyboard.stop()
            self.close()

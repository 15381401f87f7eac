"""The timer state engine.

One ``TimerEngine`` drives one focus/break cycle at a time:

    ready -> focusing -> on_break -> ready

All mutations happen synchronously inside a tick callback or a command
method. Saving a completed session is the only await; while it runs the
engine is marked as transitioning so that competing commands are ignored.
"""

from __future__ import annotations

import asyncio
import os
from datetime import date
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from pomodoro_cli.models.config_models import AppConfig, TimerConfig
from pomodoro_cli.models.core import (
    SessionCreate,
    SessionDeleteResult,
    SessionSaveResult,
    TagCreateResult,
    TodaySummary,
)
from pomodoro_cli.services.api.errors import APIError, ReauthRequiredError
from pomodoro_cli.utils.logger import get_module_logger

from .breaks import BreakPlan, BreakPolicy, FlatBreakPolicy, break_policy_from_config
from .clock import AsyncioScheduler, Clock, Scheduler, SystemClock, TimerHandle
from .events import EventKind, Listener, TimerEvent
from .state import (
    BREAK_END_DELAY,
    FOCUS_DURATION,
    PHASE_FOCUSING,
    PHASE_ON_BREAK,
    PHASE_READY,
    Phase,
    TimerSnapshot,
    TimerState,
    Transition,
)
from .tags import insert_tag

logger = get_module_logger("engine")

DEBUG_ENV_VAR = "POMODORO_DEBUG"
DEFAULT_SAVE_TIMEOUT = 10.0


class SessionStore(Protocol):
    """The server calls the engine makes for sessions."""

    async def create_session(self, session: SessionCreate) -> SessionSaveResult: ...

    async def delete_session(self, session_id: int | str) -> SessionDeleteResult: ...

    async def today(self) -> TodaySummary: ...


class TagStore(Protocol):
    async def create_tag(self, name: str) -> TagCreateResult: ...


class Notifier(Protocol):
    """Shows phase-completion notifications to the user."""

    def request_permission(self) -> bool: ...

    def notify(self, title: str, body: str) -> None: ...


def debug_enabled(timer_config: TimerConfig) -> bool:
    """Whether the force-complete shortcuts are available."""
    return timer_config.debug_shortcuts or os.environ.get(DEBUG_ENV_VAR) == "1"


class TimerEngine:
    """Pomodoro state machine with server persistence.

    Args:
        sessions: Where completed sessions are saved
        tags: Where new tags are created; ``create_tag`` is unavailable without it
        notifier: Receives "focus complete" and "break over" notifications
        clock: Source of wall-clock time
        scheduler: Installs the one-second tick and the break-end delay
        break_policy: Decides the break length after each session
        focus_duration: Focus phase length in seconds
        transition_delay: Seconds between "break over" and the reset to ready
        save_timeout: Upper bound for the session save, in seconds
        debug: Enables ``force_complete`` and ``force_end_break``
    """

    def __init__(
        self,
        sessions: SessionStore,
        *,
        tags: TagStore | None = None,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
        break_policy: BreakPolicy | None = None,
        focus_duration: int = FOCUS_DURATION,
        transition_delay: float = BREAK_END_DELAY,
        save_timeout: float = DEFAULT_SAVE_TIMEOUT,
        debug: bool = False,
        completed_today_count: int = 0,
        current_date: date | None = None,
    ):
        if focus_duration < 0:
            raise ValueError("focus_duration cannot be negative")

        self._sessions = sessions
        self._tags = tags
        self._notifier = notifier
        self._clock = clock or SystemClock()
        self._scheduler = scheduler or AsyncioScheduler()
        self._break_policy = break_policy or FlatBreakPolicy()
        self._focus_duration = focus_duration
        self._transition_delay = transition_delay
        self._save_timeout = save_timeout
        self.debug = debug

        self._state = TimerState(
            seconds_remaining=focus_duration,
            completed_today_count=completed_today_count,
            current_date=current_date,
        )
        self._transition: Transition | None = None
        self._tick_handle: TimerHandle | None = None
        self._reset_handle: TimerHandle | None = None
        self._completion_task: asyncio.Task | None = None
        self._permission_requested = False
        self._listeners: list[Listener] = []

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        sessions: SessionStore,
        **kwargs: Any,
    ) -> "TimerEngine":
        """Build an engine with the timings and policy from ``config.timer``."""
        timer = config.timer
        kwargs.setdefault("break_policy", break_policy_from_config(timer))
        kwargs.setdefault("debug", debug_enabled(timer))
        return cls(
            sessions,
            focus_duration=timer.focus_minutes * 60,
            transition_delay=timer.transition_delay,
            save_timeout=timer.save_timeout,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def transitioning(self) -> Transition | None:
        return self._transition

    @property
    def focus_duration(self) -> int:
        return self._focus_duration

    def snapshot(self) -> TimerSnapshot:
        s = self._state
        return TimerSnapshot(
            phase=s.phase,
            seconds_remaining=s.seconds_remaining,
            focus_duration_seconds=self._focus_duration,
            current_break_duration_seconds=s.current_break_duration_seconds,
            completed_today_count=s.completed_today_count,
            current_date=s.current_date,
            focus_started_at=s.focus_started_at,
            break_started_at=s.break_started_at,
            selected_tag=s.selected_tag,
            description=s.description,
            transitioning=self._transition,
            available_tags=tuple(s.available_tags),
            tag_statistics=tuple(s.tag_statistics),
            today_sessions=tuple(s.today_sessions),
        )

    def subscribe(self, listener: Listener):
        """Register ``listener`` for every event; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: EventKind, **payload: Any) -> None:
        event = TimerEvent(kind=kind, snapshot=self.snapshot(), payload=payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener failed handling %s event", kind)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Begin a focus phase. Ignored unless the engine is idle."""
        if self._state.phase != PHASE_READY or self._transition is not None:
            logger.debug(
                "start ignored in phase %s (transition=%s)",
                self._state.phase,
                self._transition,
            )
            return False

        if not self._permission_requested:
            self._permission_requested = True
            self._request_notification_permission()

        self.check_date_rollover()

        s = self._state
        s.phase = PHASE_FOCUSING
        s.focus_started_at = self._clock.now()
        s.seconds_remaining = self._focus_duration

        logger.info("Focus started (%ds)", self._focus_duration)
        self._emit("started")
        if s.seconds_remaining == 0:
            self._begin_focus_completion()
        else:
            self._install_tick()
        return True

    def cancel(self) -> bool:
        """Abandon the running focus phase without saving it."""
        if self._state.phase != PHASE_FOCUSING or self._transition is not None:
            logger.debug("cancel ignored in phase %s", self._state.phase)
            return False

        self._cancel_tick()
        s = self._state
        s.phase = PHASE_READY
        s.focus_started_at = None
        s.seconds_remaining = self._focus_duration

        logger.info("Focus cancelled")
        self._emit("cancelled")
        return True

    def end_break(self) -> bool:
        """Finish the break early. A second call while the reset is pending is ignored."""
        if self._state.phase != PHASE_ON_BREAK or self._transition is not None:
            logger.debug(
                "end_break ignored in phase %s (transition=%s)",
                self._state.phase,
                self._transition,
            )
            return False

        self._finish_break()
        return True

    def retarget_break(self, minutes: int) -> bool:
        """Change the running break's length, keeping the time already spent."""
        if minutes < 0:
            raise ValueError("break length cannot be negative")
        s = self._state
        if s.phase != PHASE_ON_BREAK or self._transition is not None:
            logger.debug("retarget_break ignored in phase %s", s.phase)
            return False

        target = minutes * 60
        started = s.break_started_at or self._clock.now()
        elapsed = int((self._clock.now() - started).total_seconds())
        new_remaining = max(0, target - elapsed)

        s.current_break_duration_seconds = target
        s.seconds_remaining = new_remaining
        logger.info(
            "Break retargeted to %d min, %ds remaining", minutes, new_remaining
        )
        self._emit("break_retargeted", minutes=minutes)

        if new_remaining == 0:
            self._finish_break()
        return True

    def force_complete(self) -> bool:
        """Debug shortcut: complete the focus phase now."""
        if not self.debug:
            logger.debug("force_complete ignored: debug shortcuts disabled")
            return False
        if self._state.phase != PHASE_FOCUSING or self._transition is not None:
            return False

        self._cancel_tick()
        self._state.seconds_remaining = 0
        self._begin_focus_completion()
        return True

    def force_end_break(self) -> bool:
        """Debug shortcut: end the break now."""
        if not self.debug:
            logger.debug("force_end_break ignored: debug shortcuts disabled")
            return False
        return self.end_break()

    def set_description(self, description: str | None) -> bool:
        if self._state.phase != PHASE_READY:
            return False
        description = (description or "").strip()
        self._state.description = description or None
        self._emit("description_changed")
        return True

    def select_tag(self, tag: str | None) -> bool:
        if self._state.phase != PHASE_READY:
            return False
        self._state.selected_tag = tag
        self._emit("tags_changed")
        return True

    def check_date_rollover(self) -> bool:
        """Zero the count if the local date moved on since it was last set.

        Returns True when the count was reset.
        """
        s = self._state
        today = self._clock.today()
        if s.current_date is None:
            s.current_date = today
            return False
        if s.current_date == today:
            return False

        logger.info(
            "Date changed from %s to %s, resetting count of %d",
            s.current_date,
            today,
            s.completed_today_count,
        )
        s.completed_today_count = 0
        s.current_date = today
        self._emit("date_rolled_over")
        return True

    async def wait_until_settled(self) -> None:
        """Wait for an in-flight focus completion, if any, to finish."""
        task = self._completion_task
        if task is not None and not task.done():
            await task

    def close(self) -> None:
        """Release the tick and the pending break-end reset."""
        self._cancel_tick()
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        if self._completion_task is not None and not self._completion_task.done():
            self._completion_task.cancel()
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Server-backed operations
    # ------------------------------------------------------------------

    async def load_today(self) -> bool:
        """Prime the count, sessions and tags from the server.

        On failure the local defaults stay in place and False is returned.
        Re-authentication errors are raised to the caller.
        """
        try:
            summary = await self._sessions.today()
        except ReauthRequiredError:
            raise
        except (APIError, httpx.HTTPError, ValidationError) as e:
            logger.warning("Could not load today's sessions: %s", e)
            self.check_date_rollover()
            return False

        s = self._state
        s.completed_today_count = summary.today_count
        s.current_date = summary.today_date
        s.today_sessions = list(summary.sessions)
        s.available_tags = list(summary.available_tags)
        s.tag_statistics = list(summary.tag_statistics)
        # A server date from before midnight still counts as stale
        self.check_date_rollover()

        logger.info("Loaded %d sessions for %s", s.completed_today_count, s.current_date)
        self._emit("today_loaded")
        return True

    async def create_tag(self, name: str) -> list[str]:
        """Create a tag on the server and select it.

        Returns the server's validation errors; an empty list means success.
        Nothing changes locally when errors are returned.
        """
        if self._tags is None:
            raise RuntimeError("TimerEngine was built without a tag store")
        if self._state.phase != PHASE_READY:
            return ["Tags can only be changed while the timer is idle"]

        try:
            result = await self._tags.create_tag(name.strip())
        except ReauthRequiredError:
            raise
        except APIError as e:
            logger.info("Tag %r rejected: %s", name, e)
            return e.errors or [str(e)]
        except httpx.HTTPError as e:
            logger.warning("Tag %r could not be created: %s", name, e)
            return ["Failed to create tag"]

        s = self._state
        s.available_tags = insert_tag(s.available_tags, result.tag)
        s.selected_tag = result.tag
        logger.info("Tag %r %s", result.tag, "created" if result.is_new else "reused")
        self._emit("tags_changed")
        return []

    async def delete_session(self, session_id: int | str) -> SessionDeleteResult:
        """Delete a completed session and adopt the server's recount."""
        result = await self._sessions.delete_session(session_id)

        s = self._state
        s.completed_today_count = result.today_count
        s.tag_statistics = list(result.tag_statistics)
        s.today_sessions = [
            session for session in s.today_sessions if str(session.id) != str(session_id)
        ]
        logger.info("Session %s deleted, %d left today", session_id, result.today_count)
        self._emit("session_deleted", session_id=session_id)
        return result

    # ------------------------------------------------------------------
    # Tick and transitions
    # ------------------------------------------------------------------

    def _install_tick(self) -> None:
        self._cancel_tick()
        self._tick_handle = self._scheduler.call_every(1, self._on_tick)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _on_tick(self) -> None:
        s = self._state
        if s.seconds_remaining > 0:
            s.seconds_remaining -= 1
        self._emit("tick")

        if s.seconds_remaining == 0:
            self._cancel_tick()
            if s.phase == PHASE_FOCUSING:
                self._begin_focus_completion()
            elif s.phase == PHASE_ON_BREAK and self._transition is None:
                self._finish_break()

    def _begin_focus_completion(self) -> None:
        if self._transition is not None:
            return
        self._transition = "completing_focus"
        self._emit("focus_completed")
        self._completion_task = asyncio.get_running_loop().create_task(
            self._complete_focus()
        )

    async def _complete_focus(self) -> None:
        s = self._state
        completed_at = self._clock.now()
        started_at = s.focus_started_at or completed_at

        self.check_date_rollover()

        session = SessionCreate(
            description=s.description,
            tag=s.selected_tag,
            started_at=started_at,
            completed_at=completed_at,
        )
        try:
            result = await asyncio.wait_for(
                self._sessions.create_session(session), timeout=self._save_timeout
            )
        except Exception as e:
            s.completed_today_count += 1
            logger.warning(
                "Session save failed (%s: %s); counting locally, now %d",
                type(e).__name__,
                e,
                s.completed_today_count,
            )
            self._emit("session_save_failed", error=e)
        else:
            self._adopt_save_result(result)
            self._emit("session_saved", result=result)

        plan = self._break_policy.plan(s.completed_today_count)
        self._enter_break(plan)

    def _adopt_save_result(self, result: SessionSaveResult) -> None:
        s = self._state
        s.completed_today_count = result.today_count
        s.current_date = result.today_date
        s.available_tags = list(result.available_tags)
        s.tag_statistics = list(result.tag_statistics)
        if result.session is not None:
            s.today_sessions = [result.session, *s.today_sessions]
        logger.info("Session saved, %d completed today", result.today_count)

    def _enter_break(self, plan: BreakPlan) -> None:
        s = self._state
        s.phase = PHASE_ON_BREAK
        s.break_started_at = self._clock.now()
        s.current_break_duration_seconds = plan.duration_seconds
        s.seconds_remaining = plan.duration_seconds
        self._transition = None
        self._install_tick()

        logger.info("Break started (%s, %ds)", plan.kind, plan.duration_seconds)
        self._emit("break_started", plan=plan)

        if plan.kind == "long_break":
            body = f"{plan.minutes} minute long break."
        else:
            body = f"{plan.minutes} minute break."
        self._notify("Pomodoro complete", body)

    def _finish_break(self) -> None:
        self._cancel_tick()
        self._transition = "ending_break"
        logger.info("Break over")
        self._emit("break_completed")
        self._notify("Break over", "Ready to focus again.")
        self._reset_handle = self._scheduler.call_later(
            self._transition_delay, self._reset_to_ready
        )

    def _reset_to_ready(self) -> None:
        self._reset_handle = None
        s = self._state
        s.phase = PHASE_READY
        s.break_started_at = None
        s.focus_started_at = None
        s.seconds_remaining = self._focus_duration
        self._transition = None
        logger.debug("Reset to ready")
        self._emit("reset")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _request_notification_permission(self) -> None:
        if self._notifier is None:
            return
        try:
            granted = self._notifier.request_permission()
        except Exception:
            logger.exception("Notification permission request failed")
            return
        logger.debug("Notification permission %s", "granted" if granted else "denied")

    def _notify(self, title: str, body: str) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(title, body)
        except Exception:
            logger.exception("Notification %r failed", title)

    def __repr__(self) -> str:
        return (
            f"TimerEngine(phase={self._state.phase!r}, "
            f"remaining={self._state.seconds_remaining}, "
            f"count={self._state.completed_today_count})"
        )

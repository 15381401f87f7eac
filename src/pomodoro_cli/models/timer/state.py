"""Timer state held by the engine, and the snapshots it publishes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from pomodoro_cli.models.core import SessionSummary, TagStatistic

Phase = Literal["ready", "focusing", "on_break"]
Transition = Literal["completing_focus", "ending_break"]

PHASE_READY: Phase = "ready"
PHASE_FOCUSING: Phase = "focusing"
PHASE_ON_BREAK: Phase = "on_break"

FOCUS_DURATION = 25 * 60
SHORT_BREAK_DURATION = 5 * 60
BREAK_END_DELAY = 1.5
DEFAULT_DAILY_TARGET = 11


@dataclass
class TimerState:
    """Mutable state owned by exactly one ``TimerEngine``."""

    phase: Phase = PHASE_READY
    seconds_remaining: int = FOCUS_DURATION
    focus_started_at: datetime | None = None
    break_started_at: datetime | None = None
    current_break_duration_seconds: int = SHORT_BREAK_DURATION
    completed_today_count: int = 0
    current_date: date | None = None
    selected_tag: str | None = None
    description: str | None = None
    available_tags: list[str] = field(default_factory=list)
    tag_statistics: list[TagStatistic] = field(default_factory=list)
    today_sessions: list[SessionSummary] = field(default_factory=list)


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable copy of the engine state handed to listeners and renderers."""

    phase: Phase
    seconds_remaining: int
    focus_duration_seconds: int
    current_break_duration_seconds: int
    completed_today_count: int
    current_date: date | None
    focus_started_at: datetime | None
    break_started_at: datetime | None
    selected_tag: str | None
    description: str | None
    transitioning: Transition | None = None
    available_tags: tuple[str, ...] = ()
    tag_statistics: tuple[TagStatistic, ...] = ()
    today_sessions: tuple[SessionSummary, ...] = ()

    @property
    def is_running(self) -> bool:
        return self.phase != PHASE_READY

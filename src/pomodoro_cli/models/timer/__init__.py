"""Pomodoro timer engine, projections and terminal UI."""

from .breaks import BreakPlan, CyclicBreakPolicy, FlatBreakPolicy, break_policy_from_config
from .clock import AsyncioScheduler, Clock, Scheduler, SystemClock
from .engine import TimerEngine, debug_enabled
from .events import TimerEvent
from .state import FOCUS_DURATION, SHORT_BREAK_DURATION, TimerSnapshot, TimerState
from .tags import TagPicker

__all__ = [
    "AsyncioScheduler",
    "BreakPlan",
    "Clock",
    "CyclicBreakPolicy",
    "FOCUS_DURATION",
    "FlatBreakPolicy",
    "SHORT_BREAK_DURATION",
    "Scheduler",
    "SystemClock",
    "TagPicker",
    "TimerEngine",
    "TimerEvent",
    "TimerSnapshot",
    "TimerState",
    "break_policy_from_config",
    "debug_enabled",
]

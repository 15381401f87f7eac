"""Events published by the timer engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from .state import TimerSnapshot

EventKind = Literal[
    "started",
    "tick",
    "cancelled",
    "focus_completed",
    "session_saved",
    "session_save_failed",
    "break_started",
    "break_retargeted",
    "break_completed",
    "reset",
    "date_rolled_over",
    "today_loaded",
    "session_deleted",
    "tags_changed",
    "description_changed",
]


@dataclass(frozen=True)
class TimerEvent:
    """Something changed in the engine.

    Attributes:
        kind: What happened
        snapshot: Engine state right after the change
        payload: Extra detail for some kinds, e.g. the break plan or the save error
    """

    kind: EventKind
    snapshot: TimerSnapshot
    payload: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[TimerEvent], None]

"""Break length policies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol

from .state import SHORT_BREAK_DURATION

BreakKind = Literal["short_break", "long_break"]


@dataclass(frozen=True)
class BreakPlan:
    """The break to take after a completed focus phase."""

    duration_seconds: int
    kind: BreakKind = "short_break"

    @property
    def minutes(self) -> int:
        return self.duration_seconds // 60


class BreakPolicy(Protocol):
    def plan(self, completed_today: int) -> BreakPlan:
        """Return the break following the ``completed_today``-th session."""
        ...


@dataclass
class FlatBreakPolicy:
    """Every break has the same length; the user retargets it mid-break."""

    short_break_minutes: int = SHORT_BREAK_DURATION // 60

    def plan(self, completed_today: int) -> BreakPlan:
        return BreakPlan(self.short_break_minutes * 60)


@dataclass
class CyclicBreakPolicy:
    """Long break after every ``long_break_every``-th session of the day.

    Long break lengths rotate through ``long_break_minutes``: with the
    defaults the 3rd session earns 30 minutes, the 6th 60 and the 9th 30
    again, then the rotation restarts.
    """

    short_break_minutes: int = SHORT_BREAK_DURATION // 60
    long_break_every: int = 3
    long_break_minutes: list[int] = field(default_factory=lambda: [30, 60, 30])

    def is_long_break_due(self, completed_today: int) -> bool:
        return completed_today > 0 and completed_today % self.long_break_every == 0

    def plan(self, completed_today: int) -> BreakPlan:
        if not self.is_long_break_due(completed_today):
            return BreakPlan(self.short_break_minutes * 60)

        cycle_position = completed_today // self.long_break_every - 1
        minutes = self.long_break_minutes[cycle_position % len(self.long_break_minutes)]
        return BreakPlan(minutes * 60, kind="long_break")


def break_policy_from_config(timer_config) -> BreakPolicy:
    """Build the policy selected by ``timer.break_policy``."""
    if timer_config.break_policy == "cyclic":
        return CyclicBreakPolicy(
            short_break_minutes=timer_config.short_break_minutes,
            long_break_every=timer_config.long_break_every,
            long_break_minutes=list(timer_config.long_break_minutes),
        )
    return FlatBreakPolicy(short_break_minutes=timer_config.short_break_minutes)

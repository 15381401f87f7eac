"""Pure functions turning engine snapshots into display values."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from pomodoro_cli.models.core import TagStatistic

from .state import DEFAULT_DAILY_TARGET, PHASE_FOCUSING, PHASE_ON_BREAK, TimerSnapshot

PIE_PALETTE = (
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#06b6d4",
    "#f97316",
    "#84cc16",
    "#ec4899",
    "#6366f1",
    "#14b8a6",
    "#a855f7",
)


@dataclass(frozen=True)
class TagSlice:
    """One tag's share of the completed sessions."""

    tag: str
    count: int
    proportion: float
    color: str

    @property
    def percent_label(self) -> str:
        return f"{self.proportion * 100:.1f}%"


def format_countdown(seconds: int) -> str:
    """Format seconds as ``MM:SS``."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def progress_fraction(snapshot: TimerSnapshot, focus_duration: int | None = None) -> float:
    """Fraction of the current phase already elapsed, from 0 to 1."""
    if snapshot.phase == PHASE_FOCUSING:
        reference = focus_duration or snapshot.focus_duration_seconds
    elif snapshot.phase == PHASE_ON_BREAK:
        reference = snapshot.current_break_duration_seconds
    else:
        return 0.0

    if reference <= 0:
        return 0.0
    fraction = 1 - snapshot.seconds_remaining / reference
    return min(1.0, max(0.0, fraction))


def daily_progress(count: int, daily_target: int | None = None) -> float:
    """Share of the daily target reached, capped at 1."""
    if not daily_target or daily_target <= 0:
        daily_target = DEFAULT_DAILY_TARGET
    return min(count / daily_target, 1.0)


def progress_segments(count: int, daily_target: int | None = None) -> list[bool]:
    """One entry per target session; True where it has been completed."""
    if not daily_target or daily_target <= 0:
        daily_target = DEFAULT_DAILY_TARGET
    filled = min(count, daily_target)
    return [i < filled for i in range(daily_target)]


def tag_distribution(stats: Iterable[TagStatistic]) -> list[TagSlice]:
    """Split completed sessions by tag.

    A tag's colour follows its position in ``stats``, so tags without
    sessions are left out of the slices but still use up a palette entry.
    """
    stats = list(stats)
    total = sum(s.count for s in stats)
    if total == 0:
        return []

    return [
        TagSlice(
            tag=stat.tag,
            count=stat.count,
            proportion=stat.count / total,
            color=PIE_PALETTE[i % len(PIE_PALETTE)],
        )
        for i, stat in enumerate(stats)
        if stat.count > 0
    ]


def status_text(snapshot: TimerSnapshot) -> str:
    if snapshot.transitioning == "ending_break":
        return "Break over!"
    if snapshot.phase == PHASE_FOCUSING:
        return "Focus time"
    if snapshot.phase == PHASE_ON_BREAK:
        return "Break time"
    return "Ready to start"

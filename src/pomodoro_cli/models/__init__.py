"""Data models for the Pomodoro CLI."""

from .config_models import AppConfig, APIConfig, NotificationConfig, OutputConfig, TimerConfig
from .core import (
    CalendarEvent,
    SessionCreate,
    SessionDeleteResult,
    SessionSaveResult,
    SessionSummary,
    Tag,
    TagCreateResult,
    TagStatistic,
    Task,
    TodaySummary,
)

__all__ = [
    "APIConfig",
    "AppConfig",
    "CalendarEvent",
    "NotificationConfig",
    "OutputConfig",
    "SessionCreate",
    "SessionDeleteResult",
    "SessionSaveResult",
    "SessionSummary",
    "Tag",
    "TagCreateResult",
    "TagStatistic",
    "Task",
    "TimerConfig",
    "TodaySummary",
]

"""Data models for the Pomodoro server JSON API.

The server speaks camelCase; the models use snake_case attributes with
camelCase aliases, and accept either spelling on input.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SESSION_DURATION_MINUTES = 25


class APIModel(BaseModel):
    """Base model for camelCase JSON payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        """Dump as a JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class SessionCreate(APIModel):
    """Body of ``POST /sessions`` for one finished focus phase.

    Attributes:
        description: Free-text label, None when left blank
        tag: Tag label, None when no tag was selected
        started_at: When the focus phase began
        completed_at: When the focus phase finished
        duration_minutes: Always the standard 25-minute session
    """

    description: str | None = None
    tag: str | None = None
    started_at: datetime
    completed_at: datetime
    duration_minutes: int = SESSION_DURATION_MINUTES


class SessionSummary(APIModel):
    """A completed session as listed for today."""

    id: int | str
    description: str | None = None
    started_at: str | None = None


class TagStatistic(APIModel):
    """Number of completed sessions carrying a tag."""

    tag: str
    count: int = Field(ge=0)


class SessionSaveResult(APIModel):
    """Successful response of ``POST /sessions``.

    Attributes:
        today_count: Server count of sessions completed today
        today_date: The server's notion of today
        available_tags: Every known tag name, sorted
        tag_statistics: Per-tag session counts, largest first
        session: The created record, when the server includes it
    """

    success: bool = True
    today_count: int = Field(ge=0)
    today_date: date
    available_tags: list[str] = Field(default_factory=list)
    tag_statistics: list[TagStatistic] = Field(default_factory=list)
    session: SessionSummary | None = None


class SessionDeleteResult(APIModel):
    """Successful response of ``DELETE /sessions/{id}``."""

    success: bool = True
    today_count: int = Field(ge=0)
    tag_statistics: list[TagStatistic] = Field(default_factory=list)


class TodaySummary(APIModel):
    """Response of ``GET /sessions``: the values a fresh page starts from."""

    success: bool = True
    today_count: int = Field(ge=0)
    today_date: date
    sessions: list[SessionSummary] = Field(default_factory=list)
    available_tags: list[str] = Field(default_factory=list)
    tag_statistics: list[TagStatistic] = Field(default_factory=list)


class Tag(APIModel):
    """A tag as listed by ``GET /tags``."""

    id: int | str
    name: str
    session_count: int = 0


class TagCreateResult(APIModel):
    """Successful response of ``POST /tags``."""

    success: bool = True
    tag: str
    is_new: bool = False


class Task(APIModel):
    """An incomplete Google Tasks item."""

    id: str
    title: str | None = None
    notes: str | None = None
    due: datetime | None = None


class CalendarEvent(APIModel):
    """One of today's Google Calendar events."""

    id: str
    title: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    all_day: bool = False

"""Configuration models for the Pomodoro CLI.

Everything here is persisted as JSON by ``ConfigService``; every field has a
default so a missing or partial config file still validates.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class APIConfig(BaseModel):
    """Server connection settings."""

    endpoint: str = Field(default="http://localhost:3000")
    timeout: int = Field(default=30)
    retry: int = Field(default=3)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Strip whitespace and trailing slashes from the endpoint."""
        if not v or not v.strip():
            raise ValueError("endpoint cannot be empty")
        return v.strip().rstrip("/")


class TimerConfig(BaseModel):
    """Pomodoro timings and engine behaviour."""

    focus_minutes: int = Field(default=25, ge=1)
    short_break_minutes: int = Field(default=5, ge=1)
    break_policy: Literal["flat", "cyclic"] = Field(default="flat")
    long_break_every: int = Field(default=3, ge=1)
    long_break_minutes: list[int] = Field(default_factory=lambda: [30, 60, 30])
    break_options: list[int] = Field(default_factory=lambda: [5, 10, 15, 30])
    daily_target: int = Field(default=11)
    transition_delay: float = Field(default=1.5, ge=0)
    save_timeout: float = Field(default=10.0, gt=0)
    debug_shortcuts: bool = Field(default=False)

    @field_validator("long_break_minutes", "break_options")
    @classmethod
    def validate_minutes(cls, v: list[int]) -> list[int]:
        """Require a non-empty list of positive minute values."""
        if not v or any(m <= 0 for m in v):
            raise ValueError("must be a non-empty list of positive minutes")
        return v


class NotificationConfig(BaseModel):
    """Desktop-style notifications shown when a phase completes."""

    enabled: bool = Field(default=True)
    bell: bool = Field(default=True)


class OutputConfig(BaseModel):
    """Default output format for list commands."""

    format: Literal["table", "json", "yaml"] = Field(default="table")


class AppConfig(BaseModel):
    """Main Pomodoro CLI configuration."""

    api: APIConfig = Field(default_factory=APIConfig)
    timer: TimerConfig = Field(default_factory=TimerConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

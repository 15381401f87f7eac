"""Google Calendar endpoints, proxied by the Pomodoro server."""

from __future__ import annotations

from pomodoro_cli.models.core import CalendarEvent

from .client import APIClient


class CalendarAPI:
    """Calendar events API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def todays_events(self) -> list[CalendarEvent]:
        """List today's events from the primary calendar."""
        data = await self.client.request_json("GET", "/calendar_events", retry=0)
        return [CalendarEvent.model_validate(e) for e in data.get("events", [])]

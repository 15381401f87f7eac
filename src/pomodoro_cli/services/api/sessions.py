"""Sessions API endpoints."""

from __future__ import annotations

from pomodoro_cli.models.core import (
    SessionCreate,
    SessionDeleteResult,
    SessionSaveResult,
    TodaySummary,
)

from .client import APIClient


class SessionsAPI:
    """Completed focus sessions."""

    def __init__(self, client: APIClient):
        self.client = client

    async def create_session(self, session: SessionCreate) -> SessionSaveResult:
        """Record a finished focus phase and return the server's view of today."""
        data = await self.client.request_json(
            "POST", "/sessions", json=session.to_payload(), retry=0
        )
        return SessionSaveResult.model_validate(data)

    async def delete_session(self, session_id: int | str) -> SessionDeleteResult:
        """Delete a completed session."""
        data = await self.client.request_json("DELETE", f"/sessions/{session_id}")
        return SessionDeleteResult.model_validate(data)

    async def today(self) -> TodaySummary:
        """Fetch today's count, sessions and tag data."""
        data = await self.client.request_json("GET", "/sessions")
        return TodaySummary.model_validate(data)

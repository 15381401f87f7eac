"""Tests for Sessions API."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from pomodoro_cli.models.core import SessionCreate
from pomodoro_cli.services.api.client import APIClient
from pomodoro_cli.services.api.sessions import SessionsAPI


@pytest.fixture
def mock_client():
    """Create a mock API client."""
    client = MagicMock(spec=APIClient)
    client.request_json = AsyncMock()
    return client


@pytest.mark.asyncio
async def test_create_session_posts_camel_case(mock_client):
    mock_client.request_json.return_value = {
        "success": True,
        "todayCount": 4,
        "todayDate": "2026-03-10",
        "availableTags": ["Deep work"],
        "tagStatistics": [{"tag": "Deep work", "count": 4}],
        "session": {"id": 9, "description": "Draft", "startedAt": "2026-03-10T09:00:00Z"},
    }
    session = SessionCreate(
        description="Draft",
        tag="Deep work",
        started_at=datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc),
        completed_at=datetime(2026, 3, 10, 9, 25, tzinfo=timezone.utc),
    )

    result = await SessionsAPI(mock_client).create_session(session)

    mock_client.request_json.assert_awaited_once()
    args, kwargs = mock_client.request_json.await_args
    assert args == ("POST", "/sessions")
    assert kwargs["retry"] == 0
    body = kwargs["json"]
    assert body["durationMinutes"] == 25
    assert body["startedAt"].startswith("2026-03-10T09:00:00")
    assert body["completedAt"].startswith("2026-03-10T09:25:00")
    assert body["tag"] == "Deep work"

    assert result.today_count == 4
    assert result.today_date == date(2026, 3, 10)
    assert result.session.id == 9


@pytest.mark.asyncio
async def test_create_session_malformed_response(mock_client):
    mock_client.request_json.return_value = {"success": True, "todayCount": "many"}
    session = SessionCreate(
        started_at=datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc),
        completed_at=datetime(2026, 3, 10, 9, 25, tzinfo=timezone.utc),
    )

    with pytest.raises(ValidationError):
        await SessionsAPI(mock_client).create_session(session)


@pytest.mark.asyncio
async def test_delete_session(mock_client):
    mock_client.request_json.return_value = {
        "success": True,
        "todayCount": 2,
        "tagStatistics": [],
    }

    result = await SessionsAPI(mock_client).delete_session(7)

    mock_client.request_json.assert_awaited_once_with("DELETE", "/sessions/7")
    assert result.today_count == 2


@pytest.mark.asyncio
async def test_today(mock_client):
    mock_client.request_json.return_value = {
        "success": True,
        "todayCount": 1,
        "todayDate": "2026-03-10",
        "sessions": [{"id": 1, "description": None, "startedAt": "2026-03-10T08:00:00Z"}],
        "availableTags": [],
        "tagStatistics": [],
    }

    summary = await SessionsAPI(mock_client).today()

    mock_client.request_json.assert_awaited_once_with("GET", "/sessions")
    assert summary.today_count == 1
    assert summary.sessions[0].started_at == "2026-03-10T08:00:00Z"

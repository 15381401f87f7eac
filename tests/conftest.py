"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from the real filesystem and
server, plus virtual time for driving the timer engine.
"""

from __future__ import annotations

import itertools
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pomodoro_cli.models.core import SessionSaveResult, TagStatistic, TodaySummary


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_dirs(tmp_path):
    """Keep config, credentials and log files inside *tmp_path*."""
    import pomodoro_cli.utils.logger as logger_mod
    from pomodoro_cli.services.config_service import get_config_service

    config_dir = tmp_path / "config"
    log_dir = tmp_path / "logs"
    original_logger = logger_mod._logger
    logger_mod._logger = None

    get_config_service.cache_clear()
    with patch(
        "pomodoro_cli.services.config_service.user_config_dir",
        return_value=str(config_dir),
    ):
        with patch("pomodoro_cli.utils.logger.user_log_dir", return_value=str(log_dir)):
            yield tmp_path
    get_config_service.cache_clear()

    app_logger = logger_mod._logger
    if app_logger is not None:
        for handler in list(app_logger.handlers):
            handler.close()
            app_logger.removeHandler(handler)
    logger_mod._logger = original_logger


@pytest.fixture()
def tmp_config():
    """Provide a real ConfigService backed by the isolated config directory."""
    from pomodoro_cli.services.config_service import ConfigService

    svc = ConfigService()
    _ = svc.config
    return svc


# ---------------------------------------------------------------------------
# Auth bypass
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def bypass_auth():
    """Skip the stored-token check in all tests by default."""
    with patch("pomodoro_cli.commands.decorators._require_auth"):
        yield


# ---------------------------------------------------------------------------
# Virtual time
# ---------------------------------------------------------------------------


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._now.date()

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)


class ManualHandle:
    def __init__(self, seq: int, due: float, callback, interval: float | None = None):
        self.seq = seq
        self.due = due
        self.callback = callback
        self.interval = interval
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class ManualScheduler:
    """Scheduler whose callbacks fire synchronously inside ``advance``.

    The paired clock is moved to each callback's due time before it runs.
    """

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.time = 0.0
        self._handles: list[ManualHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback) -> ManualHandle:
        handle = ManualHandle(next(self._seq), self.time + delay, callback)
        self._handles.append(handle)
        return handle

    def call_every(self, interval: float, callback) -> ManualHandle:
        handle = ManualHandle(next(self._seq), self.time + interval, callback, interval)
        self._handles.append(handle)
        return handle

    @property
    def active(self) -> list[ManualHandle]:
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.time + seconds
        while True:
            due = [h for h in self.active if h.due <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.seq))
            self.clock.advance(handle.due - self.time)
            self.time = handle.due
            if handle.interval is None:
                handle.cancel()
            else:
                handle.due += handle.interval
            handle.callback()

        self.clock.advance(target - self.time)
        self.time = target
        self._handles = self.active


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture()
def scheduler(clock) -> ManualScheduler:
    return ManualScheduler(clock)


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeNotifier:
    """Records notifications instead of ringing the terminal bell."""

    def __init__(self, grant: bool = True):
        self.grant = grant
        self.permission_requests = 0
        self.sent: list[tuple[str, str]] = []

    def request_permission(self) -> bool:
        self.permission_requests += 1
        return self.grant

    def notify(self, title: str, body: str) -> None:
        self.sent.append((title, body))


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


def make_save_result(today_count: int = 1, today_date: date | None = None, **kwargs):
    """Build a successful POST /sessions response as the server sends it."""
    payload = {
        "success": True,
        "todayCount": today_count,
        "todayDate": (today_date or date(2026, 3, 10)).isoformat(),
        "availableTags": kwargs.pop("available_tags", ["Deep work", "Reading"]),
        "tagStatistics": kwargs.pop(
            "tag_statistics", [{"tag": "Deep work", "count": today_count}]
        ),
    }
    if "session" in kwargs:
        payload["session"] = kwargs.pop("session")
    return SessionSaveResult.model_validate(payload)


@pytest.fixture()
def save_result():
    """Factory for successful save responses."""
    return make_save_result


@pytest.fixture()
def sessions_store():
    """Stand-in for SessionsAPI with a successful save by default."""
    store = MagicMock()
    store.create_session = AsyncMock(return_value=make_save_result(1))
    store.delete_session = AsyncMock()
    store.today = AsyncMock(
        return_value=TodaySummary(
            today_count=0,
            today_date=date(2026, 3, 10),
            sessions=[],
            available_tags=[],
            tag_statistics=[TagStatistic(tag="Deep work", count=0)],
        )
    )
    return store


@pytest.fixture()
def tags_store():
    store = MagicMock()
    store.create_tag = AsyncMock()
    return store


@pytest.fixture()
def make_engine(sessions_store, tags_store, notifier, clock, scheduler):
    """Factory building a TimerEngine wired to the fakes above."""
    from pomodoro_cli.models.timer.engine import TimerEngine

    engines = []

    def _make(**kwargs):
        kwargs.setdefault("tags", tags_store)
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("scheduler", scheduler)
        engine = TimerEngine(sessions_store, **kwargs)
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.close()

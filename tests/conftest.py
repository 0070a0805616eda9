# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_client.api.client import TodoApiClient
from todo_client.connectors.loop_runner import BackgroundLoop
from todo_client.core.state import AppState
from todo_client.reminders.notifier import DesktopNotifier
from todo_client.reminders.poller import ReminderPoller
from todo_client.session.store import SessionStore

from .fakes import FakeBackend


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todo-client-test",
        log_level="DEBUG",
        api_base_url="http://backend.test",
        http_connect_timeout=1.0,
        http_read_timeout=1.0,
        # Long enough that the timer never fires during a test.
        poll_interval_seconds=3600.0,
        notify_backend="none",
        notify_title="Reminder",
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
    )


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def state(settings: SimpleNamespace, backend: FakeBackend):
    """
    AppState wired to the in-memory backend.

    NOTE: We keep the real background loop, session store and poller here,
    because their wiring is part of what we want to test.
    """
    sessions = SessionStore(settings.session_path)
    api = TodoApiClient(
        settings.api_base_url,
        token_provider=sessions.token,
        transport=backend.transport(),
    )
    notifier = DesktopNotifier(settings.notify_backend)
    poller = ReminderPoller(api, notifier, sessions, interval_seconds=settings.poll_interval_seconds)
    app_state = AppState(
        settings=settings,
        sessions=sessions,
        api=api,
        notifier=notifier,
        poller=poller,
        loop=BackgroundLoop(name="todo-client-test").start(),
    )
    yield app_state
    app_state.shutdown()

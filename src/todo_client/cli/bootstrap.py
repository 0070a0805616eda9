# src/todo_client/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- starts the background event loop,
- wires concrete implementations into AppState (session store, REST client, notifier, poller).
"""

from __future__ import annotations

import logging

from ..api.client import TodoApiClient
from ..config import get_settings
from ..connectors.loop_runner import BackgroundLoop
from ..core.state import AppState
from ..reminders.notifier import DesktopNotifier
from ..reminders.poller import ReminderPoller
from ..session.store import SessionStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, loop: BackgroundLoop | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    sessions = SessionStore(settings.session_path)
    api = TodoApiClient.from_settings(settings, token_provider=sessions.token)
    notifier = DesktopNotifier(getattr(settings, "notify_backend", None))
    poller = ReminderPoller(
        api,
        notifier,
        sessions,
        interval_seconds=settings.poll_interval_seconds,
        notify_title=getattr(settings, "notify_title", "Reminder"),
    )

    state = AppState(
        settings=settings,
        sessions=sessions,
        api=api,
        notifier=notifier,
        poller=poller,
        loop=(loop or BackgroundLoop()).start(),
    )
    logger.debug("State ready api=%s session=%s", api.base_url, settings.session_path)
    return state

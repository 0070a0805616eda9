# src/todo_client/core/state.py

from __future__ import annotations

import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from ..api.client import TodoApiClient
from ..api.errors import NotAuthenticatedError
from ..api.models import Session
from ..connectors.loop_runner import BackgroundLoop
from ..reminders.notifier import DesktopNotifier
from ..reminders.poller import ReminderPoller
from ..session.store import SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    sessions: SessionStore
    api: TodoApiClient
    notifier: DesktopNotifier
    poller: ReminderPoller
    loop: BackgroundLoop

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine on the background loop (from the console thread)."""
        return self.loop.run(coro)

    def require_session(self) -> Session:
        session = self.sessions.current()
        if session is None:
            raise NotAuthenticatedError("not logged in")
        return session

    def start_session(self, session: Session) -> bool:
        """Persist the login and (re)start the reminder poller for it."""
        self.sessions.save(session)
        return self.run(self._activate(session))

    def restore_session(self) -> Session | None:
        """Resume a persisted login at startup; a corrupted record is cleared by the store."""
        session = self.sessions.load()
        if session is None:
            return None
        active = self.run(self._activate(session))
        logger.info("Restored session user_id=%s (poller active=%s)", session.user_id, active)
        return session

    def end_session(self) -> None:
        self.run(self.poller.stop())
        self.sessions.clear()

    async def _activate(self, session: Session) -> bool:
        return self.poller.activate(session)

    def shutdown(self) -> None:
        """Best-effort shutdown (no exceptions should escape)."""
        try:
            self.run(self.poller.stop())
        except Exception:
            logger.debug("Poller stop failed.", exc_info=True)
        try:
            self.run(self.api.aclose())
        except Exception:
            logger.debug("HTTP client close failed.", exc_info=True)
        self.loop.stop()
        self.loop.join(timeout=5.0)

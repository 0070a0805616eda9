# src/todo_client/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder poller.

The poller depends on Protocols instead of concrete implementations.
This keeps the HTTP client and the notification backend swappable and makes testing easier.
"""

from enum import StrEnum
from typing import Protocol

from ..api.models import Reminder, Session, Todo


class NotificationPermission(StrEnum):
    DEFAULT = "default"  # not decided yet
    GRANTED = "granted"
    DENIED = "denied"


class ReminderApi(Protocol):
    """The subset of the REST client the poller needs."""

    async def get_todos_by_user(self, user_id: int) -> list[Todo]: ...

    async def get_reminders_by_todo(self, todo_id: int) -> list[Reminder]: ...

    async def send_email(self, user_id: int, *, to: str, subject: str, message: str) -> None: ...

    async def mark_reminder_triggered(self, reminder: Reminder) -> Reminder: ...


class Notifier(Protocol):
    """Desktop notification channel."""

    @property
    def permission(self) -> NotificationPermission: ...

    async def request_permission(self) -> NotificationPermission: ...

    async def notify(self, title: str, body: str) -> None: ...


class SessionSource(Protocol):
    """Where the poller resolves identity from (SessionStore implements it)."""

    def current(self) -> Session | None: ...

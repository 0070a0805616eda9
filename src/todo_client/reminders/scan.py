# src/todo_client/reminders/scan.py

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

from ..api.models import Reminder


class FiredReminders:
    """
    In-memory set of reminder ids already delivered by this poller activation.

    Not persisted: a fresh activation (restart, re-login) starts empty, so a
    reminder fired just before a restart may fire again if the backend has
    not recorded it as triggered yet.
    """

    def __init__(self) -> None:
        self._ids: set[int] = set()

    def __contains__(self, reminder_id: object) -> bool:
        return reminder_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[int]:
        return iter(self._ids)

    def add(self, reminder_id: int) -> None:
        self._ids.add(reminder_id)

    def clear(self) -> None:
        self._ids.clear()


def is_due(reminder: Reminder, now: datetime, fired: FiredReminders) -> bool:
    """remind_at has passed, the backend has not marked it, and we have not fired it."""
    if reminder.triggered:
        return False
    if reminder.id in fired:
        return False
    return reminder.remind_at <= now

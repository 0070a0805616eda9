# src/todo_client/reminders/reminder_api.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from ..api.client import TodoApiClient
from ..api.models import Reminder, ReminderType

logger = logging.getLogger(__name__)


def to_utc(remind_at: datetime) -> datetime:
    """Naive datetimes are local wall-clock time (what the user typed)."""
    if remind_at.tzinfo is None:
        remind_at = remind_at.astimezone()
    return remind_at.astimezone(timezone.utc)


async def schedule_reminder(
    api: TodoApiClient,
    todo_id: int,
    remind_at: datetime,
    type: ReminderType,
    *,
    now: datetime | None = None,
) -> list[Reminder]:
    """
    Create the reminder(s) for one user choice.

    BOTH becomes two independent records (EMAIL + DESKTOP_NOTIFICATION),
    created concurrently. Raises ValueError for a time in the past.
    """
    when = to_utc(remind_at)
    current = now or datetime.now(timezone.utc)
    if when < current:
        raise ValueError("Remind time must be in the future")

    created = await asyncio.gather(
        *(api.create_reminder(todo_id, remind_at=when, type=t) for t in type.concrete_types())
    )
    logger.info(
        "Reminder(s) created todo_id=%s ids=%s at=%s",
        todo_id,
        [r.id for r in created],
        when.isoformat(),
    )
    return list(created)


async def load_todo_with_reminders(api: TodoApiClient, todo_id: int):
    """Todo details + its reminders, fetched together."""
    todo, reminders = await asyncio.gather(api.get_todo(todo_id), api.get_reminders_by_todo(todo_id))
    return todo, reminders

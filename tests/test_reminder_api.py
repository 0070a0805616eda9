# tests/test_reminder_api.py

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from todo_client.api.client import TodoApiClient
from todo_client.api.models import ReminderType
from todo_client.reminders.reminder_api import load_todo_with_reminders, schedule_reminder, to_utc

from .fakes import NOW, FakeBackend


def make_client(backend: FakeBackend) -> TodoApiClient:
    return TodoApiClient("http://backend.test", token_provider=lambda: FakeBackend.TOKEN, transport=backend.transport())


@pytest.mark.asyncio
async def test_both_creates_two_concrete_reminders() -> None:
    backend = FakeBackend()
    todo = backend.add_todo(1, "Report")
    client = make_client(backend)

    created = await schedule_reminder(client, todo["id"], NOW + timedelta(hours=1), ReminderType.BOTH, now=NOW)
    await client.aclose()

    assert sorted(r.type.value for r in created) == ["DESKTOP_NOTIFICATION", "EMAIL"]
    posted = [json.loads(r.content) for r in backend.requests if r.method == "POST"]
    assert sorted(p["type"] for p in posted) == ["DESKTOP_NOTIFICATION", "EMAIL"]
    assert all(p["remindAt"] == "2026-10-17T13:00:00.000Z" for p in posted)
    assert {r["type"] for r in backend.reminders.values()} == {"EMAIL", "DESKTOP_NOTIFICATION"}


@pytest.mark.asyncio
async def test_single_type_creates_one_reminder() -> None:
    backend = FakeBackend()
    todo = backend.add_todo(1, "Report")
    client = make_client(backend)

    created = await schedule_reminder(client, todo["id"], NOW + timedelta(minutes=5), ReminderType.EMAIL, now=NOW)
    await client.aclose()

    assert [r.type for r in created] == [ReminderType.EMAIL]
    assert len(backend.reminders) == 1


@pytest.mark.asyncio
async def test_past_time_is_rejected_without_calls() -> None:
    backend = FakeBackend()
    client = make_client(backend)

    with pytest.raises(ValueError):
        await schedule_reminder(client, 1, NOW - timedelta(seconds=1), ReminderType.BOTH, now=NOW)
    await client.aclose()

    assert backend.requests == []


@pytest.mark.asyncio
async def test_load_todo_with_reminders() -> None:
    backend = FakeBackend()
    todo = backend.add_todo(1, "Report")
    backend.add_reminder(todo["id"], "2026-10-17T13:00:00Z", "EMAIL")
    client = make_client(backend)

    loaded, reminders = await load_todo_with_reminders(client, todo["id"])
    await client.aclose()

    assert loaded.title == "Report"
    assert len(reminders) == 1


def test_to_utc_converts_aware_values() -> None:
    cet = timezone(timedelta(hours=2))
    assert to_utc(datetime(2026, 10, 17, 14, 0, tzinfo=cet)) == datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
    assert to_utc(datetime(2026, 10, 17, 14, 0)).tzinfo is timezone.utc

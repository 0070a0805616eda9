# tests/test_models.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from todo_client.api.models import (
    Reminder,
    ReminderType,
    Session,
    Todo,
    format_instant,
    parse_instant,
)


def test_reminder_type_from_api_normalizes_legacy_values() -> None:
    assert ReminderType.from_api("EMAIL") is ReminderType.EMAIL
    assert ReminderType.from_api("DESKTOP_NOTIFICATION") is ReminderType.DESKTOP_NOTIFICATION
    assert ReminderType.from_api("PUSH") is ReminderType.DESKTOP_NOTIFICATION
    assert ReminderType.from_api("BOTH") is ReminderType.BOTH
    assert ReminderType.from_api(None) is ReminderType.DESKTOP_NOTIFICATION


def test_reminder_type_parse_user_input() -> None:
    assert ReminderType.parse("desktop") is ReminderType.DESKTOP_NOTIFICATION
    assert ReminderType.parse("both") is ReminderType.BOTH
    assert ReminderType.parse("mail") is ReminderType.EMAIL
    with pytest.raises(ValueError):
        ReminderType.parse("sms")


def test_both_expands_to_two_concrete_types() -> None:
    assert ReminderType.BOTH.concrete_types() == (ReminderType.EMAIL, ReminderType.DESKTOP_NOTIFICATION)
    assert ReminderType.EMAIL.concrete_types() == (ReminderType.EMAIL,)


def test_parse_instant_handles_z_and_naive_as_utc() -> None:
    expected = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
    assert parse_instant("2026-10-17T12:00:00Z") == expected
    assert parse_instant("2026-10-17T12:00:00") == expected
    assert parse_instant("2026-10-17T14:00:00+02:00") == expected
    with pytest.raises(ValueError):
        parse_instant("")


def test_format_instant_is_utc_millis() -> None:
    dt = datetime(2026, 10, 17, 14, 0, 5, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert format_instant(dt) == "2026-10-17T12:00:05.123Z"


def test_reminder_channels() -> None:
    data = {"id": 1, "remindAt": "2026-10-17T12:00:00Z", "type": "BOTH", "triggered": False, "todoId": 3}
    rem = Reminder.from_api(data)
    assert rem.wants_email and rem.wants_desktop
    email = Reminder.from_api({**data, "type": "EMAIL"})
    assert email.wants_email and not email.wants_desktop


def test_todo_from_api_nullable_due_date() -> None:
    todo = Todo.from_api(
        {
            "id": 4,
            "title": "Call bank",
            "description": None,
            "dueDate": None,
            "completed": True,
            "createdAt": "2026-10-17T10:00:00",
            "updatedAt": "2026-10-17T10:00:00",
        }
    )
    assert todo.due_date is None
    assert todo.description == ""
    assert todo.completed


def test_session_record_round_trip_rejects_bad_user_id() -> None:
    session = Session(token="t", user_id=3, username="a", email="a@x")
    assert Session.from_record(session.to_record()) == session
    with pytest.raises(ValueError):
        Session.from_record({"token": "t", "user_id": "3"})
    with pytest.raises(KeyError):
        Session.from_record({"user_id": 3})
